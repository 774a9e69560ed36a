"""
Shared fixtures for copysift tests.
"""

import pytest

from copysift.config import SearchConfig
from copysift.core.models import Table
from copysift.session import CopySearchSession

FOX_ROWS = [
    ["The quick brown fox", "A-1"],
    ["The quick brown fox!", "A-2"],
    ["Totally different text", "B-1"],
    ["the QUICK brown Fox.", "A-3"],
]


@pytest.fixture
def fox_table():
    """Four rows, three of which normalize to the same sentence."""
    return Table.from_values(FOX_ROWS, headers=["Description", "Code"])


@pytest.fixture
def session(fox_table):
    """Session loaded with the fox table, searching column 0."""
    s = CopySearchSession(SearchConfig(threshold=0.45, search_column=0))
    s.load(fox_table)
    return s
