"""
Abstract interfaces for the copysift engines.

The session depends on these contracts; the default implementations live
under ``copysift.components``.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import (
        ColumnSelector,
        DuplicateGroup,
        MatchAllResult,
        MatchResult,
        Query,
        SearchMode,
        Table,
    )


class IMatcher(ABC):
    """Interface for single-query matching over a table."""

    @abstractmethod
    def match(
        self,
        table: "Table",
        query: "Query",
        search_column: "ColumnSelector",
        mode: "SearchMode",
        threshold: float,
    ) -> "MatchResult":
        """Annotate the cells of ``table`` that match ``query``.

        Args:
            table: Table to search; it is not modified
            query: Query to run; its previous highlights are purged first
            search_column: Column index or ``"all"``
            mode: ``contains`` or ``similar``
            threshold: Global similarity threshold in [0, 1]

        Returns:
            MatchResult holding the annotated copy and the matched row count
        """
        pass


class IMultiMatcher(ABC):
    """Interface for running several queries against one snapshot."""

    @abstractmethod
    def match_all(
        self,
        table: "Table",
        queries: Sequence["Query"],
        search_column: "ColumnSelector",
        mode: "SearchMode",
        threshold: float,
    ) -> "MatchAllResult":
        """Run every active query; all their old highlights are purged in one pass first."""
        pass


class IClusterer(ABC):
    """Interface for duplicate clustering over one column."""

    @abstractmethod
    def auto_dedup(
        self,
        table: "Table",
        column: int,
        threshold: float,
    ) -> List["DuplicateGroup"]:
        """Group near-duplicate rows and write group highlights onto ``table``.

        Returns:
            Duplicate groups with at least two rows, in discovery order.
            An empty list means no duplicates were found and the table
            was left untouched.
        """
        pass
