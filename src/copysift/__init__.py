"""
copysift
========

Near-duplicate search for text pasted from spreadsheets.

Built from three pieces:
- Shingle similarity: normalized character n-grams compared with exact Jaccard.
- Query highlighting: any number of colored queries, each run in
  ``contains`` or ``similar`` mode, annotating the cells they hit.
- Duplicate clustering: all-pairs comparison of one column with
  Union-Find grouping of near-duplicate rows.

Example:
    from copysift import CopySearchSession

    session = CopySearchSession()
    session.load_text(clipboard_text)
    session.auto_dedup(column=0)
"""

__version__ = "0.1.0"

from copysift.session import CopySearchSession

__all__ = [
    "CopySearchSession",
]
