"""
Query matching module.

Runs one query over a table in ``contains`` or ``similar`` mode and
attaches a highlight plus a note fragment to every matching cell.
"""

import time
from typing import List, NamedTuple, Optional, Union

from loguru import logger

from ...core.interfaces import IMatcher
from ...core.models import (
    ALL_COLUMNS,
    Cell,
    ColumnSelector,
    Highlight,
    MatchResult,
    Query,
    SearchMode,
    Table,
)
from ...similarity.cache import ShingleCache
from ...similarity.jaccard import jaccard, to_percent

NOTE_SEPARATOR = " | "


class Candidate(NamedTuple):
    """A non-empty cell eligible for matching."""
    row: int
    column: int
    text: str


def collect_candidates(table: Table, search_column: ColumnSelector) -> List[Candidate]:
    """Non-empty cells of ``search_column`` (or of every column for ``"all"``), trimmed."""
    candidates = []
    for ri, row in enumerate(table.rows):
        for ci, cell in enumerate(row):
            if search_column != ALL_COLUMNS and ci != search_column:
                continue
            text = cell.text
            if text:
                candidates.append(Candidate(ri, ci, text))
    return candidates


def build_note(query: Query, mode: SearchMode, similarity_percent: Optional[int] = None) -> str:
    """Note fragment describing why ``query`` matched a cell."""
    label = query.label
    if mode is SearchMode.CONTAINS:
        return f"matched {label}"
    if similarity_percent is not None:
        return f"similar {similarity_percent}% - {label}"
    return f"similar - {label}"


def append_note(cell: Cell, fragment: str, key: str) -> None:
    """Append ``fragment`` unless ``key`` already appears in the note."""
    if not cell.note:
        cell.note = fragment
    elif key not in cell.note:
        cell.note += NOTE_SEPARATOR + fragment


class MatchEngine(IMatcher):
    """Single-query matcher.

    Features:
    - Case-insensitive substring search (``contains``)
    - Shingle Jaccard search with global or per-query threshold (``similar``)
    - Shingle sets memoized in a shared ShingleCache
    - Works on a snapshot; the input table is never modified
    """

    def __init__(self, cache: Optional[ShingleCache] = None):
        """Initialize engine.

        Args:
            cache: Shingle cache to use; a private one is created if omitted
        """
        self.cache = cache if cache is not None else ShingleCache()

    def match(
        self,
        table: Table,
        query: Query,
        search_column: ColumnSelector = ALL_COLUMNS,
        mode: Union[SearchMode, str] = SearchMode.SIMILAR,
        threshold: float = 0.45,
    ) -> MatchResult:
        mode = SearchMode(mode)
        if not query.text.strip() or table.is_empty:
            logger.debug(f"Skipping query {query.id}: empty query text or empty table")
            return MatchResult(table=table, query_id=query.id)

        start = time.perf_counter()

        working = table.copy()
        working.purge({query.id})

        candidates = collect_candidates(working, search_column)
        logger.debug(f"Query {query.id}: {len(candidates)} candidate cells in column {search_column}")

        matched = self.apply(working, candidates, query, mode, threshold)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{matched} rows matched ({elapsed_ms:.0f}ms, {mode.label})")
        return MatchResult(
            table=working,
            query_id=query.id,
            matched_row_count=matched,
            elapsed_ms=elapsed_ms,
        )

    def apply(
        self,
        table: Table,
        candidates: List[Candidate],
        query: Query,
        mode: SearchMode,
        threshold: float,
    ) -> int:
        """Match ``query`` against ``candidates`` and annotate ``table`` in place.

        The caller is responsible for purging the query's old highlights.

        Returns:
            Number of distinct rows that received a highlight
        """
        matched_rows = set()

        if mode is SearchMode.CONTAINS:
            needle = query.text.lower()
            for c in candidates:
                if needle not in c.text.lower():
                    continue
                self._annotate(table.rows[c.row][c.column], query, mode, 100)
                matched_rows.add(c.row)
            return len(matched_rows)

        query_shingles = self.cache.for_text(query.text)
        effective = query.effective_threshold(threshold)

        for c in candidates:
            similarity = jaccard(query_shingles, self.cache.for_text(c.text))
            if similarity < effective:
                continue
            self._annotate(table.rows[c.row][c.column], query, mode, to_percent(similarity))
            matched_rows.add(c.row)

        return len(matched_rows)

    def _annotate(self, cell: Cell, query: Query, mode: SearchMode, percent: int) -> None:
        cell.highlights.append(Highlight(
            query_id=query.id,
            color=query.color,
            similarity=percent,
            query_text=query.text,
        ))
        append_note(cell, build_note(query, mode, percent), query.label)
