"""
Multi-query highlight aggregation.

Runs every active query against a single snapshot and derives the
per-row note summaries shown next to the table.
"""

import time
from typing import Dict, List, Optional, Sequence, Union

from loguru import logger

from ...core.interfaces import IMultiMatcher
from ...core.models import (
    ALL_COLUMNS,
    Cell,
    ColumnSelector,
    MatchAllResult,
    Query,
    SearchMode,
    Table,
    query_label,
)
from .engine import NOTE_SEPARATOR, MatchEngine, collect_candidates


class HighlightAggregator(IMultiMatcher):
    """Run several queries in one pass.

    All highlights of the queries being run are purged up front, then each
    query is matched against the same candidate list, so no query sees
    another query's fresh results.
    """

    def __init__(self, engine: Optional[MatchEngine] = None):
        self.engine = engine if engine is not None else MatchEngine()

    def match_all(
        self,
        table: Table,
        queries: Sequence[Query],
        search_column: ColumnSelector = ALL_COLUMNS,
        mode: Union[SearchMode, str] = SearchMode.SIMILAR,
        threshold: float = 0.45,
    ) -> MatchAllResult:
        mode = SearchMode(mode)
        active = [q for q in queries if q.is_active]
        if not active or table.is_empty:
            logger.debug("Nothing to run: no active queries or empty table")
            return MatchAllResult(table=table, counts={q.id: 0 for q in active})

        start = time.perf_counter()

        working = table.copy()
        working.purge({q.id for q in active})
        candidates = collect_candidates(working, search_column)

        counts: Dict[str, int] = {}
        for query in active:
            counts[query.id] = self.engine.apply(working, candidates, query, mode, threshold) if candidates else 0

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Completed {len(active)} queries, {sum(counts.values())} rows matched in total "
            f"({elapsed_ms:.0f}ms, {mode.label})"
        )
        return MatchAllResult(table=working, counts=counts, elapsed_ms=elapsed_ms)


def manual_note(row: Sequence[Cell]) -> str:
    """Non-empty cell notes of ``row`` joined together."""
    return NOTE_SEPARATOR.join(cell.note for cell in row if cell.note)


def match_summary(row: Sequence[Cell], queries: Sequence[Query] = ()) -> str:
    """
    Summary line for rows hit by two or more distinct queries.

    Example:
        'matched 2 queries: #1 "brown fox", #3 "lazy dog"'
    """
    positions = {q.id: i for i, q in enumerate(queries)}
    labels: Dict[str, str] = {}

    for cell in row:
        for h in cell.highlights:
            if h.query_id in labels:
                continue
            idx = positions.get(h.query_id)
            if idx is not None:
                query = queries[idx]
                labels[h.query_id] = f'#{idx + 1} "{query_label(query.text, query.note_text, h.query_text)}"'
            else:
                labels[h.query_id] = f'"{query_label(h.query_text)}"'

    if len(labels) <= 1:
        return ""
    return f"matched {len(labels)} queries: " + ", ".join(labels.values())


def row_summary(row: Sequence[Cell], queries: Sequence[Query] = ()) -> str:
    """Manual notes of the row followed by the multi-query summary, if any."""
    note = manual_note(row)
    summary = match_summary(row, queries)
    if note and summary:
        return f"{note}{NOTE_SEPARATOR}{summary}"
    return note or summary


def matched_rows(table: Table, query_id: Optional[str] = None) -> List[int]:
    """Indices of rows with any highlight (or with a highlight of ``query_id``)."""
    indices = []
    for ri, row in enumerate(table.rows):
        if query_id is None:
            hit = any(cell.highlights for cell in row)
        else:
            hit = any(cell.has_query(query_id) for cell in row)
        if hit:
            indices.append(ri)
    return indices
