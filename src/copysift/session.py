"""
Copy-search session.

Owns the current table, the ordered query list, the shingle cache and the
color assigner, and exposes the operations of the search tool: query
management, single and bulk search, duplicate clustering, notes and
sorting.

Engines are injected so that alternative matchers can be swapped in.
"""

from dataclasses import fields
from typing import List, Literal, Optional, Union

from loguru import logger

from .components.clustering import DuplicateClusterer
from .components.colors import ColorAssigner
from .components.matching import HighlightAggregator, MatchEngine, matched_rows
from .config import SearchConfig
from .core.errors import ConfigurationError, QueryNotFoundError
from .core.interfaces import IClusterer, IMatcher, IMultiMatcher
from .core.models import (
    ALL_COLUMNS,
    ColumnSelector,
    DuplicateGroup,
    Query,
    SearchMode,
    Table,
    validate_threshold,
)
from .io.loader import parse_table
from .similarity.cache import ShingleCache

SortMode = Literal["color", "match"]

_UPDATABLE = {f.name for f in fields(Query)} - {"id"}


class CopySearchSession:
    """Stateful search session over one table.

    Flow:
    1. ``load`` / ``load_text`` a dataset (clears the shingle cache)
    2. ``add_query`` one or more queries
    3. ``run_query`` / ``run_all`` to highlight matches, or ``auto_dedup``
       to color duplicate groups
    4. Read highlights and ``row_summary`` notes, or export via ``copysift.io``
    """

    def __init__(
        self,
        config: Optional[SearchConfig] = None,
        matcher: Optional[IMatcher] = None,
        multi_matcher: Optional[IMultiMatcher] = None,
        clusterer: Optional[IClusterer] = None,
    ):
        """Initialize session.

        Args:
            config: Search settings; defaults and environment when omitted
            matcher: Single-query matcher
            multi_matcher: Bulk matcher
            clusterer: Duplicate clusterer
        """
        self.config = config or SearchConfig()
        self.cache = ShingleCache(shingle_size=self.config.shingle_size)
        self.colors = ColorAssigner(self.config.palette)

        engine = MatchEngine(self.cache)
        self.matcher = matcher or engine
        self.multi_matcher = multi_matcher or HighlightAggregator(engine)
        self.clusterer = clusterer or DuplicateClusterer(self.cache, self.colors)

        self.table = Table()
        self.queries: List[Query] = []

    # ------------------------------------------------------------------
    # Dataset
    # ------------------------------------------------------------------

    def load(self, table: Table) -> Table:
        """Replace the dataset. Queries are kept, their counts reset."""
        self.table = table
        self.cache.clear()
        for query in self.queries:
            query.result_count = 0
        logger.info(f"Loaded table: {len(table)} rows x {table.column_count} columns")
        return table

    def load_text(self, text: str, delimiter: Optional[str] = None) -> Table:
        return self.load(parse_table(text, delimiter=delimiter))

    def reset(self) -> None:
        """Drop the dataset, every query and all color assignments."""
        self.table = Table()
        self.queries = []
        self.cache.clear()
        self.colors.reset()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @property
    def threshold(self) -> float:
        return self.config.threshold

    def set_threshold(self, value: float) -> float:
        self.config.threshold = validate_threshold(value)
        return self.config.threshold

    def set_mode(self, mode: Union[SearchMode, str]) -> SearchMode:
        try:
            self.config.mode = SearchMode(mode)
        except ValueError:
            raise ConfigurationError(f"Unknown search mode: {mode!r}")
        return self.config.mode

    def set_search_column(self, column: ColumnSelector) -> ColumnSelector:
        if column != ALL_COLUMNS and (not isinstance(column, int) or column < 0):
            raise ConfigurationError(f"Search column must be a column index or 'all', got {column!r}")
        self.config.search_column = column
        return column

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_query(self, query_id: str) -> Query:
        for query in self.queries:
            if query.id == query_id:
                return query
        raise QueryNotFoundError(query_id)

    def add_query(
        self,
        text: str = "",
        note_text: str = "",
        color: Optional[str] = None,
        threshold: Optional[float] = None,
        enabled: bool = True,
    ) -> Query:
        query = Query(text=text, note_text=note_text, threshold=threshold, enabled=enabled)
        if color is None:
            query.color = self.colors.assign(query.id)
        else:
            query.color = self.colors.claim(query.id, color)
        self.queries.append(query)
        logger.debug(f"Added query {query.id} ({query.color})")
        return query

    def update_query(self, query_id: str, **changes) -> Query:
        query = self.get_query(query_id)
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise ConfigurationError(f"Cannot update query fields: {', '.join(sorted(unknown))}")
        if "threshold" in changes and changes["threshold"] is not None:
            changes["threshold"] = validate_threshold(changes["threshold"])
        if "color" in changes:
            self.colors.claim(query_id, changes["color"])
        for key, value in changes.items():
            setattr(query, key, value)
        return query

    def remove_query(self, query_id: str) -> Query:
        """Delete a query and purge its highlights from the table.

        A cell whose only highlight came from this query also loses its note.
        """
        query = self.get_query(query_id)
        self.queries.remove(query)
        self.colors.release(query_id)

        for row in self.table.rows:
            for cell in row:
                if not cell.has_query(query_id):
                    continue
                if len(cell.highlights) <= 1:
                    cell.note = ""
                cell.purge({query_id})

        logger.debug(f"Removed query {query_id}")
        return query

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def run_query(self, query_id: str) -> int:
        """Run one query with the session settings. Returns matched row count."""
        query = self.get_query(query_id)
        result = self.matcher.match(
            self.table,
            query,
            self.config.search_column,
            self.config.mode,
            self.config.threshold,
        )
        self.table = result.table
        query.result_count = result.matched_row_count
        return result.matched_row_count

    def run_all(self) -> dict:
        """Run every enabled, non-empty query. Returns ``{query_id: matched rows}``."""
        result = self.multi_matcher.match_all(
            self.table,
            self.queries,
            self.config.search_column,
            self.config.mode,
            self.config.threshold,
        )
        self.table = result.table
        for query in self.queries:
            if query.id in result.counts:
                query.result_count = result.counts[query.id]
        return dict(result.counts)

    def auto_dedup(self, column: Optional[ColumnSelector] = None) -> List[DuplicateGroup]:
        """Color near-duplicate rows of ``column`` (default: the search column)."""
        column = self.config.search_column if column is None else column
        if column == ALL_COLUMNS or not isinstance(column, int) or column < 0:
            raise ConfigurationError("Duplicate clustering needs a single column index")
        if self.table.is_empty:
            return []

        working = self.table.copy()
        groups = self.clusterer.auto_dedup(working, column, self.config.threshold)
        if groups:
            self.table = working
            for query in self.queries:
                query.result_count = 0
        return groups

    def clear_highlights(self) -> None:
        self.table.clear_highlights()
        for query in self.queries:
            query.result_count = 0

    # ------------------------------------------------------------------
    # Notes and ordering
    # ------------------------------------------------------------------

    def update_row_note(self, row_index: int, note: str) -> None:
        """Set the row's note on its first highlighted cell (or first cell) and clear the rest."""
        if not 0 <= row_index < len(self.table.rows):
            return
        row = self.table.rows[row_index]
        if not row:
            return
        target = next((i for i, cell in enumerate(row) if cell.highlights), 0)
        for i, cell in enumerate(row):
            cell.note = note if i == target else ""

    def sort_rows(self, mode: SortMode = "color") -> None:
        """Reorder rows by highlight color or by best similarity.

        Row positions change, so position-keyed shingle entries are dropped.
        """
        if mode == "color":
            def key(row):
                color = next((c.highlights[0].color for c in row if c.highlights), "")
                return (0, color) if color else (1, "")
        elif mode == "match":
            def key(row):
                return -max((c.max_similarity for c in row), default=0)
        else:
            raise ConfigurationError(f"Unknown sort mode: {mode!r}")

        self.table.rows.sort(key=key)
        self.cache.clear()

    def matched_row_indices(self, query_id: Optional[str] = None) -> List[int]:
        return matched_rows(self.table, query_id)
