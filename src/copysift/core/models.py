"""
Data models for the copysift duplicate-search engine.

Uses dataclasses for the table, its cells and the queries run against it.
"""

import copy
import re
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .errors import ConfigurationError

ALL_COLUMNS = "all"

# Either a column index or ALL_COLUMNS
ColumnSelector = Union[int, str]

DEFAULT_QUERY_COLOR = "#ff6b6b"
UNTITLED_QUERY_LABEL = "untitled query"

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


class SearchMode(str, Enum):
    """How a query is compared against cell text."""

    CONTAINS = "contains"
    SIMILAR = "similar"

    @property
    def label(self) -> str:
        if self is SearchMode.CONTAINS:
            return "substring search"
        return "shingle jaccard"


def validate_threshold(value: float) -> float:
    """Return ``value`` as a float or raise if it lies outside [0, 1]."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Threshold must be a number, got {value!r}")
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"Threshold must be within [0, 1], got {value}")
    return value


def validate_color(color: str) -> str:
    """Return ``color`` if it is a ``#rrggbb`` string."""
    if not isinstance(color, str) or not _HEX_COLOR.match(color):
        raise ConfigurationError(f"Color must be a '#rrggbb' string, got {color!r}")
    return color


@dataclass
class Highlight:
    """One query match attached to a cell.

    Attributes:
        query_id: Id of the query (or duplicate group) that produced the match
        color: Display color as ``#rrggbb``
        similarity: Integer score 0..100
        query_text: Query text at the time of the match
    """
    query_id: str
    color: str
    similarity: int
    query_text: str

    def __post_init__(self):
        if not 0 <= self.similarity <= 100:
            raise ValueError(f"Similarity must be within 0..100, got {self.similarity}")


@dataclass
class Cell:
    """A single table cell. ``value`` is never modified after ingestion."""
    value: str
    highlights: List[Highlight] = field(default_factory=list)
    note: str = ""

    @property
    def text(self) -> str:
        return self.value.strip()

    def has_query(self, query_id: str) -> bool:
        return any(h.query_id == query_id for h in self.highlights)

    def purge(self, query_ids) -> bool:
        """Drop highlights whose id is in ``query_ids``. Returns True if any were removed."""
        before = len(self.highlights)
        self.highlights = [h for h in self.highlights if h.query_id not in query_ids]
        return len(self.highlights) != before

    def clear(self) -> None:
        self.highlights = []
        self.note = ""

    @property
    def max_similarity(self) -> int:
        return max((h.similarity for h in self.highlights), default=0)


@dataclass
class Query:
    """A user-defined search term.

    Attributes:
        text: Search text
        color: Highlight color as ``#rrggbb``
        id: Unique identifier
        note_text: Free-text annotation shown next to the query's matches
        enabled: Disabled queries are skipped by bulk runs
        threshold: Per-query similarity threshold, overrides the global one
        result_count: Matched rows from the last run
    """
    text: str = ""
    color: str = DEFAULT_QUERY_COLOR
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    note_text: str = ""
    enabled: bool = True
    threshold: Optional[float] = None
    result_count: int = 0

    def __post_init__(self):
        validate_color(self.color)
        if self.threshold is not None:
            self.threshold = validate_threshold(self.threshold)

    @property
    def is_active(self) -> bool:
        return self.enabled and bool(self.text.strip())

    @property
    def label(self) -> str:
        return query_label(self.text, self.note_text)

    def effective_threshold(self, default: float) -> float:
        return self.threshold if self.threshold is not None else default


def query_label(text: str = "", note_text: str = "", fallback: str = UNTITLED_QUERY_LABEL) -> str:
    """Human-readable label combining a query's text and its note."""
    text = (text or "").strip()
    note_text = (note_text or "").strip()
    if text and note_text:
        return f"EN:{text} | NOTE:{note_text}"
    return text or note_text or fallback


@dataclass
class Table:
    """Rectangular table of cells with a header row."""
    headers: List[str] = field(default_factory=list)
    rows: List[List[Cell]] = field(default_factory=list)

    @classmethod
    def from_values(
        cls,
        rows: Sequence[Sequence[str]],
        headers: Optional[Sequence[str]] = None,
    ) -> "Table":
        """Build a table from raw strings, padding rows to the widest one."""
        width = max([len(r) for r in rows] + [len(headers or [])], default=0)
        if headers is None:
            headers = [f"col{i + 1}" for i in range(width)]
        headers = list(headers) + [""] * (width - len(headers))
        cells = [
            [Cell(value="" if v is None else str(v)) for v in row] + [Cell(value="") for _ in range(width - len(row))]
            for row in rows
        ]
        return cls(headers=headers, rows=cells)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @property
    def column_count(self) -> int:
        return len(self.headers)

    def copy(self) -> "Table":
        """Deep copy, used as the working snapshot of a match pass."""
        return copy.deepcopy(self)

    def resolve_column(self, column: Union[int, str]) -> ColumnSelector:
        """Map a column index, a numeric string, a header name or ``"all"`` to a selector."""
        if column == ALL_COLUMNS:
            return ALL_COLUMNS
        if isinstance(column, str):
            if column in self.headers:
                return self.headers.index(column)
            if column.strip().isdigit():
                column = int(column)
            else:
                raise ConfigurationError(f"Unknown column: {column!r}")
        if not 0 <= column < max(self.column_count, 1):
            raise ConfigurationError(f"Column index {column} out of range")
        return column

    def column_values(self, column: int) -> List[str]:
        return [row[column].value if column < len(row) else "" for row in self.rows]

    def values(self) -> List[List[str]]:
        return [[cell.value for cell in row] for row in self.rows]

    def purge(self, query_ids) -> None:
        for row in self.rows:
            for cell in row:
                cell.purge(query_ids)

    def clear_highlights(self) -> None:
        for row in self.rows:
            for cell in row:
                cell.clear()


@dataclass(frozen=True)
class DuplicateGroup:
    """Rows whose values in one column are connected by similarity >= threshold.

    Attributes:
        index: Zero-based discovery order of the group
        rows: Row indices in ascending order
        column: Column the rows were compared on
        color: Highlight color assigned to the group
    """
    index: int
    rows: Tuple[int, ...]
    column: int
    color: str

    @property
    def size(self) -> int:
        return len(self.rows)

    @property
    def query_id(self) -> str:
        return f"auto_group_{self.index}"

    @property
    def label(self) -> str:
        return f"duplicate group {self.index + 1}"

    @property
    def note(self) -> str:
        return f"duplicate group {self.index + 1} ({self.size} items)"

    def to_json(self) -> dict:
        return {
            "group": self.index + 1,
            "rows": list(self.rows),
            "column": self.column,
            "color": self.color,
            "size": self.size,
        }


@dataclass
class MatchResult:
    """Outcome of running one query over a table."""
    table: Table
    query_id: str
    matched_row_count: int = 0
    elapsed_ms: float = 0.0


@dataclass
class MatchAllResult:
    """Outcome of running several queries over a table in one pass."""
    table: Table
    counts: Dict[str, int] = field(default_factory=dict)
    elapsed_ms: float = 0.0

    @property
    def total(self) -> int:
        return sum(self.counts.values())
