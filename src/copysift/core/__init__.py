from .errors import (
    ConfigurationError,
    CopySiftError,
    QueryNotFoundError,
    TableFormatError,
)
from .models import (
    ALL_COLUMNS,
    Cell,
    ColumnSelector,
    DuplicateGroup,
    Highlight,
    MatchAllResult,
    MatchResult,
    Query,
    SearchMode,
    Table,
    query_label,
    validate_color,
    validate_threshold,
)

__all__ = [
    "ALL_COLUMNS",
    "Cell",
    "ColumnSelector",
    "ConfigurationError",
    "CopySiftError",
    "DuplicateGroup",
    "Highlight",
    "MatchAllResult",
    "MatchResult",
    "Query",
    "QueryNotFoundError",
    "SearchMode",
    "Table",
    "TableFormatError",
    "query_label",
    "validate_color",
    "validate_threshold",
]
