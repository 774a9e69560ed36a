"""
Exception hierarchy for copysift.

The engines report empty inputs through return values; these errors are
raised only at the boundaries where users hand in settings or identifiers.
"""


class CopySiftError(Exception):
    """Base class for all copysift errors."""


class ConfigurationError(CopySiftError, ValueError):
    """Raised when a user-supplied setting is out of range or malformed."""


class QueryNotFoundError(CopySiftError, KeyError):
    """Raised when a query id is not registered in the session."""

    def __init__(self, query_id: str):
        super().__init__(query_id)
        self.query_id = query_id

    def __str__(self) -> str:
        return f"Query not found: {self.query_id}"


class TableFormatError(CopySiftError):
    """Raised when a table source cannot be read."""
