"""Exception hierarchy for tablekit.

Every error raised by the library descends from :class:`TableError`, so
callers can catch the whole family at once. Errors are raised at the
point of detection and are never downgraded to warnings.
"""

from __future__ import annotations

from typing import Any


# =============================================================================
# Base
# =============================================================================


class TableError(Exception):
    """Base exception for all tablekit errors."""

    pass


# =============================================================================
# Column errors
# =============================================================================


class NoColumnsError(TableError):
    """Raised when a table is rendered without any columns."""

    def __init__(self) -> None:
        super().__init__("Table does not have any columns defined")


class ColumnError(TableError):
    """Base class for column registration errors."""

    pass


class DuplicateColumnError(ColumnError):
    """Raised when a named column is registered twice."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Table already has column '{name}'. "
            "Use attach_decorator() to add another decorator to it."
        )


class UnknownColumnError(ColumnError, KeyError):
    """Raised when decorating a column that was never registered."""

    def __init__(self, name: Any) -> None:
        self.name = name
        super().__init__(f"No such column, cannot decorate: {name!r}")

    def __str__(self) -> str:
        return str(self.args[0])


class InvalidColumnKeyError(ColumnError, TypeError):
    """Raised when a column key is neither a string nor None."""

    def __init__(self, name: Any) -> None:
        self.name = name
        super().__init__(f"Column name must be a string or None, got {type(name).__name__}")


class InvalidDecoratorError(TableError, TypeError):
    """Raised when a decorator does not satisfy the decorator contract."""

    def __init__(self, decorator: Any, reason: str = "") -> None:
        self.decorator = decorator
        message = f"Invalid column decorator: {decorator!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


# =============================================================================
# Totals errors
# =============================================================================


class TotalsError(TableError):
    """Base class for totals plan errors."""

    pass


class UnknownAggregationMethodError(TotalsError):
    """Raised when a totals plan names an aggregation that does not exist."""

    def __init__(self, column: str, method: str) -> None:
        self.column = column
        self.method = method
        super().__init__(
            f"Aggregation method does not exist: '{method}' (column '{column}')"
        )


class InvalidTotalsPlanError(TotalsError, ValueError):
    """Raised when a totals directive has a shape that cannot be normalized."""

    def __init__(self, column: str, directive: Any) -> None:
        self.column = column
        self.directive = directive
        super().__init__(
            f"Cannot interpret totals directive for column '{column}': {directive!r}"
        )


# =============================================================================
# Render errors
# =============================================================================


class RenderInProgressError(TableError):
    """Raised when a table is modified while it is being rendered."""

    pass


class RenderError(TableError):
    """Raised when producing the output document fails."""

    pass


class WriteError(TableError):
    """Raised when writing rendered output to a file fails."""

    pass


# =============================================================================
# Source errors
# =============================================================================


class SourceError(TableError):
    """Raised when a row source cannot be created or read."""

    pass


# =============================================================================
# Configuration errors
# =============================================================================


class ConfigError(TableError):
    """Raised when a configuration value cannot be interpreted."""

    pass
