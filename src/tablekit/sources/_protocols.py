"""Protocol definitions for row sources.

This module defines the structural typing protocols that row sources
follow. A table only needs read access to rows: iteration in forward
order, field lookup by name, and field metadata.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Iterator, Mapping, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tablekit.sources.base import Field, RowContext


class ColumnType(Enum):
    """Declared data type of a field, used to pick a default decorator."""

    # Numeric types
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    MONEY = "money"

    # String types
    STRING = "string"
    TEXT = "text"
    PASSWORD = "password"

    # Date/Time types
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    DURATION = "duration"

    # Boolean
    BOOLEAN = "boolean"

    # Binary
    BINARY = "binary"

    # Complex types
    LIST = "list"
    STRUCT = "struct"
    JSON = "json"

    # Other
    NULL = "null"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, value: "ColumnType | str | None") -> "ColumnType":
        """Convert a type name (case-insensitive, common aliases allowed).

        Unrecognized names map to UNKNOWN.
        """
        if value is None:
            return cls.UNKNOWN
        if isinstance(value, ColumnType):
            return value

        name = str(value).strip().lower()
        aliases = {
            "int": cls.INTEGER,
            "bool": cls.BOOLEAN,
            "str": cls.STRING,
            "varchar": cls.STRING,
            "double": cls.FLOAT,
            "numeric": cls.DECIMAL,
            "timestamp": cls.DATETIME,
        }
        if name in aliases:
            return aliases[name]
        try:
            return cls(name)
        except ValueError:
            return cls.UNKNOWN


@runtime_checkable
class RowSourceProtocol(Protocol):
    """Protocol defining the interface a table reads rows through."""

    @property
    def name(self) -> str:
        """Get the source identifier/name."""
        ...

    @property
    def fields(self) -> Mapping[str, "Field"]:
        """Get field name to Field mapping, in declaration order."""
        ...

    def has_field(self, name: str) -> bool:
        """Check whether the source declares a field."""
        ...

    def get_field(self, name: str) -> "Field":
        """Get a field by name."""
        ...

    def add_field(self, name: str, type: "ColumnType | str | None" = None, **properties: Any) -> "Field":
        """Declare a field the underlying data does not carry."""
        ...

    def __iter__(self) -> Iterator["RowContext"]:
        """Iterate rows in forward order."""
        ...
