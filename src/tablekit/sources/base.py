"""Base classes for row sources.

This module provides the field model, the per-row context handed to
decorators, hooks and fold functions, and the abstract base class that
row source implementations extend.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Mapping

from tablekit.errors import SourceError
from tablekit.sources._protocols import ColumnType

if TYPE_CHECKING:
    from tablekit.sources._protocols import RowSourceProtocol

logger = logging.getLogger(__name__)


# =============================================================================
# Field
# =============================================================================


@dataclass
class Field:
    """A named field of a row source.

    Attributes:
        name: Field name, used as the column key.
        type: Declared data type.
        caption: Header caption. Derived from the name when not set.
        visible: Whether the field gets a column by default.
        ui: Presentation hints. ``ui["table"]`` may hold a decorator seed.
        synthetic: True when the field was added by the table rather
            than read from the data.
    """

    name: str
    type: ColumnType = ColumnType.UNKNOWN
    caption: str | None = None
    visible: bool = True
    ui: dict[str, Any] = field(default_factory=dict)
    synthetic: bool = False

    def __post_init__(self) -> None:
        self.type = ColumnType.coerce(self.type)

    def get_caption(self) -> str:
        """Get the header caption for this field."""
        if self.caption is not None:
            return self.caption
        words = self.name.replace("_", " ").split(" ")
        return " ".join(w[:1].upper() + w[1:] for w in words)

    def set_defaults(self, properties: Mapping[str, Any]) -> "Field":
        """Apply field properties in place.

        Args:
            properties: Mapping of attribute name to value.

        Returns:
            This field, for chaining.

        Raises:
            SourceError: If a property is not a Field attribute.
        """
        for key, value in properties.items():
            if key == "name" or not hasattr(self, key):
                raise SourceError(f"Field '{self.name}' has no property '{key}'")
            if key == "type":
                value = ColumnType.coerce(value)
            setattr(self, key, value)
        return self


def python_to_column_type(value: Any) -> ColumnType:
    """Infer a ColumnType from a Python value."""
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return ColumnType.BOOLEAN
    if isinstance(value, int):
        return ColumnType.INTEGER
    if isinstance(value, float):
        return ColumnType.FLOAT
    if isinstance(value, Decimal):
        return ColumnType.DECIMAL
    if isinstance(value, str):
        return ColumnType.STRING
    # datetime before date: datetime is a date subclass
    if isinstance(value, datetime):
        return ColumnType.DATETIME
    if isinstance(value, date):
        return ColumnType.DATE
    if isinstance(value, time):
        return ColumnType.TIME
    if isinstance(value, timedelta):
        return ColumnType.DURATION
    if isinstance(value, (bytes, bytearray)):
        return ColumnType.BINARY
    if isinstance(value, (list, tuple)):
        return ColumnType.LIST
    if isinstance(value, dict):
        return ColumnType.STRUCT
    if value is None:
        return ColumnType.NULL
    return ColumnType.UNKNOWN


# =============================================================================
# Row context
# =============================================================================


@dataclass(frozen=True)
class RowContext:
    """Read-only view of the current row.

    Passed explicitly to hooks, decorators and totals fold functions.

    Attributes:
        id: Row identifier.
        index: Zero-based position in the source.
        values: Field values of the row.
        source: The source the row was read from.
    """

    id: Any
    index: int
    values: Mapping[str, Any]
    source: "RowSourceProtocol | None" = None

    def __getitem__(self, name: str) -> Any:
        return self.values.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)


# =============================================================================
# Base row source
# =============================================================================


class BaseRowSource(ABC):
    """Abstract base class for row sources.

    Subclasses declare their fields and implement ``_iter_records``,
    yielding ``(row_id, values)`` pairs in forward order.
    """

    source_type: str = "base"

    def __init__(self, fields: Iterable[Field] = (), name: str | None = None) -> None:
        self._name = name or self.source_type
        self._fields: dict[str, Field] = {}
        for f in fields:
            self._fields[f.name] = f

    @property
    def name(self) -> str:
        """Get the source name."""
        return self._name

    @property
    def fields(self) -> Mapping[str, Field]:
        """Get the declared fields, in declaration order."""
        return MappingProxyType(self._fields)

    def has_field(self, name: str) -> bool:
        return name in self._fields

    def get_field(self, name: str) -> Field:
        """Get a field by name.

        Raises:
            SourceError: If the field does not exist.
        """
        try:
            return self._fields[name]
        except KeyError:
            raise SourceError(f"Source '{self._name}' has no field '{name}'") from None

    def add_field(
        self,
        name: str,
        type: ColumnType | str | None = None,
        **properties: Any,
    ) -> Field:
        """Declare a synthetic field.

        Synthetic fields carry no data; rows report None for them.

        Raises:
            SourceError: If the field already exists.
        """
        if name in self._fields:
            raise SourceError(f"Source '{self._name}' already has field '{name}'")
        f = Field(name=name, type=ColumnType.coerce(type), synthetic=True)
        if properties:
            f.set_defaults(properties)
        self._fields[name] = f
        logger.debug(f"Added synthetic field '{name}' ({f.type.value}) to {self._name}")
        return f

    @abstractmethod
    def _iter_records(self) -> Iterator[tuple[Any, Mapping[str, Any]]]:
        """Yield ``(row_id, values)`` pairs."""
        pass

    def __iter__(self) -> Iterator[RowContext]:
        for index, (row_id, values) in enumerate(self._iter_records()):
            yield RowContext(
                id=row_id,
                index=index,
                values=MappingProxyType(dict(values)),
                source=self,
            )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self._name!r}, fields={list(self._fields)})"
