"""Ordered registry of table columns.

Each column maps a key to a chain of one or more decorators. Named
columns are keyed by field name; positional columns (for example a row
selection checkbox) are keyed by their integer slot.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator, Mapping

from tablekit.columns.factory import create_decorator, resolve_decorator
from tablekit.errors import (
    DuplicateColumnError,
    InvalidColumnKeyError,
    RenderInProgressError,
    UnknownColumnError,
)
from tablekit.sources._protocols import ColumnType
from tablekit.sources.base import Field

if TYPE_CHECKING:
    from tablekit.formatting import ValueFormatter
    from tablekit.sources._protocols import RowSourceProtocol

logger = logging.getLogger(__name__)


@dataclass
class Column:
    """A registered column.

    Attributes:
        key: Field name, or integer slot for positional columns.
        field: The column's field; None for positional columns.
        decorators: Decorator chain, never empty.
    """

    key: str | int
    field: Field | None
    decorators: list[Any]

    @property
    def positional(self) -> bool:
        return self.field is None

    @property
    def first(self) -> Any:
        """The decorator used for header cells."""
        return self.decorators[0]

    @property
    def last(self) -> Any:
        """The decorator that emits data and totals cell tags."""
        return self.decorators[-1]


class ColumnRegistry:
    """Ordered mapping of column keys to decorator chains.

    The registry is read-only while a render pass holds it (see
    :meth:`rendering`).
    """

    def __init__(
        self,
        source: "RowSourceProtocol | None" = None,
        formatter: "ValueFormatter | None" = None,
    ) -> None:
        """Initialize the registry.

        Args:
            source: Row source whose fields named columns refer to.
            formatter: Formatter handed to decorators that have none.
        """
        self.source = source
        self.formatter = formatter
        self._columns: dict[str | int, Column] = {}
        self._next_slot = 0
        self._locked = False

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_column(
        self,
        name: str | None,
        decorator: Any = None,
        field: Field | Mapping[str, Any] | ColumnType | str | None = None,
    ) -> Any:
        """Register a column.

        Args:
            name: Field name, or None for a positional column.
            decorator: Decorator seed (see :mod:`tablekit.columns.factory`).
                When None, one is picked from the field.
            field: Field declaration for names the source does not carry
                (a ``Field``, a type, or a mapping of field properties),
                or properties to apply to an existing field.

        Returns:
            The resolved decorator.

        Raises:
            DuplicateColumnError: If a named column is registered twice.
            InvalidColumnKeyError: If the name is neither a string nor None.
            InvalidDecoratorError: If the decorator seed is invalid.
            RenderInProgressError: If called during a render pass.
        """
        self.check_unlocked()

        if name is not None and not isinstance(name, str):
            raise InvalidColumnKeyError(name)
        if name is not None and name in self._columns:
            raise DuplicateColumnError(name)

        column_field = self._resolve_field(name, field) if name is not None else None
        resolved = self._bind(resolve_decorator(column_field, decorator))

        if name is None:
            key: str | int = self._next_slot
            self._next_slot += 1
        else:
            key = name

        self._columns[key] = Column(key=key, field=column_field, decorators=[resolved])
        logger.debug(f"Registered column {key!r} with {type(resolved).__name__}")
        return resolved

    def attach_decorator(self, name: str | int, decorator: Any) -> Any:
        """Append a decorator to an existing column's chain.

        Returns:
            The resolved decorator.

        Raises:
            UnknownColumnError: If the column is not registered.
            InvalidDecoratorError: If the decorator seed is invalid.
            RenderInProgressError: If called during a render pass.
        """
        self.check_unlocked()

        if name not in self._columns:
            raise UnknownColumnError(name)

        resolved = self._bind(create_decorator(decorator))
        column = self._columns[name]
        column.decorators.append(resolved)
        logger.debug(
            f"Attached {type(resolved).__name__} to column {name!r} "
            f"(chain length {len(column.decorators)})"
        )
        return resolved

    def _resolve_field(
        self,
        name: str,
        declaration: Field | Mapping[str, Any] | ColumnType | str | None,
    ) -> Field:
        source = self.source
        existing = source.get_field(name) if source is not None and source.has_field(name) else None

        if existing is not None:
            if isinstance(declaration, Field):
                raise DuplicateColumnError(name)
            if isinstance(declaration, Mapping):
                existing.set_defaults(declaration)
            elif declaration is not None:
                existing.set_defaults({"type": declaration})
            return existing

        if isinstance(declaration, Field):
            return declaration

        properties = dict(declaration) if isinstance(declaration, Mapping) else {}
        column_type = properties.pop("type", None) if isinstance(declaration, Mapping) else declaration

        if source is not None:
            return source.add_field(name, column_type, **properties)
        return Field(name=name, type=ColumnType.coerce(column_type), synthetic=True).set_defaults(properties)

    def _bind(self, decorator: Any) -> Any:
        if getattr(decorator, "formatter", False) is None and self.formatter is not None:
            decorator.formatter = self.formatter
        return decorator

    def set_formatter(self, formatter: "ValueFormatter") -> None:
        """Replace the formatter on every decorator that uses the registry's."""
        previous = self.formatter
        self.formatter = formatter
        for column in self._columns.values():
            for decorator in column.decorators:
                current = getattr(decorator, "formatter", False)
                if current is None or (previous is not None and current is previous):
                    decorator.formatter = formatter

    # -------------------------------------------------------------------------
    # Render lock
    # -------------------------------------------------------------------------

    def check_unlocked(self) -> None:
        if self._locked:
            raise RenderInProgressError("Columns cannot be changed while the table is rendering")

    @contextmanager
    def rendering(self) -> Iterator["ColumnRegistry"]:
        """Hold the registry read-only for the duration of a render pass."""
        self._locked = True
        try:
            yield self
        finally:
            self._locked = False

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    def get(self, name: str | int) -> Column:
        """Get a column by key.

        Raises:
            UnknownColumnError: If the column is not registered.
        """
        try:
            return self._columns[name]
        except KeyError:
            raise UnknownColumnError(name) from None

    def keys(self) -> list[str | int]:
        return list(self._columns)

    def __iter__(self) -> Iterator[Column]:
        return iter(self._columns.values())

    def __len__(self) -> int:
        return len(self._columns)

    def __contains__(self, name: object) -> bool:
        return name in self._columns

    def __repr__(self) -> str:
        return f"ColumnRegistry(columns={self.keys()!r})"
