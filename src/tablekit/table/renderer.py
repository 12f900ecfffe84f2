"""The table renderer.

Example:
    >>> table = Table(source=[
    ...     {"id": 1, "name": "Alice", "amount": 10},
    ...     {"id": 2, "name": "Bob", "amount": -5},
    ... ])
    >>> table.add_decorator("amount", "money")
    >>> table.add_totals({"name": "Totals:", "amount": ["sum"]})
    >>> html = table.render()
    >>> table.totals
    {0: {'amount': 5}}
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator, Mapping

from tablekit.errors import NoColumnsError
from tablekit.formatting import ValueFormatter
from tablekit.markup.table_template import default_table_template
from tablekit.rendering.base import BaseRenderer
from tablekit.sources.factory import get_source
from tablekit.table.config import TableConfig
from tablekit.table.hooks import HookManager, HookType
from tablekit.table.registry import ColumnRegistry
from tablekit.table.rows import RowRenderer
from tablekit.table.totals import TotalsEngine

if TYPE_CHECKING:
    from tablekit.markup.template import Template
    from tablekit.sources._protocols import RowSourceProtocol
    from tablekit.sources.base import Field, RowContext

logger = logging.getLogger(__name__)


class RenderState(str, Enum):
    """Where a table is in its render pass."""

    IDLE = "idle"
    HEADER = "header"
    ITERATING = "iterating"
    FINALIZED = "finalized"


class Table(BaseRenderer[TableConfig]):
    """Renders a row source as an HTML table.

    Columns are registered with :meth:`add_column` (or all visible fields
    at once by :meth:`set_source`), decorated with :meth:`add_decorator`,
    and summarized by totals plans added with :meth:`add_totals`.

    Attributes:
        columns: The column registry.
        hooks: Per-row hook handlers (see :mod:`tablekit.table.hooks`).
        template: Table markup with ``Head``, ``Body`` and ``Foot`` slots.
        source: The row source, once set.
    """

    name = "table"

    def __init__(
        self,
        css_class: str | None = None,
        source: Any = None,
        config: TableConfig | None = None,
        template: "Template | None" = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the table.

        Args:
            css_class: CSS classes of the ``<table>`` element; shortcut for
                ``config.css_class``.
            source: Row source, or anything :func:`get_source` accepts.
                A column is added for every visible field.
            config: Table configuration. If None, uses default configuration.
            template: Table markup. Defaults to the built-in template.
            **kwargs: Configuration options to override.
        """
        super().__init__(config, **kwargs)
        if css_class is not None:
            self._config.css_class = css_class

        self.template = template or default_table_template()
        self.hooks = HookManager()
        self.columns = ColumnRegistry(formatter=ValueFormatter.from_config(self._config))
        self.source: "RowSourceProtocol | None" = None

        self._totals = TotalsEngine()
        self._state = RenderState.IDLE
        self._rows_rendered = 0
        self._rows_skipped = 0

        if source is not None:
            self.set_source(source)

    @classmethod
    def _default_config(cls) -> TableConfig:
        return TableConfig()

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def set_source(
        self,
        source: Any,
        columns: Iterable[str] | bool | None = None,
        **kwargs: Any,
    ) -> "Table":
        """Set the row source.

        Args:
            source: Row source, or anything :func:`get_source` accepts.
            columns: None adds a column for every visible field, a list
                adds the named fields, False adds none.
            **kwargs: Passed to :func:`get_source`.

        Returns:
            This table, for chaining.
        """
        self.columns.check_unlocked()
        self.source = get_source(source, **kwargs)
        self.columns.source = self.source

        if columns is False:
            return self
        if columns is None or columns is True:
            names = [f.name for f in self.source.fields.values() if f.visible]
        else:
            names = list(columns)

        for name in names:
            if name not in self.columns:
                self.add_column(name)
        return self

    def add_column(
        self,
        name: str | None,
        decorator: Any = None,
        field: "Field | Mapping[str, Any] | str | None" = None,
    ) -> Any:
        """Register a column. See :meth:`ColumnRegistry.register_column`."""
        return self.columns.register_column(name, decorator, field)

    def add_decorator(self, name: str | int, decorator: Any) -> Any:
        """Append a decorator to a column's chain.

        Raises:
            UnknownColumnError: If the column is not registered.
        """
        return self.columns.attach_decorator(name, decorator)

    attach_decorator = add_decorator

    def add_totals(self, plan: Mapping[str, Any] | None = None) -> "Table":
        """Add a totals plan; each plan renders one footer row.

        Example:
            >>> table.add_totals({"name": "Totals:", "amount": ["sum"]})
        """
        self._totals.add_plans(plan)
        return self

    def set_totals(self, plan: Mapping[str, Any] | None = None) -> "Table":
        """Replace all totals plans with one plan."""
        self._totals.set_plans(plan)
        return self

    def on_before_row(self, handler: Callable[..., Any], priority: int = 100) -> Callable[..., Any]:
        """Register a ``before_row`` handler. Usable as a decorator.

        The handler receives the row context. Returning ``False`` or
        ``RowAction.SKIP`` leaves the row out of the body and the totals.
        """
        self.hooks.register(HookType.BEFORE_ROW, handler, priority=priority, source="table")
        return handler

    def on_row_markup(self, handler: Callable[..., Any], priority: int = 100) -> Callable[..., Any]:
        """Register a ``row_markup`` handler. Usable as a decorator.

        The handler receives the row context and returns a mapping of
        slot name to markup, injected into that row only.
        """
        self.hooks.register(HookType.ROW_MARKUP, handler, priority=priority, source="table")
        return handler

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> RenderState:
        return self._state

    @property
    def totals(self) -> dict[int, dict[str, Any]]:
        """Accumulated totals of the last render pass, per plan."""
        return self._totals.totals

    @property
    def totals_engine(self) -> TotalsEngine:
        return self._totals

    @property
    def rows_rendered(self) -> int:
        return self._rows_rendered

    @property
    def rows_skipped(self) -> int:
        return self._rows_skipped

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self, data: Any = None) -> str:
        """Render the table document.

        Args:
            data: Optional row source replacing the current one. Columns
                are only added from it when none are registered yet.

        Returns:
            The ``<table>`` markup.

        Raises:
            NoColumnsError: If no columns are registered.
            UnknownAggregationMethodError: If a totals plan names an
                unknown reducer.
        """
        rows = self._begin(data)
        document = self.template.clone()

        if self._config.header:
            self._state = RenderState.HEADER
            document.set_html("Head", rows.header_row())

        for fragment in self._iterate(rows):
            document.append_html("Body", fragment)

        if self._rows_rendered == 0:
            document.set_html("Body", rows.empty_row(self._config.empty_message))
        else:
            for plan_index in self._totals:
                document.append_html("Foot", rows.totals_row(self._totals, plan_index))

        document.set("_class", self._css_classes())
        self._state = RenderState.FINALIZED
        return document.render()

    def iter_rows(self, data: Any = None) -> Iterator[str]:
        """Yield body row fragments one at a time.

        Totals are available from :attr:`totals` once the iterator is
        exhausted. Columns stay locked while the iterator is open.

        Raises:
            NoColumnsError: If no columns are registered (raised here, not
                on first iteration).
        """
        rows = self._begin(data)
        return self._iterate(rows)

    def _begin(self, data: Any) -> RowRenderer:
        if data is not None:
            self.set_source(data, columns=None if len(self.columns) == 0 else False)

        if len(self.columns) == 0:
            raise NoColumnsError()

        self._state = RenderState.IDLE
        self._rows_rendered = 0
        self._rows_skipped = 0
        self._totals.reset()

        formatter = ValueFormatter.from_config(self._config)
        self.columns.set_formatter(formatter)
        return RowRenderer(self.columns, self.template, formatter, id_slot=self._config.id_slot)

    def _iterate(self, rows: RowRenderer) -> Iterator[str]:
        if self.source is None:
            return

        use_html_tags = self._config.use_html_tags
        fold = len(self._totals) > 0

        with self.columns.rendering():
            self._state = RenderState.ITERATING
            for ctx in self.source:
                if self.hooks.should_skip(ctx):
                    self._rows_skipped += 1
                    continue

                if fold:
                    self._totals.fold_row(ctx)

                yield self._render_row(rows, ctx, use_html_tags)
                self._rows_rendered += 1

        self._state = RenderState.FINALIZED
        logger.debug(
            f"Rendered {self._rows_rendered} row(s), skipped {self._rows_skipped}, "
            f"{len(self._totals)} totals plan(s)"
        )

    def _render_row(self, rows: RowRenderer, ctx: "RowContext", use_html_tags: bool) -> str:
        if not use_html_tags:
            return rows.render_row(ctx)
        return rows.render_row(
            ctx,
            markup=rows.decorator_markup(ctx),
            trusted=self.hooks.collect_markup(ctx),
        )

    def _css_classes(self) -> str:
        classes = self._config.css_class
        if self._config.sortable:
            classes = f"{classes} sortable"
        return classes

    def __repr__(self) -> str:
        return (
            f"Table(columns={self.columns.keys()!r}, plans={len(self._totals)}, "
            f"state={self._state.value})"
        )
