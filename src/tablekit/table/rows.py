"""Row fragments: header row, body rows, totals rows and the empty state.

Body rows are produced from a row template that is composed once per
render pass. Composition walks each column's decorator chain; per-row
work afterwards is binding values into the composed template.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping

from tablekit.markup.template import Template, slot

if TYPE_CHECKING:
    from tablekit.formatting import ValueFormatter
    from tablekit.sources.base import Field, RowContext
    from tablekit.table.registry import Column, ColumnRegistry
    from tablekit.table.totals import TotalsEngine

logger = logging.getLogger(__name__)


def compose_cell(column: "Column") -> str:
    """Compose the data cell markup of one column.

    All decorators but the last contribute a template fragment and their
    ``body`` attributes; the last renders the cell tag with the collected
    attributes. Each fragment is substituted into the ``{$name}``
    placeholder of the fragment that follows it, so earlier decorators end
    up nested inside later ones. Positional columns have no placeholder;
    their fragments are joined with a space.
    """
    field = column.field
    *leading, last = column.decorators

    attributes: dict[str, Any] = {}
    fragments: list[str] = []
    for decorator in leading:
        fragments.append(decorator.render_data_cell_template(field))
        attributes = decorator.collect_attributes("body", attributes)
    fragments.append(last.render_data_cell(field, attributes))

    cell = fragments[0]
    for fragment in fragments[1:]:
        if field is not None:
            cell = fragment.replace(slot(field.name), cell)
        else:
            cell = cell + " " + fragment
    return cell


class RowRenderer:
    """Produces row fragments for one render pass.

    Attributes:
        registry: Columns to render.
        template: Table template holding the ``Head``, ``Row``, ``Totals``
            and ``Empty`` regions.
        formatter: Formats values bound into body rows.
        id_slot: Slot the row id is bound to.
    """

    def __init__(
        self,
        registry: "ColumnRegistry",
        template: Template,
        formatter: "ValueFormatter",
        id_slot: str = "_id",
    ) -> None:
        self.registry = registry
        self.template = template
        self.formatter = formatter
        self.id_slot = id_slot
        self._fields = self._collect_fields()
        self._row_template: Template | None = None

    def _collect_fields(self) -> dict[str, Field]:
        fields: dict[str, Field] = {}
        source = self.registry.source
        if source is not None:
            fields.update(source.fields)
        for column in self.registry:
            if column.field is not None:
                fields[column.field.name] = column.field
        return fields

    # -------------------------------------------------------------------------
    # Header
    # -------------------------------------------------------------------------

    def header_cells(self) -> str:
        """Concatenate each column's header cell (first decorator only)."""
        return "".join(column.first.render_header_cell(column.field) for column in self.registry)

    def header_row(self) -> str:
        return self.template.clone_region("Head").set_html("cells", self.header_cells()).render()

    # -------------------------------------------------------------------------
    # Body
    # -------------------------------------------------------------------------

    def data_row_cells(self) -> str:
        return "".join(compose_cell(column) for column in self.registry)

    @property
    def row_template(self) -> Template:
        """The composed row template, built on first access."""
        if self._row_template is None:
            master = self.template.clone_region("Row")
            master.set_html("cells", self.data_row_cells())
            master.set_html("_id", slot(self.id_slot))
            self._row_template = Template(master.render(), env=self.template.env)
            logger.debug(f"Composed row template with slots {self._row_template.slot_names}")
        return self._row_template

    def bind_values(self, ctx: "RowContext") -> dict[str, str]:
        """Format the row's values for binding, one entry per known field."""
        values: dict[str, str] = {
            name: self.formatter.format(f, ctx[name]) for name, f in self._fields.items()
        }
        for name, value in ctx.values.items():
            if name not in values:
                values[name] = self.formatter.format(None, value)
        values[self.id_slot] = "" if ctx.id is None else str(ctx.id)
        # checkbox cells always reference {$_id}
        values.setdefault("_id", values[self.id_slot])
        return values

    def decorator_markup(self, ctx: "RowContext") -> dict[str, Any]:
        """Gather per-row markup from every decorator that provides it."""
        markup: dict[str, Any] = {}
        for column in self.registry:
            for decorator in column.decorators:
                collect = getattr(decorator, "collect_row_markup", None)
                if collect is not None:
                    markup.update(collect(ctx, column.field))
        return markup

    def render_row(
        self,
        ctx: "RowContext",
        markup: Mapping[str, Any] | None = None,
        trusted: Mapping[str, Any] | None = None,
    ) -> str:
        """Render one body row.

        Args:
            ctx: The row.
            markup: Per-row slot values from decorators (escaped).
            trusted: Per-row markup from hooks (not escaped).

        Returns:
            The row fragment. Every slot bound for the row is cleared
            afterwards.
        """
        template = self.row_template
        values = self.bind_values(ctx)
        template.set(values)

        injected: list[str] = []
        if markup:
            template.set(markup)
            injected.extend(markup)
        if trusted:
            template.set_html(trusted)
            injected.extend(trusted)

        try:
            return template.render()
        finally:
            template.delete(*values, *injected)

    # -------------------------------------------------------------------------
    # Footer
    # -------------------------------------------------------------------------

    def totals_row(self, engine: "TotalsEngine", plan_index: int) -> str:
        cells = engine.render_footer_fragment(plan_index, self.registry)
        return self.template.clone_region("Totals").set_html("cells", cells).render()

    def empty_row(self, message: str) -> str:
        return (
            self.template.clone_region("Empty")
            .set("colspan", len(self.registry))
            .set("message", message)
            .render()
        )
