"""Base classes and protocols for column decorators.

A decorator turns one field's value into a table cell. Several
decorators may be chained on one column: all but the last contribute a
cell template (with a ``{$name}`` placeholder) and tag attributes, the
last one emits the cell tag itself.

Regions:
    head: header cells (``<th>``)
    body: data cells (``<td>``)
    foot: totals cells (``<td>``)
"""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable

from markupsafe import Markup, escape

from tablekit.formatting import DEFAULT_FORMATTER, ValueFormatter
from tablekit.markup.template import slot

if TYPE_CHECKING:
    from tablekit.sources.base import Field, RowContext


REGIONS = ("head", "body", "foot")

# Methods every decorator must provide.
REQUIRED_METHODS = (
    "render_header_cell",
    "render_data_cell_template",
    "render_data_cell",
    "render_totals_cell",
    "tag",
    "collect_attributes",
)

_serial = itertools.count(1)


@runtime_checkable
class ColumnDecorator(Protocol):
    """Protocol for column decorators.

    Decorators may additionally implement
    ``collect_row_markup(ctx, field) -> Mapping[str, str]`` to inject
    per-row markup into slots their cells declare.
    """

    def render_header_cell(self, field: "Field | None" = None) -> str:
        ...

    def render_data_cell_template(self, field: "Field | None" = None) -> str:
        ...

    def render_data_cell(
        self,
        field: "Field | None" = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> str:
        ...

    def render_totals_cell(self, field: "Field | None", value: Any) -> str:
        ...

    def tag(
        self,
        region: str,
        content: Any,
        attributes: Mapping[str, Any] | None = None,
    ) -> str:
        ...

    def collect_attributes(
        self,
        region: str,
        prior: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        ...


def merge_attributes(*sources: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge tag attribute mappings left to right.

    ``class`` values accumulate (duplicates dropped); any other
    attribute is overwritten by later sources.
    """
    merged: dict[str, Any] = {}
    for source in sources:
        if not source:
            continue
        for name, value in source.items():
            if name == "class":
                classes = list(merged.get("class", []))
                for cls in _class_list(value):
                    if cls not in classes:
                        classes.append(cls)
                merged["class"] = classes
            else:
                merged[name] = value
    return merged


def _class_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    return [str(v) for v in value if v]


def render_attributes(attributes: Mapping[str, Any]) -> str:
    """Render attributes as an HTML attribute string (with leading space)."""
    parts: list[str] = []
    for name, value in attributes.items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(f" {name}")
            continue
        if name == "class":
            value = " ".join(_class_list(value))
            if not value:
                continue
        parts.append(f' {name}="{escape(value)}"')
    return "".join(parts)


class Generic:
    """Plain column decorator; the base of all built-in decorators.

    Renders the caption in the header, the field value in data cells and
    the formatted aggregate in totals cells. Tag attributes are kept per
    region (``all``, ``head``, ``body``, ``foot``).

    Example:
        >>> column = Generic(caption="Amount").add_class("right aligned")
        >>> column.tag("foot", "60")
        '<td class="right aligned">60</td>'
    """

    kind = "generic"

    def __init__(
        self,
        caption: str | None = None,
        attr: Mapping[str, Mapping[str, Any]] | None = None,
        formatter: ValueFormatter | None = None,
    ) -> None:
        """Initialize the decorator.

        Args:
            caption: Header caption. Defaults to the field caption.
            attr: Initial tag attributes per region (``all``, ``head``,
                ``body``, ``foot``).
            formatter: Value formatter. The table supplies its own when
                this is None.
        """
        self.caption = caption
        self.formatter = formatter
        self.attr: dict[str, dict[str, Any]] = {"all": {}, "head": {}, "body": {}, "foot": {}}
        for region, attributes in (attr or {}).items():
            self.attr[region] = merge_attributes(self.attr.get(region), attributes)
        self._serial = next(_serial)

    # -------------------------------------------------------------------------
    # Attributes
    # -------------------------------------------------------------------------

    def add_class(self, cls: str, region: str = "all") -> "Generic":
        """Add a CSS class to the cells of a region."""
        self.attr[region] = merge_attributes(self.attr[region], {"class": cls})
        return self

    def set_attr(self, name: str, value: Any, region: str = "all") -> "Generic":
        """Set a tag attribute on the cells of a region."""
        self.attr[region] = merge_attributes(self.attr[region], {name: value})
        return self

    def collect_attributes(
        self,
        region: str,
        prior: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Merge this decorator's attributes for a region onto ``prior``."""
        return merge_attributes(prior, self.attr["all"], self.attr.get(region))

    # -------------------------------------------------------------------------
    # Cells
    # -------------------------------------------------------------------------

    def tag(
        self,
        region: str,
        content: Any,
        attributes: Mapping[str, Any] | None = None,
    ) -> str:
        """Produce a cell tag for a region.

        Plain strings are escaped; ``Markup`` content is emitted as is.
        """
        name = "th" if region == "head" else "td"
        attrs = self.collect_attributes(region, attributes)
        return f"<{name}{render_attributes(attrs)}>{escape(content)}</{name}>"

    def render_header_cell(self, field: "Field | None" = None) -> str:
        if self.caption is not None:
            caption = self.caption
        else:
            caption = field.get_caption() if field is not None else ""
        return self.tag("head", caption)

    def render_data_cell_template(self, field: "Field | None" = None) -> str:
        """Return the cell content with a placeholder for the value."""
        if field is None:
            return ""
        return slot(field.name)

    def render_data_cell(
        self,
        field: "Field | None" = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> str:
        return self.tag("body", Markup(self.render_data_cell_template(field)), attributes)

    def render_totals_cell(self, field: "Field | None", value: Any) -> str:
        return self.tag("foot", self.format_value(field, value))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def format_value(self, field: "Field | None", value: Any) -> str:
        return (self.formatter or DEFAULT_FORMATTER).format(field, value)

    def slot_prefix(self, field: "Field | None") -> str:
        """Prefix for the per-row slots this decorator declares."""
        if field is not None:
            return f"_{field.name}"
        return f"_{self.kind}{self._serial}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(caption={self.caption!r})"
