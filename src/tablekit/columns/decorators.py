"""Built-in column decorators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping
from urllib.parse import urlencode

from markupsafe import Markup

from tablekit.columns.base import Generic, merge_attributes
from tablekit.errors import ColumnError
from tablekit.formatting import DEFAULT_FORMATTER
from tablekit.markup.template import slot

if TYPE_CHECKING:
    from tablekit.sources.base import Field, RowContext


class Password(Generic):
    """Never reveals the value; data cells show a mask."""

    kind = "password"

    def __init__(self, mask: str = "***", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.mask = mask

    def render_data_cell_template(self, field: "Field | None" = None) -> str:
        return str(Markup.escape(self.mask))

    def render_totals_cell(self, field: "Field | None", value: Any) -> str:
        return self.tag("foot", "")


class Text(Generic):
    """Long text; line breaks are preserved."""

    kind = "text"

    def render_data_cell_template(self, field: "Field | None" = None) -> str:
        return '<div class="text" style="white-space: pre-wrap">' + super().render_data_cell_template(field) + "</div>"


class Money(Generic):
    """Right-aligned monetary amount; negative values get a ``negative`` class."""

    kind = "money"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.add_class("right aligned single line")

    def render_data_cell(
        self,
        field: "Field | None" = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> str:
        attributes = merge_attributes(attributes, {"class": slot(self.slot_prefix(field) + "_money")})
        return super().render_data_cell(field, attributes)

    def render_totals_cell(self, field: "Field | None", value: Any) -> str:
        return self.tag("foot", (self.formatter or DEFAULT_FORMATTER).format_money(value))

    def collect_row_markup(self, ctx: "RowContext", field: "Field | None") -> dict[str, str]:
        value = ctx[field.name] if field is not None else None
        negative = isinstance(value, (int, float)) and not isinstance(value, bool) and value < 0
        return {self.slot_prefix(field) + "_money": "negative" if negative else ""}


class Status(Generic):
    """Marks cells by which value set the row's value falls in.

    Example:
        >>> Status(positive=["paid"], negative=["overdue"])
        Status(states=['positive', 'negative'])
    """

    kind = "status"

    ICONS = {
        "positive": "checkmark",
        "negative": "close",
        "warning": "warning",
        "disabled": "minus",
    }

    def __init__(
        self,
        positive: Iterable[Any] = (),
        negative: Iterable[Any] = (),
        states: Mapping[str, Iterable[Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the decorator.

        Args:
            positive: Values rendered with the ``positive`` class.
            negative: Values rendered with the ``negative`` class.
            states: Additional state name to value set mapping, checked
                after ``positive`` and ``negative``.
        """
        super().__init__(**kwargs)
        self.states: dict[str, list[Any]] = {}
        if positive:
            self.states["positive"] = list(positive)
        if negative:
            self.states["negative"] = list(negative)
        for state, values in (states or {}).items():
            self.states[state] = list(values)

    def render_data_cell(
        self,
        field: "Field | None" = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> str:
        prefix = self.slot_prefix(field)
        attributes = merge_attributes(attributes, {"class": slot(prefix + "_status")})
        content = Markup(
            '<i class="icon ' + slot(prefix + "_icon") + '"></i>'
            + self.render_data_cell_template(field)
        )
        return self.tag("body", content, attributes)

    def state_of(self, value: Any) -> str | None:
        """Return the first state whose value set contains ``value``."""
        for state, values in self.states.items():
            # type check keeps 0/1 from matching False/True
            if any(v is value or (v == value and type(v) is type(value)) for v in values):
                return state
        return None

    def collect_row_markup(self, ctx: "RowContext", field: "Field | None") -> dict[str, str]:
        prefix = self.slot_prefix(field)
        value = ctx[field.name] if field is not None else None
        state = self.state_of(value)
        if state is None:
            return {prefix + "_status": "", prefix + "_icon": ""}
        return {
            prefix + "_status": f"{state} single line",
            prefix + "_icon": self.ICONS.get(state, ""),
        }

    def __repr__(self) -> str:
        return f"Status(states={list(self.states)!r})"


class Link(Generic):
    """Wraps the value in a link.

    The URL may reference row values as ``{field}`` and the row id as
    ``{_id}``; ``args`` adds query parameters taken from row fields.

    Example:
        >>> link = Link("/orders/{_id}", args={"customer": "customer_id"})
    """

    kind = "link"

    def __init__(
        self,
        url: str,
        args: Mapping[str, str] | Iterable[str] | None = None,
        target: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.url = url
        if args is None:
            self.args: dict[str, str] = {}
        elif isinstance(args, Mapping):
            self.args = dict(args)
        else:
            self.args = {name: name for name in args}
        self.target = target

    def render_data_cell_template(self, field: "Field | None" = None) -> str:
        target = f' target="{Markup.escape(self.target)}"' if self.target else ""
        return (
            '<a href="' + slot(self.slot_prefix(field) + "_href") + '"' + target + ">"
            + super().render_data_cell_template(field)
            + "</a>"
        )

    def build_url(self, ctx: "RowContext") -> str:
        """Build the link URL for a row."""
        values = {"_id": ctx.id, **ctx.values}
        url = self.url.format_map(_Missing(values))
        query = {param: ctx[name] for param, name in self.args.items() if ctx[name] is not None}
        if query:
            url += ("&" if "?" in url else "?") + urlencode(query)
        return url

    def collect_row_markup(self, ctx: "RowContext", field: "Field | None") -> dict[str, str]:
        return {self.slot_prefix(field) + "_href": self.build_url(ctx)}


class _Missing(dict):
    def __missing__(self, key: str) -> str:
        return ""


class Template(Generic):
    """Free-form cell content.

    The template may reference any field as ``{$field}`` and the row id
    as ``{$_id}``. When another decorator precedes it in a chain, that
    decorator's output takes the place of the ``{$field}`` placeholder.

    Example:
        >>> column = Template('<b>{$name}</b> ({$email})')
    """

    kind = "template"

    def __init__(self, template: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.template = template

    def render_data_cell_template(self, field: "Field | None" = None) -> str:
        return self.template


class Checkbox(Generic):
    """Row selection checkbox bound to the row id. Positional columns only."""

    kind = "checkbox"

    def __init__(self, name: str = "selected", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.name = name
        self.add_class("collapsing")

    def render_header_cell(self, field: "Field | None" = None) -> str:
        if field is not None:
            raise ColumnError("Checkbox must be placed in a positional column")
        return self.tag("head", Markup('<input type="checkbox" class="select-all">'))

    def render_data_cell_template(self, field: "Field | None" = None) -> str:
        return (
            f'<input type="checkbox" name="{Markup.escape(self.name)}[]" value="'
            + slot("_id")
            + '">'
        )

    def render_totals_cell(self, field: "Field | None", value: Any) -> str:
        return self.tag("foot", "")
