"""Column decorators: per-column presentation rules.

Example:
    >>> from tablekit.columns import create_decorator
    >>> money = create_decorator("money")
    >>> money.render_totals_cell(None, 1234.5)
    '<td class="right aligned single line">1,234.50</td>'
"""

from tablekit.columns.base import (
    REGIONS,
    REQUIRED_METHODS,
    ColumnDecorator,
    Generic,
    merge_attributes,
    render_attributes,
)
from tablekit.columns.decorators import Checkbox, Link, Money, Password, Status, Template, Text
from tablekit.columns.factory import (
    TYPE_TO_DECORATOR,
    create_decorator,
    list_decorators,
    register_decorator,
    resolve_decorator,
    validate_decorator,
)

__all__ = [
    "REGIONS",
    "REQUIRED_METHODS",
    "TYPE_TO_DECORATOR",
    "Checkbox",
    "ColumnDecorator",
    "Generic",
    "Link",
    "Money",
    "Password",
    "Status",
    "Template",
    "Text",
    "create_decorator",
    "list_decorators",
    "merge_attributes",
    "register_decorator",
    "render_attributes",
    "resolve_decorator",
    "validate_decorator",
]
