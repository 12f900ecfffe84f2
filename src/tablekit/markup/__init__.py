"""Markup templates with named slots."""

from tablekit.markup.table_template import default_table_template
from tablekit.markup.template import SLOT_PATTERN, Template, get_environment, slot

__all__ = [
    "SLOT_PATTERN",
    "Template",
    "default_table_template",
    "get_environment",
    "slot",
]
