"""Default markup for tables.

The document carries the ``Head``, ``Body`` and ``Foot`` slots that the
table renderer fills, and the ``Head``, ``Row``, ``Totals`` and ``Empty``
regions it clones row templates from.
"""

from __future__ import annotations

from tablekit.markup.template import Template

DOCUMENT = """<table class="{$_class}">
<thead>{$Head}</thead>
<tbody>{$Body}</tbody>
<tfoot>{$Foot}</tfoot>
</table>"""

REGIONS = {
    "Head": "<tr>{$cells}</tr>",
    "Row": '<tr data-id="{$_id}">{$cells}</tr>',
    "Totals": '<tr class="totals">{$cells}</tr>',
    "Empty": '<tr class="empty"><td colspan="{$colspan}">{$message}</td></tr>',
}


def default_table_template() -> Template:
    """Create a fresh copy of the default table template."""
    return Template(DOCUMENT, REGIONS)
