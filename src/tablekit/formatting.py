"""Conversion of field values into display strings.

Row values are formatted by the field's declared type before they are
bound into a row template. Decorators use the same formatter for the
values they render in totals cells.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from tablekit.sources._protocols import ColumnType

if TYPE_CHECKING:
    from tablekit.sources.base import Field


@dataclass(frozen=True)
class ValueFormatter:
    """Formats values for display.

    Attributes:
        date_format: strftime format for dates.
        datetime_format: strftime format for datetimes.
        time_format: strftime format for times.
        decimal_places: Digits after the decimal point for money values.
        boolean_labels: Labels for True and False.
    """

    date_format: str = "%Y-%m-%d"
    datetime_format: str = "%Y-%m-%d %H:%M:%S"
    time_format: str = "%H:%M:%S"
    decimal_places: int = 2
    boolean_labels: tuple[str, str] = ("Yes", "No")

    @classmethod
    def from_config(cls, config: Any) -> "ValueFormatter":
        """Build a formatter from a TableConfig."""
        return cls(
            date_format=config.date_format,
            datetime_format=config.datetime_format,
            time_format=config.time_format,
            decimal_places=config.decimal_places,
            boolean_labels=tuple(config.boolean_labels),
        )

    def format(self, field: "Field | None", value: Any) -> str:
        """Format a value according to the field's type.

        Args:
            field: The field the value belongs to, or None.
            value: The raw value.

        Returns:
            Display string. None becomes an empty string.
        """
        if value is None:
            return ""

        column_type = field.type if field is not None else ColumnType.UNKNOWN

        if column_type == ColumnType.MONEY:
            return self.format_money(value)

        if isinstance(value, bool):
            return self.boolean_labels[0] if value else self.boolean_labels[1]
        if isinstance(value, datetime):
            return value.strftime(self.datetime_format)
        if isinstance(value, date):
            return value.strftime(self.date_format)
        if isinstance(value, time):
            return value.strftime(self.time_format)
        if isinstance(value, (list, tuple, dict)):
            return json.dumps(value, default=str)

        return str(value)

    def format_money(self, value: Any) -> str:
        """Format a monetary amount with thousands separators."""
        if value is None or value == "":
            return ""
        try:
            amount = value if isinstance(value, Decimal) else float(value)
        except (TypeError, ValueError):
            return str(value)
        return f"{amount:,.{self.decimal_places}f}"


DEFAULT_FORMATTER = ValueFormatter()
