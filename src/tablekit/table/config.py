"""Table configuration."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

from tablekit.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class TableConfig:
    """Configuration for table rendering.

    Attributes:
        output_path: Optional path to write the rendered table to.
        header: Whether to render the header row.
        use_html_tags: Whether to inject row-specific markup from hooks
            and decorators. Switch off for speed at the cost of
            per-row markup (status classes, links, ...).
        sortable: Whether to mark the table as sortable.
        css_class: CSS classes of the ``<table>`` element.
        empty_message: Text shown when the source has no rows.
        id_slot: Slot the row id is bound to.
        date_format: strftime format for dates.
        datetime_format: strftime format for datetimes.
        time_format: strftime format for times.
        decimal_places: Digits after the decimal point for money.
        boolean_labels: Labels for True and False.
    """

    output_path: str | Path | None = None
    header: bool = True
    use_html_tags: bool = True
    sortable: bool = False
    css_class: str = "ui table"
    empty_message: str = "No records found"
    id_slot: str = "_id"
    date_format: str = "%Y-%m-%d"
    datetime_format: str = "%Y-%m-%d %H:%M:%S"
    time_format: str = "%H:%M:%S"
    decimal_places: int = 2
    boolean_labels: tuple[str, str] = ("Yes", "No")

    def get_output_path(self) -> Path | None:
        """Get the output path as a Path object."""
        if self.output_path is None:
            return None
        return Path(self.output_path)

    def update(self, **overrides: Any) -> "TableConfig":
        """Apply overrides in place.

        Raises:
            ConfigError: If an override names an unknown option.
        """
        names = {f.name for f in fields(self)}
        for key, value in overrides.items():
            if key not in names:
                raise ConfigError(
                    f"Unknown table option '{key}'. Available: {', '.join(sorted(names))}"
                )
            setattr(self, key, value)
        return self

    @classmethod
    def from_env(
        cls,
        prefix: str = "TABLEKIT_",
        environ: Mapping[str, str] | None = None,
    ) -> "TableConfig":
        """Build a configuration from environment variables.

        ``TABLEKIT_SORTABLE=true`` sets ``sortable``,
        ``TABLEKIT_DECIMAL_PLACES=3`` sets ``decimal_places`` and so on.
        Values are parsed according to the type of the option's default.

        Raises:
            ConfigError: If a value cannot be parsed.
        """
        environ = os.environ if environ is None else environ
        config = cls()
        for f in fields(config):
            key = f"{prefix}{f.name.upper()}"
            if key in environ:
                value = _parse_value(environ[key], getattr(config, f.name), key)
                setattr(config, f.name, value)
                logger.debug(f"Table option {f.name} set from {key}")
        return config


def _parse_value(raw: str, current: Any, key: str) -> Any:
    """Parse an environment value to the type of ``current``."""
    if isinstance(current, bool):
        if raw.lower() in ("true", "yes", "1", "on"):
            return True
        if raw.lower() in ("false", "no", "0", "off"):
            return False
        raise ConfigError(f"{key}: expected a boolean, got {raw!r}")

    if isinstance(current, int):
        try:
            return int(raw)
        except ValueError:
            raise ConfigError(f"{key}: expected an integer, got {raw!r}") from None

    if isinstance(current, tuple):
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            value = [part.strip() for part in raw.split(",")]
        if not isinstance(value, list) or len(value) != len(current):
            raise ConfigError(f"{key}: expected {len(current)} comma-separated values")
        return tuple(str(v) for v in value)

    if current is None and raw.lower() in ("null", "none", ""):
        return None

    return raw
