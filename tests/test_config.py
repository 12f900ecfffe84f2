"""Tests for table configuration and value formatting."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from tablekit import Table
from tablekit.errors import ConfigError
from tablekit.formatting import ValueFormatter
from tablekit.sources import ColumnType, Field
from tablekit.table import TableConfig


class TestTableConfig:
    """Tests for TableConfig."""

    def test_defaults(self):
        config = TableConfig()

        assert config.header is True
        assert config.use_html_tags is True
        assert config.css_class == "ui table"
        assert config.get_output_path() is None

    def test_update(self):
        config = TableConfig().update(sortable=True, decimal_places=3)

        assert config.sortable is True
        assert config.decimal_places == 3

    def test_update_unknown_option(self):
        with pytest.raises(ConfigError, match="Unknown table option 'colour'"):
            TableConfig().update(colour="red")

    def test_table_kwargs_override_config(self):
        table = Table(css_class="ui compact table", header=False)

        assert table.config.css_class == "ui compact table"
        assert table.config.header is False

    def test_table_rejects_unknown_kwargs(self):
        with pytest.raises(ConfigError):
            Table(colour="red")

    def test_from_env(self):
        environ = {
            "TABLEKIT_SORTABLE": "true",
            "TABLEKIT_HEADER": "off",
            "TABLEKIT_DECIMAL_PLACES": "3",
            "TABLEKIT_EMPTY_MESSAGE": "Nothing",
            "TABLEKIT_BOOLEAN_LABELS": "Y,N",
            "OTHER": "ignored",
        }

        config = TableConfig.from_env(environ=environ)

        assert config.sortable is True
        assert config.header is False
        assert config.decimal_places == 3
        assert config.empty_message == "Nothing"
        assert config.boolean_labels == ("Y", "N")

    def test_from_env_json_tuple(self):
        config = TableConfig.from_env(environ={"TABLEKIT_BOOLEAN_LABELS": '["On", "Off"]'})

        assert config.boolean_labels == ("On", "Off")

    def test_from_env_output_path(self):
        config = TableConfig.from_env(environ={"TABLEKIT_OUTPUT_PATH": "out/table.html"})

        assert str(config.get_output_path()) == "out/table.html"

    @pytest.mark.parametrize(
        "key,value",
        [
            ("TABLEKIT_SORTABLE", "maybe"),
            ("TABLEKIT_DECIMAL_PLACES", "two"),
            ("TABLEKIT_BOOLEAN_LABELS", "a,b,c"),
        ],
    )
    def test_from_env_invalid(self, key, value):
        with pytest.raises(ConfigError, match=key):
            TableConfig.from_env(environ={key: value})

    def test_custom_prefix(self):
        config = TableConfig.from_env(prefix="GRID_", environ={"GRID_SORTABLE": "1"})

        assert config.sortable is True


class TestValueFormatter:
    """Tests for value formatting."""

    @pytest.fixture
    def formatter(self) -> ValueFormatter:
        return ValueFormatter()

    def test_none(self, formatter):
        assert formatter.format(None, None) == ""

    def test_booleans(self, formatter):
        assert formatter.format(None, True) == "Yes"
        assert formatter.format(None, False) == "No"

    def test_dates(self, formatter):
        assert formatter.format(None, date(2024, 3, 1)) == "2024-03-01"
        assert formatter.format(None, datetime(2024, 3, 1, 9, 5)) == "2024-03-01 09:05:00"
        assert formatter.format(None, time(9, 5)) == "09:05:00"

    def test_money_field(self, formatter):
        field = Field("price", ColumnType.MONEY)

        assert formatter.format(field, 1234.5) == "1,234.50"
        assert formatter.format(field, Decimal("2.125")) == "2.12"

    def test_collections_as_json(self, formatter):
        assert formatter.format(None, [1, 2]) == "[1, 2]"

    def test_from_config(self):
        config = TableConfig(decimal_places=0, boolean_labels=("on", "off"))

        formatter = ValueFormatter.from_config(config)

        assert formatter.format(Field("p", "money"), 2.4) == "2"
        assert formatter.format(None, False) == "off"

    def test_table_uses_config_formatting(self):
        table = Table(source=[{"id": 1, "done": True}], boolean_labels=("✓", "✗"))
        table.add_column("label", field={"caption": "Label"})

        html = table.render()

        assert "✓" in html
