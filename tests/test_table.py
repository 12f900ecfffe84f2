"""Tests for the table renderer."""

from __future__ import annotations

import pytest

from tablekit import Generic, Table, TableConfig
from tablekit.columns.decorators import Link
from tablekit.columns.decorators import Template as TemplateColumn
from tablekit.errors import (
    ColumnError,
    NoColumnsError,
    RenderInProgressError,
    UnknownColumnError,
    WriteError,
)
from tablekit.sources import BaseRowSource, RecordSource
from tablekit.table import HookType, RenderState


class ExplodingSource(BaseRowSource):
    """Source that fails if anything iterates it."""

    source_type = "exploding"

    def _iter_records(self):
        raise AssertionError("source was iterated")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def table(records) -> Table:
    """Table over the sample rows, columns added for visible fields."""
    return Table(source=records)


# =============================================================================
# Document structure
# =============================================================================


class TestRender:
    """Tests for the rendered document."""

    def test_document(self, table):
        html = table.render()

        assert html.startswith('<table class="ui table">')
        assert "<thead><tr><th>Name</th><th>Amount</th></tr></thead>" in html
        assert '<tr data-id="1"><td>Alice</td><td>10</td></tr>' in html
        assert '<tr data-id="3"><td>Carol</td><td>30</td></tr>' in html
        assert "<tfoot></tfoot>" in html
        assert html.endswith("</table>")

    def test_header_uses_first_decorator_only(self, records):
        table = Table()
        table.set_source(records, columns=False)
        table.add_column("amount", Generic(caption="Gross"))
        table.add_decorator("amount", Generic(caption="Net"))

        html = table.render()

        assert "<thead><tr><th>Gross</th></tr></thead>" in html
        assert "Net" not in html

    def test_rows_in_source_order(self, table):
        html = table.render()

        assert html.index("Alice") < html.index("Bob") < html.index("Carol")
        assert table.rows_rendered == 3

    def test_hidden_id_field_has_no_column(self, table):
        assert table.columns.keys() == ["name", "amount"]

    def test_values_are_escaped(self):
        table = Table(source=[{"id": 1, "name": "<b>x</b>"}])

        html = table.render()

        assert "<td>&lt;b&gt;x&lt;/b&gt;</td>" in html

    def test_no_header(self, records):
        html = Table(source=records, header=False).render()

        assert "<thead></thead>" in html
        assert "<th>" not in html

    def test_css_class_and_sortable(self, records):
        html = Table("ui celled table", source=records, sortable=True).render()

        assert html.startswith('<table class="ui celled table sortable">')

    def test_selected_columns(self, records):
        table = Table()
        table.set_source(records, columns=["amount"])

        html = table.render()

        assert "<th>Amount</th>" in html
        assert "Alice" not in html

    def test_render_with_source_argument(self, records):
        html = Table().render(records)

        assert "<td>Bob</td>" in html

    def test_rendering_twice_is_identical(self, table):
        table.add_totals({"amount": "sum"})

        assert table.render() == table.render()

    def test_state(self, table):
        assert table.state is RenderState.IDLE

        table.render()

        assert table.state is RenderState.FINALIZED


# =============================================================================
# Empty and missing input
# =============================================================================


class TestEdgeCases:
    """Tests for empty sources and missing columns."""

    def test_no_columns_raises_before_iteration(self):
        table = Table()
        table.set_source(ExplodingSource(), columns=False)

        with pytest.raises(NoColumnsError, match="does not have any columns"):
            table.render()

    def test_no_columns_raised_eagerly_by_iter_rows(self):
        with pytest.raises(NoColumnsError):
            Table().iter_rows()

    def test_empty_source(self, empty_source):
        table = Table(source=empty_source).add_totals({"amount": "sum"})

        html = table.render()

        assert '<tbody><tr class="empty"><td colspan="2">No records found</td></tr></tbody>' in html
        assert "<tfoot></tfoot>" in html
        assert table.rows_rendered == 0

    def test_all_rows_skipped_shows_empty_state(self, table):
        table.add_totals({"amount": "sum"})
        table.on_before_row(lambda row: False)

        html = table.render()

        assert 'class="empty"' in html
        assert 'class="totals"' not in html

    def test_custom_empty_message(self, empty_source):
        html = Table(source=empty_source, empty_message="Nothing here").render()

        assert "Nothing here" in html


# =============================================================================
# Per-row markup
# =============================================================================


class TestRowMarkup:
    """Tests for hook and decorator markup injected into rows."""

    def test_hook_markup_does_not_leak(self, table):
        table.add_column("flag", TemplateColumn("{$_flag}"))
        table.on_row_markup(lambda row: {"_flag": "<b>!</b>"} if row.id == 2 else {})

        html = table.render()

        assert '<tr data-id="1"><td>Alice</td><td>10</td><td></td></tr>' in html
        assert '<tr data-id="2"><td>Bob</td><td>20</td><td><b>!</b></td></tr>' in html
        assert '<tr data-id="3"><td>Carol</td><td>30</td><td></td></tr>' in html

    def test_values_outside_declared_fields_do_not_leak(self):
        table = Table(source=[
            {"id": 1, "name": "a"},
            {"id": 2, "name": "b", "note": "hidden"},
            {"id": 3, "name": "c"},
        ])
        table.add_column(None, TemplateColumn("{$note}"))

        html = table.render()

        assert '<tr data-id="2"><td>b</td><td>hidden</td></tr>' in html
        assert '<tr data-id="3"><td>c</td><td></td></tr>' in html

    def test_html_tags_off_skips_markup_hooks(self, records):
        calls = []
        table = Table(source=records, use_html_tags=False)
        table.on_row_markup(lambda row: calls.append(row.id) or {})

        table.render()

        assert calls == []

    def test_money_marks_negative_rows(self):
        table = Table(source=[{"id": 1, "amount": -5}, {"id": 2, "amount": 5}])
        table.add_decorator("amount", "money")

        html = table.render()

        assert '<td class="negative right aligned single line">-5</td>' in html
        assert '<td class=" right aligned single line">5</td>' in html

    def test_boolean_field_gets_status(self):
        table = Table(source=[{"id": 1, "active": True}, {"id": 2, "active": False}])

        html = table.render()

        assert '<td class="positive single line"><i class="icon checkmark"></i>Yes</td>' in html
        assert '<td class="negative single line"><i class="icon close"></i>No</td>' in html

    def test_link(self, records):
        table = Table()
        table.set_source(records, columns=False)
        table.add_column("name", Link("/orders/{_id}", args={"customer": "name"}))

        html = table.render()

        assert '<td><a href="/orders/1?customer=Alice">Alice</a></td>' in html

    def test_checkbox_column(self, table):
        table.add_column(None, "checkbox")

        html = table.render()

        assert '<th class="collapsing"><input type="checkbox" class="select-all"></th>' in html
        assert (
            '<td class="collapsing"><input type="checkbox" name="selected[]" value="2"></td>'
            in html
        )

    def test_checkbox_on_named_column_fails(self, records):
        table = Table()
        table.set_source(records, columns=False)
        table.add_column("name", "checkbox")

        with pytest.raises(ColumnError):
            table.render()


# =============================================================================
# Registration during render
# =============================================================================


class TestLifecycle:
    """Tests for the registry lock and streaming."""

    def test_registering_during_render_fails(self, table):
        table.on_before_row(lambda row: table.add_column("extra"))

        with pytest.raises(RenderInProgressError):
            table.render()

        table.hooks.clear(HookType.BEFORE_ROW)
        table.add_column("extra")
        assert "extra" in table.columns

    def test_add_decorator_to_unknown_column(self, table):
        with pytest.raises(UnknownColumnError):
            table.add_decorator("missing", "money")

    def test_iter_rows(self, table):
        table.add_totals({"amount": "sum"})

        rows = list(table.iter_rows())

        assert len(rows) == 3
        assert rows[0] == '<tr data-id="1"><td>Alice</td><td>10</td></tr>'
        assert table.totals == {0: {"amount": 60}}
        assert table.state is RenderState.FINALIZED

    def test_synthetic_column(self, table):
        table.add_column("note", field={"type": "text", "caption": "Remarks"})

        html = table.render()

        assert "<th>Remarks</th>" in html
        assert table.source.get_field("note").synthetic is True


# =============================================================================
# Output
# =============================================================================


class TestOutput:
    """Tests for writing rendered tables."""

    def test_write(self, table, tmp_path):
        path = table.write(path=tmp_path / "out" / "table.html")

        assert path.read_text(encoding="utf-8") == table.render()

    def test_write_without_path(self, table):
        with pytest.raises(WriteError):
            table.write()

    def test_report_uses_config_path(self, records, tmp_path):
        path = tmp_path / "report.html"
        table = Table(source=records, config=TableConfig(output_path=path))

        html = table.report()

        assert path.read_text(encoding="utf-8") == html

    def test_shared_config_is_not_modified(self, records):
        config = TableConfig()

        first = Table(css_class="ui compact table", source=records, config=config)
        second = Table(source=records, config=config, sortable=True)

        assert config.css_class == "ui table"
        assert config.sortable is False
        assert first.config.css_class == "ui compact table"
        assert second.config.sortable is True
        assert '<table class="ui table">' in Table(source=records, config=config).render()

    def test_render_to_bytes(self, table):
        assert table.render_to_bytes().startswith(b"<table")
