"""Tests for the tablekit command-line interface."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from tablekit.cli import app

runner = CliRunner()


@pytest.fixture
def csv_file(tmp_path: Path) -> Path:
    path = tmp_path / "orders.csv"
    path.write_text("id,name,amount\n1,Alice,10\n2,Bob,20\n3,Carol,30\n", encoding="utf-8")
    return path


class TestRenderCommand:
    """Tests for the render command."""

    def test_render_to_stdout(self, csv_file):
        result = runner.invoke(app, ["render", str(csv_file)])

        assert result.exit_code == 0
        assert "<th>Name</th><th>Amount</th>" in result.output
        assert "Carol" in result.output
        assert "<th>Id</th>" not in result.output

    def test_selected_columns(self, csv_file):
        result = runner.invoke(app, ["render", str(csv_file), "-c", "amount"])

        assert result.exit_code == 0
        assert "<th>Amount</th>" in result.output
        assert "Alice" not in result.output

    def test_totals(self, csv_file):
        result = runner.invoke(
            app,
            ["render", str(csv_file), "-t", "name=Totals:", "-t", "amount=sum"],
        )

        assert result.exit_code == 0
        assert '<tr class="totals"><td>Totals:</td><td>60</td></tr>' in result.output

    def test_decorator(self, csv_file):
        result = runner.invoke(
            app,
            ["render", str(csv_file), "-d", "amount=money", "-t", "amount=sum"],
        )

        assert result.exit_code == 0
        assert "60.00" in result.output

    def test_no_header_and_sortable(self, csv_file):
        result = runner.invoke(app, ["render", str(csv_file), "--no-header", "--sortable"])

        assert result.exit_code == 0
        assert "<th>" not in result.output
        assert "sortable" in result.output

    def test_output_file(self, csv_file, tmp_path):
        output = tmp_path / "out" / "orders.html"
        output.parent.mkdir()

        result = runner.invoke(app, ["render", str(csv_file), "-o", str(output)])

        assert result.exit_code == 0
        assert "(3 rows)" in result.output
        assert "Bob" in output.read_text(encoding="utf-8")

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["render", str(tmp_path / "nope.csv")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_bad_pair(self, csv_file):
        result = runner.invoke(app, ["render", str(csv_file), "-t", "amount"])

        assert result.exit_code == 1
        assert "COLUMN=VALUE" in result.output

    def test_unknown_column(self, csv_file):
        result = runner.invoke(app, ["render", str(csv_file), "-d", "missing=money"])

        assert result.exit_code == 1
        assert "missing" in result.output


class TestDecoratorsCommand:
    """Tests for the decorators command."""

    def test_lists_kinds(self):
        result = runner.invoke(app, ["decorators"])

        assert result.exit_code == 0
        assert "money" in result.output.split()
        assert "status" in result.output.split()
