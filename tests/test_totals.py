"""Tests for totals plans and the aggregation engine."""

from __future__ import annotations

import pytest

from tablekit import Table
from tablekit.errors import InvalidTotalsPlanError, UnknownAggregationMethodError
from tablekit.sources import RecordSource
from tablekit.table import (
    BuiltinReducer,
    FoldFunction,
    Label,
    RowAction,
    Seed,
    TotalsEngine,
    normalize_directive,
)


def fold(engine: TotalsEngine, source) -> TotalsEngine:
    for row in source:
        engine.fold_row(row)
    return engine


# =============================================================================
# Normalization
# =============================================================================


class TestNormalizeDirective:
    """Tests for raw directive normalization."""

    def test_caption_string_is_label(self):
        assert normalize_directive("name", "Totals:") == Label("Totals:")

    def test_reducer_name_string(self):
        assert normalize_directive("amount", "sum") == BuiltinReducer("sum")

    def test_list_names_reducer(self):
        assert normalize_directive("amount", ["max"]) == BuiltinReducer("max")

    def test_mapping_with_row_and_default(self):
        directive = normalize_directive("amount", {"row": "sum", "default": 5, "title": "Sum"})

        assert directive == BuiltinReducer("sum", default=5, title="Sum")

    def test_callable_is_fold_function(self):
        def f(acc, value):
            return value

        directive = normalize_directive("amount", f)

        assert isinstance(directive, FoldFunction)
        assert directive.func is f
        assert directive.commutative is False

    def test_mapping_with_callable_row(self):
        def f(acc, value):
            return value

        directive = normalize_directive("amount", {"row": f, "commutative": True})

        assert isinstance(directive, FoldFunction)
        assert directive.commutative is True

    def test_title_only_mapping_is_label(self):
        assert normalize_directive("name", {"title": "Totals:"}) == Label("Totals:")

    def test_lowercase_caption_is_label(self):
        assert normalize_directive("name", "total") == Label("total")

    def test_unknown_reducer_name_in_list_is_kept(self):
        assert normalize_directive("amount", ["median"]) == BuiltinReducer("median")

    def test_default_only_mapping_is_seed(self):
        assert normalize_directive("amount", {"default": 99}) == Seed(99)

    def test_default_with_title_is_seed(self):
        directive = normalize_directive("amount", {"default": 0, "title": "Opening"})

        assert directive == Seed(0, title="Opening")
        assert directive.aggregating is True

    def test_builtins_are_commutative(self):
        assert BuiltinReducer("sum").commutative is True

    @pytest.mark.parametrize("raw", [42, [], {"default": None}, {"row": 3}])
    def test_invalid_shapes(self, raw):
        with pytest.raises(InvalidTotalsPlanError) as exc_info:
            normalize_directive("amount", raw)

        assert exc_info.value.column == "amount"


# =============================================================================
# Engine
# =============================================================================


class TestTotalsEngine:
    """Tests for folding rows into accumulators."""

    @pytest.mark.parametrize(
        "method,expected",
        [("sum", 60), ("count", 3), ("min", 10), ("max", 30)],
    )
    def test_builtin_reducers(self, source, method, expected):
        engine = fold(TotalsEngine().add_plans({"amount": method}), source)

        assert engine.totals == {0: {"amount": expected}}

    def test_min_is_not_seeded_with_zero(self):
        source = RecordSource([{"amount": 5}, {"amount": 7}])

        engine = fold(TotalsEngine().add_plans({"amount": ["min"]}), source)

        assert engine.totals[0]["amount"] == 5

    def test_none_values_are_skipped(self):
        source = RecordSource([{"amount": 10}, {"amount": None}, {"amount": 30}])
        engine = TotalsEngine()
        engine.add_plans({"amount": "sum"})
        engine.add_plans({"amount": "min"})
        engine.add_plans({"amount": "count"})

        fold(engine, source)

        assert engine.totals == {0: {"amount": 40}, 1: {"amount": 10}, 2: {"amount": 3}}

    def test_literal_default_seeds_accumulator(self, source):
        engine = fold(TotalsEngine().add_plans({"amount": {"row": "sum", "default": 100}}), source)

        assert engine.totals[0]["amount"] == 160

    def test_callable_default_receives_first_value_and_row(self, source):
        seen = []

        def seed(value, row):
            seen.append((value, row.id))
            return value * 2

        engine = fold(TotalsEngine().add_plans({"amount": {"row": "sum", "default": seed}}), source)

        assert seen == [(10, 1)]
        assert engine.totals[0]["amount"] == 80

    def test_two_argument_fold_function(self, source):
        engine = fold(
            TotalsEngine().add_plans({"amount": lambda acc, value: (acc or 0) + value}),
            source,
        )

        assert engine.totals[0]["amount"] == 60

    def test_three_argument_fold_function_gets_row(self, source):
        engine = fold(
            TotalsEngine().add_plans({"amount": lambda acc, value, row: (acc or []) + [row.id]}),
            source,
        )

        assert engine.totals[0]["amount"] == [1, 2, 3]

    def test_fold_function_starts_unset(self, source):
        first = []

        def f(acc, value):
            if not first:
                first.append(acc)
            return value

        fold(TotalsEngine().add_plans({"amount": f}), source)

        assert first == [None]

    def test_seed_keeps_its_initial_value(self, source):
        engine = fold(TotalsEngine().add_plans({"amount": {"default": 99}}), source)

        assert engine.totals == {0: {"amount": 99}}

    def test_callable_seed_uses_first_row(self, source):
        engine = fold(
            TotalsEngine().add_plans({"amount": {"default": lambda value, row: value + row.id}}),
            source,
        )

        assert engine.totals[0]["amount"] == 11

    def test_labels_never_enter_state(self, source):
        engine = fold(TotalsEngine().add_plans({"name": "Totals:", "amount": "sum"}), source)

        assert engine.totals == {0: {"amount": 60}}

    def test_unknown_method_names_column_and_method(self, source):
        engine = TotalsEngine().add_plans({"amount": ["median"]})

        with pytest.raises(UnknownAggregationMethodError) as exc_info:
            fold(engine, source)

        assert exc_info.value.column == "amount"
        assert exc_info.value.method == "median"
        assert "median" in str(exc_info.value)

    def test_plans_have_independent_state(self, source):
        engine = TotalsEngine().add_plans({"amount": "sum"}).add_plans({"amount": "sum"})

        fold(engine, source)

        assert engine.totals == {0: {"amount": 60}, 1: {"amount": 60}}

    def test_set_plans_replaces(self):
        engine = TotalsEngine().add_plans({"amount": "sum"}).add_plans({"amount": "max"})

        engine.set_plans({"amount": "count"})

        assert len(engine) == 1
        assert engine.plans == [{"amount": BuiltinReducer("count")}]

    def test_reset_keeps_plans(self, source):
        engine = fold(TotalsEngine().add_plans({"amount": "sum"}), source)

        engine.reset()

        assert engine.totals == {}
        assert len(engine) == 1


# =============================================================================
# Totals in rendered tables
# =============================================================================


class TestTableTotals:
    """Tests for totals produced by a table render."""

    def test_footer_row(self, records):
        table = Table(source=records).add_totals({"name": "Totals:", "amount": "sum"})

        html = table.render()

        assert '<tr class="totals"><td>Totals:</td><td>60</td></tr>' in html

    def test_lowercase_caption_renders_as_label(self, records):
        table = Table(source=records).add_totals({"name": "total", "amount": "sum"})

        html = table.render()

        assert '<tr class="totals"><td>total</td><td>60</td></tr>' in html

    def test_seeded_column_renders_through_decorator(self, records):
        table = Table(source=records)
        table.add_decorator("amount", "money")
        table.add_totals({"amount": {"default": 99}})

        html = table.render()

        assert '<td class="right aligned single line">99.00</td>' in html
        assert table.totals == {0: {"amount": 99}}

    def test_column_missing_from_plan_gets_empty_cell(self, records):
        table = Table(source=records).add_totals({"amount": "max"})

        html = table.render()

        assert '<tr class="totals"><td></td><td>30</td></tr>' in html

    def test_two_plans_render_in_order(self, records):
        table = Table(source=records)
        table.add_totals({"amount": "sum"})
        table.add_totals({"amount": "max"})

        html = table.render()

        first = html.index("<td>60</td>")
        second = html.index("<td>30</td></tr></tfoot>")
        assert html.count('<tr class="totals">') == 2
        assert first < second
        assert table.totals == {0: {"amount": 60}, 1: {"amount": 30}}

    def test_skipped_rows_are_not_folded(self, records):
        table = Table(source=records).add_totals({"amount": "sum"})
        table.add_totals({"amount": "count"})
        table.on_before_row(lambda row: row["amount"] != 20)

        table.render()

        assert table.totals == {0: {"amount": 40}, 1: {"amount": 2}}
        assert table.rows_rendered == 2
        assert table.rows_skipped == 1

    def test_skip_action(self, records):
        table = Table(source=records).add_totals({"amount": "sum"})
        table.on_before_row(lambda row: RowAction.SKIP if row.id == 1 else RowAction.CONTINUE)

        table.render()

        assert table.totals[0]["amount"] == 50

    def test_unknown_method_aborts_render(self, records):
        table = Table(source=records).add_totals({"amount": ["median"]})

        with pytest.raises(UnknownAggregationMethodError):
            table.render()

    def test_unknown_method_not_raised_without_rows(self, empty_source):
        table = Table(source=empty_source).add_totals({"amount": ["median"]})

        html = table.render()

        assert "totals" not in html

    def test_set_totals_replaces_plans(self, records):
        table = Table(source=records).add_totals({"amount": "sum"})

        table.set_totals({"amount": "count"})
        table.render()

        assert table.totals == {0: {"amount": 3}}

    def test_money_totals_use_decorator_format(self, records):
        table = Table(source=records)
        table.add_decorator("amount", "money")
        table.add_totals({"amount": "sum"})

        html = table.render()

        assert '<td class="right aligned single line">60.00</td>' in html

    def test_accumulators_reset_between_renders(self, records):
        table = Table(source=records).add_totals({"amount": "sum"})

        table.render()
        table.render()

        assert table.totals == {0: {"amount": 60}}
