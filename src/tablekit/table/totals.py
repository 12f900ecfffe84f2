"""Totals plans and the aggregation engine.

A totals plan maps column keys to directives. Each plan produces one
footer row. Directives are normalized once, when the plan is added, into
one of four variants:

- :class:`Label`: a static caption such as ``"Totals:"``
- :class:`Seed`: a value set from ``default`` on the first row, then kept
- :class:`BuiltinReducer`: ``sum``, ``count``, ``min`` or ``max``
- :class:`FoldFunction`: ``f(accumulator, value, row) -> accumulator``

Accepted raw shapes::

    {"name": "Totals:"}                       # Label
    {"name": {"title": "Totals:"}}            # Label
    {"amount": {"default": 0}}                # Seed
    {"amount": "sum"}                         # BuiltinReducer
    {"amount": ["sum"]}                       # BuiltinReducer
    {"amount": {"row": "sum", "default": 0}}  # BuiltinReducer with seed
    {"amount": lambda acc, v, row: ...}       # FoldFunction
    {"amount": {"row": fold, "default": f}}   # FoldFunction with seed

A bare string naming a built-in reducer is that reducer; any other bare
string is a label. Other reducer names are only accepted in the list and
``row`` shapes, and fail when the first row is folded.

Accumulators start unset (None) rather than zero so that ``min`` and
``max`` take their first bound from the data.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Iterator, Mapping

from tablekit.errors import InvalidTotalsPlanError, UnknownAggregationMethodError

if TYPE_CHECKING:
    from tablekit.sources.base import RowContext
    from tablekit.table.registry import ColumnRegistry

logger = logging.getLogger(__name__)


class _NoDefault:
    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


# =============================================================================
# Built-in reducers
# =============================================================================


def _sum(acc: Any, value: Any) -> Any:
    acc = 0 if acc is None else acc
    return acc if value is None else acc + value


def _count(acc: Any, value: Any) -> Any:
    return (0 if acc is None else acc) + 1


def _min(acc: Any, value: Any) -> Any:
    if value is None:
        return acc
    if acc is None:
        return value
    return value if value < acc else acc


def _max(acc: Any, value: Any) -> Any:
    if value is None:
        return acc
    if acc is None:
        return value
    return value if value > acc else acc


BUILTIN_REDUCERS: dict[str, Callable[[Any, Any], Any]] = {
    "sum": _sum,
    "count": _count,
    "min": _min,
    "max": _max,
}


def _positional_arity(func: Callable[..., Any]) -> int | None:
    """Number of positional arguments ``func`` accepts; None if unlimited or unknown."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return None
    count = 0
    for param in signature.parameters.values():
        if param.kind == param.VAR_POSITIONAL:
            return None
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def call_trimmed(func: Callable[..., Any], *args: Any) -> Any:
    """Call ``func`` with as many leading ``args`` as it accepts."""
    arity = _positional_arity(func)
    if arity is None:
        return func(*args)
    return func(*args[:arity])


# =============================================================================
# Directives
# =============================================================================


@dataclass(frozen=True)
class Label:
    """Static caption cell; never aggregates."""

    title: str

    aggregating: ClassVar[bool] = False
    commutative: ClassVar[bool] = True


@dataclass(frozen=True)
class Seed:
    """Value initialized from ``default`` on the first row and never folded.

    Attributes:
        default: Initial value, or a callable ``(value, row) -> initial``.
        title: Optional caption, kept for callers that display it.
    """

    default: Any
    title: str | None = None

    aggregating: ClassVar[bool] = True
    commutative: ClassVar[bool] = True

    def apply(self, column: str, acc: Any, value: Any, ctx: "RowContext") -> Any:
        return acc


@dataclass(frozen=True)
class BuiltinReducer:
    """One of the built-in reducers, looked up by name when first applied.

    Attributes:
        method: Reducer name.
        default: Initial accumulator value, or a callable
            ``(value, row) -> initial``.
        title: Optional caption, kept for callers that display it.
    """

    method: str
    default: Any = NO_DEFAULT
    title: str | None = None

    aggregating: ClassVar[bool] = True
    commutative: ClassVar[bool] = True

    def apply(self, column: str, acc: Any, value: Any, ctx: "RowContext") -> Any:
        """Return the new accumulator.

        Raises:
            UnknownAggregationMethodError: If the method does not exist.
        """
        reducer = BUILTIN_REDUCERS.get(self.method)
        if reducer is None:
            raise UnknownAggregationMethodError(column, self.method)
        return reducer(acc, value)


@dataclass(frozen=True)
class FoldFunction:
    """User fold function ``(accumulator, value, row) -> accumulator``.

    The accumulator is None on the first call unless a default is given.
    Functions taking two arguments are called without the row.

    Attributes:
        func: The fold function.
        default: Initial accumulator value, or a callable
            ``(value, row) -> initial``.
        title: Optional caption, kept for callers that display it.
        commutative: Declares that the fold does not depend on row order.
    """

    func: Callable[..., Any]
    default: Any = NO_DEFAULT
    title: str | None = None
    commutative: bool = False

    aggregating: ClassVar[bool] = True

    def apply(self, column: str, acc: Any, value: Any, ctx: "RowContext") -> Any:
        return call_trimmed(self.func, acc, value, ctx)


Directive = Label | Seed | BuiltinReducer | FoldFunction


def normalize_directive(column: str, raw: Any) -> Directive:
    """Normalize a raw totals directive.

    Raises:
        InvalidTotalsPlanError: If the directive has an unsupported shape.
    """
    if isinstance(raw, (Label, Seed, BuiltinReducer, FoldFunction)):
        return raw

    if isinstance(raw, str):
        if raw in BUILTIN_REDUCERS:
            return BuiltinReducer(raw)
        return Label(raw)

    if isinstance(raw, (list, tuple)):
        if raw and isinstance(raw[0], str):
            return BuiltinReducer(raw[0])
        raise InvalidTotalsPlanError(column, raw)

    if isinstance(raw, Mapping):
        row = raw.get("row")
        title = raw.get("title")
        default = raw.get("default")
        default = NO_DEFAULT if default is None else default

        if row is None:
            if default is not NO_DEFAULT:
                return Seed(default, title=title)
            if title is not None:
                return Label(str(title))
            raise InvalidTotalsPlanError(column, raw)
        if isinstance(row, (list, tuple)) and row and isinstance(row[0], str):
            row = row[0]
        if isinstance(row, str):
            return BuiltinReducer(row, default=default, title=title)
        if callable(row):
            return FoldFunction(
                row,
                default=default,
                title=title,
                commutative=bool(raw.get("commutative", False)),
            )
        raise InvalidTotalsPlanError(column, raw)

    if callable(raw):
        return FoldFunction(raw)

    raise InvalidTotalsPlanError(column, raw)


def normalize_plan(plan: Mapping[str, Any]) -> dict[str, Directive]:
    """Normalize every directive of a raw plan."""
    return {column: normalize_directive(column, raw) for column, raw in plan.items()}


# =============================================================================
# Accumulator store
# =============================================================================


@dataclass
class TotalsState:
    """Accumulator values keyed by ``(plan_index, column)``."""

    _values: dict[tuple[int, str], Any] = field(default_factory=dict)

    def has(self, plan_index: int, column: str) -> bool:
        return (plan_index, column) in self._values

    def get(self, plan_index: int, column: str, default: Any = None) -> Any:
        return self._values.get((plan_index, column), default)

    def set(self, plan_index: int, column: str, value: Any) -> None:
        self._values[(plan_index, column)] = value

    def snapshot(self) -> dict[int, dict[str, Any]]:
        """Return ``{plan_index: {column: value}}``."""
        result: dict[int, dict[str, Any]] = {}
        for (plan_index, column), value in self._values.items():
            result.setdefault(plan_index, {})[column] = value
        return result


# =============================================================================
# Engine
# =============================================================================


class TotalsEngine:
    """Holds totals plans and folds rows into their accumulators.

    Example:
        >>> engine = TotalsEngine().add_plans({"amount": ["sum"]})
        >>> for row in RecordSource([{"amount": 10}, {"amount": 20}]):
        ...     engine.fold_row(row)
        >>> engine.totals
        {0: {'amount': 30}}
    """

    def __init__(self) -> None:
        self._plans: list[dict[str, Directive]] = []
        self._state = TotalsState()

    @property
    def plans(self) -> list[dict[str, Directive]]:
        """Get the normalized plans, in declaration order."""
        return [dict(plan) for plan in self._plans]

    @property
    def state(self) -> TotalsState:
        return self._state

    @property
    def totals(self) -> dict[int, dict[str, Any]]:
        """Get the accumulated values per plan."""
        return self._state.snapshot()

    def add_plans(self, plan: Mapping[str, Any] | None = None) -> "TotalsEngine":
        """Add a totals plan. Each plan renders as one footer row.

        Returns:
            This engine, for chaining.

        Raises:
            InvalidTotalsPlanError: If a directive cannot be normalized.
        """
        normalized = normalize_plan(plan or {})
        self._plans.append(normalized)
        logger.debug(
            f"Added totals plan {len(self._plans) - 1}: "
            + ", ".join(f"{k}={type(d).__name__}" for k, d in normalized.items())
        )
        return self

    def set_plans(self, plan: Mapping[str, Any] | None = None) -> "TotalsEngine":
        """Replace all totals plans with one plan."""
        self._plans = []
        self._state = TotalsState()
        return self.add_plans(plan)

    def reset(self) -> None:
        """Discard accumulated values; plans are kept."""
        self._state = TotalsState()

    def fold_row(self, ctx: "RowContext") -> None:
        """Fold one row into the accumulators of every plan.

        Raises:
            UnknownAggregationMethodError: If a plan names an unknown reducer.
        """
        for plan_index, plan in enumerate(self._plans):
            for column, directive in plan.items():
                if not directive.aggregating:
                    continue

                value = ctx[column]

                if not self._state.has(plan_index, column):
                    self._state.set(plan_index, column, self._initial(directive, value, ctx))

                acc = self._state.get(plan_index, column)
                self._state.set(plan_index, column, directive.apply(column, acc, value, ctx))

    @staticmethod
    def _initial(directive: Directive, value: Any, ctx: "RowContext") -> Any:
        default = directive.default
        if default is NO_DEFAULT:
            return None
        if callable(default):
            return call_trimmed(default, value, ctx)
        return default

    def render_footer_fragment(self, plan_index: int, registry: "ColumnRegistry") -> str:
        """Render the cells of one totals row.

        Cells come from the last decorator of each column. Columns the
        plan does not mention get an empty cell, aggregating directives
        render the accumulated value and labels render their text.
        """
        plan = self._plans[plan_index]
        cells: list[str] = []
        for column in registry:
            decorator = column.last
            directive = plan.get(column.key) if isinstance(column.key, str) else None

            if directive is None:
                cells.append(decorator.tag("foot", ""))
            elif directive.aggregating:
                value = self._state.get(plan_index, column.key)
                cells.append(decorator.render_totals_cell(column.field, value))
            else:
                cells.append(decorator.tag("foot", directive.title))
        return "".join(cells)

    def __len__(self) -> int:
        return len(self._plans)

    def __iter__(self) -> Iterator[int]:
        return iter(range(len(self._plans)))

    def __repr__(self) -> str:
        return f"TotalsEngine(plans={len(self._plans)})"
