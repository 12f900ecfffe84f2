"""Table rendering: column registry, totals, hooks and the renderer."""

from tablekit.table.config import TableConfig
from tablekit.table.hooks import Hook, HookManager, HookType, RowAction
from tablekit.table.registry import Column, ColumnRegistry
from tablekit.table.renderer import RenderState, Table
from tablekit.table.rows import RowRenderer, compose_cell
from tablekit.table.totals import (
    BUILTIN_REDUCERS,
    BuiltinReducer,
    FoldFunction,
    Label,
    Seed,
    TotalsEngine,
    TotalsState,
    normalize_directive,
    normalize_plan,
)

__all__ = [
    "BUILTIN_REDUCERS",
    "BuiltinReducer",
    "Column",
    "ColumnRegistry",
    "FoldFunction",
    "Hook",
    "HookManager",
    "HookType",
    "Label",
    "RenderState",
    "RowAction",
    "RowRenderer",
    "Seed",
    "Table",
    "TableConfig",
    "TotalsEngine",
    "TotalsState",
    "compose_cell",
    "normalize_directive",
    "normalize_plan",
]
