"""tablekit: HTML tables with decorated columns and streaming totals.

Example:
    >>> import tablekit as tk
    >>> table = tk.Table(source=[{"id": 1, "amount": 10}, {"id": 2, "amount": 20}])
    >>> html = table.add_totals({"amount": "sum"}).render()
    >>> table.totals
    {0: {'amount': 30}}
"""

from tablekit.columns import Generic, create_decorator, register_decorator
from tablekit.errors import (
    ConfigError,
    DuplicateColumnError,
    InvalidColumnKeyError,
    InvalidDecoratorError,
    InvalidTotalsPlanError,
    NoColumnsError,
    RenderInProgressError,
    SourceError,
    TableError,
    UnknownAggregationMethodError,
    UnknownColumnError,
)
from tablekit.sources import ColumnType, Field, RowContext, get_source
from tablekit.table import HookType, RenderState, RowAction, Table, TableConfig

__version__ = "0.1.0"

__all__ = [
    "ColumnType",
    "ConfigError",
    "DuplicateColumnError",
    "Field",
    "Generic",
    "HookType",
    "InvalidColumnKeyError",
    "InvalidDecoratorError",
    "InvalidTotalsPlanError",
    "NoColumnsError",
    "RenderInProgressError",
    "RenderState",
    "RowAction",
    "RowContext",
    "SourceError",
    "Table",
    "TableConfig",
    "TableError",
    "UnknownAggregationMethodError",
    "UnknownColumnError",
    "__version__",
    "create_decorator",
    "get_source",
    "register_decorator",
]
