"""Row sources that feed a table.

Example:
    >>> from tablekit.sources import get_source
    >>> source = get_source([{"id": 1, "amount": 10}])
    >>> [row["amount"] for row in source]
    [10]
"""

from tablekit.sources._protocols import ColumnType, RowSourceProtocol
from tablekit.sources.base import BaseRowSource, Field, RowContext, python_to_column_type
from tablekit.sources.factory import get_source
from tablekit.sources.polars_source import PolarsSource, polars_to_column_type
from tablekit.sources.records import RecordSource

__all__ = [
    "BaseRowSource",
    "ColumnType",
    "Field",
    "PolarsSource",
    "RecordSource",
    "RowContext",
    "RowSourceProtocol",
    "get_source",
    "polars_to_column_type",
    "python_to_column_type",
]
