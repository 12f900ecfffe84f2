"""Factory function for creating row sources.

This module detects the kind of input data and wraps it in the
appropriate row source implementation.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import polars as pl

from tablekit.errors import SourceError
from tablekit.sources._protocols import RowSourceProtocol


def _is_columnar(obj: Any) -> bool:
    """Check if a dict looks like columnar data (name -> list of values)."""
    if not isinstance(obj, dict):
        return False
    if not obj:
        return True
    first_value = next(iter(obj.values()))
    return isinstance(first_value, (list, tuple))


def get_source(data: Any, **kwargs: Any) -> RowSourceProtocol:
    """Create an appropriate row source for the given data.

    Supported input types:
    - An existing row source (returned as is)
    - Polars DataFrame or LazyFrame
    - Python dictionary in columnar format
    - File path (CSV, JSON, NDJSON, Parquet)
    - Sequence or iterator of mappings

    Args:
        data: Input data in any supported format.
        **kwargs: Passed to the row source constructor.

    Returns:
        Row source wrapping the data.

    Raises:
        SourceError: If the input type is not supported.

    Example:
        >>> source = get_source([{"id": 1, "amount": 10}])
        >>> source = get_source({"amount": [10, 20, 30]})
    """
    if isinstance(data, RowSourceProtocol):
        return data

    from tablekit.sources.polars_source import PolarsSource
    from tablekit.sources.records import RecordSource

    if isinstance(data, (pl.DataFrame, pl.LazyFrame)):
        return PolarsSource(data, **kwargs)

    if _is_columnar(data):
        return PolarsSource(pl.DataFrame(data), **kwargs)

    if isinstance(data, (str, Path)):
        return PolarsSource.from_file(data, **kwargs)

    if isinstance(data, Iterable) and not isinstance(data, (Mapping, bytes)):
        return RecordSource(data, **kwargs)

    raise SourceError(
        f"Unsupported data type: {type(data).__name__}. "
        "Supported: row source, Polars DataFrame/LazyFrame, columnar dict, "
        "file path, iterable of mappings"
    )
