"""Polars row source implementation.

This module provides row sources for Polars DataFrames and LazyFrames,
as well as for data files Polars can read (CSV, JSON, Parquet).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Mapping

import polars as pl

from tablekit.errors import SourceError
from tablekit.sources._protocols import ColumnType
from tablekit.sources.base import BaseRowSource, Field


# =============================================================================
# Type Mapping
# =============================================================================


def polars_to_column_type(polars_dtype: Any) -> ColumnType:
    """Convert Polars dtype to ColumnType.

    Args:
        polars_dtype: Polars data type.

    Returns:
        Corresponding ColumnType.
    """
    # accept both dtype classes (pl.Int64) and instances (pl.Int64())
    dtype_name = polars_dtype.__name__ if isinstance(polars_dtype, type) else type(polars_dtype).__name__

    if dtype_name in ("Int8", "Int16", "Int32", "Int64", "UInt8", "UInt16", "UInt32", "UInt64"):
        return ColumnType.INTEGER
    if dtype_name in ("Float32", "Float64"):
        return ColumnType.FLOAT
    if dtype_name == "Decimal":
        return ColumnType.DECIMAL
    if dtype_name in ("String", "Utf8", "Categorical", "Enum"):
        return ColumnType.STRING
    if dtype_name == "Date":
        return ColumnType.DATE
    if dtype_name == "Datetime":
        return ColumnType.DATETIME
    if dtype_name == "Time":
        return ColumnType.TIME
    if dtype_name == "Duration":
        return ColumnType.DURATION
    if dtype_name == "Boolean":
        return ColumnType.BOOLEAN
    if dtype_name == "Binary":
        return ColumnType.BINARY
    if dtype_name in ("List", "Array"):
        return ColumnType.LIST
    if dtype_name == "Struct":
        return ColumnType.STRUCT
    if dtype_name == "Null":
        return ColumnType.NULL

    return ColumnType.UNKNOWN


_FILE_READERS = {
    ".csv": pl.scan_csv,
    ".parquet": pl.scan_parquet,
    ".pq": pl.scan_parquet,
    ".ndjson": pl.scan_ndjson,
    ".jsonl": pl.scan_ndjson,
}


# =============================================================================
# Polars DataFrame/LazyFrame Row Source
# =============================================================================


class PolarsSource(BaseRowSource):
    """Row source for a Polars DataFrame or LazyFrame.

    A LazyFrame is collected when iteration starts, not before.

    Example:
        >>> import polars as pl
        >>> df = pl.DataFrame({"id": [1, 2], "amount": [10, 20]})
        >>> source = PolarsSource(df)
        >>> source.get_field("amount").type
        <ColumnType.INTEGER: 'integer'>
    """

    source_type = "polars"

    def __init__(
        self,
        data: pl.DataFrame | pl.LazyFrame,
        id_field: str | None = "id",
        types: Mapping[str, ColumnType | str] | None = None,
        name: str | None = None,
    ) -> None:
        """Initialize Polars row source.

        Args:
            data: Polars DataFrame or LazyFrame.
            id_field: Column carrying the row id; hidden by default.
            types: Overrides for the inferred field types (for example
                ``{"price": "money"}``).
            name: Optional source name.
        """
        if isinstance(data, pl.DataFrame):
            self._lf = data.lazy()
            self._df: pl.DataFrame | None = data
        elif isinstance(data, pl.LazyFrame):
            self._lf = data
            self._df = None
        else:
            raise SourceError(
                f"PolarsSource expects a DataFrame or LazyFrame, got {type(data).__name__}"
            )

        self._id_field = id_field
        types = types or {}
        schema = self._lf.collect_schema()
        fields = [
            Field(
                name=col,
                type=ColumnType.coerce(types[col]) if col in types else polars_to_column_type(dtype),
                visible=col != id_field,
            )
            for col, dtype in schema.items()
        ]
        super().__init__(fields, name=name)

    @classmethod
    def from_file(cls, path: str | Path, **kwargs: Any) -> "PolarsSource":
        """Create a source from a data file.

        Raises:
            SourceError: If the file type is unsupported or missing.
        """
        path = Path(path)
        if not path.is_file():
            raise SourceError(f"File not found: {path}")

        suffix = path.suffix.lower()
        if suffix == ".json":
            return cls(pl.read_json(path), name=kwargs.pop("name", path.name), **kwargs)
        reader = _FILE_READERS.get(suffix)
        if reader is None:
            raise SourceError(
                f"Unsupported file type: {path.suffix}. "
                "Supported: .csv, .json, .parquet, .ndjson, .jsonl"
            )
        return cls(reader(path), name=kwargs.pop("name", path.name), **kwargs)

    @property
    def dataframe(self) -> pl.DataFrame:
        """Get the collected DataFrame."""
        if self._df is None:
            self._df = self._lf.collect()
        return self._df

    def _iter_records(self) -> Iterator[tuple[Any, Mapping[str, Any]]]:
        df = self.dataframe
        has_id = self._id_field is not None and self._id_field in df.columns
        for index, record in enumerate(df.iter_rows(named=True)):
            yield (record[self._id_field] if has_id else index), record
