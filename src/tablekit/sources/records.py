"""Row source over an in-memory sequence (or iterator) of mappings."""

from __future__ import annotations

import itertools
from typing import Any, Iterable, Iterator, Mapping

from tablekit.errors import SourceError
from tablekit.sources._protocols import ColumnType
from tablekit.sources.base import BaseRowSource, Field, python_to_column_type


class RecordSource(BaseRowSource):
    """Row source for records given as mappings.

    Fields are taken from ``fields`` when given, otherwise inferred from
    the first record. The id field, when present, is hidden by default.
    Iterators are consumed once; lists may be rendered repeatedly.

    Example:
        >>> source = RecordSource([{"id": 1, "amount": 10}, {"id": 2, "amount": 20}])
        >>> [row["amount"] for row in source]
        [10, 20]
    """

    source_type = "records"

    def __init__(
        self,
        records: Iterable[Mapping[str, Any]],
        fields: Iterable[Field] | Mapping[str, ColumnType | str] | None = None,
        id_field: str | None = "id",
        name: str | None = None,
    ) -> None:
        """Initialize the record source.

        Args:
            records: Sequence or iterator of mappings.
            fields: Explicit fields, or a mapping of field name to type.
            id_field: Field carrying the row id. Rows without it use
                their position.
            name: Optional source name.
        """
        self._id_field = id_field

        if isinstance(records, Iterator):
            try:
                first = next(records)
            except StopIteration:
                first = None
            self._records: Iterable[Mapping[str, Any]] = (
                itertools.chain([first], records) if first is not None else []
            )
        else:
            self._records = records
            first = next(iter(records), None)

        if first is not None and not isinstance(first, Mapping):
            raise SourceError(
                f"RecordSource expects mappings, got {type(first).__name__}"
            )

        if fields is None:
            declared = self._infer_fields(first)
        elif isinstance(fields, Mapping):
            declared = [Field(name=k, type=ColumnType.coerce(v)) for k, v in fields.items()]
        else:
            declared = list(fields)

        super().__init__(declared, name=name)

    def _infer_fields(self, first: Mapping[str, Any] | None) -> list[Field]:
        if first is None:
            return []
        return [
            Field(
                name=key,
                type=python_to_column_type(value),
                visible=key != self._id_field,
            )
            for key, value in first.items()
        ]

    def _iter_records(self) -> Iterator[tuple[Any, Mapping[str, Any]]]:
        for index, record in enumerate(self._records):
            if self._id_field is not None and self._id_field in record:
                row_id = record[self._id_field]
            else:
                row_id = index
            yield row_id, record
