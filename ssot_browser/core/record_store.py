from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

import pandas as pd

# Column name -> cell value. Dicts keep insertion order, which is the column order.
Record = Dict[str, str]


def _cell_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value)


def normalise_record(raw: Mapping[str, Any]) -> Record:
    """Copy a raw row into a Record, stringifying every cell (None -> "")."""
    return {str(k): _cell_to_str(v) for k, v in raw.items()}


def infer_columns(records: Sequence[Mapping[str, Any]]) -> List[str]:
    """
    Column set of a dataset, taken from the first record.

    Records with a different key set are not detected here; passing a
    heterogeneous dataset is a caller error.
    """
    if not records:
        return []
    return list(records[0].keys())


class RecordStore:
    """
    One loaded dataset for a single resource type.

    - Ordered, immutable sequence of Records
    - Column schema inferred once from the first record
    - Replaced wholesale on every load/reload; never patched in place
    """

    def __init__(self, resource: str, records: Iterable[Record]) -> None:
        self.resource = resource
        self._records: tuple[Record, ...] = tuple(records)
        self._columns: Optional[List[str]] = None

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------
    @classmethod
    def from_rows(cls, resource: str, rows: Iterable[Mapping[str, Any]]) -> RecordStore:
        return cls(resource, (normalise_record(r) for r in rows))

    @classmethod
    def empty(cls, resource: str) -> RecordStore:
        return cls(resource, ())

    # -------------------------------------------------------------------------
    # Schema
    # -------------------------------------------------------------------------
    @property
    def columns(self) -> List[str]:
        if self._columns is None:
            self._columns = infer_columns(self._records)
        return list(self._columns)

    @property
    def records(self) -> tuple[Record, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    def __getitem__(self, idx: int) -> Record:
        return self._records[idx]

    def __bool__(self) -> bool:
        return bool(self._records)

    # -------------------------------------------------------------------------
    # Conversions
    # -------------------------------------------------------------------------
    def to_rows(self) -> List[Record]:
        """Plain list of dict copies (JSON-safe, e.g. for dcc.Store)."""
        return [dict(r) for r in self._records]

    def __repr__(self) -> str:
        return f"RecordStore(resource={self.resource!r}, n_records={len(self)})"
