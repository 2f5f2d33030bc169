from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

import pandas as pd

from ssot_browser.core.record_store import Record, infer_columns

logger = logging.getLogger(__name__)


def records_to_frame(records: Sequence[Record], columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """DataFrame of string cells with the dataset's column order."""
    cols = list(columns) if columns is not None else infer_columns(records)
    return pd.DataFrame(list(records), columns=cols, dtype=str).fillna("")


def export_csv(
    records: Sequence[Record],
    columns: Optional[Sequence[str]] = None,
    delimiter: str = ",",
) -> str:
    """
    Serialise records to delimited text (header row + one line per record).

    Pass `columns` when exporting a filtered subset so an empty selection
    still produces the header.
    """
    df = records_to_frame(records, columns)
    text = df.to_csv(index=False, sep=delimiter, lineterminator="\n")
    logger.info(
        "Exported records",
        extra={"n_records": len(df), "n_columns": len(df.columns), "delimiter": delimiter},
    )
    return text


def export_filename(resource: str, on: Optional[date] = None) -> str:
    on = on or date.today()
    return f"updated_{resource}_{on.isoformat()}.csv"
