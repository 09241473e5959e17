from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union

import pandas as pd


EXCEL_SUFFIXES = {".xlsx", ".xls"}


@dataclass(frozen=True)
class Dataset:
    id: str
    columns: List[str] = field(default_factory=list)
    rows: List[List[Any]] = field(default_factory=list)


def _cell(value: Any) -> Any:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    if hasattr(value, "item"):
        return value.item()
    return value


def from_frame(df: pd.DataFrame, dataset_id: str) -> Dataset:
    df = df.loc[:, ~df.columns.duplicated()]
    rows = [[_cell(v) for v in record] for record in df.itertuples(index=False, name=None)]
    return Dataset(id=str(dataset_id), columns=[str(c) for c in df.columns], rows=rows)


def read_table(source: Union[str, Path, bytes], filename: Optional[str] = None) -> pd.DataFrame:
    name = filename or (str(source) if not isinstance(source, bytes) else "")
    suffix = Path(name).suffix.lower()
    handle = io.BytesIO(source) if isinstance(source, bytes) else source
    if suffix in EXCEL_SUFFIXES:
        return pd.read_excel(handle)
    return pd.read_csv(handle)


def load_dataset(source: Union[str, Path, bytes], dataset_id: str, filename: Optional[str] = None) -> Dataset:
    return from_frame(read_table(source, filename), dataset_id)


def column_values(dataset: Dataset, index: int) -> List[Optional[float]]:
    """Numeric values of one column in row order; unparseable cells become None."""
    raw = pd.Series([row[index] if len(row) > index else None for row in dataset.rows], dtype=object)
    numeric = pd.to_numeric(raw, errors="coerce")
    return [None if pd.isna(v) else float(v) for v in numeric]
