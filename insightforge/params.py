from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from insightforge.catalog import Requirements
from insightforge.dataset import Dataset
from insightforge.errors import MissingPrerequisite
from insightforge.settings import ColumnDefaults


@dataclass(frozen=True)
class AnalysisParams:
    column: Optional[str] = None
    column_index: Optional[int] = None
    group_by: Optional[str] = None
    row_field: Optional[str] = None
    value_field: Optional[str] = None
    columns: List[str] = field(default_factory=list)
    sub_method: Optional[str] = None


def _pick(columns: List[str], index: int, name: str) -> str:
    if index < 0 or index >= len(columns):
        raise MissingPrerequisite(f"{name}: dataset has {len(columns)} columns, expected index {index}")
    return columns[index]


def resolve_params(
    dataset: Dataset,
    reqs: Requirements,
    defaults: ColumnDefaults,
    *,
    sub_method: Optional[str] = None,
    default_sub_method: str = "pearson",
) -> AnalysisParams:
    """Fill the parameters a method needs from fixed column positions."""
    cols = list(dataset.columns)
    needs_column = reqs.needs_column or reqs.needs_xy
    needs_row = reqs.needs_row_field or reqs.needs_xy
    return AnalysisParams(
        column=_pick(cols, defaults.column, "column") if needs_column else None,
        column_index=defaults.column if needs_column else None,
        group_by=_pick(cols, defaults.group_by, "group_by") if reqs.needs_group_by else None,
        row_field=_pick(cols, defaults.row_field, "row_field") if needs_row else None,
        value_field=_pick(cols, defaults.value_field, "value_field") if reqs.needs_value_field else None,
        columns=[_pick(cols, i, "column") for i in defaults.multi_column] if reqs.needs_multi_column else [],
        sub_method=(sub_method or default_sub_method) if reqs.needs_sub_method else None,
    )


def build_query(dataset_id: str, reqs: Requirements, params: AnalysisParams) -> List[Tuple[str, str]]:
    """Query pairs for one analytics request, only what the method requires."""
    query: List[Tuple[str, str]] = [("dataset_id", str(dataset_id))]
    if reqs.needs_column or reqs.needs_xy:
        query.append(("column", params.column))
    if reqs.needs_group_by:
        query.append(("group_by", params.group_by))
    if reqs.needs_row_field or reqs.needs_xy:
        query.append(("row_field", params.row_field))
    if reqs.needs_value_field:
        query.append(("value_field", params.value_field))
    if reqs.needs_multi_column:
        query.extend(("column", c) for c in params.columns)
    if reqs.needs_sub_method:
        query.append(("method", params.sub_method))
    return query
