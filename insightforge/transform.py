"""Analytics payload -> canonical chart model.

Every function here is pure: the same payload always yields an equal
``ChartModel``. Payload shapes are trusted; nothing is validated.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from insightforge.catalog import STAT_LABELS, PairSpec, palette_color, rgba
from insightforge.models import BoxPlotSummary, ChartModel, MatrixCell, PairedRow, Series


def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        out = float(value)
    except Exception:
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def bar_style(index: int, alpha: float = 0.5) -> Dict[str, Any]:
    color = palette_color(index)
    return {"backgroundColor": rgba(color, alpha), "borderColor": rgba(color, 1), "borderWidth": 1}


def line_style(index: int) -> Dict[str, Any]:
    color = palette_color(index)
    return {"borderColor": rgba(color, 1), "backgroundColor": rgba(color, 0.5), "fill": False, "tension": 0.1}


def matrix_color(value: float, low: float = -1.0, high: float = 1.0) -> str:
    """Red for ``low``, blue for ``high``, linear in between."""
    clamped = min(max(value, low), high)
    t = (clamped - low) / (high - low)
    return f"rgb({round(255 * (1 - t))}, 0, {round(255 * t)})"


def _single(label: str, data: List[Any], title: str, style: Dict[str, Any]) -> ChartModel:
    return ChartModel(labels=[label], datasets=[Series(label=label, data=data, style=style)], title=title)


# ---------- descriptives ----------
def transform_scalar(payload: Mapping[str, Any], stat: str) -> ChartModel:
    label = STAT_LABELS.get(stat, stat)
    index = list(STAT_LABELS).index(stat) if stat in STAT_LABELS else 0
    return _single(label, [payload.get(stat)], label, bar_style(index))


def transform_paired(rows: Sequence[PairedRow], pair: PairSpec) -> ChartModel:
    return ChartModel(
        labels=[r.label for r in rows],
        datasets=[
            Series(label=pair.first_label, data=[r.first for r in rows], style=bar_style(0, 0.6)),
            Series(label=pair.second_label, data=[r.second for r in rows], style=bar_style(1, 0.6)),
        ],
        title=pair.title,
    )


# ---------- aggregation ----------
def transform_grouped(payload: Mapping[str, Any], label: str = "Result") -> ChartModel:
    return ChartModel(
        labels=list(payload.keys()),
        datasets=[Series(label=label, data=list(payload.values()), style=bar_style(0))],
        title=label,
    )


def transform_pivot(payload: Mapping[str, Mapping[str, Any]], title: str = "Pivot Table") -> ChartModel:
    row_labels = list(payload.keys())
    columns = sorted({col for row in payload.values() for col in row})
    datasets = []
    for idx, col in enumerate(columns):
        data = [payload[row].get(col) for row in row_labels]
        datasets.append(Series(label=col, data=data, style=bar_style(idx, 0.6)))
    return ChartModel(labels=row_labels, datasets=datasets, title=title)


# ---------- correlation ----------
def transform_correlation(payload: Mapping[str, Any], kind: str) -> ChartModel:
    label = f"{kind.capitalize()} Correlation"
    index = 0 if kind == "pearson" else 3
    return _single(label, [payload.get(kind)], label, bar_style(index))


def transform_correlation_matrix(payload: Mapping[str, Mapping[str, Any]], title: str = "Correlation Matrix") -> ChartModel:
    labels = list(payload.keys())
    cells: List[MatrixCell] = []
    for row_label in labels:
        row = payload[row_label]
        for col_label in labels:
            value = row.get(col_label)
            if _is_number(value):
                cells.append(MatrixCell(x=col_label, y=row_label, v=value))
    style = {"backgroundColor": [matrix_color(c.v) for c in cells]}
    return ChartModel(labels=labels, datasets=[Series(label=title, data=cells, style=style)], title=title)


# ---------- distribution ----------
def transform_histogram(payload: Mapping[str, Any], label: str = "Histogram") -> ChartModel:
    style = {**bar_style(2), "borderSkipped": False}
    return ChartModel(
        labels=list(payload.get("labels") or []),
        datasets=[Series(label=label, data=list(payload.get("counts") or []), style=style)],
        title=label,
    )


def transform_kde(payload: Mapping[str, Any], label: str = "KDE") -> ChartModel:
    style = {**line_style(0), "fill": True}
    return ChartModel(
        labels=list(payload.get("labels") or []),
        datasets=[Series(label=label, data=list(payload.get("densities") or []), style=style)],
        title=label,
    )


def transform_box_plot(payload: Mapping[str, Any], label: str = "Box Plot") -> ChartModel:
    stats = dict(payload.get("stats") or {})
    q1, q3 = stats.get("Q1"), stats.get("Q3")
    summary = BoxPlotSummary(
        min=stats.get("lower_outlier"),
        q1=q1,
        median=(q1 + q3) / 2,
        q3=q3,
        max=stats.get("upper_outlier"),
    )
    values = payload.get("values") or []
    style = {**bar_style(4), "outlierColor": "#999"}
    return ChartModel(
        labels=list(payload.get("labels") or []),
        datasets=[Series(label=label, data=[summary for _ in values], style=style)],
        title=label,
        stats=stats,
    )


# ---------- outliers ----------
OUTLIER_KINDS = {"zscore": ("Z-Score", 3), "iqr": ("IQR", 0)}


def transform_outliers(payload: Mapping[str, Any], values: Sequence[Any], kind: str) -> ChartModel:
    """Keep every original position; only outliers carry a value."""
    name, color_index = OUTLIER_KINDS[kind]
    indices = list(payload.get("indices") or [])
    marked = set(indices)
    data = [v if i in marked else None for i, v in enumerate(values)]
    title = f"{name} Outliers" if indices else f"No {name} Outliers Found"
    return ChartModel(
        labels=[str(i) for i in range(len(values))],
        datasets=[Series(label=f"{name} Outliers", data=data, style={"backgroundColor": rgba(palette_color(color_index), 0.6)})],
        title=title,
    )


def transform_zscore_outliers(payload: Mapping[str, Any], values: Sequence[Any]) -> ChartModel:
    return transform_outliers(payload, values, "zscore")


def transform_iqr_outliers(payload: Mapping[str, Any], values: Sequence[Any]) -> ChartModel:
    return transform_outliers(payload, values, "iqr")


# ---------- cleaning ----------
def _first_number(row: Sequence[Any]) -> Optional[float]:
    for cell in row:
        value = _to_number(cell)
        if value is not None:
            return value
    return None


def transform_dropped_rows(payload: Mapping[str, Any], label: str = "Cleaned Dataset") -> ChartModel:
    rows = list(payload.get("rows") or [])[1:]
    return ChartModel(
        labels=[", ".join(str(c) for c in row) for row in rows],
        datasets=[Series(label=label, data=[_first_number(row) for row in rows], style=bar_style(2))],
        title="Rows After Dropping Missing Values",
    )


def transform_filled_missing(payload: Mapping[str, Any], label: str = "Dataset with Filled Values") -> ChartModel:
    rows = list(payload.get("rows") or [])
    return ChartModel(
        labels=[f"Row {i + 1}" for i in range(len(rows))],
        datasets=[Series(label=label, data=[_to_number(row[0]) if row else None for row in rows], style=bar_style(0))],
        title=label,
    )


def transform_log_transformed(
    payload: Mapping[str, Any], column_index: int = 0, label: str = "Log-Transformed Dataset"
) -> ChartModel:
    rows = list(payload.get("rows") or [])
    data = [_to_number(row[column_index]) if len(row) > column_index else None for row in rows]
    return ChartModel(
        labels=[row[0] if row else None for row in rows],
        datasets=[Series(label=label, data=data, style=line_style(4))],
        title=label,
    )


def transform_normalized_column(payload: Mapping[str, Any], label: str = "Normalized Column") -> ChartModel:
    rows = list(payload.get("rows") or [])
    return ChartModel(
        labels=[row[0] for row in rows],
        datasets=[Series(label=label, data=[_to_number(row[1]) if len(row) > 1 else None for row in rows], style=line_style(2))],
        title=label,
    )


def transform_standardized_columns(payload: Mapping[str, Sequence[Any]], title: str = "Standardized Columns") -> ChartModel:
    columns = list(payload.items())
    length = len(columns[0][1]) if columns else 0
    datasets = [Series(label=name, data=list(values), style=line_style(idx)) for idx, (name, values) in enumerate(columns)]
    return ChartModel(labels=list(range(length)), datasets=datasets, title=title)


def transform_filtered_sorted(
    payload: Mapping[str, Any], headers: Sequence[str], label: str = "Filtered and Sorted Data"
) -> ChartModel:
    records = list(payload.get("data") or [])
    label_key, value_key = headers[0], headers[1]
    return ChartModel(
        labels=[r.get(label_key) for r in records],
        datasets=[Series(label=label, data=[_to_number(r.get(value_key)) for r in records], style=bar_style(2))],
        title=label,
    )
