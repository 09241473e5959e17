from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import altair as alt
import pandas as pd

from insightforge.catalog import BAR, BOXPLOT, LINE, MATRIX, STACKED_BAR
from insightforge.errors import UnsupportedChartType
from insightforge.models import ChartModel

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _long_frame(model: ChartModel) -> pd.DataFrame:
    records: List[Dict[str, Any]] = []
    for series in model.datasets:
        for pos, (label, value) in enumerate(zip(model.labels, series.data)):
            records.append({"position": pos, "label": str(label), "series": series.label, "value": value})
    return pd.DataFrame(records, columns=["position", "label", "series", "value"])


def _series_color(model: ChartModel) -> alt.Color:
    domain = [s.label for s in model.datasets]
    colors = [s.style.get("borderColor") for s in model.datasets]
    if domain and all(isinstance(c, str) for c in colors):
        return alt.Color("series:N", title=None, scale=alt.Scale(domain=domain, range=colors))
    return alt.Color("series:N", title=None)


def _category_chart(model: ChartModel, archetype: str) -> alt.Chart:
    df = _long_frame(model)
    x = alt.X("label:N", title=None, sort=None, axis=alt.Axis(labelAngle=-45))
    tooltip = [alt.Tooltip("label:N", title="Label"), alt.Tooltip("series:N", title="Series"), alt.Tooltip("value:Q", title="Value")]
    base = alt.Chart(df).encode(x=x, y=alt.Y("value:Q", title=None), color=_series_color(model), tooltip=tooltip)
    if archetype == LINE:
        return base.mark_line(point=True)
    if archetype == STACKED_BAR:
        return base.mark_bar()
    return base.mark_bar().encode(xOffset=alt.XOffset("series:N"), y=alt.Y("value:Q", title=None, stack=None))


def _boxplot_chart(model: ChartModel) -> alt.LayerChart:
    records = []
    for series in model.datasets:
        for label, summary in zip(model.labels, series.data):
            records.append({"label": str(label), **asdict(summary)})
    df = pd.DataFrame(records, columns=["label", "min", "q1", "median", "q3", "max"])
    base = alt.Chart(df).encode(x=alt.X("label:N", title=None, sort=None))
    whiskers = base.mark_rule().encode(y=alt.Y("min:Q", title=None), y2="max:Q")
    box = base.mark_bar(size=28, opacity=0.6).encode(
        y="q1:Q",
        y2="q3:Q",
        tooltip=[alt.Tooltip(c, format=".3~f") for c in ["min", "q1", "median", "q3", "max"]],
    )
    median = base.mark_tick(color="white", size=28, thickness=2).encode(y="median:Q")
    return alt.layer(whiskers, box, median)


def _matrix_chart(model: ChartModel) -> alt.LayerChart:
    cells = [asdict(c) for s in model.datasets for c in s.data]
    df = pd.DataFrame(cells, columns=["x", "y", "v"])
    axis_order = [str(label) for label in model.labels]
    base = alt.Chart(df).encode(
        x=alt.X("x:N", title=None, sort=axis_order),
        y=alt.Y("y:N", title=None, sort=axis_order),
    )
    rect = base.mark_rect().encode(
        color=alt.Color("v:Q", title="Value", scale=alt.Scale(scheme="redblue", domain=[-1, 1])),
        tooltip=["x:N", "y:N", alt.Tooltip("v:Q", format=".3f")],
    )
    text = base.mark_text(baseline="middle").encode(text=alt.Text("v:Q", format=".2f"))
    return alt.layer(rect, text)


def build_chart(model: ChartModel, archetype: str) -> alt.TopLevelMixin:
    if archetype in (BAR, LINE, STACKED_BAR):
        chart = _category_chart(model, archetype)
    elif archetype == BOXPLOT:
        chart = _boxplot_chart(model)
    elif archetype == MATRIX:
        chart = _matrix_chart(model)
    else:
        raise UnsupportedChartType(archetype)
    return chart.properties(title=model.title or "")


def chart_spec(model: ChartModel, archetype: str) -> Dict[str, Any]:
    return to_vega_spec(build_chart(model, archetype))
