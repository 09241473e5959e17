from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from insightforge.errors import UnsupportedChartType


BAR = "bar"
LINE = "line"
STACKED_BAR = "stackedBar"
BOXPLOT = "boxplot"
MATRIX = "matrix"
ARCHETYPES = (BAR, LINE, STACKED_BAR, BOXPLOT, MATRIX)

GROUPS = ("descriptives", "aggregation", "correlation", "distribution", "outliers", "cleaning")

AGGREGATIONS = ("sum", "mean", "count", "min", "max", "median", "stddev")
GROUPED_STATS = AGGREGATIONS + ("mode", "variance", "range")
SCALAR_STATS = ("mean", "median", "mode", "stddev", "variance", "min", "max", "sum", "count", "range")
CLEANING_OPERATIONS = (
    "drop-rows-with-missing",
    "fill-missing-with",
    "apply-log-transformation",
    "normalize-column",
    "standardize-column",
    "filter-sort",
)
SUB_METHODS = ("pearson", "spearman")

STAT_LABELS: Dict[str, str] = {
    "mean": "Mean",
    "median": "Median",
    "mode": "Mode",
    "stddev": "Std Dev",
    "variance": "Variance",
    "min": "Min",
    "max": "Max",
    "sum": "Sum",
    "count": "Count",
    "range": "Range",
}

PALETTE = (
    (54, 162, 235),
    (255, 205, 86),
    (75, 192, 192),
    (255, 99, 132),
    (153, 102, 255),
    (255, 159, 64),
    (89, 161, 79),
    (175, 122, 161),
)


def rgba(rgb: Tuple[int, int, int], alpha: float) -> str:
    r, g, b = rgb
    return f"rgba({r}, {g}, {b}, {alpha:g})"


def palette_color(index: int) -> Tuple[int, int, int]:
    return PALETTE[index % len(PALETTE)]


@dataclass(frozen=True)
class Requirements:
    needs_column: bool = False
    needs_group_by: bool = False
    needs_row_field: bool = False
    needs_value_field: bool = False
    needs_multi_column: bool = False
    needs_sub_method: bool = False
    needs_xy: bool = False

    def flags(self) -> Dict[str, bool]:
        return {
            "needs_column": self.needs_column,
            "needs_group_by": self.needs_group_by,
            "needs_row_field": self.needs_row_field,
            "needs_value_field": self.needs_value_field,
            "needs_multi_column": self.needs_multi_column,
            "needs_sub_method": self.needs_sub_method,
            "needs_xy": self.needs_xy,
        }


@dataclass(frozen=True)
class PairSpec:
    """Two grouped statistics fetched separately and shown side by side."""

    first: str
    second: str
    first_label: str
    second_label: str
    title: str

    @property
    def components(self) -> Tuple[str, str]:
        return (f"grouped-{self.first}", f"grouped-{self.second}")


@dataclass(frozen=True)
class MethodSpec:
    name: str
    group: str
    label: str
    requirements: Requirements = field(default_factory=Requirements)


def _pair(first: str, second: str) -> PairSpec:
    a, b = STAT_LABELS[first], STAT_LABELS[second]
    return PairSpec(first=first, second=second, first_label=a, second_label=b, title=f"Grouped {a} and {b}")


PAIRED_METHODS: Dict[str, PairSpec] = {
    "mean-median": _pair("mean", "median"),
    "min-max": _pair("min", "max"),
    "sum-count": _pair("sum", "count"),
    "stddev-variance": _pair("stddev", "variance"),
    "mode-median": _pair("mode", "median"),
    "range-stddev": _pair("range", "stddev"),
}

_COLUMN = Requirements(needs_column=True)
_GROUPED = Requirements(needs_column=True, needs_group_by=True)
_PIVOT = Requirements(needs_row_field=True, needs_group_by=True, needs_value_field=True)


def _build_catalog() -> Dict[str, MethodSpec]:
    specs: List[MethodSpec] = []
    for stat in SCALAR_STATS:
        specs.append(MethodSpec(stat, "descriptives", STAT_LABELS[stat], _COLUMN))
    for name, pair in PAIRED_METHODS.items():
        specs.append(MethodSpec(name, "descriptives", pair.title, _GROUPED))
    for agg in GROUPED_STATS:
        specs.append(MethodSpec(f"grouped-{agg}", "aggregation", f"Grouped {STAT_LABELS[agg]}", _GROUPED))
    for agg in AGGREGATIONS:
        specs.append(MethodSpec(f"pivot-{agg}", "aggregation", f"Pivot {STAT_LABELS[agg]}", _PIVOT))
    specs += [
        MethodSpec("pearson-correlation", "correlation", "Pearson Correlation", Requirements(needs_xy=True)),
        MethodSpec("spearman-correlation", "correlation", "Spearman Correlation", Requirements(needs_xy=True)),
        MethodSpec(
            "correlation-matrix",
            "correlation",
            "Correlation Matrix",
            Requirements(needs_multi_column=True, needs_sub_method=True),
        ),
        MethodSpec("histogram", "distribution", "Histogram", _COLUMN),
        MethodSpec("kde", "distribution", "KDE", _COLUMN),
        MethodSpec("boxplot", "distribution", "Box Plot", _COLUMN),
        MethodSpec("zscore-outliers", "outliers", "Z-Score Outliers", _COLUMN),
        MethodSpec("iqr-outliers", "outliers", "IQR Outliers", _COLUMN),
        MethodSpec("drop-rows-with-missing", "cleaning", "Rows After Dropping Missing Values"),
        MethodSpec("fill-missing-with", "cleaning", "Dataset with Filled Values"),
        MethodSpec("apply-log-transformation", "cleaning", "Log-Transformed Dataset", _COLUMN),
        MethodSpec("normalize-column", "cleaning", "Normalized Column", _COLUMN),
        MethodSpec("standardize-column", "cleaning", "Standardized Columns", _COLUMN),
        MethodSpec("filter-sort", "cleaning", "Filtered and Sorted Data", _COLUMN),
    ]
    return {s.name: s for s in specs}


CATALOG: Dict[str, MethodSpec] = _build_catalog()


def methods_in(group: str) -> List[str]:
    return [name for name, spec in CATALOG.items() if spec.group == group]


def requirements(method: str) -> Requirements:
    """Request parameters a method needs; unknown methods need nothing."""
    spec = CATALOG.get(method)
    return spec.requirements if spec is not None else Requirements()


def normalize(method: str) -> str:
    """Collapse a method identifier to the key that selects its chart archetype."""
    if method.startswith("zscore") or method.startswith("iqr"):
        return method[: -len("-outliers")] if method.endswith("-outliers") else method
    if method.startswith("grouped-"):
        return "grouped"
    if method.startswith("pivot-"):
        return "pivot"
    if method.endswith("-correlation"):
        return method[: -len("-correlation")]
    if method == "correlation-matrix":
        return "correlationmatrix"
    for op in CLEANING_OPERATIONS:
        if op in method:
            return op.replace("-", "")
    return method


ARCHETYPE_TABLE: Dict[str, str] = {
    **{stat: BAR for stat in SCALAR_STATS},
    **{name: BAR for name in PAIRED_METHODS},
    "grouped": BAR,
    "pivot": BAR,
    "pearson": BAR,
    "spearman": BAR,
    "correlationmatrix": MATRIX,
    "histogram": BAR,
    "kde": LINE,
    "boxplot": BOXPLOT,
    "zscore": BAR,
    "iqr": BAR,
    "droprowswithmissing": BAR,
    "fillmissingwith": BAR,
    "applylogtransformation": LINE,
    "normalizecolumn": LINE,
    "standardizecolumn": LINE,
    "filtersort": BAR,
}


def archetype_of(key: str) -> str:
    archetype = ARCHETYPE_TABLE.get(key)
    if archetype is None:
        raise UnsupportedChartType(key)
    return archetype
