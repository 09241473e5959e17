import copy

from insightforge.catalog import PAIRED_METHODS
from insightforge.models import BoxPlotSummary, MatrixCell, PairedRow
from insightforge.transform import (
    matrix_color,
    transform_box_plot,
    transform_correlation,
    transform_correlation_matrix,
    transform_dropped_rows,
    transform_filled_missing,
    transform_filtered_sorted,
    transform_grouped,
    transform_histogram,
    transform_iqr_outliers,
    transform_kde,
    transform_log_transformed,
    transform_normalized_column,
    transform_paired,
    transform_pivot,
    transform_scalar,
    transform_standardized_columns,
    transform_zscore_outliers,
)


def test_grouped():
    chart = transform_grouped({"A": 1, "B": 2}, "L")
    assert chart.labels == ["A", "B"]
    assert len(chart.datasets) == 1
    assert chart.datasets[0].label == "L"
    assert chart.datasets[0].data == [1, 2]


def test_pivot_unions_columns_and_fills_missing_with_none():
    chart = transform_pivot({"R1": {"C1": 10}, "R2": {"C1": 5, "C2": 7}})
    assert chart.labels == ["R1", "R2"]
    assert [s.label for s in chart.datasets] == ["C1", "C2"]
    assert chart.datasets[0].data == [10, 5]
    assert chart.datasets[1].data == [None, 7]


def test_pivot_sorts_columns_but_keeps_row_order():
    chart = transform_pivot({"Z": {"b": 1, "a": 2}, "A": {"c": 3}})
    assert chart.labels == ["Z", "A"]
    assert [s.label for s in chart.datasets] == ["a", "b", "c"]
    assert chart.datasets[2].data == [None, 3]


def test_pivot_colors_are_deterministic():
    payload = {"R1": {"C1": 1, "C2": 2}}
    first = transform_pivot(payload)
    second = transform_pivot(payload)
    assert [s.style for s in first.datasets] == [s.style for s in second.datasets]
    assert first.datasets[0].style["backgroundColor"] != first.datasets[1].style["backgroundColor"]


def test_zscore_outliers_found():
    chart = transform_zscore_outliers({"indices": [0, 2]}, [10, 20, 30])
    assert chart.labels == ["0", "1", "2"]
    assert chart.datasets[0].data == [10, None, 30]
    assert chart.title == "Z-Score Outliers"


def test_zscore_outliers_none_found():
    chart = transform_zscore_outliers({"indices": []}, [10, 20, 30])
    assert chart.datasets[0].data == [None, None, None]
    assert chart.title == "No Z-Score Outliers Found"


def test_iqr_outliers():
    chart = transform_iqr_outliers({"indices": [1]}, [1.0, 99.0])
    assert chart.datasets[0].data == [None, 99.0]
    assert chart.datasets[0].label == "IQR Outliers"
    assert transform_iqr_outliers({"indices": []}, [1.0]).title == "No IQR Outliers Found"


def test_correlation_matrix_skips_missing_cells():
    chart = transform_correlation_matrix({"A": {"B": 0.5}, "B": {"A": 0.5}})
    cells = chart.datasets[0].data
    assert chart.labels == ["A", "B"]
    assert len(cells) == 2
    assert MatrixCell(x="B", y="A", v=0.5) in cells
    assert MatrixCell(x="A", y="B", v=0.5) in cells


def test_correlation_matrix_drops_non_numeric_values():
    chart = transform_correlation_matrix({"A": {"A": None, "B": "x"}, "B": {"A": 0, "B": 1.0}})
    assert chart.datasets[0].data == [MatrixCell(x="A", y="B", v=0), MatrixCell(x="B", y="B", v=1.0)]
    assert len(chart.datasets[0].style["backgroundColor"]) == 2


def test_matrix_color_is_clamped():
    assert matrix_color(1.0) == "rgb(0, 0, 255)"
    assert matrix_color(-1.0) == "rgb(255, 0, 0)"
    assert matrix_color(5.0) == matrix_color(1.0)
    assert matrix_color(-3.0) == matrix_color(-1.0)


def test_scalar_uses_readable_label():
    chart = transform_scalar({"stddev": 5}, "stddev")
    assert chart.labels == ["Std Dev"]
    assert chart.datasets[0].label == "Std Dev"
    assert chart.datasets[0].data == [5]


def test_scalar_mode_can_be_text():
    assert transform_scalar({"mode": "red"}, "mode").datasets[0].data == ["red"]


def test_paired():
    rows = [PairedRow("A", 1, 10), PairedRow("B", 2, 20)]
    chart = transform_paired(rows, PAIRED_METHODS["min-max"])
    assert chart.labels == ["A", "B"]
    assert [s.label for s in chart.datasets] == ["Min", "Max"]
    assert chart.datasets[1].data == [10, 20]
    assert chart.title == "Grouped Min and Max"


def test_correlation_scalars():
    assert transform_correlation({"pearson": 0.8}, "pearson").datasets[0].data == [0.8]
    chart = transform_correlation({"spearman": 0.9}, "spearman")
    assert chart.labels == ["Spearman Correlation"]


def test_histogram_and_kde_are_renames():
    hist = transform_histogram({"labels": ["0-1", "1-2"], "counts": [3, 4]})
    assert hist.labels == ["0-1", "1-2"]
    assert hist.datasets[0].data == [3, 4]
    kde = transform_kde({"labels": ["0.0", "0.5"], "densities": [0.1, 0.2]})
    assert kde.datasets[0].data == [0.1, 0.2]
    assert kde.datasets[0].style["fill"] is True


def test_box_plot_median_is_quartile_midpoint():
    payload = {
        "labels": ["Q1", "Q3", "Lower", "Upper"],
        "values": [2.0, 6.0, -4.0, 12.0],
        "stats": {"Q1": 2.0, "Q3": 6.0, "IQR": 4.0, "lower_outlier": -4.0, "upper_outlier": 12.0},
    }
    chart = transform_box_plot(payload)
    expected = BoxPlotSummary(min=-4.0, q1=2.0, median=4.0, q3=6.0, max=12.0)
    assert chart.datasets[0].data == [expected] * 4
    assert chart.stats["IQR"] == 4.0
    assert chart.to_dict()["datasets"][0]["data"][0] == {"min": -4.0, "q1": 2.0, "median": 4.0, "q3": 6.0, "max": 12.0}


def test_dropped_rows_skip_header():
    chart = transform_dropped_rows({"rows": [["name", "age"], ["Alice", "24"], ["Bob", "30"]]})
    assert chart.labels == ["Alice, 24", "Bob, 30"]
    assert chart.datasets[0].data == [24.0, 30.0]


def test_filled_missing():
    chart = transform_filled_missing({"rows": [["5"], ["x"], ["7.5", "a"]]})
    assert chart.labels == ["Row 1", "Row 2", "Row 3"]
    assert chart.datasets[0].data == [5.0, None, 7.5]


def test_log_transformed_reads_selected_column():
    chart = transform_log_transformed({"rows": [["a", "0.69"], ["b", "1.10"]]}, column_index=1)
    assert chart.labels == ["a", "b"]
    assert chart.datasets[0].data == [0.69, 1.10]


def test_normalized_column():
    chart = transform_normalized_column({"rows": [[10, "0.0"], [20, "1.0"]]})
    assert chart.labels == [10, 20]
    assert chart.datasets[0].data == [0.0, 1.0]


def test_standardized_columns():
    chart = transform_standardized_columns({"colA": [0.1, -1.3, 1.2], "colB": [-0.4, 0.0, 0.4]})
    assert chart.labels == [0, 1, 2]
    assert [s.label for s in chart.datasets] == ["colA", "colB"]
    assert chart.datasets[0].style["borderColor"] != chart.datasets[1].style["borderColor"]


def test_filtered_sorted():
    payload = {"data": [{"name": "Bob", "age": "30"}, {"name": "Eve", "age": "41"}]}
    chart = transform_filtered_sorted(payload, ["name", "age"])
    assert chart.labels == ["Bob", "Eve"]
    assert chart.datasets[0].data == [30.0, 41.0]


def test_row_tables_keep_label_alignment():
    for chart in (
        transform_filled_missing({"rows": [["1"], [""], ["3"]]}),
        transform_log_transformed({"rows": [["1"], ["x"]]}),
        transform_dropped_rows({"rows": [["h"], ["a"], ["b"]]}),
    ):
        assert len(chart.datasets[0].data) == len(chart.labels)


def test_transformers_are_pure():
    pivot = {"R1": {"C1": 10}, "R2": {"C1": 5, "C2": 7}}
    snapshot = copy.deepcopy(pivot)
    assert transform_pivot(pivot) == transform_pivot(pivot)
    assert pivot == snapshot
    matrix = {"A": {"B": 0.5}, "B": {"A": 0.5}}
    assert transform_correlation_matrix(matrix).to_dict() == transform_correlation_matrix(matrix).to_dict()
    outliers = {"indices": [0]}
    assert transform_zscore_outliers(outliers, [1, 2]) == transform_zscore_outliers(outliers, [1, 2])
