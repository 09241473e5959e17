from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from insightforge import transform
from insightforge.catalog import CATALOG, PAIRED_METHODS, SCALAR_STATS, PairSpec, archetype_of, normalize, requirements
from insightforge.client import AnalyticsClient
from insightforge.dataset import Dataset, column_values
from insightforge.errors import AnalysisError, PartialJoinFailure, UnknownMethod
from insightforge.models import ChartModel, PairedRow, Series
from insightforge.params import AnalysisParams, build_query, resolve_params
from insightforge.settings import Settings, load_settings


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransformContext:
    method: str
    dataset: Dataset
    params: AnalysisParams


@dataclass(frozen=True)
class ChartState:
    labels: List[Any]
    datasets: List[Series]
    title: str
    archetype: str
    token: int

    def to_model(self) -> ChartModel:
        return ChartModel(labels=self.labels, datasets=self.datasets, title=self.title)

    def to_dict(self) -> Dict[str, Any]:
        return {**self.to_model().to_dict(), "archetype": self.archetype, "token": self.token}


@dataclass(frozen=True)
class AnalysisResult:
    group: str
    method: str
    archetype: str
    chart: ChartModel
    token: int


Route = Callable[[Any, TransformContext], ChartModel]


def _scalar(stat: str) -> Route:
    def route(payload: Any, ctx: TransformContext) -> ChartModel:
        return transform.transform_scalar(payload, stat)

    return route


def _grouped(payload: Any, ctx: TransformContext) -> ChartModel:
    return transform.transform_grouped(payload, CATALOG[ctx.method].label)


def _pivot(payload: Any, ctx: TransformContext) -> ChartModel:
    return transform.transform_pivot(payload, CATALOG[ctx.method].label)


def _outliers(kind: str) -> Route:
    def route(payload: Any, ctx: TransformContext) -> ChartModel:
        return transform.transform_outliers(payload, column_values(ctx.dataset, ctx.params.column_index), kind)

    return route


def _log_transformed(payload: Any, ctx: TransformContext) -> ChartModel:
    return transform.transform_log_transformed(payload, ctx.params.column_index or 0)


def _filtered_sorted(payload: Any, ctx: TransformContext) -> ChartModel:
    headers = [ctx.dataset.columns[0] if ctx.dataset.columns else "", ctx.params.column]
    return transform.transform_filtered_sorted(payload, headers)


ROUTES: Dict[str, Route] = {
    **{stat: _scalar(stat) for stat in SCALAR_STATS},
    "grouped": _grouped,
    "pivot": _pivot,
    "pearson": lambda payload, ctx: transform.transform_correlation(payload, "pearson"),
    "spearman": lambda payload, ctx: transform.transform_correlation(payload, "spearman"),
    "correlationmatrix": lambda payload, ctx: transform.transform_correlation_matrix(payload),
    "histogram": lambda payload, ctx: transform.transform_histogram(payload),
    "kde": lambda payload, ctx: transform.transform_kde(payload),
    "boxplot": lambda payload, ctx: transform.transform_box_plot(payload),
    "zscore": _outliers("zscore"),
    "iqr": _outliers("iqr"),
    "droprowswithmissing": lambda payload, ctx: transform.transform_dropped_rows(payload),
    "fillmissingwith": lambda payload, ctx: transform.transform_filled_missing(payload),
    "applylogtransformation": _log_transformed,
    "normalizecolumn": lambda payload, ctx: transform.transform_normalized_column(payload),
    "standardizecolumn": lambda payload, ctx: transform.transform_standardized_columns(payload),
    "filtersort": _filtered_sorted,
}


def _labelled_items(payload: Any) -> List[Tuple[Any, Any]]:
    if isinstance(payload, Mapping):
        return list(payload.items())
    return [(item["label"], item["value"]) for item in payload]


def merge_paired_results(first: Any, second: Any) -> List[PairedRow]:
    """Join two grouped results on their group labels, in the first result's order."""
    left = _labelled_items(first)
    right = _labelled_items(second)
    if len(left) != len(right):
        raise PartialJoinFailure(f"paired results differ in length ({len(left)} vs {len(right)})")
    right_by_label = dict(right)
    if len(right_by_label) != len(right) or set(right_by_label) != {label for label, _ in left}:
        raise PartialJoinFailure("paired results do not share the same group labels")
    return [PairedRow(label=label, first=value, second=right_by_label[label]) for label, value in left]


class AnalysisDispatcher:
    """Runs one analysis request at a time against the analytics service.

    Each call takes a new token; only the newest call may replace ``state``.
    """

    def __init__(self, client: Optional[AnalyticsClient] = None, settings: Optional[Settings] = None):
        self.settings = settings or load_settings()
        self.client = client or AnalyticsClient(self.settings)
        self.state: Optional[ChartState] = None
        self._tokens = itertools.count(1)
        self._latest = 0

    @property
    def latest_token(self) -> int:
        return self._latest

    def _is_current(self, token: int) -> bool:
        return token == self._latest

    async def run_analysis(
        self,
        group: str,
        method: str,
        sub_method: Optional[str] = None,
        *,
        dataset: Dataset,
    ) -> Optional[AnalysisResult]:
        token = next(self._tokens)
        self._latest = token
        try:
            chart, archetype = await self._execute(group, method, sub_method, dataset)
        except Exception as exc:
            if not self._is_current(token):
                logger.debug("discarding stale failure for %s/%s (token %s): %s", group, method, token, exc)
                return None
            raise
        if not self._is_current(token):
            logger.debug("discarding stale result for %s/%s (token %s, latest %s)", group, method, token, self._latest)
            return None
        self.state = ChartState(
            labels=chart.labels, datasets=chart.datasets, title=chart.title, archetype=archetype, token=token
        )
        return AnalysisResult(group=group, method=method, archetype=archetype, chart=chart, token=token)

    async def _execute(
        self, group: str, method: str, sub_method: Optional[str], dataset: Dataset
    ) -> Tuple[ChartModel, str]:
        spec = CATALOG.get(method)
        if spec is None or spec.group != group:
            raise UnknownMethod(method if spec is None else f"{group}/{method}")
        key = normalize(method)
        pair = PAIRED_METHODS.get(method)
        if pair is None and key not in ROUTES:
            raise UnknownMethod(method)
        archetype = archetype_of(key)

        reqs = requirements(method)
        try:
            params = resolve_params(
                dataset,
                reqs,
                self.settings.columns,
                sub_method=sub_method,
                default_sub_method=self.settings.default_sub_method,
            )
        except AnalysisError as exc:
            logger.warning("not sending %s/%s: %s", group, method, exc)
            raise
        query = build_query(dataset.id, reqs, params)
        logger.info("dispatching %s/%s for dataset %s", group, method, dataset.id)

        if pair is not None:
            rows = await self._fetch_paired(pair, query)
            return transform.transform_paired(rows, pair), archetype

        payload = await self.client.fetch(group, method, query)
        ctx = TransformContext(method=method, dataset=dataset, params=params)
        return ROUTES[key](payload, ctx), archetype

    async def _fetch_paired(self, pair: PairSpec, query: Sequence[Tuple[str, str]]) -> List[PairedRow]:
        results = await asyncio.gather(
            *(self.client.fetch(CATALOG[component].group, component, list(query)) for component in pair.components),
            return_exceptions=True,
        )
        for component, result in zip(pair.components, results):
            if isinstance(result, BaseException):
                raise PartialJoinFailure(f"{component} failed: {result}") from result
        return merge_paired_results(results[0], results[1])

    async def close(self) -> None:
        await self.client.close()
