from __future__ import annotations

import logging
import math
from collections import OrderedDict
from contextlib import asynccontextmanager
from typing import Callable, Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import AnalysisResponse, DatasetModel, MethodInfoModel, MethodsResponse
from insightforge.catalog import CATALOG, GROUPS, PAIRED_METHODS, archetype_of, normalize
from insightforge.charts import chart_spec
from insightforge.client import AnalyticsClient
from insightforge.dispatcher import AnalysisDispatcher
from insightforge.errors import (
    MissingPrerequisite,
    PartialJoinFailure,
    UnknownMethod,
    UnsupportedChartType,
    UpstreamHTTPError,
)
from insightforge.settings import load_settings


logger = logging.getLogger(__name__)
settings = load_settings()

_client: Optional[AnalyticsClient] = None
_dispatchers: OrderedDict[str, AnalysisDispatcher] = OrderedDict()


def _shared_client() -> AnalyticsClient:
    global _client
    if _client is None:
        _client = AnalyticsClient(settings)
    return _client


def _default_factory() -> AnalysisDispatcher:
    return AnalysisDispatcher(client=_shared_client(), settings=settings)


dispatcher_factory: Callable[[], AnalysisDispatcher] = _default_factory


def get_dispatcher(session: str) -> AnalysisDispatcher:
    """One dispatcher (and so one chart state) per dashboard session.

    The least recently used sessions are dropped past ``settings.max_sessions``;
    their dispatchers share the module client, so nothing is closed here.
    """
    dispatcher = _dispatchers.get(session)
    if dispatcher is None:
        dispatcher = dispatcher_factory()
        _dispatchers[session] = dispatcher
    _dispatchers.move_to_end(session)
    while len(_dispatchers) > settings.max_sessions:
        evicted, _ = _dispatchers.popitem(last=False)
        logger.debug("evicting dispatcher for session %s", evicted)
    return dispatcher


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    if _client is not None:
        await _client.close()
    _dispatchers.clear()


app = FastAPI(title="InsightForge Analytics API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(status_code: int, exc: Exception, message: Optional[str] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message or str(exc), "type": type(exc).__name__})


@app.get("/meta/methods")
def meta_methods():
    methods = [
        MethodInfoModel(
            group=spec.group,
            method=spec.name,
            label=spec.label,
            archetype=archetype_of(normalize(spec.name)),
            paired=spec.name in PAIRED_METHODS,
            requirements=spec.requirements.flags(),
        )
        for spec in CATALOG.values()
    ]
    return _json(MethodsResponse(groups=list(GROUPS), methods=methods).model_dump())


@app.post("/analysis/{group}/{method}")
async def analysis(
    group: str,
    method: str,
    dataset: DatasetModel,
    sub_method: Optional[str] = Query(default=None),
    session: str = Query(default="default"),
):
    dispatcher = get_dispatcher(session)
    try:
        result = await dispatcher.run_analysis(group, method, sub_method, dataset=dataset.to_dataset())
        if result is None:
            return Response(status_code=204)
        body = AnalysisResponse(
            group=result.group,
            method=result.method,
            archetype=result.archetype,
            chart=result.chart.to_dict(),
            spec=chart_spec(result.chart, result.archetype),
        )
        return _json(body.model_dump())
    except (UnknownMethod, UnsupportedChartType) as exc:
        return _error(400, exc)
    except MissingPrerequisite as exc:
        return _error(422, exc)
    except (UpstreamHTTPError, PartialJoinFailure) as exc:
        return _error(502, exc)
    except Exception as exc:
        logger.exception("analysis %s/%s failed", group, method)
        return _error(500, exc)


@app.get("/chart")
def current_chart(session: str = Query(default="default")):
    dispatcher = _dispatchers.get(session)
    state = dispatcher.state if dispatcher is not None else None
    if state is None:
        return _json({"chart": None})
    return _json({"chart": state.to_dict()})
