from __future__ import annotations

import httpx
import pytest

from insightforge.client import AnalyticsClient
from insightforge.dataset import Dataset
from insightforge.dispatcher import AnalysisDispatcher
from insightforge.settings import Settings


COLUMNS = ["id", "region", "product", "units", "price", "revenue", "margin", "notes"]
ROWS = [
    [1, "North", "Widget", 10, 2.5, 25.0, 10, "ok"],
    [2, "South", "Widget", 4, 2.5, 10.0, 200, ""],
    [3, "North", "Gadget", 7, 4.0, 28.0, 12, "ok"],
    [4, "East", "Gadget", 1, 4.0, 4.0, "n/a", "late"],
]


@pytest.fixture
def dataset() -> Dataset:
    return Dataset(id="ds-1", columns=list(COLUMNS), rows=[list(r) for r in ROWS])


def _make_dispatcher(handler) -> AnalysisDispatcher:
    settings = Settings(api_url="http://analytics.test")
    client = AnalyticsClient(settings, transport=httpx.MockTransport(handler))
    return AnalysisDispatcher(client=client, settings=settings)


@pytest.fixture
def make_dispatcher():
    return _make_dispatcher
