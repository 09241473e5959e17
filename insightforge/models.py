from __future__ import annotations

from dataclasses import asdict, dataclass, field, is_dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class BoxPlotSummary:
    """Five-number box summary.

    ``median`` is the midpoint of ``q1`` and ``q3``; the analytics service does
    not return a true median for box plots and consumers rely on this value.
    """

    min: float
    q1: float
    median: float
    q3: float
    max: float


@dataclass(frozen=True)
class MatrixCell:
    x: str
    y: str
    v: float


@dataclass(frozen=True)
class PairedRow:
    label: str
    first: Any
    second: Any


@dataclass
class Series:
    label: str
    data: List[Any]
    style: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = [asdict(p) if is_dataclass(p) else p for p in self.data]
        return {"label": self.label, "data": data, **self.style}


@dataclass
class ChartModel:
    labels: List[Any]
    datasets: List[Series]
    title: str = ""
    stats: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "labels": list(self.labels),
            "datasets": [s.to_dict() for s in self.datasets],
            "title": self.title,
        }
        if self.stats is not None:
            out["stats"] = dict(self.stats)
        return out
