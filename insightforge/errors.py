from __future__ import annotations

from typing import Optional


class AnalysisError(Exception):
    """Base class for failures of a single analysis request."""


class UnknownMethod(AnalysisError):
    def __init__(self, method: str):
        super().__init__(f"unsupported analysis method: {method}")
        self.method = method


class UnsupportedChartType(AnalysisError):
    def __init__(self, key: str):
        super().__init__(f"unsupported chart type for: {key}")
        self.key = key


class MissingPrerequisite(AnalysisError):
    """A required default parameter could not be resolved from the active dataset."""


class UpstreamHTTPError(AnalysisError):
    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        self.message = message or f"analytics request failed (HTTP {status_code})"
        super().__init__(self.message)


class PartialJoinFailure(AnalysisError):
    """One side of a paired request failed or the two results do not line up."""
