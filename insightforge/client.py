from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

import httpx

from insightforge.errors import UpstreamHTTPError
from insightforge.settings import Settings


logger = logging.getLogger(__name__)


def analytics_path(group: str, method: str) -> str:
    return f"/analytics/{group}/{method}"


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except Exception:
        return None
    if isinstance(body, dict):
        message = body.get("error") or body.get("message")
        return str(message) if message else None
    return None


class AnalyticsClient:
    """Thin async wrapper over the remote analytics service."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.api_url
        self.timeout = settings.timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)
        return self._http_client

    async def close(self) -> None:
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    async def fetch(self, group: str, method: str, query: List[Tuple[str, str]]) -> Any:
        client = await self._get_client()
        path = analytics_path(group, method)
        try:
            response = await client.get(path, params=query)
        except httpx.HTTPError as exc:
            logger.warning("analytics request %s failed: %s", path, exc)
            raise UpstreamHTTPError(0, f"analytics service unreachable: {exc}") from exc
        if not response.is_success:
            message = _error_message(response)
            logger.warning("analytics request %s returned %s: %s", path, response.status_code, message)
            raise UpstreamHTTPError(response.status_code, message)
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("analytics request %s returned a non-JSON body", path)
            raise UpstreamHTTPError(response.status_code, "analytics service returned invalid JSON") from exc
