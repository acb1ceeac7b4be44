"""Async REST client for the reports backend.

Every collaborator endpoint the rendering core consumes goes through
``ReportsAPIClient``. Calls are coroutines on a shared ``httpx.AsyncClient``
so concurrent fetches interleave on one event loop instead of using threads.

Usage:
    async with ReportsAPIClient.from_settings(get_settings()) as client:
        reports = await client.list_reports()
        charts = await client.get_chart_configs(reports[0]["_id"])

Error Handling:
    Transport failures, non-2xx statuses and undecodable bodies all raise
    ``FetchError``. Token-like values are redacted from error payloads before
    they reach messages or logs.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any

import httpx

from ..core.config import Settings
from ..core.errors import FetchError
from ..core.logging_config import get_logger
from ..core.models import ChartData, InsightRequest

logger = get_logger(__name__)

SENSITIVE_KEYS = {"access_token", "token", "authorization", "api_key", "secret", "password"}


def sanitize_error(error_data: Any) -> Any:
    """Recursively remove sensitive data from error responses."""
    if isinstance(error_data, dict):
        sanitized: dict[str, Any] = {}
        for key, value in error_data.items():
            if str(key).lower() in SENSITIVE_KEYS:
                sanitized[key] = "***REDACTED***"
            elif isinstance(value, dict):
                sanitized[key] = sanitize_error(value)
            elif isinstance(value, str):
                if value.startswith(("Bearer ", "sk-", "eyJ")):
                    sanitized[key] = "***REDACTED***"
                else:
                    sanitized[key] = value[:500]
            else:
                sanitized[key] = value
        return sanitized
    return str(error_data)[:500] if error_data else ""


class ReportsAPIClient:
    """Client for the reports, chart-config, upload and insight endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root, e.g. ``http://localhost:5000/api``
            token: Optional bearer token sent on every request
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> ReportsAPIClient:
        return cls(
            settings.api_base_url,
            token=settings.api_token,
            timeout=settings.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> ReportsAPIClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(
                "Request failed", extra={"method": method, "path": path, "error": str(e)}
            )
            raise FetchError(f"{method} {path} failed: {type(e).__name__}") from e

        if resp.status_code >= 400:
            try:
                err_json: Any = resp.json()
            except ValueError:
                err_json = {"error": resp.text[:200]}
            raise FetchError(
                f"{method} {path} returned {resp.status_code}: {sanitize_error(err_json)}",
                status_code=resp.status_code,
            )

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise FetchError(f"{method} {path} returned a non-JSON body") from e

    async def list_reports(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/analytics/reports")
        if not isinstance(data, list):
            raise FetchError("GET /analytics/reports did not return a list")
        return [r for r in data if isinstance(r, dict)]

    async def get_chart_configs(self, report_id: str) -> list[dict[str, Any]]:
        path = f"/chart-analytics/{report_id}"
        data = await self._request("GET", path)
        if not isinstance(data, list):
            raise FetchError(f"GET {path} did not return a list")
        return [c for c in data if isinstance(c, dict)]

    async def generate_insight(self, request: InsightRequest) -> str:
        data = await self._request("POST", "/insights/generate", json=request.to_api())
        insight = data.get("insight") if isinstance(data, dict) else None
        return insight if isinstance(insight, str) else ""

    async def get_upload(self, upload_id: str) -> dict[str, Any]:
        path = f"/upload/{upload_id}"
        data = await self._request("GET", path)
        if not isinstance(data, dict):
            raise FetchError(f"GET {path} did not return an object")
        return data

    async def get_chart_data(self, upload_id: str, x_axis: str, y_axis: str) -> dict[str, Any]:
        path = f"/analytics/chart-data/{upload_id}"
        data = await self._request("GET", path, params={"xAxis": x_axis, "yAxis": y_axis})
        if not isinstance(data, dict):
            raise FetchError(f"GET {path} did not return an object")
        return data

    async def save_chart_config(
        self, upload_id: str, chart_type: str, chart_data: ChartData
    ) -> Any:
        payload = {"uploadId": upload_id, "chartType": chart_type, "chartData": chart_data.to_api()}
        return await self._request("POST", "/chart-analytics", json=payload)

    async def log_event(
        self, upload_id: str, action: str, details: dict[str, Any] | None = None
    ) -> Any:
        payload = {"uploadId": upload_id, "action": action, "details": details or {}}
        return await self._request("POST", "/analytics/log", json=payload)
