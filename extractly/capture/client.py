from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from extractly.capture.storage import CaptureSettings


class CaptureError(RuntimeError):
    pass


class ExtractlyClient:
    """HTTP client for the Extractly backend API."""

    def __init__(self, settings: CaptureSettings, transport: Optional[httpx.BaseTransport] = None):
        self.base_url = settings.api_base_url.rstrip("/")
        self._client = httpx.Client(
            timeout=settings.timeout / 1000.0,
            # retries only cover failed connections, never a sent request
            transport=transport or httpx.HTTPTransport(retries=settings.max_retries),
        )

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            resp = self._client.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.HTTPError as e:
            raise CaptureError(f"Request to backend failed: {e}") from e
        if resp.is_error:
            try:
                message = resp.json().get("error")
            except ValueError:
                message = None
            raise CaptureError(message or f"Server error: {resp.status_code}")
        return resp.json()

    def ingest(self, url: str, html: str, instruction: str) -> Dict[str, Any]:
        return self._request("POST", "/ingest", json={"url": url, "html": html, "instruction": instruction})

    def get_record(self, record_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/records/{record_id}")

    def list_records(self, **params: Any) -> Dict[str, Any]:
        query = {k: v for k, v in params.items() if v is not None}
        return self._request("GET", "/records", params=query)

    def health(self) -> Dict[str, Any]:
        # /health lives beside /api, not under it
        root = self.base_url[: -len("/api")] if self.base_url.endswith("/api") else self.base_url
        try:
            resp = self._client.get(f"{root}/health")
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise CaptureError(f"Health check failed: {e}") from e
        return resp.json()

    def close(self) -> None:
        self._client.close()
