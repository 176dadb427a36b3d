"""
BundleClient SDK: sync client for Bundle-Engine.

Used by the request-handling layer to fetch progress snapshots from a
remote Bundle-Engine server instead of computing them in-process.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx


@dataclass
class ClientProgress:
    """Progress snapshot returned by the SDK."""

    subscription_id: Optional[str] = None
    bundle_draft_id: Optional[str] = None
    bundle_title: str = ""
    status: str = ""
    sessions_used: int = 0
    sessions_included: int = 0
    sessions_remaining: int = 0
    sessions_progress_pct: int = 0
    products_used: float = 0
    products_included: int = 0
    products_remaining: float = 0
    products_progress_pct: int = 0
    alerts: list[str] = field(default_factory=list)


@dataclass
class ClientProgressResult:
    """Result of progress() call."""

    success: bool
    progress: Optional[ClientProgress] = None
    code: str = ""
    message: str = ""


class BundleClient:
    """
    Synchronous HTTP client for Bundle-Engine.

    Records are plain dicts in the same shape the API accepts.
    """

    def __init__(
        self,
        server_url: str = "http://localhost:8080",
        timeout: int = 30,
        max_retries: int = 3,
        retry_backoff_base: float = 0.5,
    ):
        self.server_url = server_url.rstrip("/")
        self.max_retries = max_retries
        self.retry_backoff_base = retry_backoff_base
        self._http = httpx.Client(
            base_url=self.server_url,
            timeout=timeout,
        )

    def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> Any:
        """Central HTTP method with retry and structured error handling.

        Retries on timeouts, transport errors, 5xx and 429 with exponential
        backoff. Other 4xx responses are returned as error dicts right away.
        """
        last_error = None
        for attempt in range(self.max_retries):
            try:
                resp = getattr(self._http, method)(path, **kwargs)
                if resp.status_code >= 500 or resp.status_code == 429:
                    last_error = f"HTTP {resp.status_code}"
                    if attempt < self.max_retries - 1:
                        time.sleep(self.retry_backoff_base * (2 ** attempt))
                        continue
                    return {
                        "error": f"Server error: {resp.status_code}",
                        "code": "SERVER_ERROR",
                    }
                if resp.status_code >= 400:
                    try:
                        body = resp.json()
                    except json.JSONDecodeError:
                        body = {}
                    code = body.get("code") if isinstance(body, dict) else None
                    return {
                        "error": f"Client error: {resp.status_code}",
                        "code": code or "CLIENT_ERROR",
                    }
                return resp.json()
            except httpx.TimeoutException:
                last_error = "timeout"
                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_backoff_base * (2 ** attempt))
                    continue
            except httpx.HTTPError as e:
                last_error = str(e)
                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_backoff_base * (2 ** attempt))
                    continue
            except json.JSONDecodeError:
                return {"error": "Invalid JSON response", "code": "JSON_ERROR"}

        return {"error": f"All {self.max_retries} retries exhausted: {last_error}", "code": "CONNECTION_ERROR"}

    @staticmethod
    def _is_error(data: Any) -> bool:
        return isinstance(data, dict) and "error" in data and "code" in data

    def health(self) -> dict[str, Any]:
        return self._request("get", "/health")

    def parse_bundle(self, bundle: dict[str, Any]) -> dict[str, Any]:
        """Parsed products, services and goals of a bundle record."""
        return self._request("post", "/bundles/parse", json=bundle)

    def progress(
        self,
        subscription: dict[str, Any],
        bundle: Optional[dict[str, Any]] = None,
        deliveries: Optional[list[dict[str, Any]]] = None,
    ) -> ClientProgressResult:
        body: dict[str, Any] = {"subscription": subscription, "deliveries": deliveries or []}
        if bundle is not None:
            body["bundle"] = bundle

        data = self._request("post", "/progress", json=body)
        if self._is_error(data):
            return ClientProgressResult(success=False, code=data["code"], message=data["error"])

        known = ClientProgress.__dataclass_fields__
        return ClientProgressResult(
            success=True,
            progress=ClientProgress(**{k: v for k, v in data.items() if k in known}),
            code="OK",
        )

    def session_stats(self, subscription: dict[str, Any]) -> dict[str, Any]:
        return self._request("post", "/progress/session-stats", json={"subscription": subscription})

    def close(self) -> None:
        self._http.close()

