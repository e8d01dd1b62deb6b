from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .errors import ProviderHTTPError, ProviderNotConfiguredError, ToolExecutionError

_MAX_ERROR_BODY = 500


class ProviderClient:
    """
    Thin async HTTP client for the inference provider.

    Responsibilities:
    - run: synchronous inference (one POST, the body is the result)
    - submit / status / result: the queue submit-and-poll contract
    - probe: lightweight ``HEAD`` used by the health monitor

    Note: This client does not retry. Retry policy lives in ``ExecutionAdapter``.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str],
        sync_base_url: str = "https://fal.run",
        queue_base_url: str = "https://queue.fal.run",
        timeout: float = 120.0,
        probe_timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.sync_base_url = sync_base_url.rstrip("/")
        self.queue_base_url = queue_base_url.rstrip("/")
        self.probe_timeout = probe_timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._logger = logging.getLogger(__name__)

    def _headers(self, *, json_body: bool = False) -> dict[str, str]:
        if not self.api_key:
            raise ProviderNotConfiguredError()
        headers: dict[str, str] = {"Authorization": f"Key {self.api_key}"}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def sync_url(self, model_path: str) -> str:
        return f"{self.sync_base_url}/{model_path}"

    def queue_url(self, model_path: str) -> str:
        return f"{self.queue_base_url}/{model_path}"

    def status_url(self, model_path: str, request_id: str) -> str:
        return f"{self.queue_base_url}/{model_path}/requests/{request_id}/status"

    def result_url(self, model_path: str, request_id: str) -> str:
        return f"{self.queue_base_url}/{model_path}/requests/{request_id}"

    async def _send(self, method: str, url: str, *, label: str, **kwargs: Any) -> Any:
        try:
            r = await self._client.request(method, url, **kwargs)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = e.response.text[:_MAX_ERROR_BODY]
            raise ProviderHTTPError(
                f"Provider {label} failed: {e.response.status_code} - {body}",
                status_code=e.response.status_code,
                details=body,
            ) from e
        except httpx.HTTPError as e:
            raise ToolExecutionError(f"Provider {label} request error: {e}") from e
        try:
            return r.json()
        except ValueError as e:
            raise ToolExecutionError(f"Provider {label} returned a non-JSON body") from e

    async def run(self, model_path: str, payload: Dict[str, Any]) -> Any:
        url = self.sync_url(model_path)
        self._logger.debug("ProviderClient.run: POST %s", url)
        return await self._send("POST", url, label="run", headers=self._headers(json_body=True), json=payload)

    async def submit(self, model_path: str, payload: Dict[str, Any]) -> str:
        url = self.queue_url(model_path)
        self._logger.debug("ProviderClient.submit: POST %s", url)
        data = await self._send("POST", url, label="queue submit", headers=self._headers(json_body=True), json=payload)
        request_id = data.get("request_id") if isinstance(data, dict) else None
        if not request_id:
            raise ToolExecutionError("No request_id from queue submission")
        self._logger.debug("ProviderClient.submit: request_id=%s", request_id)
        return str(request_id)

    async def status(self, model_path: str, request_id: str) -> Dict[str, Any]:
        data = await self._send("GET", self.status_url(model_path, request_id), label="status check", headers=self._headers())
        return data if isinstance(data, dict) else {"status": data}

    async def result(self, model_path: str, request_id: str) -> Any:
        return await self._send("GET", self.result_url(model_path, request_id), label="result fetch", headers=self._headers())

    async def probe(self, model_path: str) -> int:
        """Return the HTTP status of a ``HEAD`` request; transport errors propagate."""
        r = await self._client.head(self.sync_url(model_path), timeout=self.probe_timeout)
        return r.status_code

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
