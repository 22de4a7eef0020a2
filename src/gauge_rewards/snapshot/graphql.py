from __future__ import annotations

from typing import Any

import backoff
import httpx

from gauge_rewards.errors import TransientNetworkError
from gauge_rewards.observability.logging import get_logger
from gauge_rewards.observability.redaction import redact_url
from gauge_rewards.types import JsonDict

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429, 500, 502, 503, 504})


class SnapshotHttpClient:
    """Async JSON client shared by the hub, subgraph and score endpoints.

    Every request carries a timeout. Transport failures, retryable HTTP
    statuses and GraphQL/JSON-RPC error payloads are retried with
    exponential backoff and full jitter; once ``max_tries`` is exhausted the
    last ``TransientNetworkError`` propagates.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 30.0,
        max_tries: int = 4,
        backoff_factor: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout_seconds,
            transport=transport,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        self._logger = get_logger("snapshot_http")
        self._post = backoff.on_exception(
            backoff.expo,
            TransientNetworkError,
            max_tries=max_tries,
            jitter=backoff.full_jitter,
            giveup=lambda exc: not getattr(exc, "retryable", True),
            on_backoff=self._log_backoff,
            factor=backoff_factor,
        )(self._post_once)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def post_json(self, url: str, payload: JsonDict) -> JsonDict:
        return await self._post(url, payload)

    async def query(self, url: str, query: str, variables: JsonDict | None = None) -> JsonDict:
        body = await self.post_json(url, {"query": query, "variables": variables or {}})
        data = body.get("data")
        if not isinstance(data, dict):
            raise TransientNetworkError(f"{redact_url(url)} returned no data", retryable=False)
        return data

    async def _post_once(self, url: str, payload: JsonDict) -> JsonDict:
        safe_url = redact_url(url)
        try:
            response = await self._client.post(url, json=payload)
        except httpx.TimeoutException as exc:
            raise TransientNetworkError(f"request to {safe_url} timed out") from exc
        except httpx.TransportError as exc:
            raise TransientNetworkError(f"request to {safe_url} failed: {exc}") from exc

        if response.status_code in RETRYABLE_STATUS_CODES:
            raise TransientNetworkError(f"{safe_url} responded with HTTP {response.status_code}")
        if response.is_error:
            raise TransientNetworkError(
                f"{safe_url} responded with HTTP {response.status_code}",
                retryable=False,
            )

        try:
            body: Any = response.json()
        except ValueError as exc:
            raise TransientNetworkError(f"{safe_url} returned invalid JSON") from exc

        if not isinstance(body, dict):
            raise TransientNetworkError(f"{safe_url} returned an unexpected payload", retryable=False)

        errors = body.get("errors") or body.get("error")
        if errors:
            raise TransientNetworkError(f"{safe_url} returned errors: {errors}")
        return body

    def _log_backoff(self, details: dict[str, Any]) -> None:
        self._logger.warning(
            "request_retry",
            tries=details.get("tries"),
            wait_seconds=round(float(details.get("wait") or 0.0), 3),
            error=str(details.get("exception", "")),
        )
