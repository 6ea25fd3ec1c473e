import asyncio
import logging
import time
from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_incrementing

from walletledger.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


class TransientHTTPError(ExternalServiceError):
    """A retryable status code. Surfaces to callers only once retries are exhausted."""


class RateLimitedClient:
    """Async HTTP client with simple interval-based rate limiting and bounded retries."""

    def __init__(
        self,
        rate_per_second: float = 5.0,
        timeout: float = 30.0,
        retries: int = 2,
        backoff: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._min_interval = 1.0 / rate_per_second
        self._last_request_time = 0.0
        self._lock = asyncio.Lock()
        self._retries = retries
        self._backoff = backoff
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def _wait_for_slot(self) -> None:
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_request_time
            if elapsed < self._min_interval:
                await asyncio.sleep(self._min_interval - elapsed)
            self._last_request_time = time.monotonic()

    async def get(self, url: str, params: dict | None = None, headers: dict | None = None) -> httpx.Response:
        await self._wait_for_slot()
        return await self._client.get(url, params=params, headers=headers)

    async def post(
        self, url: str, json: dict | list | None = None, headers: dict | None = None
    ) -> httpx.Response:
        await self._wait_for_slot()
        return await self._client.post(url, json=json, headers=headers)

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        params: dict | None = None,
        json: dict | list | None = None,
        headers: dict | None = None,
    ) -> Any:
        """Send a request and decode the JSON body.

        Retries transport errors and RETRY_STATUSES with linear backoff
        (backoff, 2*backoff, ...). Raises ExternalServiceError on a final
        non-2xx response or an undecodable body.
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception_type((TransientHTTPError, httpx.TransportError)),
            stop=stop_after_attempt(self._retries + 1),
            wait=wait_incrementing(start=self._backoff, increment=self._backoff),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    if method == "POST":
                        response = await self.post(url, json=json, headers=headers)
                    else:
                        response = await self.get(url, params=params, headers=headers)
                    if response.status_code in RETRY_STATUSES:
                        logger.info(
                            "%s %s returned %d (attempt %d)",
                            method, url, response.status_code, attempt.retry_state.attempt_number,
                        )
                        raise TransientHTTPError(
                            f"{method} {url} returned {response.status_code}",
                            status_code=response.status_code,
                        )
        except httpx.TransportError as exc:
            raise ExternalServiceError(f"{method} {url} failed: {exc}") from exc

        if response.status_code >= 400:
            raise ExternalServiceError(
                f"{method} {url} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ExternalServiceError(f"{method} {url} returned invalid JSON") from exc

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RateLimitedClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
