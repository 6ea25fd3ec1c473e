"""The Graph Token API client: per-network fungible and NFT transfer pages."""

import asyncio
import logging
from typing import Any

from walletledger.domain.models import PageParams
from walletledger.exceptions import ExternalServiceError
from walletledger.infra.feeds.types import TokenApiNftTransfer, TokenApiTransfer
from walletledger.infra.http.rate_limited_client import RateLimitedClient
from walletledger.infra.http.upstream_status import UpstreamStatus

logger = logging.getLogger(__name__)


def _query(params: dict[str, Any]) -> dict[str, str]:
    return {k: str(v) for k, v in params.items() if v is not None and v != ""}


def _rows(payload: Any) -> list[dict]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, list):
            return data
    return []


def _transfer_key(t: TokenApiTransfer) -> tuple:
    if t.log_index is not None:
        return (t.transaction_id, t.log_index, t.contract, t.amount)
    return (t.transaction_id, (t.from_ or "").lower(), (t.to or "").lower(), t.contract, t.amount)


class TokenApiClient:
    """Fetches transfer rows for one wallet on one network.

    Each logical page is filled with as many upstream calls as needed
    (`limit_max` rows per call) until `PageParams.limit` rows are collected
    or the feed returns a short page. The feed answers newest-first, so a
    caller that needs the oldest rows of a window sets `PageParams.exhaust`
    and the whole window is read, up to `max_scan_rows`.
    """

    def __init__(
        self,
        http_client: RateLimitedClient,
        base_url: str,
        status: UpstreamStatus,
        jwt: str = "",
        api_key: str = "",
        limit_max: int = 40,
        max_scan_rows: int = 10_000,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._status = status
        self._jwt = jwt
        self._api_key = api_key
        self._limit_max = max(1, limit_max)
        self._max_scan_rows = max(1, max_scan_rows)

    def _headers(self) -> dict[str, str]:
        # Exactly one auth mechanism; JWT wins when both are configured.
        headers = {"content-type": "application/json"}
        if self._jwt:
            headers["authorization"] = f"Bearer {self._jwt}"
        elif self._api_key:
            headers["x-api-key"] = self._api_key
        return headers

    async def _get_rows(self, path: str, params: dict[str, Any]) -> list[dict]:
        try:
            payload = await self._http.request_json(
                "GET", f"{self._base_url}{path}", params=_query(params), headers=self._headers()
            )
        except ExternalServiceError as e:
            if e.status_code == 429:
                self._status.mark_rate_limited()
            raise
        return _rows(payload)

    async def _collect(self, path: str, p: PageParams, extra: dict[str, Any]) -> list[dict]:
        target = self._max_scan_rows if p.exhaust else max(1, p.limit)
        page = max(1, p.page)
        rows: list[dict] = []
        while len(rows) < target:
            if p.exhaust:
                limit_this_call = self._limit_max
            else:
                limit_this_call = min(self._limit_max, target - len(rows))
            chunk = await self._get_rows(path, {
                "network": p.network.value,
                "start_time": p.from_time,
                "end_time": p.to_time,
                **extra,
                "page": page,
                "limit": limit_this_call,
            })
            if not chunk:
                break
            rows.extend(chunk)
            if len(chunk) < limit_this_call:
                break
            page += 1
        else:
            if p.exhaust:
                logger.warning(
                    "Token API %s%s: stopped scanning %s after %d rows",
                    self._base_url, path, p.network.value, len(rows),
                )
        return rows

    async def fetch_fungible_transfers(self, p: PageParams) -> list[TokenApiTransfer]:
        """Outbound and inbound fungible/native transfers, outbound first.

        A self-transfer matches both queries; its inbound copy is dropped.
        """
        out_rows, in_rows = await asyncio.gather(
            self._collect("/evm/transfers", p, {"from_address": p.address}),
            self._collect("/evm/transfers", p, {"to_address": p.address}),
        )
        outbound = [TokenApiTransfer.model_validate(row) for row in out_rows]
        sent = {_transfer_key(t) for t in outbound}
        inbound = [t for t in (TokenApiTransfer.model_validate(row) for row in in_rows) if _transfer_key(t) not in sent]
        transfers = outbound + inbound
        logger.debug("Token API %s: %d fungible rows for %s", p.network.value, len(transfers), p.address)
        return transfers

    async def fetch_nft_transfers(self, p: PageParams) -> list[TokenApiNftTransfer]:
        rows = await self._collect("/evm/nft/transfers", p, {"address": p.address})
        return [TokenApiNftTransfer.model_validate(row) for row in rows]
