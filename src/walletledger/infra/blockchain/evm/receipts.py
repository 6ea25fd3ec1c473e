"""Batched eth_getTransactionReceipt lookups: tx status and gas cost inputs."""

import logging
from collections.abc import Iterable
from typing import Any

from walletledger.domain.enums import LegStatus, Network
from walletledger.domain.models import Receipt
from walletledger.exceptions import ConfigurationError, ExternalServiceError
from walletledger.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

_STATUS = {"0x1": LegStatus.SUCCESS, "0x0": LegStatus.REVERTED}


def _hex_to_int(value: Any) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value:
        return int(value, 16) if value.lower().startswith("0x") else int(value)
    return 0


def parse_receipt(raw: Any) -> Receipt:
    """Missing or undecodable receipts map to an unknown status with zero gas."""
    if not isinstance(raw, dict):
        return Receipt()
    try:
        return Receipt(
            status=_STATUS.get(str(raw.get("status", "")).lower(), LegStatus.UNKNOWN),
            gas_used=_hex_to_int(raw.get("gasUsed")),
            effective_gas_price=_hex_to_int(raw.get("effectiveGasPrice")),
        )
    except ValueError:
        logger.warning("Undecodable receipt: %s", raw)
        return Receipt()


class ReceiptEnricher:
    """One JSON-RPC batch per network page.

    A failed batch raises; there is no per-hash isolation, so a dead endpoint
    fails every hash for that network.
    """

    def __init__(
        self,
        http_client: RateLimitedClient,
        rpc_urls: dict[str, str] | None = None,
        default_url: str = "",
    ) -> None:
        self._http = http_client
        self._rpc_urls = dict(rpc_urls or {})
        self._default_url = default_url

    def rpc_url_for(self, network: Network) -> str:
        url = self._rpc_urls.get(network.value) or self._default_url
        if not url:
            raise ConfigurationError(
                f"No RPC URL configured for {network.value} (set RPC_URLS or RPC_URL_DEFAULT)"
            )
        return url

    def ensure_configured(self, networks: Iterable[Network]) -> None:
        """Fail fast before any upstream call when an endpoint is missing."""
        for network in networks:
            self.rpc_url_for(network)

    async def fetch_receipts(self, network: Network, tx_hashes: list[str]) -> dict[str, Receipt]:
        hashes = list(dict.fromkeys(tx_hashes))
        if not hashes:
            return {}

        url = self.rpc_url_for(network)
        body = [
            {"jsonrpc": "2.0", "id": i + 1, "method": "eth_getTransactionReceipt", "params": [h]}
            for i, h in enumerate(hashes)
        ]
        payload = await self._http.request_json("POST", url, json=body)
        if not isinstance(payload, list):
            raise ExternalServiceError(f"RPC receipts {network.value}: expected a batch response")

        by_id: dict[int, Any] = {}
        for item in payload:
            if isinstance(item, dict) and isinstance(item.get("id"), int):
                by_id[item["id"]] = item.get("result")

        receipts = {h: parse_receipt(by_id.get(i + 1)) for i, h in enumerate(hashes)}
        logger.debug("RPC %s: %d receipts (%d unknown)", network.value, len(receipts),
                     sum(1 for r in receipts.values() if r.status == LegStatus.UNKNOWN))
        return receipts
