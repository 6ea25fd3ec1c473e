"""GeckoTerminal DEX fallback: pick a pool for a token, read its 5-minute OHLCV bars."""

import logging
from typing import Any

from walletledger.domain.enums import Network, PriceSource
from walletledger.domain.models import DexPair, PriceQuote
from walletledger.exceptions import ExternalServiceError
from walletledger.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

BASE_URL = "https://api.geckoterminal.com/api/v2"
BAR_SECONDS = 300

NETWORK_SLUGS: dict[Network, str] = {
    Network.MAINNET: "eth",
    Network.BSC: "bsc",
    Network.POLYGON: "polygon_pos",
    Network.OPTIMISM: "optimism",
    Network.BASE: "base",
    Network.ARBITRUM_ONE: "arbitrum",
    Network.AVALANCHE: "avax",
    Network.UNICHAIN: "unichain",
}

# Native assets have no pools of their own; price them through the wrapped token.
WRAPPED_NATIVE: dict[Network, str] = {
    Network.MAINNET: "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
    Network.BSC: "0xbb4cdb9cbd36b01bd1cbaebf2de08d9173bc095c",
    Network.POLYGON: "0x0d500b1d8e8ef31e21c99d1db9a6444d3adf1270",
    Network.OPTIMISM: "0x4200000000000000000000000000000000000006",
    Network.BASE: "0x4200000000000000000000000000000000000006",
    Network.ARBITRUM_ONE: "0x82af49447d8a07e3bd95bd0d56f35241523fbab1",
    Network.AVALANCHE: "0xb31f66aa3c1e785363f0875a1b74e27b85fd66c7",
    Network.UNICHAIN: "0x4200000000000000000000000000000000000006",
}


def _to_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def select_best_pair(pools: list[dict], min_liquidity_usd: float) -> DexPair | None:
    """Highest `reserve_in_usd` wins; ties keep the first pool seen.

    Pools under the liquidity floor are only considered when no pool clears it.
    """
    liquid: DexPair | None = None
    illiquid: DexPair | None = None
    for pool in pools:
        attrs = pool.get("attributes") or {}
        address = attrs.get("address")
        reserve = _to_float(attrs.get("reserve_in_usd"))
        if not address or reserve is None:
            continue
        is_liquid = reserve >= min_liquidity_usd
        pair = DexPair(
            pair_id=str(pool.get("id") or address),
            address=str(address).lower(),
            liquidity_usd=reserve,
            liquid=is_liquid,
        )
        if is_liquid:
            if liquid is None or reserve > liquid.liquidity_usd:
                liquid = pair
        elif illiquid is None or reserve > illiquid.liquidity_usd:
            illiquid = pair
    return liquid or illiquid


def _normalize_ts(ts: float) -> int:
    # Some feeds return milliseconds.
    return int(ts / 1000) if ts > 1e12 else int(ts)


def closest_bar_close(bars: list[list], timestamp: int, window_seconds: int) -> tuple[int, float] | None:
    """Close price of the bar nearest `timestamp`, or None if none is within the window."""
    best: tuple[int, float] | None = None
    best_dist: int | None = None
    for bar in bars:
        if not isinstance(bar, (list, tuple)) or len(bar) < 5:
            continue
        ts = _to_float(bar[0])
        close = _to_float(bar[4])
        if ts is None or close is None or close <= 0:
            continue
        bar_ts = _normalize_ts(ts)
        dist = abs(bar_ts - timestamp)
        if dist > window_seconds:
            continue
        if best_dist is None or dist < best_dist:
            best, best_dist = (bar_ts, close), dist
    return best


class GeckoTerminalProvider:
    def __init__(
        self,
        http_client: RateLimitedClient,
        base_url: str = BASE_URL,
        min_liquidity_usd: float = 50_000.0,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._min_liquidity_usd = min_liquidity_usd

    async def best_pair(self, network: Network, token: str) -> DexPair | None:
        slug = NETWORK_SLUGS.get(network)
        if slug is None:
            return None
        url = f"{self._base_url}/networks/{slug}/tokens/{token.lower()}/pools"
        data = await self._get(url, params=None)
        pools = data.get("data") if isinstance(data, dict) else None
        if not isinstance(pools, list):
            return None
        pair = select_best_pair([p for p in pools if isinstance(p, dict)], self._min_liquidity_usd)
        if pair is not None and not pair.liquid:
            logger.debug("GeckoTerminal: only illiquid pools for %s on %s", token, network.value)
        return pair

    async def bar_close(self, network: Network, pair: DexPair, timestamp: int, window_seconds: int) -> PriceQuote | None:
        """Close of the 5-minute bar nearest `timestamp` (within +/- window)."""
        limit = (2 * window_seconds) // BAR_SECONDS + 1
        bars = await self._ohlcv(network, pair, before=timestamp + window_seconds, limit=limit)
        hit = closest_bar_close(bars, timestamp, window_seconds)
        if hit is None:
            return None
        bar_ts, close = hit
        return PriceQuote(price_usd=close, source=PriceSource.GECKOTERMINAL, timestamp=bar_ts)

    async def latest_close(self, network: Network, pair: DexPair) -> PriceQuote | None:
        bars = await self._ohlcv(network, pair, before=None, limit=1)
        latest: tuple[int, float] | None = None
        for bar in bars:
            if not isinstance(bar, (list, tuple)) or len(bar) < 5:
                continue
            ts, close = _to_float(bar[0]), _to_float(bar[4])
            if ts is None or close is None or close <= 0:
                continue
            bar_ts = _normalize_ts(ts)
            if latest is None or bar_ts > latest[0]:
                latest = (bar_ts, close)
        if latest is None:
            return None
        return PriceQuote(price_usd=latest[1], source=PriceSource.GECKOTERMINAL, timestamp=latest[0])

    async def _ohlcv(self, network: Network, pair: DexPair, before: int | None, limit: int) -> list:
        slug = NETWORK_SLUGS.get(network)
        if slug is None:
            return []
        params: dict[str, Any] = {"aggregate": 5, "limit": limit}
        if before is not None:
            params["before_timestamp"] = before
        url = f"{self._base_url}/networks/{slug}/pools/{pair.address}/ohlcv/minute"
        data = await self._get(url, params=params)
        try:
            bars = data["data"]["attributes"]["ohlcv_list"]
        except (KeyError, TypeError):
            return []
        return bars if isinstance(bars, list) else []

    async def _get(self, url: str, params: dict | None) -> Any:
        try:
            return await self._http.request_json("GET", url, params=params)
        except ExternalServiceError as exc:
            logger.warning("GeckoTerminal request failed: %s", exc)
            return None
