"""DefiLlama coins API provider: current and historical USD prices by chain:contract."""

import logging

from walletledger.domain.enums import Network, PriceSource
from walletledger.domain.models import PriceQuote
from walletledger.exceptions import ExternalServiceError
from walletledger.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

BASE_URL = "https://coins.llama.fi"

# Network -> DefiLlama chain key
CHAIN_KEYS: dict[Network, str] = {
    Network.MAINNET: "ethereum",
    Network.BSC: "bsc",
    Network.POLYGON: "polygon",
    Network.OPTIMISM: "optimism",
    Network.BASE: "base",
    Network.ARBITRUM_ONE: "arbitrum",
    Network.AVALANCHE: "avax",
    Network.UNICHAIN: "unichain",
}

# Native gas token -> coingecko id. L2s pay gas in ETH.
NATIVE_COIN_IDS: dict[Network, str] = {
    Network.MAINNET: "coingecko:ethereum",
    Network.BSC: "coingecko:binancecoin",
    Network.POLYGON: "coingecko:polygon-ecosystem-token",
    Network.OPTIMISM: "coingecko:ethereum",
    Network.BASE: "coingecko:ethereum",
    Network.ARBITRUM_ONE: "coingecko:ethereum",
    Network.AVALANCHE: "coingecko:avalanche-2",
    Network.UNICHAIN: "coingecko:ethereum",
}


def coin_id(network: Network, contract: str | None) -> str | None:
    """`chain:contract` for tokens, `coingecko:<id>` for the native asset."""
    if contract is None:
        return NATIVE_COIN_IDS.get(network)
    chain = CHAIN_KEYS.get(network)
    if chain is None:
        return None
    return f"{chain}:{contract.lower()}"


class DefiLlamaProvider:
    """Primary price source. Errors and missing coins both come back as None."""

    def __init__(
        self,
        http_client: RateLimitedClient,
        base_url: str = BASE_URL,
        search_width: str = "30m",
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._search_width = search_width

    async def get_current(self, network: Network, contract: str | None) -> PriceQuote | None:
        cid = coin_id(network, contract)
        if cid is None:
            return None
        return await self._fetch(f"{self._base_url}/prices/current/{cid}", cid, params=None)

    async def get_historical(self, network: Network, contract: str | None, timestamp: int) -> PriceQuote | None:
        cid = coin_id(network, contract)
        if cid is None:
            return None
        return await self._fetch(
            f"{self._base_url}/prices/historical/{timestamp}/{cid}",
            cid,
            params={"searchWidth": self._search_width},
        )

    async def _fetch(self, url: str, cid: str, params: dict | None) -> PriceQuote | None:
        try:
            data = await self._http.request_json("GET", url, params=params)
        except ExternalServiceError as exc:
            logger.warning("DefiLlama lookup failed for %s: %s", cid, exc)
            return None

        coins = data.get("coins") if isinstance(data, dict) else None
        entry = coins.get(cid) if isinstance(coins, dict) else None
        if not isinstance(entry, dict):
            return None

        price = entry.get("price")
        if not isinstance(price, (int, float)) or isinstance(price, bool) or price <= 0:
            return None
        ts = entry.get("timestamp")
        return PriceQuote(
            price_usd=float(price),
            source=PriceSource.DEFILLAMA,
            timestamp=int(ts) if isinstance(ts, (int, float)) else None,
        )
