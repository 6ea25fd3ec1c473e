"""PriceResolver: DefiLlama first, GeckoTerminal pools as fallback, both behind PriceCache."""

import logging
import time
from collections.abc import Awaitable, Callable

from walletledger.domain.enums import Network
from walletledger.domain.models import DexPair, PriceQuote
from walletledger.infra.price.cache import PriceCache
from walletledger.infra.price.defillama import DefiLlamaProvider, coin_id
from walletledger.infra.price.geckoterminal import WRAPPED_NATIVE, GeckoTerminalProvider

logger = logging.getLogger(__name__)


class PriceResolver:
    """Unit USD price for (network, contract) now or at a timestamp. None means unknown."""

    def __init__(
        self,
        cache: PriceCache,
        defillama: DefiLlamaProvider | None = None,
        geckoterminal: GeckoTerminalProvider | None = None,
        history_window_seconds: int = 1800,
        bucket_seconds: int = 300,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._cache = cache
        self._defillama = defillama
        self._geckoterminal = geckoterminal
        self._window = history_window_seconds
        self._bucket = bucket_seconds
        self._clock = clock

    async def get_price_at(self, network: Network, contract: str | None, timestamp: int) -> PriceQuote | None:
        contract = contract.lower() if contract else None
        ident = coin_id(network, contract) or self._dex_ident(network, contract)

        async def fetch() -> PriceQuote | None:
            if self._defillama is not None:
                quote = await self._guard(
                    "defillama", ident, self._defillama.get_historical(network, contract, timestamp)
                )
                if quote is not None:
                    return quote
            pair = await self._pair_for(network, contract)
            if pair is None or self._geckoterminal is None:
                return None
            return await self._guard(
                "geckoterminal", pair.pair_id,
                self._geckoterminal.bar_close(network, pair, timestamp, self._window),
            )

        return await self._cache.get_or_fetch(("historical", timestamp, ident), fetch)

    async def get_current_price(self, network: Network, contract: str | None) -> PriceQuote | None:
        contract = contract.lower() if contract else None
        bucket = int(self._clock()) // self._bucket

        cid = coin_id(network, contract)
        if cid is not None and self._defillama is not None:
            quote = await self._cache.get_or_fetch(
                ("current", cid, bucket),
                lambda: self._guard("defillama", cid, self._defillama.get_current(network, contract)),
            )
            if quote is not None:
                return quote

        pair = await self._pair_for(network, contract)
        if pair is None or self._geckoterminal is None:
            return None
        return await self._cache.get_or_fetch(
            ("current", pair.pair_id, bucket),
            lambda: self._guard("geckoterminal", pair.pair_id, self._geckoterminal.latest_close(network, pair)),
        )

    async def _pair_for(self, network: Network, contract: str | None) -> DexPair | None:
        if self._geckoterminal is None:
            return None
        token = contract or WRAPPED_NATIVE.get(network)
        if token is None:
            return None
        return await self._cache.get_or_fetch(
            ("pair", network.value, token),
            lambda: self._guard("geckoterminal", token, self._geckoterminal.best_pair(network, token)),
        )

    @staticmethod
    def _dex_ident(network: Network, contract: str | None) -> str:
        return f"{network.value}:{contract or 'native'}"

    @staticmethod
    async def _guard(source: str, ident: str, call: Awaitable):
        try:
            return await call
        except Exception:
            logger.exception("Price lookup via %s failed for %s", source, ident)
            return None
