"""LedgerAggregator: fan out over networks, build priced and classified legs, merge and paginate.

Per network:
    transfers (fungible + NFT) -> normalize -> leading legs -> receipts -> prices -> classify -> gas USD

Networks are processed concurrently and fail independently. The merged list is
sorted by the ledger's total order and then sliced by cursor (or page) and limit.

Ascending walks read the whole time window from the newest-first feed; each
network then keeps only the legs the requested page can reach.
"""

import asyncio
import logging
import re
import time
from collections.abc import Callable

from walletledger.domain.enums import Network, SortOrder
from walletledger.domain.models import CursorPosition, Leg, LegPage, LegQuery, NetworkResult, PageParams, Receipt
from walletledger.exceptions import UpstreamUnavailableError
from walletledger.infra.blockchain.evm.receipts import ReceiptEnricher
from walletledger.infra.feeds.token_api import TokenApiClient
from walletledger.infra.http.upstream_status import UpstreamStatus
from walletledger.infra.price.service import PriceResolver
from walletledger.ledger.classifier import classify_by_transaction
from walletledger.ledger.cursor import decode_cursor, encode_cursor_from_leg, is_after_cursor, sort_legs
from walletledger.ledger.gas import gas_fee_native
from walletledger.ledger.normalizer import norm_addr, normalize_fungible_transfer, normalize_nft_transfer

logger = logging.getLogger(__name__)

_ADDRESS_RE = re.compile(r"^0x[0-9a-f]{40}$")


def is_evm_address(value: str | None) -> bool:
    return bool(value) and bool(_ADDRESS_RE.match(value.strip().lower()))


class LedgerAggregator:
    def __init__(
        self,
        feed: TokenApiClient,
        enricher: ReceiptEnricher,
        resolver: PriceResolver,
        status: UpstreamStatus,
        default_limit: int = 20,
        max_limit: int = 40,
        fetch_window_cap: int = 80,
        network_concurrency: int = 8,
        pricing_concurrency: int = 50,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._feed = feed
        self._enricher = enricher
        self._resolver = resolver
        self._status = status
        self._default_limit = default_limit
        self._max_limit = max_limit
        self._fetch_window_cap = fetch_window_cap
        self._network_concurrency = network_concurrency
        self._pricing_concurrency = pricing_concurrency
        self._clock = clock

    def _clamp_limit(self, limit: int | None) -> int:
        if limit is None:
            limit = self._default_limit
        return max(1, min(limit, self._max_limit))

    def _fetch_window(self, limit: int, page: int, has_cursor: bool) -> int:
        window = limit * (3 if has_cursor else page)
        return max(limit, min(window, self._fetch_window_cap))

    async def list_transaction_legs(self, query: LegQuery) -> LegPage:
        """Single entry point: one page of the wallet's merged ledger.

        Raises ValueError for a malformed wallet address, ConfigurationError when
        a requested network has no RPC endpoint, InvalidCursorError for a bad
        cursor and UpstreamUnavailableError when every network failed.
        """
        wallet = norm_addr(query.wallet)
        if not is_evm_address(wallet):
            raise ValueError(f"Invalid address: {query.wallet!r}")
        networks = list(dict.fromkeys(query.networks)) or list(Network)

        # fail fast, before any upstream call
        self._enricher.ensure_configured(networks)
        cursor = decode_cursor(query.cursor)

        limit = self._clamp_limit(query.limit)
        page = max(1, query.page)
        window = self._fetch_window(limit, page, cursor is not None)
        keep = limit if cursor is not None else page * limit
        from_time, to_time = self._time_bounds(query, cursor)

        sem = asyncio.Semaphore(self._network_concurrency)
        results: list[NetworkResult] = await asyncio.gather(*[
            self._process_network(
                sem,
                PageParams(
                    network=network, address=wallet, from_time=from_time, to_time=to_time,
                    page=1, limit=window,
                    # the feed answers newest-first
                    exhaust=query.order == SortOrder.ASC,
                ),
                query.order,
                cursor,
                keep,
            )
            for network in networks
        ])

        failed = {r.network.value: r.error for r in results if not r.ok}
        if failed and len(failed) == len(results):
            raise UpstreamUnavailableError(failed)

        merged: list[Leg] = []
        gas_usd_by_tx: dict[str, float] = {}
        for r in results:
            if r.ok:
                merged.extend(r.legs)
                gas_usd_by_tx.update(r.gas_usd_by_tx)

        ordered = sort_legs(merged, query.order)
        if cursor is not None:
            ordered = [leg for leg in ordered if is_after_cursor(leg, cursor, query.order)]
        else:
            ordered = ordered[(page - 1) * limit:]

        legs = ordered[:limit]
        page_hashes = {leg.tx_hash for leg in legs}
        logger.info(
            "Ledger %s: %d legs across %d networks (%d failed)",
            wallet, len(legs), len(networks), len(failed),
        )
        return LegPage(
            legs=legs,
            limit=limit,
            gas_usd_by_tx={h: usd for h, usd in gas_usd_by_tx.items() if h in page_hashes},
            next_cursor=encode_cursor_from_leg(legs[-1]) if legs else None,
            has_more=len(legs) == limit,
            failed_networks=failed,
            warnings=self._status.warnings(),
        )

    @staticmethod
    def _time_bounds(query: LegQuery, cursor: CursorPosition | None) -> tuple[int | None, int | None]:
        from_time, to_time = query.from_time, query.to_time
        if cursor is None:
            return from_time, to_time
        # Legs sharing the cursor's timestamp may still follow it, so the bound is inclusive.
        if query.order == SortOrder.ASC:
            from_time = cursor.timestamp if from_time is None else max(from_time, cursor.timestamp)
        else:
            to_time = cursor.timestamp if to_time is None else min(to_time, cursor.timestamp)
        return from_time, to_time

    @staticmethod
    def _leading_legs(
        legs: list[Leg], order: SortOrder, cursor: CursorPosition | None, keep: int
    ) -> list[Leg]:
        """The first `keep` legs past the cursor, widened to whole transactions.

        Transactions with nothing left past the cursor are dropped. Legs of a
        kept transaction stay together even when some were already delivered,
        so classification sees the full transaction.
        """
        ordered = sort_legs(legs, order)
        if cursor is not None:
            live = {leg.tx_hash for leg in ordered if is_after_cursor(leg, cursor, order)}
            ordered = [leg for leg in ordered if leg.tx_hash in live]

        kept: list[Leg] = []
        counted = 0
        for leg in ordered:
            if counted >= keep and leg.tx_hash != kept[-1].tx_hash:
                break
            kept.append(leg)
            if cursor is None or is_after_cursor(leg, cursor, order):
                counted += 1
        return kept

    async def _process_network(
        self,
        sem: asyncio.Semaphore,
        p: PageParams,
        order: SortOrder,
        cursor: CursorPosition | None,
        keep: int,
    ) -> NetworkResult:
        async with sem:
            try:
                legs, gas = await self._build_network_legs(p, order, cursor, keep)
            except Exception as e:
                logger.exception("Ledger build failed for %s on %s", p.address, p.network.value)
                return NetworkResult(network=p.network, error=str(e) or e.__class__.__name__)
        return NetworkResult(network=p.network, legs=legs, gas_usd_by_tx=gas)

    async def _build_network_legs(
        self,
        p: PageParams,
        order: SortOrder,
        cursor: CursorPosition | None,
        keep: int,
    ) -> tuple[list[Leg], dict[str, float]]:
        fungible_rows, nft_rows = await asyncio.gather(
            self._feed.fetch_fungible_transfers(p),
            self._feed.fetch_nft_transfers(p),
        )
        legs = [normalize_fungible_transfer(row, p.address, p.network) for row in fungible_rows]
        legs += [normalize_nft_transfer(row, p.address, p.network) for row in nft_rows]
        legs = self._leading_legs(legs, order, cursor, keep)
        if not legs:
            return [], {}

        receipts = await self._enricher.fetch_receipts(p.network, [leg.tx_hash for leg in legs])
        legs = [
            leg.model_copy(update={"status": receipts[leg.tx_hash].status}) if leg.tx_hash in receipts else leg
            for leg in legs
        ]
        legs = await self._price_legs(p.network, legs)
        legs = classify_by_transaction(legs)
        gas = await self._gas_usd_by_tx(p.network, legs, receipts)
        return legs, gas

    async def _price_legs(self, network: Network, legs: list[Leg]) -> list[Leg]:
        sem = asyncio.Semaphore(self._pricing_concurrency)
        keys = list(dict.fromkeys((leg.asset.contract, leg.timestamp) for leg in legs))

        async def price(contract: str | None, ts: int) -> float | None:
            async with sem:
                quote = await self._resolver.get_price_at(network, contract, ts)
            return quote.price_usd if quote is not None else None

        prices = dict(zip(keys, await asyncio.gather(*[price(c, ts) for c, ts in keys])))

        priced: list[Leg] = []
        for leg in legs:
            unit = prices.get((leg.asset.contract, leg.timestamp))
            if unit is None:
                priced.append(leg)
            else:
                priced.append(leg.model_copy(update={"amount_usd_at_tx": leg.amount * unit}))
        return priced

    async def _gas_usd_by_tx(
        self, network: Network, legs: list[Leg], receipts: dict[str, Receipt]
    ) -> dict[str, float]:
        first_ts: dict[str, int] = {}
        for leg in legs:
            first_ts.setdefault(leg.tx_hash, leg.timestamp)

        now = int(self._clock())
        gas: dict[str, float] = {}
        for tx_hash, ts in first_ts.items():
            receipt = receipts.get(tx_hash)
            if receipt is None:
                continue
            fee = gas_fee_native(receipt)
            if fee <= 0:
                continue
            quote = await self._resolver.get_price_at(network, None, min(ts, now))
            if quote is None:
                continue
            gas[tx_hash] = fee * quote.price_usd
        return gas
