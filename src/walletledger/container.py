from dependency_injector import containers, providers

from walletledger.config import Settings
from walletledger.infra.blockchain.evm.receipts import ReceiptEnricher
from walletledger.infra.feeds.token_api import TokenApiClient
from walletledger.infra.http.rate_limited_client import RateLimitedClient
from walletledger.infra.http.upstream_status import UpstreamStatus
from walletledger.infra.price.cache import PriceCache
from walletledger.infra.price.defillama import DefiLlamaProvider
from walletledger.infra.price.geckoterminal import GeckoTerminalProvider
from walletledger.infra.price.service import PriceResolver
from walletledger.ledger.aggregator import LedgerAggregator


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(modules=["walletledger.api.deps"])

    settings = providers.Singleton(Settings)

    http_client = providers.Singleton(
        RateLimitedClient,
        rate_per_second=settings.provided.http_rate_per_second,
        timeout=settings.provided.http_timeout_seconds,
        retries=settings.provided.http_retries,
        backoff=settings.provided.http_backoff_seconds,
    )

    upstream_status = providers.Singleton(
        UpstreamStatus,
        cooldown_seconds=settings.provided.token_api_rate_limit_cooldown_seconds,
    )

    price_cache = providers.Singleton(
        PriceCache,
        ttl_seconds=settings.provided.price_cache_ttl_seconds,
        max_entries=settings.provided.price_cache_max_entries,
    )

    defillama = providers.Singleton(
        DefiLlamaProvider,
        http_client=http_client,
        base_url=settings.provided.defillama_base_url,
    )

    geckoterminal = providers.Singleton(
        GeckoTerminalProvider,
        http_client=http_client,
        base_url=settings.provided.geckoterminal_base_url,
        min_liquidity_usd=settings.provided.dex_min_liquidity_usd,
    )

    price_resolver = providers.Singleton(
        PriceResolver,
        cache=price_cache,
        defillama=defillama,
        geckoterminal=geckoterminal,
        history_window_seconds=settings.provided.price_history_window_seconds,
        bucket_seconds=settings.provided.price_bucket_seconds,
    )

    token_api = providers.Singleton(
        TokenApiClient,
        http_client=http_client,
        base_url=settings.provided.token_api_base_url,
        status=upstream_status,
        jwt=settings.provided.graph_token_api_jwt,
        api_key=settings.provided.graph_token_api_key,
        limit_max=settings.provided.token_api_limit_max,
        max_scan_rows=settings.provided.token_api_max_scan_rows,
    )

    receipt_enricher = providers.Singleton(
        ReceiptEnricher,
        http_client=http_client,
        rpc_urls=settings.provided.rpc_urls,
        default_url=settings.provided.rpc_url_default,
    )

    aggregator = providers.Singleton(
        LedgerAggregator,
        feed=token_api,
        enricher=receipt_enricher,
        resolver=price_resolver,
        status=upstream_status,
        default_limit=settings.provided.tx_default_limit,
        max_limit=settings.provided.tx_max_limit,
        fetch_window_cap=settings.provided.tx_fetch_window_cap,
        network_concurrency=settings.provided.network_fetch_concurrency,
        pricing_concurrency=settings.provided.pricing_concurrency,
    )
