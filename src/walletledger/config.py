from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Token API (transfer feed)
    token_api_base_url: str = "https://token-api.thegraph.com/v1"
    graph_token_api_jwt: str = ""
    graph_token_api_key: str = ""
    token_api_limit_max: int = 40  # rows per upstream call
    token_api_max_scan_rows: int = 10_000  # per query when an ascending walk reads a whole window
    token_api_rate_limit_cooldown_seconds: int = 300

    # On-chain RPC: per-network endpoints, e.g. RPC_URLS='{"mainnet": "https://..."}'
    rpc_urls: dict[str, str] = {}
    rpc_url_default: str = ""

    # Price sources
    defillama_base_url: str = "https://coins.llama.fi"
    geckoterminal_base_url: str = "https://api.geckoterminal.com/api/v2"
    dex_min_liquidity_usd: float = 50_000.0
    price_history_window_seconds: int = 1800  # +/- around the target timestamp
    price_bucket_seconds: int = 300  # current-price cache granularity
    price_cache_ttl_seconds: int = 86_400
    price_cache_max_entries: int = 50_000

    # HTTP
    http_timeout_seconds: float = 15.0
    http_retries: int = 2
    http_backoff_seconds: float = 0.5
    http_rate_per_second: float = 10.0

    # Ledger
    tx_default_limit: int = 20
    tx_max_limit: int = 40
    tx_fetch_window_cap: int = 80
    network_fetch_concurrency: int = 8
    pricing_concurrency: int = 50
    spam_filter_mode: str = "soft"

    debug: bool = False

    class Config:
        env_file = ".env"


settings = Settings()
