"""Tests for DefiLlamaProvider with mocked HTTP."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from walletledger.domain.enums import Network, PriceSource
from walletledger.exceptions import ExternalServiceError
from walletledger.infra.price.defillama import DefiLlamaProvider, coin_id

USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


class TestCoinId:
    def test_token(self):
        assert coin_id(Network.MAINNET, USDC) == "ethereum:0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
        assert coin_id(Network.ARBITRUM_ONE, "0xabc") == "arbitrum:0xabc"

    def test_native(self):
        assert coin_id(Network.MAINNET, None) == "coingecko:ethereum"
        assert coin_id(Network.BASE, None) == "coingecko:ethereum"
        assert coin_id(Network.BSC, None) == "coingecko:binancecoin"
        assert coin_id(Network.AVALANCHE, None) == "coingecko:avalanche-2"
        assert coin_id(Network.POLYGON, None) == "coingecko:polygon-ecosystem-token"


class TestDefiLlamaProvider:
    @pytest.mark.asyncio
    async def test_historical_price(self):
        cid = "ethereum:0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
        mock_http = MagicMock()
        mock_http.request_json = AsyncMock(return_value={
            "coins": {cid: {"price": 0.9998, "symbol": "USDC", "timestamp": 1700000012, "confidence": 0.99}}
        })
        provider = DefiLlamaProvider(http_client=mock_http, base_url="https://coins.llama.fi")

        quote = await provider.get_historical(Network.MAINNET, USDC, 1700000000)

        assert quote is not None
        assert quote.price_usd == pytest.approx(0.9998)
        assert quote.source == PriceSource.DEFILLAMA
        assert quote.timestamp == 1700000012
        args, kwargs = mock_http.request_json.call_args
        assert args == ("GET", f"https://coins.llama.fi/prices/historical/1700000000/{cid}")
        assert kwargs["params"] == {"searchWidth": "30m"}

    @pytest.mark.asyncio
    async def test_current_native_price(self):
        mock_http = MagicMock()
        mock_http.request_json = AsyncMock(return_value={"coins": {"coingecko:ethereum": {"price": 3000}}})
        provider = DefiLlamaProvider(http_client=mock_http)

        quote = await provider.get_current(Network.OPTIMISM, None)

        assert quote is not None
        assert quote.price_usd == 3000.0
        assert mock_http.request_json.call_args.args[1].endswith("/prices/current/coingecko:ethereum")

    @pytest.mark.asyncio
    async def test_missing_coin_returns_none(self):
        mock_http = MagicMock()
        mock_http.request_json = AsyncMock(return_value={"coins": {}})
        provider = DefiLlamaProvider(http_client=mock_http)

        assert await provider.get_historical(Network.MAINNET, USDC, 1700000000) is None

    @pytest.mark.asyncio
    async def test_zero_price_is_absence(self):
        mock_http = MagicMock()
        mock_http.request_json = AsyncMock(return_value={"coins": {"coingecko:ethereum": {"price": 0}}})
        provider = DefiLlamaProvider(http_client=mock_http)

        assert await provider.get_current(Network.MAINNET, None) is None

    @pytest.mark.asyncio
    async def test_http_error_returns_none(self):
        mock_http = MagicMock()
        mock_http.request_json = AsyncMock(side_effect=ExternalServiceError("boom", status_code=502))
        provider = DefiLlamaProvider(http_client=mock_http)

        assert await provider.get_historical(Network.MAINNET, USDC, 1700000000) is None
