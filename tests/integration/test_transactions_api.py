from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from walletledger.api.deps import get_aggregator
from walletledger.api.main import app
from walletledger.domain.enums import LegClass, LegDirection, LegKind, Network, SortOrder
from walletledger.domain.models import LegPage, UpstreamWarnings
from walletledger.exceptions import ConfigurationError, InvalidCursorError, UpstreamUnavailableError

WALLET = "0x1111111111111111111111111111111111111111"


@pytest.fixture()
def aggregator():
    return MagicMock()


@pytest.fixture()
async def client(aggregator):
    app.dependency_overrides[get_aggregator] = lambda: aggregator
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def _page(legs, **kwargs) -> LegPage:
    defaults = dict(limit=20, gas_usd_by_tx={"0xaaa": 1.25}, next_cursor="abc", has_more=False)
    defaults.update(kwargs)
    return LegPage(legs=legs, **defaults)


class TestListTransactionLegs:
    async def test_returns_legs_and_meta(self, client, aggregator, make_leg):
        legs = [
            make_leg(LegDirection.OUT, symbol="0x0xUSDC", amount_usd_at_tx=10.0, leg_class=LegClass.SWAP_OUT),
            make_leg(LegDirection.IN, LegKind.NATIVE, symbol="ETH", log_index=1, leg_class=LegClass.SWAP_IN),
        ]
        aggregator.list_transaction_legs = AsyncMock(return_value=_page(legs))

        res = await client.get(f"/api/transactions/{WALLET}", params={"spam_filter": "off"})

        assert res.status_code == 200
        body = res.json()
        assert len(body["data"]) == 2
        assert body["data"][0]["class"] == "swap_out"
        assert body["data"][0]["display_symbol"] == "0xUSDC"
        assert body["data"][0]["asset"]["symbol"] == "0x0xUSDC"
        assert body["data"][1]["kind"] == "native"
        assert body["meta"]["gas_usd_by_tx"] == {"0xaaa": 1.25}
        assert body["meta"]["next_cursor"] == "abc"
        assert body["meta"]["has_more"] is False
        assert body["meta"]["failed_networks"] == {}
        assert body["meta"]["warnings"]["token_api_rate_limited"] is False
        assert body["summary"] is None
        assert body["page"] == 1
        assert body["limit"] == 20

    async def test_query_forwarded(self, client, aggregator):
        aggregator.list_transaction_legs = AsyncMock(return_value=_page([]))

        res = await client.get(
            f"/api/transactions/{WALLET}",
            params={
                "networks": "base,bsc",
                "from": "2023-11-14T22:13:20Z",
                "to": "1700003600",
                "limit": 5,
                "cursor": "tok",
                "order": "desc",
            },
        )

        assert res.status_code == 200
        query = aggregator.list_transaction_legs.await_args.args[0]
        assert query.wallet == WALLET
        assert query.networks == [Network.BASE, Network.BSC]
        assert query.from_time == 1_700_000_000
        assert query.to_time == 1_700_003_600
        assert query.limit == 5
        assert query.cursor == "tok"
        assert query.order == SortOrder.DESC

    async def test_spam_filtered_by_default(self, client, aggregator, make_leg):
        legs = [make_leg(symbol="CLAIM AIRDROP NOW"), make_leg(symbol="USDC", log_index=1)]
        aggregator.list_transaction_legs = AsyncMock(return_value=_page(legs))

        res = await client.get(f"/api/transactions/{WALLET}")

        assert [leg["asset"]["symbol"] for leg in res.json()["data"]] == ["USDC"]

    async def test_min_usd_and_summary(self, client, aggregator, make_leg):
        legs = [
            make_leg(amount_usd_at_tx=0.01, tx_hash="0xdust"),
            make_leg(amount_usd_at_tx=50.0, leg_class=LegClass.TRANSFER_IN, log_index=1),
        ]
        aggregator.list_transaction_legs = AsyncMock(return_value=_page(legs))

        res = await client.get(f"/api/transactions/{WALLET}", params={"min_usd": 1, "summary": "true"})

        body = res.json()
        assert len(body["data"]) == 1
        assert body["summary"]["kpi"]["total_usd_in"] == 50.0
        assert body["summary"]["kpi"]["net_usd"] == pytest.approx(48.75)
        assert body["summary"]["by_class"]["transfer_in"]["count"] == 1

    async def test_warnings_surface(self, client, aggregator):
        warnings = UpstreamWarnings(token_api_rate_limited=True, token_api_retry_after_ms=120_000)
        aggregator.list_transaction_legs = AsyncMock(return_value=_page([], warnings=warnings))

        res = await client.get(f"/api/transactions/{WALLET}")

        assert res.json()["meta"]["warnings"] == {"token_api_rate_limited": True, "token_api_retry_after_ms": 120000}


class TestErrors:
    async def test_invalid_network(self, client, aggregator):
        aggregator.list_transaction_legs = AsyncMock()
        res = await client.get(f"/api/transactions/{WALLET}", params={"networks": "solana"})
        assert res.status_code == 400
        assert "solana" in res.json()["detail"]
        aggregator.list_transaction_legs.assert_not_awaited()

    async def test_invalid_time(self, client, aggregator):
        aggregator.list_transaction_legs = AsyncMock()
        res = await client.get(f"/api/transactions/{WALLET}", params={"from": "yesterday"})
        assert res.status_code == 400

    async def test_invalid_address(self, client, aggregator):
        aggregator.list_transaction_legs = AsyncMock(side_effect=ValueError("Invalid address: '0x1'"))
        res = await client.get("/api/transactions/0x1")
        assert res.status_code == 400

    async def test_invalid_cursor(self, client, aggregator):
        aggregator.list_transaction_legs = AsyncMock(side_effect=InvalidCursorError("Cursor is not a valid token"))
        res = await client.get(f"/api/transactions/{WALLET}", params={"cursor": "bad"})
        assert res.status_code == 400
        assert res.json()["detail"] == "Cursor is not a valid token"

    async def test_upstream_unavailable(self, client, aggregator):
        aggregator.list_transaction_legs = AsyncMock(side_effect=UpstreamUnavailableError({"mainnet": "timeout"}))
        res = await client.get(f"/api/transactions/{WALLET}")
        assert res.status_code == 502
        assert res.json()["detail"]["failed_networks"] == {"mainnet": "timeout"}

    async def test_configuration_error(self, client, aggregator):
        aggregator.list_transaction_legs = AsyncMock(side_effect=ConfigurationError("No RPC URL configured for base"))
        res = await client.get(f"/api/transactions/{WALLET}")
        assert res.status_code == 500
        assert "No RPC URL" in res.json()["detail"]


async def test_health(client):
    res = await client.get("/api/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"
