"""Tests for Token API row -> Leg normalization."""

import pytest

from walletledger.domain.enums import LegDirection, LegKind, LegSource, Network
from walletledger.infra.feeds.types import TokenApiNftTransfer, TokenApiTransfer
from walletledger.ledger.normalizer import (
    NATIVE_SENTINEL,
    amount_from_raw,
    leg_direction,
    norm_addr,
    normalize_fungible_transfer,
    normalize_nft_transfer,
)

WALLET = "0x1111111111111111111111111111111111111111"
OTHER = "0x2222222222222222222222222222222222222222"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


def _row(**overrides) -> TokenApiTransfer:
    data = {
        "transaction_id": "0xABC",
        "block_num": 18_000_000,
        "timestamp": 1_700_000_000,
        "from": OTHER,
        "to": WALLET,
        "contract": USDC,
        "symbol": "USDC",
        "decimals": 6,
        "amount": "2500000",
        "log_index": 7,
    }
    data.update(overrides)
    return TokenApiTransfer.model_validate(data)


class TestLegDirection:
    def test_outbound(self):
        assert leg_direction(WALLET, OTHER, WALLET) == LegDirection.OUT

    def test_inbound(self):
        assert leg_direction(OTHER, WALLET, WALLET) == LegDirection.IN

    def test_self_transfer_is_inbound(self):
        assert leg_direction(WALLET, WALLET, WALLET) == LegDirection.IN


class TestNormAddr:
    def test_trims_and_lowercases(self):
        assert norm_addr("  0xABCdef\n") == "0xabcdef"

    def test_missing(self):
        assert norm_addr(None) == "0x"


class TestAmountFromRaw:
    def test_shifts_by_decimals(self):
        assert amount_from_raw("2500000", 6) == pytest.approx(2.5)

    def test_missing_decimals_defaults_to_18(self):
        assert amount_from_raw("1000000000000000000", None) == pytest.approx(1.0)

    def test_human_scale_value_kept(self):
        assert amount_from_raw("1.25", 18) == pytest.approx(1.25)

    def test_empty_or_garbage(self):
        assert amount_from_raw(None, 6) == 0.0
        assert amount_from_raw("abc", 6) == 0.0


class TestNormalizeFungible:
    def test_erc20_inbound(self):
        leg = normalize_fungible_transfer(_row(), WALLET, Network.MAINNET)
        assert leg.tx_hash == "0xabc"
        assert leg.direction == LegDirection.IN
        assert leg.kind == LegKind.FUNGIBLE_TOKEN
        assert leg.asset.contract == USDC.lower()
        assert leg.asset.decimals == 6
        assert leg.amount_raw == "2500000"
        assert leg.amount == pytest.approx(2.5)
        assert leg.log_index == 7
        assert leg.source == LegSource.TOKENAPI_TRANSFERS
        assert leg.leg_class is None
        assert leg.amount_usd_at_tx is None

    def test_provided_value_wins(self):
        leg = normalize_fungible_transfer(_row(value=3.0), WALLET, Network.MAINNET)
        assert leg.amount == pytest.approx(3.0)

    def test_numeric_amount_coerced_to_string(self):
        leg = normalize_fungible_transfer(_row(amount=2500000), WALLET, Network.MAINNET)
        assert leg.amount_raw == "2500000"

    def test_missing_log_index_defaults_to_zero(self):
        leg = normalize_fungible_transfer(_row(log_index=None), WALLET, Network.MAINNET)
        assert leg.log_index == 0

    @pytest.mark.parametrize("contract", [None, NATIVE_SENTINEL, "0x0000000000000000000000000000000000000000"])
    def test_native_transfer(self, contract):
        row = _row(contract=contract, symbol=None, decimals=None, amount="500000000000000000",
                   **{"from": WALLET, "to": OTHER})
        leg = normalize_fungible_transfer(row, WALLET, Network.BSC)
        assert leg.kind == LegKind.NATIVE
        assert leg.asset.contract is None
        assert leg.asset.symbol == "BNB"
        assert leg.asset.decimals == 18
        assert leg.direction == LegDirection.OUT
        assert leg.amount == pytest.approx(0.5)

    def test_missing_amount(self):
        leg = normalize_fungible_transfer(_row(amount=None), WALLET, Network.MAINNET)
        assert leg.amount_raw == "0"
        assert leg.amount == 0.0


class TestNormalizeNft:
    def _nft(self, **overrides) -> TokenApiNftTransfer:
        data = {
            "transaction_id": "0xDEF",
            "block_num": 18_000_001,
            "timestamp": 1_700_000_100,
            "from": OTHER,
            "to": WALLET,
            "contract": "0xBC4CA0EdA7647A8aB7C2061c2E118A18a936f13D",
            "token_id": 1234,
            "symbol": "BAYC",
        }
        data.update(overrides)
        return TokenApiNftTransfer.model_validate(data)

    def test_erc721_defaults_to_one(self):
        leg = normalize_nft_transfer(self._nft(), WALLET, Network.MAINNET)
        assert leg.kind == LegKind.NFT_UNIQUE
        assert leg.amount_raw == "1"
        assert leg.amount == 1.0
        assert leg.asset.token_id == "1234"
        assert leg.asset.decimals == 0
        assert leg.asset.contract == "0xbc4ca0eda7647a8ab7c2061c2e118a18a936f13d"
        assert leg.source == LegSource.TOKENAPI_NFT

    def test_erc1155_quantity(self):
        leg = normalize_nft_transfer(self._nft(amount="5"), WALLET, Network.MAINNET)
        assert leg.kind == LegKind.NFT_FUNGIBLE
        assert leg.amount == 5.0

    def test_outbound_nft(self):
        leg = normalize_nft_transfer(self._nft(**{"from": WALLET, "to": OTHER}), WALLET, Network.MAINNET)
        assert leg.direction == LegDirection.OUT
