import pytest

from walletledger.domain.enums import (
    LegClass,
    LegDirection,
    LegKind,
    LegSource,
    LegStatus,
    Network,
    PriceSource,
    SortOrder,
    SpamMode,
    parse_networks,
)


class TestEnumsAreStringMixin:
    """All enums use (str, Enum) so they serialize to strings in JSON."""

    def test_network_is_str(self):
        assert isinstance(Network.ARBITRUM_ONE, str)
        assert Network.ARBITRUM_ONE == "arbitrum-one"

    def test_leg_enums_are_str(self):
        assert LegDirection.IN == "in"
        assert LegKind.NFT_UNIQUE == "nft-unique"
        assert LegStatus.REVERTED == "reverted"
        assert LegSource.TOKENAPI_NFT == "tokenapi-nft"

    def test_filter_enums_are_str(self):
        assert SpamMode("soft") == SpamMode.SOFT
        assert SortOrder("desc") == SortOrder.DESC
        assert PriceSource.GECKOTERMINAL == "geckoterminal"

    def test_leg_class_values(self):
        assert len(LegClass) == 10
        assert LegClass.NFT_TRANSFER_OUT == "nft_transfer_out"


class TestLegKind:
    def test_families(self):
        assert LegKind.NATIVE.is_fungible and not LegKind.NATIVE.is_nft
        assert LegKind.FUNGIBLE_TOKEN.is_fungible
        assert LegKind.NFT_FUNGIBLE.is_nft and not LegKind.NFT_FUNGIBLE.is_fungible


class TestParseNetworks:
    @pytest.mark.parametrize("value", [None, "", [], " , "])
    def test_empty_means_all(self, value):
        assert parse_networks(value) == list(Network)

    def test_comma_separated(self):
        assert parse_networks("base, mainnet") == [Network.BASE, Network.MAINNET]

    def test_list_and_dedup(self):
        assert parse_networks(["bsc,bsc", "polygon"]) == [Network.BSC, Network.POLYGON]

    def test_invalid_names_reported(self):
        with pytest.raises(ValueError, match="solana, ethereum"):
            parse_networks("mainnet,solana,ethereum")
