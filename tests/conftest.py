import pytest

from walletledger.domain.enums import LegDirection, LegKind, LegSource, Network
from walletledger.domain.models import Leg, LegAsset

WALLET = "0x1111111111111111111111111111111111111111"
OTHER = "0x2222222222222222222222222222222222222222"
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
NFT_CONTRACT = "0xbc4ca0eda7647a8ab7c2061c2e118a18a936f13d"


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def wallet() -> str:
    return WALLET


@pytest.fixture()
def make_leg():
    """Build a Leg with sensible defaults; override any field by keyword."""

    def _make(
        direction: LegDirection = LegDirection.IN,
        kind: LegKind = LegKind.FUNGIBLE_TOKEN,
        tx_hash: str = "0xaaa",
        network: Network = Network.MAINNET,
        timestamp: int = 1_700_000_000,
        block_number: int = 18_000_000,
        log_index: int = 0,
        symbol: str | None = "USDC",
        contract: str | None = USDC,
        amount: float = 1.0,
        **extra,
    ) -> Leg:
        is_in = direction == LegDirection.IN
        if kind == LegKind.NATIVE:
            contract = None
        source = LegSource.TOKENAPI_NFT if kind.is_nft else LegSource.TOKENAPI_TRANSFERS
        return Leg(
            tx_hash=tx_hash,
            network=network,
            block_number=block_number,
            timestamp=timestamp,
            log_index=log_index,
            from_address=OTHER if is_in else WALLET,
            to_address=WALLET if is_in else OTHER,
            direction=direction,
            kind=kind,
            asset=LegAsset(contract=contract, symbol=symbol, decimals=0 if kind.is_nft else 6),
            amount=amount,
            source=source,
            **extra,
        )

    return _make
