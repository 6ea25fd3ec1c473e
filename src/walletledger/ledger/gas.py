"""Gas fee calculation utilities."""

from decimal import Decimal

from walletledger.domain.enums import Network
from walletledger.domain.models import Receipt

NATIVE_DECIMALS = 18

# Native token symbol per network
NATIVE_SYMBOLS: dict[Network, str] = {
    Network.MAINNET: "ETH",
    Network.BSC: "BNB",
    Network.POLYGON: "MATIC",
    Network.OPTIMISM: "ETH",
    Network.BASE: "ETH",
    Network.ARBITRUM_ONE: "ETH",
    Network.AVALANCHE: "AVAX",
    Network.UNICHAIN: "ETH",
}


def native_symbol(network: Network) -> str:
    return NATIVE_SYMBOLS.get(network, "ETH")


def gas_fee_native(receipt: Receipt) -> float:
    """Gas fee in native units (gasUsed x effectiveGasPrice / 1e18)."""
    wei = receipt.gas_fee_wei
    if wei <= 0:
        return 0.0
    return float(Decimal(wei).scaleb(-NATIVE_DECIMALS))
