from enum import Enum


class LegDirection(str, Enum):
    IN = "in"
    OUT = "out"


class LegKind(str, Enum):
    """Asset family of a leg."""

    NATIVE = "native"
    FUNGIBLE_TOKEN = "fungible-token"
    NFT_UNIQUE = "nft-unique"
    NFT_FUNGIBLE = "nft-fungible"

    @property
    def is_nft(self) -> bool:
        return self in (LegKind.NFT_UNIQUE, LegKind.NFT_FUNGIBLE)

    @property
    def is_fungible(self) -> bool:
        return self in (LegKind.NATIVE, LegKind.FUNGIBLE_TOKEN)


class LegStatus(str, Enum):
    SUCCESS = "success"
    REVERTED = "reverted"
    UNKNOWN = "unknown"


class LegClass(str, Enum):
    """Accounting intent assigned by the classifier."""

    SWAP_IN = "swap_in"
    SWAP_OUT = "swap_out"
    NFT_BUY = "nft_buy"
    NFT_SELL = "nft_sell"
    NFT_TRANSFER_IN = "nft_transfer_in"
    NFT_TRANSFER_OUT = "nft_transfer_out"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"
    INCOME = "income"
    EXPENSE = "expense"


class LegSource(str, Enum):
    """Upstream feed that produced the row."""

    TOKENAPI_TRANSFERS = "tokenapi-transfers"
    TOKENAPI_NFT = "tokenapi-nft"
