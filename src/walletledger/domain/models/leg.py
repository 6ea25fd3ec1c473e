"""Canonical ledger leg and the types that describe where it sits in the ledger."""

from pydantic import BaseModel, ConfigDict, Field

from walletledger.domain.enums import LegClass, LegDirection, LegKind, LegSource, LegStatus, Network


class LegAsset(BaseModel):
    model_config = ConfigDict(frozen=True)

    contract: str | None = None  # None = native coin
    symbol: str | None = None
    decimals: int | None = None
    token_id: str | None = None  # NFT only


class CursorPosition(BaseModel):
    """A point in the ledger's total order.

    Compared field by field: timestamp, block number, tx hash (lexicographic),
    log index, then network as the final tie-break.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: int
    block_number: int
    tx_hash: str
    log_index: int = 0
    network: str = ""

    def sort_key(self) -> tuple[int, int, str, int, str]:
        return (self.timestamp, self.block_number, self.tx_hash, self.log_index, self.network)


class Leg(BaseModel):
    """One inbound or outbound asset movement within a transaction, seen from the tracked wallet.

    Legs are frozen: every pipeline stage hands back a copy via `model_copy(update=...)`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tx_hash: str
    network: Network
    block_number: int
    timestamp: int  # epoch seconds
    log_index: int = 0

    from_address: str
    to_address: str
    direction: LegDirection

    kind: LegKind
    asset: LegAsset = LegAsset()

    amount_raw: str = "0"  # exact base units
    amount: float = 0.0  # human units, display only
    amount_usd_at_tx: float | None = None

    status: LegStatus = LegStatus.UNKNOWN
    leg_class: LegClass | None = Field(default=None, alias="class")
    source: LegSource

    @property
    def position(self) -> CursorPosition:
        return CursorPosition(
            timestamp=self.timestamp,
            block_number=self.block_number,
            tx_hash=self.tx_hash,
            log_index=self.log_index,
            network=self.network.value,
        )

    def sort_key(self) -> tuple[int, int, str, int, str]:
        return (self.timestamp, self.block_number, self.tx_hash, self.log_index, self.network.value)


class PageParams(BaseModel):
    """One upstream page request for one network."""

    network: Network
    address: str
    from_time: int | None = None
    to_time: int | None = None
    page: int = 1
    limit: int = 20
    exhaust: bool = False  # read every row in [from_time, to_time], ignoring limit
