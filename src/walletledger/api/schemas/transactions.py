from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from walletledger.domain.models import LedgerSummary, LegAsset, UpstreamWarnings


class LegResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tx_hash: str
    network: str
    block_number: int
    timestamp: int
    log_index: int
    from_address: str
    to_address: str
    direction: str
    kind: str
    asset: LegAsset
    display_symbol: Optional[str] = None
    amount_raw: str
    amount: float
    amount_usd_at_tx: Optional[float] = None
    status: str
    leg_class: Optional[str] = Field(default=None, alias="class")
    source: str


class LedgerMeta(BaseModel):
    gas_usd_by_tx: dict[str, float]
    next_cursor: Optional[str] = None
    has_more: bool
    failed_networks: dict[str, str]
    warnings: UpstreamWarnings


class LedgerResponse(BaseModel):
    data: list[LegResponse]
    meta: LedgerMeta
    summary: Optional[LedgerSummary] = None
    page: int
    limit: int
