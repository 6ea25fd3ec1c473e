"""Input and output contract of the ledger aggregator."""

from pydantic import BaseModel

from walletledger.domain.enums import Network, SortOrder
from walletledger.domain.models.leg import Leg


class LegQuery(BaseModel):
    wallet: str
    networks: list[Network] = []  # empty = all supported networks
    from_time: int | None = None
    to_time: int | None = None
    page: int = 1
    limit: int | None = None  # None = configured default
    cursor: str | None = None
    order: SortOrder = SortOrder.ASC


class NetworkResult(BaseModel):
    """Outcome of processing one network: legs on success, an error message otherwise."""

    network: Network
    legs: list[Leg] = []
    gas_usd_by_tx: dict[str, float] = {}
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class UpstreamWarnings(BaseModel):
    token_api_rate_limited: bool = False
    token_api_retry_after_ms: int = 0


class LegPage(BaseModel):
    """One page of the merged ledger.

    `has_more` is approximate: it is True whenever exactly `limit` legs were
    returned, so the last page may be followed by one empty page.
    """

    legs: list[Leg] = []
    limit: int = 0  # effective page size after clamping
    gas_usd_by_tx: dict[str, float] = {}
    next_cursor: str | None = None
    has_more: bool = False
    failed_networks: dict[str, str] = {}
    warnings: UpstreamWarnings = UpstreamWarnings()
