"""Roll-up types produced by the summary builder."""

from pydantic import BaseModel


class Kpi(BaseModel):
    total_usd_in: float = 0.0
    total_usd_out: float = 0.0
    net_usd: float = 0.0  # in - out - gas
    count: int = 0


class Bucket(BaseModel):
    count: int = 0
    usd_in: float = 0.0
    usd_out: float = 0.0


class Counterparty(BaseModel):
    address: str
    usd: float
    count: int


class LedgerSummary(BaseModel):
    kpi: Kpi = Kpi()
    by_class: dict[str, Bucket] = {}
    by_network: dict[str, Bucket] = {}
    top_counterparties: list[Counterparty] = []
    gas_usd_total: float = 0.0
