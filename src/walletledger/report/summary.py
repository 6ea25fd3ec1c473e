"""Roll up a page of legs into KPI totals, per-class/per-network buckets and top counterparties."""

from walletledger.domain.enums import LegDirection
from walletledger.domain.models import Bucket, Counterparty, Kpi, Leg, LedgerSummary

TOP_COUNTERPARTIES = 20
UNCLASSIFIED = "unclassified"


def _add(bucket: Bucket, leg: Leg, usd: float) -> None:
    bucket.count += 1
    if leg.direction == LegDirection.IN:
        bucket.usd_in += usd
    else:
        bucket.usd_out += usd


def build_summary(legs: list[Leg], gas_usd_by_tx: dict[str, float] | None = None) -> LedgerSummary:
    """Legs without a USD value are counted but add nothing to the totals."""
    total_in = 0.0
    total_out = 0.0
    by_class: dict[str, Bucket] = {}
    by_network: dict[str, Bucket] = {}
    counterparties: dict[str, Counterparty] = {}

    for leg in legs:
        usd = leg.amount_usd_at_tx or 0.0
        if leg.direction == LegDirection.IN:
            total_in += usd
        else:
            total_out += usd

        cls = leg.leg_class.value if leg.leg_class is not None else UNCLASSIFIED
        _add(by_class.setdefault(cls, Bucket()), leg, usd)
        _add(by_network.setdefault(leg.network.value, Bucket()), leg, usd)

        # the other side of the leg
        other = leg.from_address if leg.direction == LegDirection.IN else leg.to_address
        if other:
            cp = counterparties.setdefault(other, Counterparty(address=other, usd=0.0, count=0))
            cp.usd += usd
            cp.count += 1

    gas_total = sum(v for v in (gas_usd_by_tx or {}).values() if v)
    top = sorted(counterparties.values(), key=lambda c: abs(c.usd), reverse=True)[:TOP_COUNTERPARTIES]

    return LedgerSummary(
        kpi=Kpi(
            total_usd_in=total_in,
            total_usd_out=total_out,
            net_usd=total_in - total_out - gas_total,
            count=len(legs),
        ),
        by_class=by_class,
        by_network=by_network,
        top_counterparties=top,
        gas_usd_total=gas_total,
    )
