import logging
from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from walletledger.api.deps import get_aggregator
from walletledger.api.schemas.transactions import LedgerMeta, LedgerResponse, LegResponse
from walletledger.config import settings
from walletledger.domain.enums import SortOrder, SpamMode, parse_networks
from walletledger.domain.models import LegQuery
from walletledger.exceptions import InvalidCursorError, UpstreamUnavailableError
from walletledger.ledger.aggregator import LedgerAggregator
from walletledger.ledger.filters import apply_leg_filters, clean_symbol
from walletledger.report.summary import build_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/transactions", tags=["transactions"])

AggregatorDep = Annotated[LedgerAggregator, Depends(get_aggregator)]


def parse_time(value: Optional[str]) -> Optional[int]:
    """Epoch seconds or an ISO-8601 datetime (naive values are taken as UTC)."""
    if value is None or not value.strip():
        return None
    value = value.strip()
    if value.lstrip("-").isdigit():
        return int(value)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"Invalid time: {value!r}") from None
    if parsed.tzinfo is None:
        return int((parsed - datetime(1970, 1, 1)).total_seconds())
    return int(parsed.timestamp())


@router.get("/{address}", response_model=LedgerResponse)
async def list_transaction_legs(
    address: str,
    aggregator: AggregatorDep,
    networks: Optional[str] = Query(None, description="Comma-separated networks (default: all)"),
    from_time: Optional[str] = Query(None, alias="from"),
    to_time: Optional[str] = Query(None, alias="to"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    cursor: Optional[str] = Query(None),
    order: SortOrder = Query(SortOrder.ASC),
    min_usd: float = Query(0.0, ge=0),
    spam_filter: Optional[SpamMode] = Query(None),
    summary: bool = Query(False),
) -> LedgerResponse:
    try:
        query = LegQuery(
            wallet=address,
            networks=parse_networks(networks),
            from_time=parse_time(from_time),
            to_time=parse_time(to_time),
            page=page,
            limit=limit,
            cursor=cursor,
            order=order,
        )
        result = await aggregator.list_transaction_legs(query)
    except (ValueError, InvalidCursorError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except UpstreamUnavailableError as e:
        logger.warning("Ledger for %s unavailable: %s", address, e)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": "Upstream unavailable", "failed_networks": e.failures},
        )

    mode = spam_filter or SpamMode(settings.spam_filter_mode)
    legs = apply_leg_filters(result.legs, min_usd=min_usd, mode=mode)
    hashes = {leg.tx_hash for leg in legs}
    gas_usd_by_tx = {h: usd for h, usd in result.gas_usd_by_tx.items() if h in hashes}

    return LedgerResponse(
        data=[
            LegResponse(**leg.model_dump(mode="json"), display_symbol=clean_symbol(leg.asset.symbol))
            for leg in legs
        ],
        meta=LedgerMeta(
            gas_usd_by_tx=gas_usd_by_tx,
            # pagination continues from the last unfiltered leg
            next_cursor=result.next_cursor,
            has_more=result.has_more,
            failed_networks=result.failed_networks,
            warnings=result.warnings,
        ),
        summary=build_summary(legs, gas_usd_by_tx) if summary else None,
        page=page,
        limit=result.limit,
    )
