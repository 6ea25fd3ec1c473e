from walletledger.domain.models.leg import CursorPosition, Leg, LegAsset, PageParams
from walletledger.domain.models.ledger import LegPage, LegQuery, NetworkResult, UpstreamWarnings
from walletledger.domain.models.price import DexPair, PriceQuote
from walletledger.domain.models.receipt import Receipt
from walletledger.domain.models.summary import Bucket, Counterparty, Kpi, LedgerSummary

__all__ = [
    "Bucket",
    "Counterparty",
    "CursorPosition",
    "DexPair",
    "Kpi",
    "Leg",
    "LedgerSummary",
    "LegAsset",
    "LegPage",
    "LegQuery",
    "NetworkResult",
    "PageParams",
    "PriceQuote",
    "Receipt",
    "UpstreamWarnings",
]
