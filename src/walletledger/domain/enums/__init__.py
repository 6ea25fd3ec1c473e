from walletledger.domain.enums.filters import SortOrder, SpamMode
from walletledger.domain.enums.leg import LegClass, LegDirection, LegKind, LegSource, LegStatus
from walletledger.domain.enums.network import Network, parse_networks
from walletledger.domain.enums.price import PriceSource

__all__ = [
    "LegClass",
    "LegDirection",
    "LegKind",
    "LegSource",
    "LegStatus",
    "Network",
    "PriceSource",
    "SortOrder",
    "SpamMode",
    "parse_networks",
]
