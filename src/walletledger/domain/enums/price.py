from enum import Enum


class PriceSource(str, Enum):
    DEFILLAMA = "defillama"
    GECKOTERMINAL = "geckoterminal"
