from pydantic import BaseModel, ConfigDict

from walletledger.domain.enums import PriceSource


class PriceQuote(BaseModel):
    """USD unit price produced by one source. Never zero-as-missing: absence is None."""

    model_config = ConfigDict(frozen=True)

    price_usd: float
    source: PriceSource
    timestamp: int | None = None  # time of the data point used, when the source reports it


class DexPair(BaseModel):
    """A DEX pool candidate for pricing a token."""

    model_config = ConfigDict(frozen=True)

    pair_id: str
    address: str
    liquidity_usd: float
    liquid: bool = True
