"""Raw row shapes returned by the Token API transfer endpoints (only the fields we use)."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_str(v: object) -> object:
    # The feed sometimes sends quantities and token ids as JSON numbers.
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class TokenApiTransfer(BaseModel):
    """Fungible or native transfer row."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    transaction_id: str
    block_num: int
    timestamp: int  # epoch seconds
    network: str | None = None

    from_: str | None = Field(default=None, alias="from")
    to: str | None = None

    contract: str | None = None  # None or 0xeeee... for native
    symbol: str | None = None
    decimals: int | None = None

    amount: str | None = None  # base units as string
    value: float | None = None  # human units, when the feed pre-computes them
    log_index: int | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: object) -> object:
        return _as_str(v)


class TokenApiNftTransfer(BaseModel):
    """ERC-721 / ERC-1155 transfer row."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    transaction_id: str
    block_num: int
    timestamp: int
    network: str | None = None

    from_: str | None = Field(default=None, alias="from")
    to: str | None = None

    contract: str
    token_id: str | None = None
    symbol: str | None = None
    amount: str | None = None  # quantity for 1155; absent means 1
    value: float | None = None
    log_index: int | None = None

    @field_validator("amount", "token_id", mode="before")
    @classmethod
    def coerce_strings(cls, v: object) -> object:
        return _as_str(v)
