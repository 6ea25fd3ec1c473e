from pydantic import BaseModel, ConfigDict

from walletledger.domain.enums import LegStatus


class Receipt(BaseModel):
    """Subset of an EVM transaction receipt needed for status and gas cost."""

    model_config = ConfigDict(frozen=True)

    status: LegStatus = LegStatus.UNKNOWN
    gas_used: int = 0
    effective_gas_price: int = 0

    @property
    def gas_fee_wei(self) -> int:
        return self.gas_used * self.effective_gas_price
