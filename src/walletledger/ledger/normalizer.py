"""Raw Token API transfer rows -> canonical legs."""

import re
from decimal import Decimal, InvalidOperation

from walletledger.domain.enums import LegDirection, LegKind, LegSource, Network
from walletledger.domain.models import Leg, LegAsset
from walletledger.infra.feeds.types import TokenApiNftTransfer, TokenApiTransfer
from walletledger.ledger.gas import NATIVE_DECIMALS, native_symbol

NATIVE_SENTINEL = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

_INTEGER = re.compile(r"^\d+$")


def norm_addr(address: str | None) -> str:
    """Best-effort trim and lowercase; missing addresses become '0x'."""
    return (address or "0x").strip().lower()


def is_native_contract(contract: str | None) -> bool:
    return not contract or contract.lower() in (NATIVE_SENTINEL, ZERO_ADDRESS)


def leg_direction(from_addr: str, to_addr: str, wallet: str) -> LegDirection:
    """`out` when the wallet sent the row, `in` otherwise.

    A self-transfer (from == to == wallet) is reported as `in`. Deciding on the
    sender alone would report it as `out`.
    """
    if from_addr == wallet and to_addr != wallet:
        return LegDirection.OUT
    return LegDirection.IN


def amount_from_raw(amount_raw: str | None, decimals: int | None) -> float:
    """Shift a base-unit integer string into human units.

    A raw value that is already human-scale (has a dot or exponent) is parsed as is.
    """
    if not amount_raw:
        return 0.0
    try:
        value = Decimal(amount_raw)
    except InvalidOperation:
        return 0.0
    if not _INTEGER.match(amount_raw):
        return float(value)
    d = decimals if decimals is not None else NATIVE_DECIMALS
    if d <= 0:
        return float(value)
    return float(value.scaleb(-d))


def normalize_fungible_transfer(row: TokenApiTransfer, wallet: str, network: Network) -> Leg:
    wallet = wallet.lower()
    from_addr = norm_addr(row.from_)
    to_addr = norm_addr(row.to)
    native = is_native_contract(row.contract)

    decimals = row.decimals if row.decimals is not None else (NATIVE_DECIMALS if native else None)
    if row.value is not None and row.value >= 0:
        amount = float(row.value)
    else:
        amount = amount_from_raw(row.amount, decimals)

    return Leg(
        tx_hash=row.transaction_id.lower(),
        network=network,
        block_number=row.block_num,
        timestamp=row.timestamp,
        log_index=row.log_index or 0,
        from_address=from_addr,
        to_address=to_addr,
        direction=leg_direction(from_addr, to_addr, wallet),
        kind=LegKind.NATIVE if native else LegKind.FUNGIBLE_TOKEN,
        asset=LegAsset(
            contract=None if native else row.contract.lower(),  # type: ignore[union-attr]
            symbol=row.symbol if row.symbol is not None else (native_symbol(network) if native else None),
            decimals=decimals,
        ),
        amount_raw=row.amount or "0",
        amount=amount,
        source=LegSource.TOKENAPI_TRANSFERS,
    )


def normalize_nft_transfer(row: TokenApiNftTransfer, wallet: str, network: Network) -> Leg:
    wallet = wallet.lower()
    from_addr = norm_addr(row.from_)
    to_addr = norm_addr(row.to)

    # ERC-721 has no quantity; ERC-1155 may carry one
    amount_raw = row.amount or "1"
    if row.value is not None:
        amount = float(row.value)
    else:
        amount = amount_from_raw(amount_raw, 0)

    return Leg(
        tx_hash=row.transaction_id.lower(),
        network=network,
        block_number=row.block_num,
        timestamp=row.timestamp,
        log_index=row.log_index or 0,
        from_address=from_addr,
        to_address=to_addr,
        direction=leg_direction(from_addr, to_addr, wallet),
        kind=LegKind.NFT_FUNGIBLE if amount > 1 else LegKind.NFT_UNIQUE,
        asset=LegAsset(
            contract=row.contract.lower(),
            symbol=row.symbol,
            decimals=0,
            token_id=row.token_id,
        ),
        amount_raw=amount_raw,
        amount=amount,
        source=LegSource.TOKENAPI_NFT,
    )
