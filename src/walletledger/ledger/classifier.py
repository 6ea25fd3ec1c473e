"""Per-transaction accounting intent for legs.

Rules run over the whole transaction in order and never overwrite a class
that is already set, so classification is idempotent:

1. SWAP: fungible/native legs both in and out
2. NFT BUY: NFT in and fungible out (unclassed fungible out -> expense)
3. NFT SELL: NFT out and fungible in (unclassed fungible in -> income)
4. TRANSFER_IN/OUT: none of the above, a single fungible direction and no NFTs
5. Residual: anything still unclassed, by asset family and direction

Rules 1-3 are independent guards and may all fire on one transaction.
"""

from collections import defaultdict

from walletledger.domain.enums import LegClass, LegDirection
from walletledger.domain.models import Leg

_RESIDUAL: dict[tuple[str, LegDirection], LegClass] = {
    ("nft", LegDirection.IN): LegClass.NFT_TRANSFER_IN,
    ("nft", LegDirection.OUT): LegClass.NFT_TRANSFER_OUT,
    ("fungible", LegDirection.IN): LegClass.TRANSFER_IN,
    ("fungible", LegDirection.OUT): LegClass.TRANSFER_OUT,
}


def _family(leg: Leg) -> str:
    if leg.kind.is_nft:
        return "nft"
    if leg.kind.is_fungible:
        return "fungible"
    return "other"


def classify_legs(legs: list[Leg]) -> list[Leg]:
    """Classify the legs of ONE transaction. Returns new legs in input order."""
    classes: list[LegClass | None] = [leg.leg_class for leg in legs]

    def idx(family: str, direction: LegDirection) -> list[int]:
        return [i for i, leg in enumerate(legs) if _family(leg) == family and leg.direction == direction]

    def assign(indices: list[int], cls: LegClass) -> None:
        for i in indices:
            if classes[i] is None:
                classes[i] = cls

    in_fungible = idx("fungible", LegDirection.IN)
    out_fungible = idx("fungible", LegDirection.OUT)
    in_nft = idx("nft", LegDirection.IN)
    out_nft = idx("nft", LegDirection.OUT)

    has_swap = bool(in_fungible) and bool(out_fungible)
    has_nft_buy = bool(in_nft) and bool(out_fungible)
    has_nft_sell = bool(out_nft) and bool(in_fungible)

    if has_swap:
        assign(in_fungible, LegClass.SWAP_IN)
        assign(out_fungible, LegClass.SWAP_OUT)
    if has_nft_buy:
        assign(in_nft, LegClass.NFT_BUY)
        assign(out_fungible, LegClass.EXPENSE)
    if has_nft_sell:
        assign(out_nft, LegClass.NFT_SELL)
        assign(in_fungible, LegClass.INCOME)

    if not (has_swap or has_nft_buy or has_nft_sell):
        no_nft = not in_nft and not out_nft
        if in_fungible and not out_fungible and no_nft:
            assign(in_fungible, LegClass.TRANSFER_IN)
        if out_fungible and not in_fungible and no_nft:
            assign(out_fungible, LegClass.TRANSFER_OUT)

    for i, leg in enumerate(legs):
        if classes[i] is None:
            fallback = LegClass.INCOME if leg.direction == LegDirection.IN else LegClass.EXPENSE
            classes[i] = _RESIDUAL.get((_family(leg), leg.direction), fallback)

    return [
        leg if leg.leg_class == cls else leg.model_copy(update={"leg_class": cls})
        for leg, cls in zip(legs, classes)
    ]


def classify_by_transaction(legs: list[Leg]) -> list[Leg]:
    """Group legs by (network, tx hash), classify each group, keep the input order."""
    groups: dict[tuple[str, str], list[int]] = defaultdict(list)
    for i, leg in enumerate(legs):
        groups[(leg.network.value, leg.tx_hash)].append(i)

    result: list[Leg] = list(legs)
    for indices in groups.values():
        classified = classify_legs([legs[i] for i in indices])
        for i, leg in zip(indices, classified):
            result[i] = leg
    return result
