"""Opaque, versioned pagination cursors over the ledger's total order."""

import base64
import binascii
import json
import logging
from collections.abc import Iterable

from pydantic import ValidationError

from walletledger.domain.enums import SortOrder
from walletledger.domain.models import CursorPosition, Leg
from walletledger.exceptions import InvalidCursorError

logger = logging.getLogger(__name__)

CURSOR_VERSION = 1


def encode_cursor(position: CursorPosition) -> str:
    payload = {
        "v": CURSOR_VERSION,
        "timestamp": position.timestamp,
        "blockNumber": position.block_number,
        "txHash": position.tx_hash,
        "logIndex": position.log_index,
        "network": position.network,
    }
    raw = json.dumps(payload, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def encode_cursor_from_leg(leg: Leg) -> str:
    return encode_cursor(leg.position)


def decode_cursor(token: str | None) -> CursorPosition | None:
    """Decode a cursor token. None/empty means "from the start"."""
    if not token:
        return None
    try:
        padded = token + "=" * (-len(token) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError) as e:
        logger.info("Rejected undecodable cursor: %s", e)
        raise InvalidCursorError("Cursor is not a valid token") from e

    if not isinstance(payload, dict):
        raise InvalidCursorError("Cursor is not a valid token")
    if payload.get("v") != CURSOR_VERSION:
        raise InvalidCursorError(f"Unsupported cursor version: {payload.get('v')!r}")

    fields = (payload.get("timestamp"), payload.get("blockNumber"), payload.get("logIndex"))
    if not all(isinstance(f, int) and not isinstance(f, bool) for f in fields):
        raise InvalidCursorError("Cursor is missing ordering fields")
    try:
        return CursorPosition(
            timestamp=payload["timestamp"],
            block_number=payload["blockNumber"],
            tx_hash=payload["txHash"],
            log_index=payload["logIndex"],
            network=payload.get("network", ""),
        )
    except (KeyError, ValidationError) as e:
        raise InvalidCursorError("Cursor is missing ordering fields") from e


def compare_leg_to_cursor(leg: Leg, cursor: CursorPosition) -> int:
    """Negative, zero or positive as the leg sorts before, at or after the cursor."""
    a, b = leg.sort_key(), cursor.sort_key()
    return (a > b) - (a < b)


def is_after_cursor(leg: Leg, cursor: CursorPosition, order: SortOrder = SortOrder.ASC) -> bool:
    """True when the leg comes strictly later than the cursor in the iteration order."""
    cmp = compare_leg_to_cursor(leg, cursor)
    return cmp > 0 if order == SortOrder.ASC else cmp < 0


def sort_legs(legs: Iterable[Leg], order: SortOrder = SortOrder.ASC) -> list[Leg]:
    return sorted(legs, key=Leg.sort_key, reverse=order == SortOrder.DESC)
