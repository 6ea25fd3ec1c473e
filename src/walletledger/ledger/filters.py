"""Post-hoc leg filters: USD dust floor and a symbol-based spam heuristic."""

import re

from pydantic import BaseModel

from walletledger.domain.enums import SpamMode
from walletledger.domain.models import Leg

# Blue-chips and stables that are never treated as spam
SYMBOL_WHITELIST = frozenset({
    "ETH", "WETH", "BTC", "WBTC", "BNB", "AVAX", "MATIC", "POL",
    "USDT", "USDC", "DAI", "FRAX", "LUSD", "TUSD", "GUSD", "PYUSD",
    "ARB", "OP", "BASE",
})

SOFT_THRESHOLD = 3.0
HARD_THRESHOLD = 1.0

_REPEATED_0X = re.compile(r"^(0x){2,}", re.IGNORECASE)
_PROMO_KEYWORDS = re.compile(
    r"\b(CLAIM|AIRDROP|REWARD|BONUS|VISIT|HTTP|HTTPS|T\.ME|TELEGRAM|GET\s+REWARD)\b", re.IGNORECASE
)
_PROMO_PREFIX = re.compile(
    r"^(T\.ME|TELEGRAM|HTTP|HTTPS|CLAIM|AIRDROP|REWARD|BONUS|VISIT|GET\s+REWARD)", re.IGNORECASE
)
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_NON_ASCII = re.compile(r"[^ -~]")


class SpamScore(BaseModel):
    score: float = 0.0
    reasons: list[str] = []


def score_spam(symbol: str | None) -> SpamScore:
    """Weighted suspicion score for a token symbol. Whitelisted symbols score 0."""
    s = (symbol or "").strip()
    if s.upper() in SYMBOL_WHITELIST:
        return SpamScore()

    score = 0.0
    reasons: list[str] = []

    def add(weight: float, reason: str) -> None:
        nonlocal score
        score += weight
        reasons.append(reason)

    if not s:
        add(0.5, "empty-symbol")
    if _REPEATED_0X.search(s):
        add(2, "repeated-0x")
    if _PROMO_KEYWORDS.search(s):
        add(2, "promo-keywords")
    if _PROMO_PREFIX.search(s):
        add(2, "promo-prefix")
    if _NON_ALNUM.search(s):
        add(5, "non-english-chars")
    if _NON_ASCII.search(s):
        add(0.5, "non-ascii")
    if len(s) > 24:
        add(1.5, "very-long")
    if "|" in s:
        add(1, "pipe-separator")

    return SpamScore(score=score, reasons=reasons)


def is_spam(symbol: str | None, mode: SpamMode) -> bool:
    if mode == SpamMode.OFF:
        return False
    threshold = SOFT_THRESHOLD if mode == SpamMode.SOFT else HARD_THRESHOLD
    return score_spam(symbol).score >= threshold


def is_dust(leg: Leg, min_usd: float) -> bool:
    """Only legs with a known USD value can be dust."""
    return leg.amount_usd_at_tx is not None and leg.amount_usd_at_tx < min_usd


def apply_leg_filters(legs: list[Leg], min_usd: float = 0.0, mode: SpamMode = SpamMode.SOFT) -> list[Leg]:
    """Drop dust and spam legs. NFTs skip the spam check."""
    kept = []
    for leg in legs:
        if is_dust(leg, min_usd):
            continue
        if not leg.kind.is_nft and is_spam(leg.asset.symbol, mode):
            continue
        kept.append(leg)
    return kept


def clean_symbol(symbol: str | None) -> str | None:
    """Display form: collapse a repeated 0x prefix and cap the length."""
    if not symbol:
        return None
    return _REPEATED_0X.sub("0x", symbol.strip())[:64]
