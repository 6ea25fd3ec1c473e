"""Process-wide "upstream is rate limiting us" advisory flag."""

import logging
import time
from collections.abc import Callable

from walletledger.domain.models import UpstreamWarnings

logger = logging.getLogger(__name__)


class UpstreamStatus:
    """Last-writer-wins cooldown marker. Advisory only: nothing waits on it."""

    def __init__(self, cooldown_seconds: float = 300.0, clock: Callable[[], float] = time.time) -> None:
        self._cooldown = cooldown_seconds
        self._clock = clock
        self._rate_limited_until = 0.0

    def mark_rate_limited(self) -> None:
        self._rate_limited_until = self._clock() + self._cooldown
        logger.warning("Token API rate limited; cooling down for %ds", self._cooldown)

    def warnings(self) -> UpstreamWarnings:
        remaining = self._rate_limited_until - self._clock()
        if remaining > 0:
            return UpstreamWarnings(token_api_rate_limited=True, token_api_retry_after_ms=int(remaining * 1000))
        return UpstreamWarnings()
