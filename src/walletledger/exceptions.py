"""Error taxonomy for the ledger pipeline.

Absence (no price, no receipt, no transfers) is never an exception; it is None
or an `unknown` status on the leg.
"""


class LedgerError(Exception):
    """Base class for all walletledger errors."""


class ExternalServiceError(LedgerError):
    """An upstream call failed (transport error, non-2xx, or malformed payload)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(LedgerError):
    """Required configuration is missing. Raised before any upstream call is made."""


class InvalidCursorError(LedgerError):
    """A pagination cursor could not be decoded or has an unsupported version."""


class UpstreamUnavailableError(LedgerError):
    """Every requested network failed, so there is nothing to return."""

    def __init__(self, failures: dict[str, str]) -> None:
        detail = "; ".join(f"{net}: {msg}" for net, msg in failures.items())
        super().__init__(f"Could not reach upstream for any requested network ({detail})")
        self.failures = failures
