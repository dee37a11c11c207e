"""
Scanner Errors

Provider failures are fatal while collecting candidates and non-fatal per
symbol during a scan. Configuration errors are raised before a scan starts.
"""

from typing import List, Optional


class ScannerError(Exception):
    """Base class for all scanner errors"""


class ProviderError(ScannerError):
    """A market or sentiment provider could not deliver data"""

    def __init__(self, message: str, provider: Optional[str] = None, symbol: Optional[str] = None):
        super().__init__(message)
        self.provider = provider
        self.symbol = symbol


class ProviderUnavailableError(ProviderError):
    """Transient provider failure (network, HTTP status, unparsable payload)"""


class SymbolNotFoundError(ProviderError):
    """Provider has no data for the requested symbol"""


class InvalidConfigError(ScannerError, ValueError):
    """Scanner configuration is outside its allowed bounds"""


class ScanCancelledError(ScannerError):
    """Scan stopped early because of a timeout or caller cancellation.

    ``partial_picks`` holds the picks completed before the stop, already
    filtered and sorted.
    """

    def __init__(self, reason: str, partial_picks: Optional[List] = None, pending: int = 0):
        super().__init__(f"Scan {reason}: {pending} candidate(s) not analyzed")
        self.reason = reason
        self.partial_picks = partial_picks or []
        self.pending = pending
