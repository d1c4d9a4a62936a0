"""Custom error classes."""
from typing import Optional


class BalanceTrackerError(Exception):
    """Base exception for balance tracker application."""
    pass


class InvalidAddressError(BalanceTrackerError):
    """Address does not match the 0x + 40 hex characters format."""
    pass


class InvalidInputError(BalanceTrackerError):
    """Batch input that cannot be processed (empty or too large)."""
    pass


class ExtractionError(BalanceTrackerError):
    """Balance could not be read from the profile page."""
    
    def __init__(self, message: str, address: Optional[str] = None):
        super().__init__(message)
        self.address = address


class BrowserLaunchError(ExtractionError):
    """Browser engine failed to start."""
    pass


class BatchNotFoundError(BalanceTrackerError):
    """Batch id is unknown or has expired."""
    pass
