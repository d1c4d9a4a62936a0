"""Shared dependencies for the API routes."""
from balance_tracker.services.batch_store import BatchStore
from balance_tracker.services.extractor import BalanceExtractor

_batch_store = BatchStore()


def get_extractor() -> BalanceExtractor:
    """A new extractor per request; each call opens its own browser session."""
    return BalanceExtractor()


def get_batch_store() -> BatchStore:
    """Process-wide batch registry."""
    return _batch_store
