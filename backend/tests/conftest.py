"""Shared fakes: a scripted page standing in for Playwright, and a scripted extractor."""
import asyncio

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from balance_tracker.config import Settings
from balance_tracker.models.balance import ExtractionResult, ExtractionStatus
from balance_tracker.services.extractor import BalanceExtractor

ADDRESS_A = "0xABCDEF0000000000000000000000000000000001"
ADDRESS_B = "0xabcdef0000000000000000000000000000000002"
ADDRESS_C = "0x1234567890abcdef1234567890ABCDEF12345678"


class FakeElement:
    def __init__(self, page):
        self.page = page

    async def text_content(self):
        return self.page.next_balance_text()


class FakePage:
    """
    Serves balance texts in order, repeating the last one, the way the
    profile page shows "$0" before the real figure arrives.
    """

    def __init__(
        self,
        balance_texts=("$1,234+3.2%",),
        percentage="+3.2%",
        selector_appears=True,
        goto_error=None,
        element_missing_reads=0,
    ):
        self.balance_texts = list(balance_texts)
        self.percentage = percentage
        self.selector_appears = selector_appears
        self.goto_error = goto_error
        self.element_missing_reads = element_missing_reads
        self.visited = []
        self.reads = 0

    async def goto(self, url, wait_until=None, timeout=None):
        self.visited.append((url, wait_until))
        if self.goto_error is not None:
            raise self.goto_error

    async def wait_for_selector(self, selector, state=None, timeout=None):
        if not self.selector_appears:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def query_selector(self, selector):
        if self.element_missing_reads > 0:
            self.element_missing_reads -= 1
            return None
        return FakeElement(self)

    async def text_content(self, selector, timeout=None):
        if self.percentage is None:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return self.percentage

    def next_balance_text(self):
        self.reads += 1
        if len(self.balance_texts) > 1:
            return self.balance_texts.pop(0)
        return self.balance_texts[0]


class FakeSession:
    def __init__(self, page, enter_error=None):
        self.page = page
        self.enter_error = enter_error
        self.entered = False
        self.closed = False

    async def __aenter__(self):
        self.entered = True
        if self.enter_error is not None:
            raise self.enter_error
        return self.page

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True


class FakeExtractor(BalanceExtractor):
    """
    Stands in for BalanceExtractor in batch tests.

    outcomes maps address -> balance string or exception to raise.
    Addresses in `blocking` wait on `release` before answering.
    """

    def __init__(self, outcomes=None, delays=None, blocking=()):
        super().__init__()
        self.outcomes = outcomes or {}
        self.delays = delays or {}
        self.blocking = set(blocking)
        self.release = asyncio.Event()
        self.started = asyncio.Event()
        self.calls = []
        self.cancelled = []

    async def fetch_balance(self, address):
        self.calls.append(address)
        try:
            if address in self.blocking:
                self.started.set()
                await self.release.wait()
            if address in self.delays:
                await asyncio.sleep(self.delays[address])
        except asyncio.CancelledError:
            self.cancelled.append(address)
            raise
        outcome = self.outcomes.get(address, "$100")
        if isinstance(outcome, BaseException):
            raise outcome
        return ExtractionResult(
            address=address,
            balance=outcome,
            percentage_change="+1.0%",
            status=ExtractionStatus.SUCCESS
        )


@pytest.fixture
def fast_settings():
    return Settings(
        balance_poll_interval_seconds=0.01,
        balance_poll_timeout_seconds=0.1,
        percentage_timeout_ms=10,
    )


@pytest.fixture
def make_extractor(fast_settings):
    """Build a BalanceExtractor whose sessions serve the given fake page."""
    sessions = []

    def factory(page, enter_error=None):
        def session_factory():
            session = FakeSession(page, enter_error=enter_error)
            sessions.append(session)
            return session
        return BalanceExtractor(config=fast_settings, session_factory=session_factory), sessions

    return factory
