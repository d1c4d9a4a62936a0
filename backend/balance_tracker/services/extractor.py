"""Profile page balance extractor."""
import asyncio
from typing import AsyncContextManager, Callable, Optional
from playwright.async_api import Page
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from balance_tracker.config import Settings, settings as default_settings
from balance_tracker.models.balance import ExtractionResult, ExtractionStatus
from balance_tracker.services.browser import BrowserSession
from balance_tracker.utils.addresses import validate_address
from balance_tracker.utils.errors import BrowserLaunchError, ExtractionError
from balance_tracker.utils.parsing import balance_value, parse_balance_text, parse_percentage_text

SessionFactory = Callable[[], AsyncContextManager[Page]]


class BalanceExtractor:
    """Reads the portfolio balance and percentage change of one address."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        session_factory: Optional[SessionFactory] = None
    ):
        self.config = config or default_settings
        self.session_factory = session_factory or (lambda: BrowserSession(self.config))

    def profile_url(self, address: str) -> str:
        return self.config.profile_url_template.format(address=address)

    async def fetch_balance(self, address: str) -> ExtractionResult:
        """
        Render the address's profile page and read its header fields.

        Steps:
        1. Open a fresh browser session (closed again on every exit path)
        2. Navigate, considering the page loaded once the document is parsed
        3. Wait for the balance element to appear
        4. Poll the balance until it leaves zero or the poll window ends
        5. Read the percentage change, best effort

        Args:
            address: Wallet address (0x + 40 hex)

        Returns:
            Successful extraction result

        Raises:
            InvalidAddressError: If the address is malformed
            ExtractionError: If the page or balance element cannot be loaded
            BrowserLaunchError: If the browser engine cannot start
        """
        validate_address(address)
        url = self.profile_url(address)

        async with self.session_factory() as page:
            try:
                print(f"[EXTRACT] Navigating to {url}")
                await page.goto(
                    url,
                    wait_until="domcontentloaded",
                    timeout=self.config.navigation_timeout_ms
                )
                await page.wait_for_selector(
                    self.config.balance_selector,
                    state="visible",
                    timeout=self.config.selector_timeout_ms
                )
                balance = await self._wait_for_balance(page)
            except PlaywrightTimeoutError as e:
                raise ExtractionError(f"Timed out loading balance for {address}: {e.message}", address) from e
            except PlaywrightError as e:
                raise ExtractionError(f"Error loading balance for {address}: {e.message}", address) from e

            percentage_change = await self._read_percentage(page, address)

        print(f"[EXTRACT] {address}: balance={balance}, change={percentage_change}")
        return ExtractionResult(
            address=address,
            balance=balance,
            percentage_change=percentage_change,
            status=ExtractionStatus.SUCCESS
        )

    async def extract(self, address: str) -> ExtractionResult:
        """
        Like fetch_balance, but a failure of this address becomes a failed result.

        BrowserLaunchError is not about the address and still propagates.
        """
        try:
            return await self.fetch_balance(address)
        except BrowserLaunchError:
            raise
        except ExtractionError as e:
            print(f"[EXTRACT] Failed for {address}: {e}")
            return ExtractionResult.failed(address, str(e))

    async def _wait_for_balance(self, page: Page) -> str:
        """
        Poll the balance element until it shows a non-zero amount.

        The page renders "$0" first and fills in the real figure later. When
        the poll window closes the last value read is accepted, so a wallet
        that really holds nothing still resolves to "$0".
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.config.balance_poll_timeout_seconds
        balance = await self._read_balance(page)
        while balance_value(balance) == 0:
            if loop.time() >= deadline:
                print(f"[EXTRACT] Balance still {balance} after {self.config.balance_poll_timeout_seconds}s, accepting it")
                break
            await asyncio.sleep(self.config.balance_poll_interval_seconds)
            balance = await self._read_balance(page)
        return balance

    async def _read_balance(self, page: Page) -> str:
        element = await page.query_selector(self.config.balance_selector)
        if element is None:
            return parse_balance_text(None)
        return parse_balance_text(await element.text_content())

    async def _read_percentage(self, page: Page, address: str) -> Optional[str]:
        """Percentage change text, or None when the element cannot be read."""
        try:
            text = await page.text_content(
                self.config.percentage_selector,
                timeout=self.config.percentage_timeout_ms
            )
        except PlaywrightError as e:
            print(f"[EXTRACT] WARNING: Failed to fetch percentage change for {address}: {e.message}")
            return None
        return parse_percentage_text(text)
