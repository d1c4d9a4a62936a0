"""Headless browser sessions."""
from typing import Optional
from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Route
from playwright.async_api import Error as PlaywrightError
from balance_tracker.config import Settings, settings as default_settings
from balance_tracker.utils.errors import BrowserLaunchError, ExtractionError


class BrowserSession:
    """
    One browser process with one fresh context and page.

    Used as an async context manager: the browser is launched on entry and
    closed on every exit path, including cancellation. Sessions are never
    shared between addresses.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    async def __aenter__(self) -> Page:
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                args=self.config.browser_args,
                executable_path=self.config.browser_executable_path
            )
        except PlaywrightError as e:
            await self._shutdown()
            raise BrowserLaunchError(f"Browser failed to start: {e.message}") from e
        except Exception as e:
            await self._shutdown()
            raise BrowserLaunchError(f"Browser failed to start: {e!r}") from e
        except BaseException:
            # Cancelled while launching
            await self._shutdown()
            raise

        try:
            self._context = await self._browser.new_context(
                user_agent=self.config.user_agent,
                locale=self.config.locale,
                extra_http_headers={"Accept-Language": self.config.accept_language}
            )
            if self.config.block_resources:
                await self._context.route("**/*", self._block_non_essential)
            self.page = await self._context.new_page()
        except PlaywrightError as e:
            await self._shutdown()
            raise ExtractionError(f"Could not open browser page: {e.message}") from e
        except BaseException:
            await self._shutdown()
            raise

        return self.page

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self._shutdown()

    async def _block_non_essential(self, route: Route):
        """Abort images, media and fonts; everything else loads normally."""
        if route.request.resource_type in self.config.blocked_resource_types:
            await route.abort()
        else:
            await route.continue_()

    async def _shutdown(self):
        try:
            if self._browser is not None:
                await self._browser.close()
        except PlaywrightError as e:
            print(f"[BROWSER] WARNING: Error closing browser: {e.message}")
        finally:
            self._browser = None
            self._context = None
            self.page = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None


async def check_browser(config: Optional[Settings] = None) -> str:
    """
    Launch the engine and open a known page.

    Returns:
        Title of the check page

    Raises:
        ExtractionError: If the browser cannot start or load the page
    """
    config = config or default_settings
    async with BrowserSession(config) as page:
        try:
            await page.goto(
                config.browser_check_url,
                wait_until="domcontentloaded",
                timeout=config.navigation_timeout_ms
            )
            title = await page.title()
        except PlaywrightError as e:
            raise ExtractionError(f"Browser check failed: {e.message}") from e
    print(f"[BROWSER] Browser check loaded {config.browser_check_url!r}: {title!r}")
    return title
