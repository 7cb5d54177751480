"""
Direct Playwright Client
========================

Launches the browser engine in-process with Playwright's async API. One
client is started per scenario; isolated contexts are opened on its
``browser`` by :class:`ui_tests.session_context.SessionManager`.

Usage:
    from ui_tests.playwright_client import PlaywrightClient

    async with PlaywrightClient() as client:
        async with SessionManager(client.browser, base_url=settings.base_url) as manager:
            session = await manager.create_session("Test User", credentials)
"""

import logging
from typing import Optional

from playwright.async_api import async_playwright, Browser, Playwright

from ui_tests.config import settings

logger = logging.getLogger(__name__)


class PlaywrightClient:
    """
    Direct Playwright client (no server required).

    Example:
        async with PlaywrightClient(headless=False) as client:
            context = await client.browser.new_context()
    """

    def __init__(
        self,
        browser_type: Optional[str] = None,
        headless: Optional[bool] = None,
    ):
        """
        Initialize Playwright client.

        Args:
            browser_type: Browser to use (chromium, firefox, webkit); defaults to settings
            headless: Run in headless mode (None = from settings)
        """
        self.browser_type = browser_type or settings.browser_type
        self.headless = settings.playwright_headless if headless is None else headless

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def connect(self):
        """Launch the Playwright browser."""
        self._playwright = await async_playwright().start()

        if self.browser_type == 'firefox':
            self._browser = await self._playwright.firefox.launch(headless=self.headless)
        elif self.browser_type == 'webkit':
            self._browser = await self._playwright.webkit.launch(headless=self.headless)
        else:
            self._browser = await self._playwright.chromium.launch(headless=self.headless)
        logger.debug("Launched %s (headless=%s)", self.browser_type, self.headless)

    async def close(self):
        """Close the browser and stop Playwright."""
        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    @property
    def browser(self) -> Browser:
        """Get the browser instance."""
        if not self._browser:
            raise RuntimeError("Client not connected")
        return self._browser
