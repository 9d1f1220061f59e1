# catalog_pipeline/delegates/browser_delegate.py
import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from playwright.async_api import async_playwright, Playwright, Browser, BrowserContext, Page
from playwright.async_api import Error as PlaywrightError

from ..errors import NavigationFault, QueryFault

logger = logging.getLogger(__name__)


class BrowserDelegate:
    """
    Owns the Playwright driver, the browser and a single browser context.
    Every scrape opens its own page through new_page(); the browser stays up
    until the async with block exits.
    """
    def __init__(self, user_agent: str, viewport: Dict, headless: bool = True, har_output_path: Optional[Path] = None):
        self.user_agent = user_agent
        self.viewport = viewport
        self.headless = headless
        self.har_output_path = har_output_path
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def __aenter__(self):
        logger.debug("Starting Playwright and launching browser (headless=%s)...", self.headless)
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.headless)

        context_options = {"user_agent": self.user_agent, "viewport": self.viewport}
        if self.har_output_path:
            logger.debug("Enabling HAR recording to: %s", self.har_output_path)
            context_options.update(
                record_har_path=self.har_output_path,
                record_har_omit_content=False,
                record_har_mode="full",
            )
        self._context = await self._browser.new_context(**context_options)
        logger.debug("Playwright browser launched and context created.")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        logger.debug("Closing browser context, browser and stopping Playwright...")
        if self._context:
            await self._context.close() # This will finalize the HAR file
        if self._browser:
            await self._browser.close()
        if self._playwright:
            await self._playwright.stop()
        self._context = self._browser = self._playwright = None
        logger.debug("Playwright resources released.")

    async def new_page(self) -> Page:
        if not self._context:
            raise RuntimeError("Browser context not initialized. Use 'async with BrowserDelegate(...)'.")
        return await self._context.new_page()


async def navigate(page, url: str, timeout_ms: int):
    """Navigates and waits for network idle, turning browser errors into NavigationFault."""
    logger.debug("Navigating to %s (timeout: %s ms)", url, timeout_ms)
    try:
        await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
    except PlaywrightError as e:
        raise NavigationFault(url, str(e)) from e
    logger.debug("Network idle reached for %s", url)


async def run_query(page, script: str, arg: Any, name: str, timeout_ms: Optional[int], url: Optional[str] = None) -> Any:
    """Evaluates a read-only projection, raising QueryFault on browser errors or timeout."""
    try:
        coro = page.evaluate(script, arg)
        if timeout_ms is None:
            return await coro
        return await asyncio.wait_for(coro, timeout=timeout_ms / 1000)
    except asyncio.TimeoutError as e:
        raise QueryFault(name, url, f"timed out after {timeout_ms} ms") from e
    except PlaywrightError as e:
        raise QueryFault(name, url, str(e)) from e
