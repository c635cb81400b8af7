"""Render pages in a headless browser via Playwright."""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from types import TracebackType
from typing import AsyncIterator, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from site_backup.config import CrawlConfig

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """A page could not be loaded."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url


class FetchTimeoutError(FetchError):
    """Navigation did not reach network idle within the timeout."""

    def __init__(self, url: str, timeout_seconds: float) -> None:
        super().__init__(url, f"Navigation timeout of {timeout_seconds * 1000:.0f}ms exceeded loading {url}")
        self.timeout_seconds = timeout_seconds


class PageFetcher:
    """Load URLs one at a time in a single browser page."""

    def __init__(self, page: Page, timeout_seconds: float = 30.0) -> None:
        self._page = page
        self._timeout_seconds = timeout_seconds

    async def fetch(self, url: str) -> str:
        """Navigate to ``url``, wait for network idle, and return the rendered HTML.

        Raises:
            FetchTimeoutError: If the page did not settle within the timeout.
            FetchError: On navigation failure or a non-success response.
        """
        try:
            response = await self._page.goto(
                url,
                wait_until="networkidle",
                timeout=self._timeout_seconds * 1000,
            )
        except PlaywrightTimeoutError as exc:
            raise FetchTimeoutError(url, self._timeout_seconds) from exc
        except PlaywrightError as exc:
            raise FetchError(url, exc.message) from exc

        if response is not None and not response.ok:
            raise FetchError(url, f"HTTP {response.status} {response.status_text}".strip())

        return await self._page.content()


class BrowserSessionFactory:
    """Own one browser and hand out isolated sessions, one per lane.

    Use as an async context manager; while open, calling the factory returns
    an async context manager yielding a :class:`PageFetcher` bound to a fresh
    browser context (own cookies and storage, configured user agent).
    """

    def __init__(self, config: CrawlConfig) -> None:
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> BrowserSessionFactory:
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.config.headless)
        logger.debug("Launched Chromium (headless=%s)", self.config.headless)
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    @asynccontextmanager
    async def session(self) -> AsyncIterator[PageFetcher]:
        if self._browser is None:
            raise RuntimeError("BrowserSessionFactory must be entered before opening sessions")
        context = await self._browser.new_context(user_agent=self.config.user_agent)
        try:
            page = await context.new_page()
            yield PageFetcher(page, timeout_seconds=self.config.timeout_seconds)
        finally:
            await context.close()

    def __call__(self) -> AbstractAsyncContextManager[PageFetcher]:
        return self.session()
