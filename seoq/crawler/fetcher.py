# seoq/crawler/fetcher.py
"""
Fetcher module: loads page HTML either over plain HTTP (aiohttp) or through a
headless Chromium browser (playwright).

Both fetchers expose ``async fetch(url) -> str`` and raise
:class:`~seoq.errors.FetchError` with a :class:`~seoq.errors.FetchErrorKind`
telling timeouts, HTTP status failures and network errors apart.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator, Protocol, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout
from playwright.async_api import Browser, Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from seoq.config import FetchMode, SeoqConfig
from seoq.errors import BrowserLaunchError, FetchError, FetchErrorKind

__all__ = [
    "PageFetcher",
    "HttpPageFetcher",
    "BrowserPageFetcher",
    "BROWSER_TIMEOUT_MS",
    "RETRY_STATUS",
    "create_session",
    "open_browser",
    "open_fetcher",
]

BROWSER_TIMEOUT_MS = 30_000
RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

logger = logging.getLogger("seoq")


class PageFetcher(Protocol):
    async def fetch(self, url: str) -> str: ...


def create_session(config: SeoqConfig) -> ClientSession:
    """aiohttp session with the configured timeout and User-Agent."""
    return ClientSession(
        timeout=ClientTimeout(total=config.timeout),
        headers={"User-Agent": config.user_agent},
        raise_for_status=False,
    )


class HttpPageFetcher:
    """Handles HTTP fetching with retries/backoff on 5xx and 429, and timeout."""

    def __init__(
        self,
        session: ClientSession,
        config: SeoqConfig,
        retry_status: Sequence[int] = RETRY_STATUS,
    ) -> None:
        self.session = session
        self.config = config
        self._retry_status = retry_status

    async def fetch(self, url: str) -> str:
        attempts = 0
        while True:
            try:
                async with self.session.get(url) as resp:
                    if resp.status in self._retry_status and attempts < self.config.retry_times:
                        raise ClientError(f"Retryable status {resp.status}")
                    if resp.status >= 400:
                        raise FetchError(
                            f"Failed to fetch page content: HTTP {resp.status} {resp.reason or ''}".rstrip(),
                            kind=FetchErrorKind.HTTP_STATUS,
                            status=resp.status,
                        )
                    return await resp.text(errors="replace")
            except asyncio.TimeoutError as exc:
                # no retry on timeout
                raise FetchError(
                    f"Failed to fetch page content: Request timeout after {self.config.timeout:g}s.",
                    kind=FetchErrorKind.TIMEOUT,
                ) from exc
            except ClientError as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    raise FetchError(
                        f"Failed to fetch page content: Network error. {exc}",
                        kind=FetchErrorKind.NETWORK,
                    ) from exc
                # exponential backoff, cap at 60s
                backoff = min(2**attempts, 60)
                logger.debug("Retry %d/%d for %s after %d s", attempts, self.config.retry_times, url, backoff)
                await asyncio.sleep(backoff)


class BrowserPageFetcher:
    """Renders pages in a shared browser; every call opens and closes its own page."""

    def __init__(self, browser: Browser, timeout_ms: int = BROWSER_TIMEOUT_MS) -> None:
        self.browser = browser
        self.timeout_ms = timeout_ms

    async def fetch(self, url: str) -> str:
        page = await self.browser.new_page()
        try:
            await page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)
            return await page.content()
        except PlaywrightTimeoutError as exc:
            raise FetchError(
                f"Failed to fetch page content: Navigation timeout after {self.timeout_ms // 1000}s. "
                "The page may be loading slowly or unresponsive.",
                kind=FetchErrorKind.TIMEOUT,
            ) from exc
        except PlaywrightError as exc:
            raise FetchError(
                f"Failed to fetch page content: Network error. {exc.message}",
                kind=FetchErrorKind.NETWORK,
            ) from exc
        finally:
            with suppress(PlaywrightError):
                await page.close()


@asynccontextmanager
async def open_browser() -> AsyncIterator[Browser]:
    """Launch one headless Chromium and close it exactly once on exit."""
    async with async_playwright() as pw:
        try:
            browser = await pw.chromium.launch(headless=True)
        except PlaywrightError as exc:
            raise BrowserLaunchError(exc.message) from exc
        logger.debug("Browser launched")
        try:
            yield browser
        finally:
            with suppress(PlaywrightError):
                await browser.close()
            logger.debug("Browser closed")


@asynccontextmanager
async def open_fetcher(config: SeoqConfig, mode: FetchMode | None = None) -> AsyncIterator[PageFetcher]:
    """Shared fetcher for a whole batch: one browser or one HTTP session."""
    mode = mode or config.fetch_mode
    if mode == "browser":
        async with open_browser() as browser:
            yield BrowserPageFetcher(browser, timeout_ms=int(config.browser_timeout * 1000))
    else:
        async with create_session(config) as session:
            yield HttpPageFetcher(session, config)
