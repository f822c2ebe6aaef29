"""Page renderer for sources that need script execution.

The extractors depend only on the PageRenderer protocol; PlaywrightRenderer
is the default implementation (headless Chromium, visible text only).
"""

from __future__ import annotations

import logging
from typing import Protocol

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from ..errors import FetchError

logger = logging.getLogger(__name__)


class PageRenderer(Protocol):
    """Render a URL and return the page's visible text."""

    async def render(
        self, url: str, timeout: float, user_agent: str | None = None
    ) -> str:
        ...


class PlaywrightRenderer:
    """Render pages with Playwright's headless Chromium."""

    def __init__(self, wait_until: str = "networkidle") -> None:
        self.wait_until = wait_until

    async def render(
        self, url: str, timeout: float, user_agent: str | None = None
    ) -> str:
        """Load ``url`` once and return ``document.body.innerText``.

        Raises:
            FetchError: If the browser cannot load the page in time.
        """
        try:
            async with async_playwright() as pw:
                browser = await pw.chromium.launch(headless=True)
                try:
                    context = await browser.new_context(user_agent=user_agent)
                    page = await context.new_page()
                    await page.goto(
                        url, wait_until=self.wait_until, timeout=timeout * 1000
                    )
                    text = await page.evaluate("() => document.body.innerText")
                finally:
                    await browser.close()
        except PlaywrightError as exc:
            raise FetchError(f"Rendering {url} failed: {exc}", url=url) from exc

        logger.debug("Rendered %s (%d chars)", url, len(text or ""))
        return text or ""
