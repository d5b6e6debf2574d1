"""
Render Session and PDF emission using Playwright/Chromium.

Every conversion launches its own Chromium process, loads the sanitized
HTML, strips the reserved wrapper element, measures the content height and
prints a single page exactly that tall. The browser is always torn down
when the session exits, whether or not rendering succeeded.
"""

import logging
import os
from typing import Any, Dict, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright

from .config import ServiceSettings
from .errors import BrowserUnavailableError

logger = logging.getLogger(__name__)

WRAPPER_ELEMENT_ID = "awesomewrap"
PDF_PAGE_WIDTH = "210mm"  # A4 width

# Flags for containers and serverless hosts without a usable sandbox or /dev/shm
CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]

REMOVE_WRAPPER_SCRIPT = """
(elementId) => {
    const element = document.getElementById(elementId);
    if (element) {
        element.remove();
    }
}
"""

MEASURE_HEIGHT_SCRIPT = """
() => {
    document.body.style.margin = "0";
    return document.documentElement.scrollHeight;
}
"""


def build_pdf_options(content_height: int) -> Dict[str, Any]:
    """
    Build keyword arguments for ``page.pdf`` sized to the rendered content.

    Width is fixed to A4; height is the measured content height so the
    document fits on exactly one page with no blank trailer. Explicit
    dimensions win over any ``@page`` size in the document's stylesheets.

    Args:
        content_height: Scroll height of the document root in pixels

    Returns:
        Dict of Playwright PDF options
    """
    height = max(int(content_height), 1)
    return {
        "width": PDF_PAGE_WIDTH,
        "height": f"{height}px",
        "print_background": True,
        "prefer_css_page_size": False,
        "page_ranges": "1",
    }


class RenderSession:
    """
    One isolated Chromium process dedicated to a single conversion.

    Use as an async context manager::

        async with RenderSession(settings) as session:
            await session.load(html)
            ...
    """

    def __init__(self, settings: ServiceSettings):
        self.settings = settings
        self.page: Optional[Page] = None
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> "RenderSession":
        self._playwright = await async_playwright().start()
        try:
            executable_path = self._resolve_executable_path()
            logger.info(f"Chromium executable path: {executable_path}")

            self._browser = await self._playwright.chromium.launch(
                headless=self.settings.playwright_headless,
                executable_path=executable_path,
                args=CHROMIUM_ARGS,
            )
            self.page = await self._browser.new_page()
            self.page.set_default_timeout(self.settings.playwright_timeout)
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _resolve_executable_path(self) -> str:
        path = self.settings.chromium_executable_path or self._playwright.chromium.executable_path
        if not path or not os.path.exists(path):
            raise BrowserUnavailableError(f"Chromium executable not found at {path or '<unresolved>'}")
        return path

    async def close(self) -> None:
        """Tear down the browser and the Playwright driver. Safe to call twice."""
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None
        self.page = None

        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.warning(f"Failed to close Chromium cleanly: {e}")
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning(f"Failed to stop Playwright cleanly: {e}")

    async def load(self, html: str) -> None:
        """Set the page content and wait until the network goes idle."""
        await self.page.set_content(
            html,
            wait_until="networkidle",
            timeout=self.settings.playwright_timeout,
        )

    async def remove_wrapper(self) -> None:
        """Delete the reserved wrapper element if the document has one."""
        await self.page.evaluate(REMOVE_WRAPPER_SCRIPT, WRAPPER_ELEMENT_ID)

    async def measure_content_height(self) -> int:
        """Zero the body margin and return the root element's scroll height."""
        height = await self.page.evaluate(MEASURE_HEIGHT_SCRIPT)
        return int(height)

    async def pdf(self, content_height: int) -> bytes:
        """Print the loaded page as a single PDF page of the given height."""
        return await self.page.pdf(**build_pdf_options(content_height))


async def render_html_to_pdf(html: str, settings: ServiceSettings) -> bytes:
    """
    Render sanitized HTML to PDF bytes in a fresh browser process.

    Args:
        html: Sanitized HTML document or fragment
        settings: Service settings (timeouts, headless mode, executable path)

    Returns:
        PDF binary data

    Raises:
        BrowserUnavailableError: If Chromium cannot be located
        playwright.async_api.Error: On load timeout or rendering failure
    """
    async with RenderSession(settings) as session:
        await session.load(html)
        await session.remove_wrapper()
        content_height = await session.measure_content_height()
        logger.info(f"Measured content height: {content_height}px")
        pdf_bytes = await session.pdf(content_height)

    logger.info(f"Generated PDF ({len(pdf_bytes)} bytes)")
    return pdf_bytes
