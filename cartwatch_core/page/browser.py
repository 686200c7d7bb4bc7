"""
Browser rendering - load a live page with Playwright and snapshot it.

Storefronts render most of their product markup client-side, so the CLI
renders the page in headless Chromium before running detection on the
resulting HTML.
"""

import logging
import subprocess
import sys
from typing import Optional

from ..config import config
from ..exceptions import PageLoadError
from .html import HtmlDocument

logger = logging.getLogger(__name__)


def _launch_args(headless: bool) -> dict:
    return {
        "headless": headless,
        "args": [
            "--no-sandbox",
            "--disable-dev-shm-usage",
            "--disable-blink-features=AutomationControlled",
        ],
    }


async def launch_browser(playwright, headless: Optional[bool] = None):
    """Launch Chromium, installing it once if the executable is missing."""
    launch_args = _launch_args(config.headless if headless is None else headless)
    try:
        return await playwright.chromium.launch(**launch_args)
    except Exception as e:
        if "Executable doesn't exist" not in str(e):
            raise
        logger.warning("Chromium missing, running playwright install")
        subprocess.run(
            [sys.executable, "-m", "playwright", "install", "chromium"],
            capture_output=True,
            timeout=300,
        )
        return await playwright.chromium.launch(**launch_args)


async def snapshot_page(page) -> HtmlDocument:
    """Snapshot an already open Playwright page."""
    html = await page.content()
    return HtmlDocument.from_html(html, url=page.url)


async def render_page(
    url: str,
    headless: Optional[bool] = None,
    timeout_ms: Optional[int] = None,
) -> HtmlDocument:
    """
    Load ``url`` in headless Chromium and return the rendered document.

    Raises:
        PageLoadError: navigation failed or timed out
    """
    from playwright.async_api import async_playwright
    from playwright.async_api import Error as PlaywrightError

    timeout = timeout_ms or config.page_timeout_ms
    async with async_playwright() as p:
        browser = await launch_browser(p, headless)
        try:
            page = await browser.new_page()
            try:
                await page.goto(url, wait_until="domcontentloaded", timeout=timeout)
                try:
                    await page.wait_for_load_state("networkidle", timeout=min(timeout, 5000))
                except PlaywrightError:
                    logger.debug(f"networkidle not reached for {url}, using current DOM")
            except PlaywrightError as e:
                raise PageLoadError(f"Navigation failed for {url}: {e}") from e
            document = await snapshot_page(page)
        finally:
            await browser.close()

    logger.info(f"Rendered {url} ({len(document.soup.find_all(True))} elements)")
    return document
