"""
app/services/screenshot_service.py

Purpose: JPEG screenshot of a product page for listings imported from a link

- Desktop viewport and user agent so shop sites skip their "open the app" overlay
- Scrolls once to trigger lazy-loaded images, then captures the viewport
"""

import base64
from typing import Optional, Callable, Any

from playwright.async_api import async_playwright, Error as PlaywrightError

from app.core.config import settings
from app.core.exceptions import ValidationError, ExternalServiceError
from app.core.logging import get_logger
from app.services.link_preview_service import BROWSER_USER_AGENT
from utils.validation_utils import is_public_http_url

logger = get_logger(__name__)

VIEWPORT = {"width": 1366, "height": 768}
JPEG_QUALITY = 70
SETTLE_MS = 3000

BROWSER_ARGS = ["--hide-scrollbars", "--no-sandbox", "--disable-setuid-sandbox"]

SCROLL_SCRIPT = """
async () => {
    window.scrollBy(0, 500);
    await new Promise((resolve) => setTimeout(resolve, 1000));
    window.scrollBy(0, 500);
    window.scrollTo(0, 0);
}
"""

CAPTURE_FAILED_MESSAGE = "Không thể truy cập trang web này. Vui lòng thử lại."


class ScreenshotService:
    """
    Headless Chromium capture via Playwright.

    ``playwright_factory`` returns an async context manager exposing
    ``chromium.launch()``; it defaults to ``async_playwright``.
    """

    def __init__(self, playwright_factory: Optional[Callable[[], Any]] = None, settle_ms: int = SETTLE_MS):
        self._playwright_factory = playwright_factory or async_playwright
        self._settle_ms = settle_ms
        self._timeout_ms = int(settings.SCREENSHOT_TIMEOUT_SECONDS * 1000)

    async def capture(self, url: str) -> str:
        """
        Captures ``url`` and returns a ``data:image/jpeg;base64,...`` string.

        Raises:
            ValidationError: If ``url`` is not a public http(s) link
            ExternalServiceError: If the page cannot be loaded or captured
        """
        url = (url or "").strip()
        if not is_public_http_url(url):
            raise ValidationError("Link không hợp lệ.")

        try:
            async with self._playwright_factory() as playwright:
                browser = await playwright.chromium.launch(args=BROWSER_ARGS)
                try:
                    page = await browser.new_page(
                        viewport=VIEWPORT,
                        user_agent=BROWSER_USER_AGENT,
                        ignore_https_errors=True,
                    )
                    await page.goto(url, wait_until="networkidle", timeout=self._timeout_ms)
                    await page.evaluate(SCROLL_SCRIPT)
                    await page.wait_for_timeout(self._settle_ms)
                    image = await page.screenshot(type="jpeg", quality=JPEG_QUALITY, full_page=False)
                finally:
                    await browser.close()
        except PlaywrightError as e:
            logger.error(f"Screenshot failed for {url}: {e}")
            raise ExternalServiceError(CAPTURE_FAILED_MESSAGE)

        logger.info(f"Captured screenshot of {url} ({len(image)} bytes)")
        return "data:image/jpeg;base64," + base64.b64encode(image).decode()


# Global service instance
_screenshot_service: Optional[ScreenshotService] = None


def get_screenshot_service() -> ScreenshotService:
    """Get or create the global screenshot service."""
    global _screenshot_service
    if _screenshot_service is None:
        _screenshot_service = ScreenshotService()
    return _screenshot_service


def set_screenshot_service(service: Optional[ScreenshotService]):
    """Replaces the global instance (tests inject a fake browser)."""
    global _screenshot_service
    _screenshot_service = service
