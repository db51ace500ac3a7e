"""
app/services/link_preview_service.py

Purpose: Import title and image from a product link (Shopee, Lazada, ...)

- Fetches the page directly, then through a fetch proxy if that fails
- Reads Open Graph / Twitter tags, <title> and Product JSON-LD
- Brand is guessed from the link itself
"""

import json
from typing import Optional, Dict, Any, List, Tuple

import httpx
from bs4 import BeautifulSoup

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from utils.validation_utils import is_public_http_url

logger = get_logger(__name__)

BRANDS = (
    ("shopee", "Shopee"),
    ("lazada", "Lazada"),
    ("tiki", "Tiki"),
    ("tiktok", "TikTok Shop"),
    ("sendo", "Sendo"),
    ("youtube", "Youtube"),
)
DEFAULT_BRAND = "Website khác"

# Shorter bodies are error or consent pages
MIN_HTML_LENGTH = 100

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

UNREACHABLE_MESSAGE = "Không thể kết nối tới trang web này."
BLOCKED_MESSAGE = "Trang web chặn bot. Vui lòng nhập thủ công."


def detect_brand(url: str) -> str:
    lowered = url.lower()
    for needle, brand in BRANDS:
        if needle in lowered:
            return brand
    return DEFAULT_BRAND


def _meta(soup: BeautifulSoup, **attrs) -> str:
    tag = soup.find("meta", attrs=attrs)
    return (tag.get("content") or "").strip() if tag else ""


def _json_ld_product(soup: BeautifulSoup) -> Tuple[str, str]:
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            data = json.loads(script.string or "{}")
        except ValueError:
            continue
        for item in data if isinstance(data, list) else [data]:
            if not isinstance(item, dict) or item.get("@type") not in ("Product", "ItemPage"):
                continue
            image = item.get("image") or ""
            if isinstance(image, list):
                image = image[0] if image else ""
            return str(item.get("name") or ""), str(image)
    return "", ""


def parse_link_metadata(html: str) -> Dict[str, str]:
    """
    Extracts ``{title, image}`` from a product page. Missing values are "".
    """
    soup = BeautifulSoup(html, "html.parser")

    title = (
        _meta(soup, property="og:title")
        or _meta(soup, name="twitter:title")
        or (soup.title.get_text(strip=True) if soup.title else "")
    )

    image = _meta(soup, property="og:image") or _meta(soup, name="twitter:image")
    if not image:
        link = soup.find("link", rel="image_src")
        image = (link.get("href") or "").strip() if link else ""

    if not title or not image:
        ld_title, ld_image = _json_ld_product(soup)
        title = title or ld_title
        image = image or ld_image

    if image.startswith("//"):
        image = "https:" + image

    return {"title": title.strip(), "image": image}


class LinkPreviewService:
    """
    Fetches product pages for the "import from link" form.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport
        self._timeout = settings.HTTP_TIMEOUT_SECONDS

    async def _fetch_direct(self, client: httpx.AsyncClient, url: str) -> str:
        response = await client.get(url, headers={"User-Agent": BROWSER_USER_AGENT})
        response.raise_for_status()
        return response.text

    async def _fetch_via_proxy(self, client: httpx.AsyncClient, url: str) -> str:
        response = await client.get(settings.LINK_PREVIEW_PROXY_URL, params={"url": url})
        response.raise_for_status()
        return (response.json() or {}).get("contents") or ""

    async def fetch_html(self, url: str) -> Optional[str]:
        """
        Returns the page HTML from the first source that answers, else None.
        """
        sources: List[Tuple[str, Any]] = [
            ("direct", self._fetch_direct),
            ("proxy", self._fetch_via_proxy),
        ]
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport, follow_redirects=True
        ) as client:
            for name, fetch in sources:
                try:
                    html = await fetch(client, url)
                except (httpx.HTTPError, ValueError) as e:
                    logger.warning(f"Link fetch via {name} failed for {url}: {e}")
                    continue
                if html and len(html) > MIN_HTML_LENGTH:
                    return html
                logger.warning(f"Link fetch via {name} returned an empty page for {url}")
        return None

    async def crawl_link_metadata(self, url: str) -> Dict[str, Any]:
        """
        Builds a listing draft from a product link.

        Returns:
            ``{"success": True, "data": {title, image, url, brand}}`` or
            ``{"success": False, "error": message}`` when the page cannot be read

        Raises:
            ValidationError: If ``url`` is not a public http(s) link
        """
        url = (url or "").strip()
        if not is_public_http_url(url):
            raise ValidationError("Link không hợp lệ.")

        brand = detect_brand(url)
        logger.info(f"Importing link metadata from {brand}: {url}")

        html = await self.fetch_html(url)
        if html is None:
            return {"success": False, "error": UNREACHABLE_MESSAGE}

        metadata = parse_link_metadata(html)
        if not metadata["title"] and not metadata["image"]:
            return {"success": False, "error": BLOCKED_MESSAGE}

        return {"success": True, "data": {**metadata, "url": url, "brand": brand}}


# Global service instance
_link_preview_service: Optional[LinkPreviewService] = None


def get_link_preview_service() -> LinkPreviewService:
    """Get or create the global link preview service."""
    global _link_preview_service
    if _link_preview_service is None:
        _link_preview_service = LinkPreviewService()
    return _link_preview_service


def set_link_preview_service(service: Optional[LinkPreviewService]):
    """Replaces the global instance (tests inject a mocked transport)."""
    global _link_preview_service
    _link_preview_service = service
