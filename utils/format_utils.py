"""
utils/format_utils.py

Purpose: Display formatting helpers

- VND price formatting
- Relative time labels
- SEO slugs and listing URLs
"""

import re
import unicodedata
from datetime import datetime
from typing import Optional, Union

from utils.time_utils import utc_now


def format_price(amount: Union[int, float]) -> str:
    """
    Formats an amount in Vietnamese dong.

    Example: 1500000 -> "1.500.000 ₫"
    """
    return f"{int(round(amount)):,}".replace(",", ".") + " ₫"


def format_time_ago(moment: datetime, now: Optional[datetime] = None) -> str:
    """
    Returns a short Vietnamese "time ago" label for a timestamp.
    """
    now = now or utc_now()
    seconds = int((now - moment).total_seconds())

    if seconds < 60:
        return "Vừa xong"
    if seconds < 3600:
        return f"{seconds // 60} phút trước"
    if seconds < 86400:
        return f"{seconds // 3600} giờ trước"
    return f"{seconds // 86400} ngày trước"


def strip_accents(text: str) -> str:
    """Removes Vietnamese diacritics, mapping đ/Đ to d/D."""
    decomposed = unicodedata.normalize("NFD", text)
    without_marks = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    return without_marks.replace("đ", "d").replace("Đ", "D")


def slugify(text: str) -> str:
    """
    Builds a URL slug from free text.

    Example: "Bán iPhone 15 Pro Max!" -> "ban-iphone-15-pro-max"
    """
    text = strip_accents(str(text)).lower()
    text = re.sub(r"[^0-9a-z\-\s]", "", text)
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")


def get_listing_url(listing_id: str, title: str) -> str:
    """SEO-friendly listing path: /san-pham/<slug>-<id>."""
    return f"/san-pham/{slugify(title)}-{listing_id}"
