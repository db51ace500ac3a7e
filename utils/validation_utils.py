"""
utils/validation_utils.py

Purpose: Input validation

- Base64 data URL parsing for uploads
- E-mail and Vietnamese phone number checks
- Rating range checks
- Public http(s) link checks for server-side fetches
- Input sanitization
"""

import base64
import binascii
import ipaddress
import re
from typing import Optional, Tuple
from urllib.parse import urlparse


_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[\w-]+=[\w.-]+)*)(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)


def is_data_url(value: Optional[str]) -> bool:
    """True if the value looks like a ``data:`` URL rather than a plain link."""
    return bool(value) and value.startswith("data:")


def parse_data_url(data_url: str) -> Optional[Tuple[str, bytes]]:
    """
    Decodes a base64 ``data:`` URL.

    Args:
        data_url: e.g. "data:image/jpeg;base64,/9j/4AAQ..."

    Returns:
        (content_type, raw bytes) or None if the URL is malformed
    """
    if not data_url:
        return None

    match = _DATA_URL_RE.match(data_url.strip())
    if not match or not match.group("b64"):
        return None

    content_type = match.group("mime") or "application/octet-stream"
    try:
        raw = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError):
        return None

    return content_type.lower(), raw


def validate_email(email: str) -> bool:
    """
    Validates a basic e-mail address shape.
    """
    if not email:
        return False
    return bool(re.match(r"^[^@\s]+@[^@\s]+\.[^@\s]+$", email.strip()))


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_phone_number(phone: str) -> bool:
    """
    Validates Vietnamese mobile number format.

    Accepts 0xxxxxxxxx or +84xxxxxxxxx (10 digits nationally).
    """
    if not phone:
        return False

    phone = re.sub(r"[\s\-\(\)\.]", "", phone)

    if phone.startswith("+84"):
        phone = "0" + phone[3:]
    elif phone.startswith("84") and len(phone) == 11:
        phone = "0" + phone[2:]

    return bool(re.match(r"^0[35789]\d{8}$", phone))


def validate_rating(rating: int) -> bool:
    """Ratings are whole stars from 1 to 5."""
    return isinstance(rating, int) and not isinstance(rating, bool) and 1 <= rating <= 5


def sanitize_input(text: str, max_length: int = 1000) -> str:
    """
    Sanitizes user input to prevent markup injection.

    Args:
        text: Input text
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    text = text[:max_length]
    text = re.sub(r"[<>{}\[\]]", "", text)
    text = " ".join(text.split())

    return text.strip()


def is_public_http_url(url: str) -> bool:
    """
    True for an http(s) link whose host is not local or a private address.

    Hostnames are not resolved; only literal IPs and localhost are refused.
    """
    if not url:
        return False

    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False

    host = parsed.hostname.lower()
    if host == "localhost" or host.endswith(".localhost"):
        return False

    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return True
    return address.is_global
