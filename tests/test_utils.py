from datetime import datetime, timedelta

import pytest

from app.core.exceptions import ValidationError
from app.db.pagination import encode_cursor, decode_cursor
from app.models.listing import seller_can_set, ListingStatus
from app.models.transaction import is_valid_transition, TransactionStatus
from app.models.user import effective_tier, SubscriptionTier
from utils.format_utils import format_price, format_time_ago, slugify, get_listing_url
from utils.search_utils import build_keywords, is_search_match, calculate_relevance_score
from utils.time_utils import utc_now, is_subscription_active, start_of_day
from utils.validation_utils import (
    parse_data_url,
    validate_email,
    validate_phone_number,
    validate_rating,
    sanitize_input,
)


def test_format_price():
    assert format_price(1500000) == "1.500.000 ₫"
    assert format_price(0) == "0 ₫"


def test_format_time_ago():
    now = datetime(2024, 1, 2, 12, 0, 0)
    assert format_time_ago(now - timedelta(seconds=10), now) == "Vừa xong"
    assert format_time_ago(now - timedelta(minutes=5), now) == "5 phút trước"
    assert format_time_ago(now - timedelta(hours=3), now) == "3 giờ trước"
    assert format_time_ago(now - timedelta(days=2), now) == "2 ngày trước"


def test_slugify_strips_vietnamese_accents():
    assert slugify("Bán iPhone 15 Pro Max!") == "ban-iphone-15-pro-max"
    assert slugify("Đồ gia dụng, nội thất") == "do-gia-dung-noi-that"
    assert get_listing_url("abc", "Xe Đạp") == "/san-pham/xe-dap-abc"


def test_search_match_uses_token_prefixes():
    assert is_search_match("Bán iPhone 15 Pro", "ip 15")
    assert is_search_match("Điện thoại Samsung", "dien thoai")
    assert not is_search_match("Điện thoại Samsung", "laptop")
    assert not is_search_match("Anything", "   ")


def test_relevance_prefers_exact_and_leading_matches():
    exact = calculate_relevance_score("iPhone 15", "iphone 15")
    leading = calculate_relevance_score("iPhone 15 Pro Max", "iphone 15")
    inner = calculate_relevance_score("Ốp lưng iPhone 15", "iphone 15")
    assert exact > leading > inner


def test_build_keywords_unique_in_order():
    assert build_keywords("Xe đạp xe máy") == ["xe", "dap", "may"]


def test_parse_data_url():
    content_type, raw = parse_data_url("data:image/PNG;base64,aGVsbG8=")
    assert content_type == "image/png"
    assert raw == b"hello"
    assert parse_data_url("data:image/png,notbase64") is None
    assert parse_data_url("data:image/png;base64,@@@") is None
    assert parse_data_url("https://example.com/a.png") is None


@pytest.mark.parametrize("phone,valid", [
    ("0912345678", True),
    ("+84912345678", True),
    ("091 234 5678", True),
    ("0112345678", False),
    ("12345", False),
])
def test_validate_phone_number(phone, valid):
    assert validate_phone_number(phone) is valid


def test_validate_email_and_rating():
    assert validate_email("an@example.com")
    assert not validate_email("not-an-email")
    assert validate_rating(5)
    assert not validate_rating(True)
    assert not validate_rating(4.5)


def test_sanitize_input():
    assert sanitize_input("  <b>Xin   chào</b> ") == "bXin chào/b"
    assert sanitize_input("abcdef", max_length=3) == "abc"
    assert sanitize_input(None) == ""


def test_effective_tier_lapses_after_expiry():
    now = utc_now()
    assert effective_tier({"subscription_tier": "pro", "subscription_expires": now + timedelta(days=1)}) == SubscriptionTier.PRO
    assert effective_tier({"subscription_tier": "pro", "subscription_expires": now - timedelta(days=1)}) == SubscriptionTier.FREE
    assert effective_tier({"subscription_tier": "basic", "subscription_expires": None}) == SubscriptionTier.FREE
    assert effective_tier({}) == SubscriptionTier.FREE


def test_subscription_active_and_start_of_day():
    moment = datetime(2024, 5, 1, 15, 30)
    assert is_subscription_active(moment, now=moment - timedelta(seconds=1))
    assert not is_subscription_active(moment, now=moment)
    assert start_of_day(moment) == datetime(2024, 5, 1)


def test_transaction_transitions():
    assert is_valid_transition(TransactionStatus.PENDING, TransactionStatus.SUCCESS)
    assert is_valid_transition(TransactionStatus.PENDING, TransactionStatus.FAILED)
    assert not is_valid_transition(TransactionStatus.SUCCESS, TransactionStatus.FAILED)


def test_seller_transitions():
    assert seller_can_set(ListingStatus.APPROVED, ListingStatus.SOLD)
    assert seller_can_set(ListingStatus.HIDDEN, ListingStatus.APPROVED)
    assert not seller_can_set(ListingStatus.PENDING, ListingStatus.APPROVED)
    assert not seller_can_set(ListingStatus.REJECTED, ListingStatus.HIDDEN)


def test_cursor_roundtrip_and_garbage():
    moment = datetime(2024, 5, 1, 15, 30, 0, 123000)
    assert decode_cursor(encode_cursor(moment, "abc")) == (moment, "abc")
    with pytest.raises(ValidationError):
        decode_cursor("%%%")
