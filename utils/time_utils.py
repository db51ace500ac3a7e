"""
utils/time_utils.py

Purpose: Time and expiry helpers

- Naive-UTC timestamps (matching what MongoDB returns)
- Subscription expiry calculation and checks
- Start-of-day boundary for daily posting limits
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Current UTC time as a naive datetime, truncated to milliseconds so it
    compares equal to the value read back from MongoDB.
    """
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def calculate_subscription_expiry(start: Optional[datetime] = None, days: int = 30) -> datetime:
    """
    Calculates when a subscription bought at ``start`` expires.
    """
    return (start or utc_now()) + timedelta(days=days)


def is_subscription_active(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    Checks if a subscription is still valid.
    """
    if not expires_at:
        return False
    return (now or utc_now()) < expires_at


def start_of_day(moment: Optional[datetime] = None) -> datetime:
    moment = moment or utc_now()
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)
