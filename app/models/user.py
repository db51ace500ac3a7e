"""
app/models/user.py

Purpose: User document model

- Role, status, subscription tier and KYC enums
- Default profile for newly registered accounts
- Effective tier resolution (expired subscriptions fall back to free)
"""

from enum import Enum
from typing import Dict, Any, Optional

from utils.constants import DEFAULT_AVATAR_URL, DEFAULT_USER_NAME
from utils.time_utils import utc_now, is_subscription_active


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    BANNED = "banned"


class SubscriptionTier(str, Enum):
    FREE = "free"
    BASIC = "basic"
    PRO = "pro"


class VerificationStatus(str, Enum):
    UNVERIFIED = "unverified"
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class AuthProvider(str, Enum):
    PASSWORD = "password"
    GOOGLE = "google"


def new_user_document(
    user_id: str,
    email: str,
    name: Optional[str] = None,
    avatar: Optional[str] = None,
    password_hash: Optional[str] = None,
    provider: AuthProvider = AuthProvider.PASSWORD,
) -> Dict[str, Any]:
    """
    Builds the profile stored for a first-time user.
    """
    return {
        "_id": user_id,
        "name": name or DEFAULT_USER_NAME,
        "email": email,
        "password_hash": password_hash,
        "auth_provider": provider.value,
        "avatar": avatar or DEFAULT_AVATAR_URL.format(seed=user_id),
        "role": UserRole.USER.value,
        "status": UserStatus.ACTIVE.value,
        "joined_at": utc_now(),
        "subscription_tier": SubscriptionTier.FREE.value,
        "subscription_expires": None,
        "wallet_balance": 0,
        "verification_status": VerificationStatus.UNVERIFIED.value,
    }


def effective_tier(user: Dict[str, Any]) -> SubscriptionTier:
    """
    Tier that currently applies to a user. Paid tiers lapse to free once
    ``subscription_expires`` has passed.
    """
    tier = SubscriptionTier(user.get("subscription_tier") or SubscriptionTier.FREE.value)
    if tier == SubscriptionTier.FREE:
        return tier
    if not is_subscription_active(user.get("subscription_expires")):
        return SubscriptionTier.FREE
    return tier
