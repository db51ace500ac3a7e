"""
app/schemas/user.py

Purpose: User profile schemas

- Own profile (with wallet and verification data)
- Public seller card
- Admin moderation payloads
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from app.models.user import UserRole, UserStatus, SubscriptionTier, VerificationStatus


class PublicUser(BaseModel):
    """What other users see of a seller."""
    id: str
    name: str
    avatar: Optional[str] = None
    role: UserRole = UserRole.USER
    joined_at: Optional[datetime] = None
    location: Optional[str] = None
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED


class UserProfile(PublicUser):
    """The signed-in user's own profile."""
    email: str
    status: UserStatus = UserStatus.ACTIVE
    auth_provider: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    subscription_expires: Optional[datetime] = None
    wallet_balance: int = 0
    id_card_front: Optional[str] = None
    id_card_back: Optional[str] = None
    kyc_submitted_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    avatar: Optional[str] = Field(None, description="Image URL or base64 data URL")
    phone: Optional[str] = None
    location: Optional[str] = None
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


class UserPage(BaseModel):
    users: List[UserProfile]
    next_cursor: Optional[str] = None
    has_more: bool = False


class UserStatusUpdate(BaseModel):
    status: UserStatus


class UserRoleUpdate(BaseModel):
    role: UserRole


class VerificationSubmit(BaseModel):
    front_image: str = Field(..., description="Front of the ID card, base64 data URL")
    back_image: str = Field(..., description="Back of the ID card, base64 data URL")


class VerificationReview(BaseModel):
    approve: bool


class FollowStats(BaseModel):
    followers: int
    following: int


class FollowState(BaseModel):
    following: bool
