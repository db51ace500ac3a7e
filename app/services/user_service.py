"""
app/services/user_service.py

Purpose: User data management

- Profile retrieval and updates
- Admin user search, ban/unban and role changes
- Identity verification (KYC) submission and review
"""

import re
from typing import Optional, Dict, Any, List, Tuple

from pymongo import ReturnDocument

from app.core.exceptions import UserNotFoundError, ValidationError, ConflictError
from app.core.logging import get_logger, LogContext
from app.db.mongo import get_users_collection
from app.db.pagination import find_page
from app.models.social import NotificationType
from app.models.user import UserRole, UserStatus, VerificationStatus
from app.realtime.hub import get_event_hub, user_tag
from app.services import notification_service, storage_service
from utils.constants import (
    KYC_VERIFIED_TITLE,
    KYC_VERIFIED_MESSAGE,
    KYC_REJECTED_TITLE,
    KYC_REJECTED_MESSAGE,
)
from utils.time_utils import utc_now
from utils.validation_utils import validate_phone_number, sanitize_input

logger = get_logger(__name__)

# Fields a user may change on their own profile
PROFILE_FIELDS = ("name", "avatar", "phone", "location", "address", "lat", "lng")


async def get_user(user_id: str) -> Optional[Dict[str, Any]]:
    """
    Retrieves a user by ID.

    Returns:
        User document or None if not found
    """
    return await get_users_collection().find_one({"_id": user_id})


async def get_user_or_raise(user_id: str) -> Dict[str, Any]:
    user = await get_user(user_id)
    if not user:
        raise UserNotFoundError()
    return user


async def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    return await get_users_collection().find_one({"email": email})


async def update_user_profile(user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Updates the whitelisted profile fields of a user.

    Args:
        user_id: User ID
        changes: Partial profile; unknown keys are ignored

    Returns:
        Updated user document
    """
    with LogContext(user_id=user_id):
        update = {k: v for k, v in changes.items() if k in PROFILE_FIELDS and v is not None}

        if "phone" in update and not validate_phone_number(update["phone"]):
            raise ValidationError("Invalid phone number")
        if "name" in update:
            update["name"] = sanitize_input(update["name"], max_length=100)
            if not update["name"]:
                raise ValidationError("Name must not be empty")
        if "avatar" in update:
            update["avatar"] = await storage_service.store_image_if_needed(
                update["avatar"], f"avatars/{user_id}", owner_id=user_id
            )

        if not update:
            return await get_user_or_raise(user_id)

        user = await get_users_collection().find_one_and_update(
            {"_id": user_id},
            {"$set": update},
            return_document=ReturnDocument.AFTER
        )
        if not user:
            raise UserNotFoundError()

        logger.info(f"Profile updated: {', '.join(sorted(update))}")
        return user


async def get_users_paged(
    page_size: int = 20,
    cursor: Optional[str] = None,
    search: Optional[str] = None,
    verification_status: Optional[VerificationStatus] = None,
) -> Tuple[List[Dict[str, Any]], Optional[str], bool]:
    """
    Pages through users, newest accounts first (admin view).

    Returns:
        (users, next_cursor, has_more)
    """
    query: Dict[str, Any] = {}
    if verification_status:
        query["verification_status"] = VerificationStatus(verification_status).value
    if search:
        pattern = re.escape(search.strip())
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"email": {"$regex": pattern, "$options": "i"}},
            {"phone": {"$regex": pattern, "$options": "i"}},
        ]

    return await find_page(get_users_collection(), query, "joined_at", page_size, cursor)


async def set_user_status(user_id: str, status: UserStatus) -> Dict[str, Any]:
    """Bans or reinstates a user."""
    status = UserStatus(status)
    user = await get_users_collection().find_one_and_update(
        {"_id": user_id},
        {"$set": {"status": status.value}},
        return_document=ReturnDocument.AFTER
    )
    if not user:
        raise UserNotFoundError()
    logger.warning(f"User status set to {status.value}", extra={"user_id": user_id})

    if status == UserStatus.BANNED:
        closed = get_event_hub().close_tagged(user_tag(user_id))
        if closed:
            logger.info(f"Closed {closed} live feeds of banned user", extra={"user_id": user_id})
    return user


async def set_user_role(user_id: str, role: UserRole) -> Dict[str, Any]:
    role = UserRole(role)
    user = await get_users_collection().find_one_and_update(
        {"_id": user_id},
        {"$set": {"role": role.value}},
        return_document=ReturnDocument.AFTER
    )
    if not user:
        raise UserNotFoundError()
    logger.warning(f"User role set to {role.value}", extra={"user_id": user_id})
    return user


async def submit_verification(user_id: str, front_image: str, back_image: str) -> Dict[str, Any]:
    """
    Uploads both sides of an ID card and queues the user for review.

    Raises:
        ConflictError: If the user is already verified
    """
    with LogContext(user_id=user_id):
        user = await get_user_or_raise(user_id)
        if user.get("verification_status") == VerificationStatus.VERIFIED.value:
            raise ConflictError("User is already verified", code="ALREADY_VERIFIED")

        front_url = await storage_service.store_image_if_needed(front_image, f"kyc/{user_id}", owner_id=user_id)
        back_url = await storage_service.store_image_if_needed(back_image, f"kyc/{user_id}", owner_id=user_id)

        user = await get_users_collection().find_one_and_update(
            {"_id": user_id},
            {"$set": {
                "verification_status": VerificationStatus.PENDING.value,
                "id_card_front": front_url,
                "id_card_back": back_url,
                "kyc_submitted_at": utc_now(),
            }},
            return_document=ReturnDocument.AFTER
        )
        logger.info("Verification submitted")
        return user


async def review_verification(user_id: str, approve: bool) -> Dict[str, Any]:
    """
    Admin decision on a pending verification. Notifies the user.
    """
    with LogContext(user_id=user_id):
        status = VerificationStatus.VERIFIED if approve else VerificationStatus.REJECTED

        user = await get_users_collection().find_one_and_update(
            {"_id": user_id, "verification_status": VerificationStatus.PENDING.value},
            {"$set": {"verification_status": status.value}},
            return_document=ReturnDocument.AFTER
        )
        if not user:
            await get_user_or_raise(user_id)
            raise ConflictError("No pending verification for this user", code="NO_PENDING_VERIFICATION")

        if approve:
            await notification_service.send_notification(
                user_id, KYC_VERIFIED_TITLE, KYC_VERIFIED_MESSAGE,
                type=NotificationType.SUCCESS, link="/profile"
            )
        else:
            await notification_service.send_notification(
                user_id, KYC_REJECTED_TITLE, KYC_REJECTED_MESSAGE,
                type=NotificationType.WARNING, link="/profile"
            )

        logger.info(f"Verification {status.value}")
        return user
