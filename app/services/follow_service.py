"""
app/services/follow_service.py

Purpose: Follow graph between users
"""

from typing import Dict

from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from app.db.mongo import get_collection, FOLLOWS
from app.models.social import NotificationType
from app.services import notification_service, user_service
from utils.constants import NEW_FOLLOWER_TITLE, NEW_FOLLOWER_MESSAGE, ANONYMOUS_USER_NAME
from utils.time_utils import utc_now

logger = get_logger(__name__)


def follow_id(follower_id: str, followed_id: str) -> str:
    return f"{follower_id}_{followed_id}"


async def check_is_following(follower_id: str, followed_id: str) -> bool:
    count = await get_collection(FOLLOWS).count_documents({"_id": follow_id(follower_id, followed_id)})
    return count > 0


async def follow_user(follower_id: str, followed_id: str) -> None:
    """
    Follows a user and notifies them. Following twice is a no-op.
    """
    if follower_id == followed_id:
        raise ValidationError("You cannot follow yourself")

    await user_service.get_user_or_raise(followed_id)

    result = await get_collection(FOLLOWS).update_one(
        {"_id": follow_id(follower_id, followed_id)},
        {"$setOnInsert": {
            "follower_id": follower_id,
            "followed_id": followed_id,
            "created_at": utc_now(),
        }},
        upsert=True
    )
    if result.upserted_id is None:
        return

    follower = await user_service.get_user(follower_id)
    await notification_service.send_notification(
        followed_id,
        NEW_FOLLOWER_TITLE,
        NEW_FOLLOWER_MESSAGE.format(name=(follower or {}).get("name") or ANONYMOUS_USER_NAME),
        type=NotificationType.FOLLOW,
        link=f"/profile/{follower_id}",
    )
    logger.info(f"{follower_id} followed {followed_id}")


async def unfollow_user(follower_id: str, followed_id: str) -> None:
    await get_collection(FOLLOWS).delete_one({"_id": follow_id(follower_id, followed_id)})


async def toggle_follow(follower_id: str, followed_id: str) -> bool:
    """
    Returns:
        True if the user now follows ``followed_id``
    """
    if await check_is_following(follower_id, followed_id):
        await unfollow_user(follower_id, followed_id)
        return False
    await follow_user(follower_id, followed_id)
    return True


async def get_follow_stats(user_id: str) -> Dict[str, int]:
    follows = get_collection(FOLLOWS)
    return {
        "followers": await follows.count_documents({"followed_id": user_id}),
        "following": await follows.count_documents({"follower_id": user_id}),
    }
