"""
app/services/notification_service.py

Purpose: In-app notifications

- Creates notifications and signals the owner's live feed
- Feed, unread count and read markers
- Feed stream with explicit unsubscribe
"""

from typing import Optional, Dict, Any, List

from pymongo import DESCENDING

from app.core.config import settings
from app.core.exceptions import ResourceNotFoundError
from app.core.logging import get_logger
from app.core.security import AuthSession
from app.db.mongo import get_notifications_collection, new_id
from app.models.social import NotificationType
from app.realtime.hub import get_event_hub, notifications_topic, Subscription
from app.services import auth_service
from utils.time_utils import utc_now

logger = get_logger(__name__)


async def send_notification(
    user_id: str,
    title: str,
    message: str,
    type: NotificationType = NotificationType.INFO,
    link: Optional[str] = None,
    image: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Stores an unread notification for a user.
    """
    doc = {
        "_id": new_id(),
        "user_id": user_id,
        "title": title,
        "message": message,
        "type": NotificationType(type).value,
        "read": False,
        "created_at": utc_now(),
        "link": link,
        "image": image,
    }
    await get_notifications_collection().insert_one(doc)
    logger.debug(f"Notification sent: {title}", extra={"user_id": user_id})

    await get_event_hub().publish(notifications_topic(user_id))
    return doc


async def get_notifications(user_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Most recent notifications first."""
    limit = limit or settings.NOTIFICATION_FEED_LIMIT
    cursor = (
        get_notifications_collection()
        .find({"user_id": user_id})
        .sort([("created_at", DESCENDING), ("_id", DESCENDING)])
        .limit(limit)
    )
    return await cursor.to_list(length=limit)


async def unread_count(user_id: str) -> int:
    return await get_notifications_collection().count_documents({"user_id": user_id, "read": False})


async def mark_notification_as_read(notification_id: str, user_id: str) -> None:
    """
    Raises:
        ResourceNotFoundError: If the notification does not belong to the user
    """
    result = await get_notifications_collection().update_one(
        {"_id": notification_id, "user_id": user_id},
        {"$set": {"read": True}}
    )
    if result.matched_count == 0:
        raise ResourceNotFoundError("Notification not found")

    await get_event_hub().publish(notifications_topic(user_id))


async def mark_all_as_read(user_id: str) -> int:
    result = await get_notifications_collection().update_many(
        {"user_id": user_id, "read": False},
        {"$set": {"read": True}}
    )
    if result.modified_count:
        await get_event_hub().publish(notifications_topic(user_id))
    return result.modified_count


async def get_notification_snapshot(user_id: str) -> Dict[str, Any]:
    return {
        "notifications": await get_notifications(user_id),
        "unread_count": await unread_count(user_id),
    }


async def subscribe_notifications(session: AuthSession) -> Subscription:
    """
    Live feed of ``{notifications, unread_count}`` snapshots for the caller.
    Ends when the session is revoked or the user is banned. The caller must
    unsubscribe when done.
    """
    return await get_event_hub().subscribe(
        notifications_topic(session.user_id),
        auth_service.guarded_loader(session, lambda current: get_notification_snapshot(current.user_id)),
        tags=auth_service.session_tags(session),
    )
