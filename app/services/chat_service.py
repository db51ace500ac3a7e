"""
app/services/chat_service.py

Purpose: Buyer/seller chat about a listing

- One room per (listing, buyer) pair
- Messages with optional image, read markers and unread counts
- Live streams for the room list and a single room
"""

from typing import Optional, Dict, Any, List

from pymongo import DESCENDING, ReturnDocument

from app.core.exceptions import ResourceNotFoundError, PermissionDeniedError, ValidationError
from app.core.logging import get_logger, LogContext
from app.core.security import AuthSession
from app.db.mongo import get_chats_collection, new_id
from app.models.social import NotificationType
from app.realtime.hub import get_event_hub, chat_rooms_topic, chat_room_topic, Subscription
from app.services import auth_service, listing_service, notification_service, storage_service, user_service
from utils.constants import NEW_MESSAGE_TITLE, IMAGE_MESSAGE_PREVIEW
from utils.time_utils import utc_now
from utils.validation_utils import sanitize_input

logger = get_logger(__name__)

ROOM_LIST_LIMIT = 100


def _participant_entry(user: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    user = user or {}
    return {"name": user.get("name"), "avatar": user.get("avatar")}


async def _publish_room(room: Dict[str, Any]):
    topics = [chat_room_topic(room["_id"])]
    topics += [chat_rooms_topic(uid) for uid in room["participant_ids"]]
    await get_event_hub().publish(*topics)


def chat_room_id(listing_id: str, buyer_id: str) -> str:
    return f"{listing_id}_{buyer_id}"


async def create_chat_room(listing_id: str, buyer_id: str) -> Dict[str, Any]:
    """
    Opens (or reuses) the buyer's room for a listing.
    Two concurrent calls end up with the same room.

    Raises:
        ResourceNotFoundError: Unknown listing
        ValidationError: The seller tried to chat with themself
    """
    listing = await listing_service.get_listing_or_raise(listing_id)
    seller_id = listing["seller_id"]
    if seller_id == buyer_id:
        raise ValidationError("You cannot chat with yourself")

    room_id = chat_room_id(listing_id, buyer_id)
    chats = get_chats_collection()
    existing = await chats.find_one({"_id": room_id})
    if existing:
        return existing

    buyer = await user_service.get_user_or_raise(buyer_id)
    seller = await user_service.get_user(seller_id)
    images = listing.get("images") or []

    room = {
        "listing_id": listing_id,
        "listing_title": listing["title"],
        "listing_image": images[0] if images else None,
        "listing_price": listing["price"],
        "participant_ids": [buyer_id, seller_id],
        "participants_data": {
            buyer_id: _participant_entry(buyer),
            seller_id: _participant_entry(seller),
        },
        "messages": [],
        "last_message": None,
        "last_update": utc_now(),
        "seen_by": [buyer_id],
    }
    result = await chats.update_one({"_id": room_id}, {"$setOnInsert": room}, upsert=True)
    room = await chats.find_one({"_id": room_id})
    if result.upserted_id is None:
        # Another request created it first
        return room

    logger.info("Chat room created", extra={"room_id": room_id, "user_id": buyer_id, "listing_id": listing_id})
    await _publish_room(room)
    return room


def _ensure_participant(room: Dict[str, Any], session: AuthSession):
    if session.user_id not in room["participant_ids"] and not session.is_admin:
        raise PermissionDeniedError("You are not a participant of this chat")


async def get_chat_room(room_id: str, session: AuthSession) -> Dict[str, Any]:
    room = await get_chats_collection().find_one({"_id": room_id})
    if not room:
        raise ResourceNotFoundError("Chat room not found")
    _ensure_participant(room, session)
    return room


async def get_chat_rooms(user_id: str) -> List[Dict[str, Any]]:
    """A user's rooms without message bodies, most recently active first."""
    cursor = (
        get_chats_collection()
        .find({"participant_ids": user_id}, {"messages": 0})
        .sort([("last_update", DESCENDING), ("_id", DESCENDING)])
        .limit(ROOM_LIST_LIMIT)
    )
    return await cursor.to_list(length=ROOM_LIST_LIMIT)


async def unread_room_count(user_id: str) -> int:
    """Rooms with a message the user has not seen."""
    return await get_chats_collection().count_documents({
        "participant_ids": user_id,
        "seen_by": {"$ne": user_id},
        "last_message": {"$ne": None},
    })


async def add_message(
    room_id: str,
    session: AuthSession,
    text: str = "",
    image: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Appends a message. Only the sender has seen the room afterwards; the
    other participant gets a notification.
    """
    with LogContext(user_id=session.user_id, room_id=room_id):
        room = await get_chat_room(room_id, session)

        text = sanitize_input(text or "", max_length=2000)
        if not text and not image:
            raise ValidationError("Message must have text or an image")

        if image:
            image = await storage_service.store_image_if_needed(image, f"chats/{room_id}", owner_id=session.user_id)

        message = {
            "id": new_id(),
            "sender_id": session.user_id,
            "text": text,
            "image": image,
            "timestamp": utc_now(),
        }

        room = await get_chats_collection().find_one_and_update(
            {"_id": room_id},
            {
                "$push": {"messages": message},
                "$set": {
                    "last_message": text or IMAGE_MESSAGE_PREVIEW,
                    "last_update": message["timestamp"],
                    "seen_by": [session.user_id],
                },
            },
            return_document=ReturnDocument.AFTER
        )
        logger.debug("Message added")

        await _publish_room(room)

        sender_name = room.get("participants_data", {}).get(session.user_id, {}).get("name")
        for uid in room["participant_ids"]:
            if uid == session.user_id:
                continue
            await notification_service.send_notification(
                uid,
                NEW_MESSAGE_TITLE.format(name=sender_name or ""),
                text or IMAGE_MESSAGE_PREVIEW,
                type=NotificationType.MESSAGE,
                link=f"/chat/{room_id}",
            )

        return message


async def mark_room_as_seen(room_id: str, session: AuthSession) -> None:
    room = await get_chat_room(room_id, session)
    if session.user_id in room.get("seen_by", []):
        return

    await get_chats_collection().update_one(
        {"_id": room_id},
        {"$addToSet": {"seen_by": session.user_id}}
    )
    await _publish_room(room)


async def get_rooms_snapshot(user_id: str) -> Dict[str, Any]:
    return {
        "rooms": await get_chat_rooms(user_id),
        "unread_count": await unread_room_count(user_id),
    }


async def subscribe_chat_rooms(session: AuthSession) -> Subscription:
    """Live room list with unread count for the caller."""
    return await get_event_hub().subscribe(
        chat_rooms_topic(session.user_id),
        auth_service.guarded_loader(session, lambda current: get_rooms_snapshot(current.user_id)),
        tags=auth_service.session_tags(session),
    )


async def subscribe_chat_room(room_id: str, session: AuthSession) -> Subscription:
    """
    Live view of one room. Access is checked before subscribing, and the
    session is re-checked for every snapshot (logout, ban, role change).
    """
    await get_chat_room(room_id, session)
    return await get_event_hub().subscribe(
        chat_room_topic(room_id),
        auth_service.guarded_loader(session, lambda current: get_chat_room(room_id, current)),
        tags=auth_service.session_tags(session),
    )
