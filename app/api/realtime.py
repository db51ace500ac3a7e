"""
app/api/realtime.py

Purpose: WebSocket feeds for live views

- Notifications, chat room list, single chat room, reviews of a target
- Every message is a full snapshot of the view
- Token passed as ?token= (browsers cannot set headers on WebSockets)
- The subscription is always released when the socket goes away
"""

import asyncio
from typing import Any, Optional, Awaitable, Callable

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Query, status
from fastapi.encoders import jsonable_encoder

from app.core.exceptions import MarketplaceError
from app.core.logging import get_logger
from app.core.security import AuthSession
from app.db.mongo import to_public
from app.models.social import ReviewTargetType
from app.realtime.hub import Subscription, StreamClosed
from app.services import auth_service, chat_service, notification_service, review_service

logger = get_logger(__name__)
router = APIRouter(prefix="/ws", tags=["Realtime"])


def public_view(value: Any) -> Any:
    """Converts stored documents nested anywhere in a snapshot to their API shape."""
    if isinstance(value, list):
        return [public_view(v) for v in value]
    if isinstance(value, dict):
        if "_id" in value:
            value = to_public(value)
        return {k: public_view(v) for k, v in value.items()}
    return value


async def _open(
    websocket: WebSocket,
    subscribe: Callable[[], Awaitable[Subscription]],
) -> Optional[Subscription]:
    try:
        return await subscribe()
    except MarketplaceError as e:
        logger.info(f"WebSocket refused: {e.message}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.message)
    except StreamClosed as e:
        logger.info(f"WebSocket refused: {e}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(e))
    return None


async def _authenticate(websocket: WebSocket, token: Optional[str]) -> Optional[AuthSession]:
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Not authenticated")
        return None
    try:
        return await auth_service.resolve_session(token)
    except MarketplaceError as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.message)
        return None


async def stream_subscription(websocket: WebSocket, subscription: Subscription):
    """
    Sends each snapshot until the client disconnects or the stream ends.
    """
    async def watch_disconnect():
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        finally:
            subscription.unsubscribe()

    watcher = asyncio.create_task(watch_disconnect())
    try:
        async for snapshot in subscription:
            await websocket.send_json(jsonable_encoder(public_view(snapshot)))
    except WebSocketDisconnect:
        logger.debug(f"Client left {subscription.topic}")
    finally:
        subscription.unsubscribe()
        watcher.cancel()


@router.websocket("/notifications")
async def notifications_feed(websocket: WebSocket, token: Optional[str] = Query(None)):
    await websocket.accept()
    session = await _authenticate(websocket, token)
    if not session:
        return

    subscription = await _open(websocket, lambda: notification_service.subscribe_notifications(session))
    if subscription:
        await stream_subscription(websocket, subscription)


@router.websocket("/chats")
async def chat_rooms_feed(websocket: WebSocket, token: Optional[str] = Query(None)):
    await websocket.accept()
    session = await _authenticate(websocket, token)
    if not session:
        return

    subscription = await _open(websocket, lambda: chat_service.subscribe_chat_rooms(session))
    if subscription:
        await stream_subscription(websocket, subscription)


@router.websocket("/chats/{room_id}")
async def chat_room_feed(websocket: WebSocket, room_id: str, token: Optional[str] = Query(None)):
    await websocket.accept()
    session = await _authenticate(websocket, token)
    if not session:
        return

    subscription = await _open(websocket, lambda: chat_service.subscribe_chat_room(room_id, session))
    if subscription:
        await stream_subscription(websocket, subscription)


@router.websocket("/reviews/{target_type}/{target_id}")
async def reviews_feed(websocket: WebSocket, target_type: ReviewTargetType, target_id: str):
    await websocket.accept()
    subscription = await _open(websocket, lambda: review_service.subscribe_reviews(target_id, target_type))
    if subscription:
        await stream_subscription(websocket, subscription)
