"""
app/api/notifications.py

Purpose: Notification feed endpoints
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_session
from app.core.security import AuthSession
from app.schemas.notification import NotificationFeed, to_notification
from app.schemas.response import ActionResult
from app.services import notification_service

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationFeed)
async def get_notifications(session: AuthSession = Depends(get_session)):
    snapshot = await notification_service.get_notification_snapshot(session.user_id)
    return NotificationFeed(
        notifications=[to_notification(n) for n in snapshot["notifications"]],
        unread_count=snapshot["unread_count"],
    )


@router.post("/read-all", response_model=ActionResult)
async def mark_all_as_read(session: AuthSession = Depends(get_session)):
    count = await notification_service.mark_all_as_read(session.user_id)
    return ActionResult(message=f"{count} marked as read")


@router.post("/{notification_id}/read", response_model=ActionResult)
async def mark_notification_as_read(notification_id: str, session: AuthSession = Depends(get_session)):
    await notification_service.mark_notification_as_read(notification_id, session.user_id)
    return ActionResult()
