"""
app/schemas/notification.py

Purpose: Notification feed schemas
"""

from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from datetime import datetime

from app.db.mongo import to_public
from app.models.social import NotificationType
from utils.format_utils import format_time_ago


class Notification(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    read: bool = False
    created_at: datetime
    time_ago: Optional[str] = None
    link: Optional[str] = None
    image: Optional[str] = None


class NotificationFeed(BaseModel):
    notifications: List[Notification]
    unread_count: int


def to_notification(doc: Dict[str, Any]) -> Notification:
    data = to_public(doc)
    data["time_ago"] = format_time_ago(doc["created_at"])
    return Notification(**data)
