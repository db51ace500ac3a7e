"""
app/models/social.py

Purpose: Enums for interaction records

- Notification types
- Review targets
- Report lifecycle
"""

from enum import Enum


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    REVIEW = "review"
    MESSAGE = "message"
    APPROVAL = "approval"
    FOLLOW = "follow"
    SYSTEM = "system"


class ReviewTargetType(str, Enum):
    LISTING = "listing"
    USER = "user"


class ReportStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"
