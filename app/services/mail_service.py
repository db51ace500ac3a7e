"""
app/services/mail_service.py

Purpose: Admin e-mail outbox

- Queues alert e-mails in the `mail` collection
- A mail-delivery worker outside this service sends them
"""

from typing import List, Optional

from app.core.config import settings
from app.core.logging import get_logger
from app.db.mongo import get_collection, new_id, MAIL
from utils.time_utils import utc_now

logger = get_logger(__name__)


async def queue_email(to: List[str], subject: str, html: str) -> str:
    """
    Adds an e-mail to the outbox.

    Returns:
        Outbox document id
    """
    doc = {
        "_id": new_id(),
        "to": to,
        "message": {"subject": subject, "html": html},
        "created_at": utc_now(),
    }
    await get_collection(MAIL).insert_one(doc)
    logger.debug(f"Queued e-mail: {subject}")
    return doc["_id"]


async def queue_admin_email(subject: str, html: str, to: Optional[List[str]] = None) -> str:
    """Queues an alert for the marketplace administrators."""
    return await queue_email(to or [settings.ADMIN_EMAIL], subject, html)
