"""
app/services/report_service.py

Purpose: Abuse reports on listings and users

- Users file reports
- Admins review, resolve or dismiss them
"""

from typing import Optional, Dict, Any, List

from pymongo import DESCENDING, ReturnDocument

from app.core.exceptions import ValidationError, ResourceNotFoundError
from app.core.logging import get_logger
from app.db.mongo import get_collection, new_id, REPORTS
from app.models.social import ReportStatus
from app.services import listing_service, user_service
from utils.time_utils import utc_now
from utils.validation_utils import sanitize_input

logger = get_logger(__name__)


async def create_report(
    reporter_id: str,
    reason: str,
    listing_id: Optional[str] = None,
    target_user_id: Optional[str] = None,
    details: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Files a report against a listing or a user.
    """
    if not listing_id and not target_user_id:
        raise ValidationError("A report needs a listing or a user")

    reason = sanitize_input(reason or "", max_length=200)
    if not reason:
        raise ValidationError("Reason is required")

    if listing_id:
        await listing_service.get_listing_or_raise(listing_id)
    if target_user_id:
        await user_service.get_user_or_raise(target_user_id)

    report = {
        "_id": new_id(),
        "listing_id": listing_id,
        "target_user_id": target_user_id,
        "user_id": reporter_id,
        "reason": reason,
        "details": sanitize_input(details, max_length=2000) if details else None,
        "created_at": utc_now(),
        "status": ReportStatus.PENDING.value,
    }
    await get_collection(REPORTS).insert_one(report)
    logger.info(f"Report filed: {reason}", extra={"user_id": reporter_id, "listing_id": listing_id})
    return report


async def report_listing(reporter_id: str, listing_id: str, reason: str, details: Optional[str] = None) -> Dict[str, Any]:
    return await create_report(reporter_id, reason, listing_id=listing_id, details=details)


async def report_user(reporter_id: str, target_user_id: str, reason: str, details: Optional[str] = None) -> Dict[str, Any]:
    return await create_report(reporter_id, reason, target_user_id=target_user_id, details=details)


async def get_all_reports(status: Optional[ReportStatus] = None, limit: int = 200) -> List[Dict[str, Any]]:
    query = {"status": ReportStatus(status).value} if status else {}
    cursor = (
        get_collection(REPORTS)
        .find(query)
        .sort([("created_at", DESCENDING), ("_id", DESCENDING)])
        .limit(limit)
    )
    return await cursor.to_list(length=limit)


async def _set_status(report_id: str, status: ReportStatus) -> Dict[str, Any]:
    report = await get_collection(REPORTS).find_one_and_update(
        {"_id": report_id},
        {"$set": {"status": status.value, "resolved_at": utc_now()}},
        return_document=ReturnDocument.AFTER
    )
    if not report:
        raise ResourceNotFoundError("Report not found")
    logger.info(f"Report {report_id} {status.value}")
    return report


async def resolve_report(report_id: str) -> Dict[str, Any]:
    return await _set_status(report_id, ReportStatus.RESOLVED)


async def dismiss_report(report_id: str) -> Dict[str, Any]:
    return await _set_status(report_id, ReportStatus.DISMISSED)
