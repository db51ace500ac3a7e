"""
app/api/admin.py

Purpose: Admin console endpoints

- Dashboard figures
- Transaction approval / rejection
- User moderation and identity verification
- Listing moderation and bulk delete
- Reports, system settings and demo data
"""

from typing import Optional, List

from fastapi import APIRouter, Depends, Query

from app.api.deps import require_admin
from app.core.config import settings
from app.core.exceptions import PermissionDeniedError
from app.core.logging import get_logger
from app.core.security import AuthSession
from app.db.mongo import to_public
from app.models.listing import ListingStatus
from app.models.social import ReportStatus
from app.models.transaction import TransactionStatus
from app.models.user import VerificationStatus
from app.schemas.listing import ListingPage, BatchDeleteRequest, BatchDeleteResult, to_listing
from app.schemas.misc import DashboardStats
from app.schemas.response import ActionResult
from app.schemas.settings import SystemSettings
from app.schemas.social import Report
from app.schemas.transaction import Transaction, TransactionList
from app.schemas.user import UserProfile, UserPage, UserStatusUpdate, UserRoleUpdate, VerificationReview
from app.services import (
    admin_service,
    listing_service,
    report_service,
    seed_service,
    settings_service,
    transaction_service,
    user_service,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats():
    return DashboardStats(**await admin_service.get_dashboard_stats())


# ============================================================
# TRANSACTIONS
# ============================================================

@router.get("/transactions", response_model=TransactionList)
async def get_transactions(status: Optional[TransactionStatus] = None, user_id: Optional[str] = None):
    txs = await transaction_service.get_transactions(user_id=user_id, status=status)
    return TransactionList(transactions=[Transaction(**to_public(t)) for t in txs])


@router.post("/transactions/{transaction_id}/approve", response_model=Transaction)
async def approve_transaction(transaction_id: str):
    """Credits the deposit or activates the subscription, once."""
    return Transaction(**to_public(await transaction_service.approve_transaction(transaction_id)))


@router.post("/transactions/{transaction_id}/reject", response_model=Transaction)
async def reject_transaction(transaction_id: str):
    return Transaction(**to_public(await transaction_service.reject_transaction(transaction_id)))


# ============================================================
# USERS
# ============================================================

@router.get("/users", response_model=UserPage)
async def get_users(
    page_size: int = Query(20, ge=1, le=100),
    cursor: Optional[str] = None,
    search: Optional[str] = Query(None, max_length=100),
    verification_status: Optional[VerificationStatus] = None,
):
    users, next_cursor, has_more = await user_service.get_users_paged(
        page_size=page_size, cursor=cursor, search=search, verification_status=verification_status
    )
    return UserPage(users=[UserProfile(**to_public(u)) for u in users], next_cursor=next_cursor, has_more=has_more)


@router.patch("/users/{user_id}/status", response_model=UserProfile)
async def set_user_status(user_id: str, payload: UserStatusUpdate, session: AuthSession = Depends(require_admin)):
    if user_id == session.user_id:
        raise PermissionDeniedError("You cannot change your own status")
    return UserProfile(**to_public(await user_service.set_user_status(user_id, payload.status)))


@router.patch("/users/{user_id}/role", response_model=UserProfile)
async def set_user_role(user_id: str, payload: UserRoleUpdate, session: AuthSession = Depends(require_admin)):
    if user_id == session.user_id:
        raise PermissionDeniedError("You cannot change your own role")
    return UserProfile(**to_public(await user_service.set_user_role(user_id, payload.role)))


@router.post("/users/{user_id}/verification", response_model=UserProfile)
async def review_verification(user_id: str, payload: VerificationReview):
    return UserProfile(**to_public(await user_service.review_verification(user_id, payload.approve)))


# ============================================================
# LISTINGS
# ============================================================

@router.get("/listings", response_model=ListingPage)
async def get_listings(
    status: ListingStatus = ListingStatus.PENDING,
    page_size: int = Query(20, ge=1, le=100),
    cursor: Optional[str] = None,
    session: AuthSession = Depends(require_admin),
):
    """Moderation queue; pending listings by default."""
    docs, next_cursor, has_more = await listing_service.get_listings_paged(
        page_size=page_size, cursor=cursor, status=status, session=session
    )
    return ListingPage(listings=[to_listing(d) for d in docs], next_cursor=next_cursor, has_more=has_more)


@router.post("/listings/batch-delete", response_model=BatchDeleteResult)
async def delete_listings_batch(payload: BatchDeleteRequest):
    return BatchDeleteResult(deleted=await listing_service.delete_listings_batch(payload.ids))


# ============================================================
# REPORTS
# ============================================================

@router.get("/reports", response_model=List[Report])
async def get_reports(status: Optional[ReportStatus] = None):
    return [Report(**to_public(r)) for r in await report_service.get_all_reports(status)]


@router.post("/reports/{report_id}/resolve", response_model=Report)
async def resolve_report(report_id: str):
    return Report(**to_public(await report_service.resolve_report(report_id)))


@router.post("/reports/{report_id}/dismiss", response_model=Report)
async def dismiss_report(report_id: str):
    return Report(**to_public(await report_service.dismiss_report(report_id)))


# ============================================================
# SYSTEM
# ============================================================

@router.put("/settings", response_model=SystemSettings)
async def update_settings(payload: SystemSettings):
    return SystemSettings(**await settings_service.update_settings(payload.model_dump()))


@router.post("/seed", response_model=ActionResult)
async def seed_database():
    """Resets demo data. Disabled in production."""
    if settings.is_production:
        raise PermissionDeniedError("Seeding is disabled in production")
    result = await seed_service.seed_database()
    return ActionResult(message=f"Seeded {result['users']} users and {result['listings']} listings")
