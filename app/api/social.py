"""
app/api/social.py

Purpose: Reviews and reports
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_session
from app.core.security import AuthSession
from app.db.mongo import to_public
from app.models.social import ReviewTargetType
from app.schemas.social import ReviewCreate, Review, ReviewSummary, ReportCreate, Report
from app.services import review_service, report_service

router = APIRouter(tags=["Social"])


@router.post("/reviews", response_model=Review, status_code=201)
async def add_review(payload: ReviewCreate, session: AuthSession = Depends(get_session)):
    review = await review_service.add_review(
        session.user_id, payload.target_id, payload.target_type, payload.rating, payload.comment
    )
    return Review(**to_public(review))


@router.get("/reviews", response_model=ReviewSummary)
async def get_reviews(target_id: str, target_type: ReviewTargetType):
    summary = await review_service.get_review_summary(target_id, target_type)
    summary["reviews"] = [to_public(r) for r in summary["reviews"]]
    return ReviewSummary(**summary)


@router.post("/reports", response_model=Report, status_code=201)
async def create_report(payload: ReportCreate, session: AuthSession = Depends(get_session)):
    """Reports a listing or a user to the moderators."""
    report = await report_service.create_report(
        session.user_id,
        payload.reason,
        listing_id=payload.listing_id,
        target_user_id=payload.target_user_id,
        details=payload.details,
    )
    return Report(**to_public(report))
