"""
app/api/listings.py

Purpose: Listing endpoints

- Public feed, VIP strip, search and detail
- Seller create / edit / status / delete / push
- Favorites and reviews of a listing
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_session, get_optional_session
from app.core.security import AuthSession
from app.db.mongo import to_public
from app.models.listing import ListingStatus
from app.models.social import ReviewTargetType
from app.schemas.listing import (
    Listing,
    ListingCreate,
    ListingUpdate,
    ListingStatusUpdate,
    ListingPage,
    FavoriteState,
    to_listing,
)
from app.schemas.response import ActionResult
from app.schemas.social import ReviewSummary
from app.schemas.transaction import Transaction
from app.services import listing_service, transaction_service, favorite_service, review_service
from utils.constants import VIP_LISTINGS_LIMIT

router = APIRouter(prefix="/listings", tags=["Listings"])


@router.get("", response_model=ListingPage)
async def get_listings(
    page_size: int = Query(20, ge=1, le=100),
    cursor: Optional[str] = None,
    category: Optional[str] = None,
    seller_id: Optional[str] = None,
    status: Optional[ListingStatus] = None,
    search: Optional[str] = Query(None, max_length=200),
    location: Optional[str] = None,
    session: Optional[AuthSession] = Depends(get_optional_session),
):
    """
    Listing feed, newest first. Pass ``cursor`` from the previous page to
    continue. With ``search`` all matches come back in one page ordered by
    relevance.
    """
    docs, next_cursor, has_more = await listing_service.get_listings_paged(
        page_size=page_size,
        cursor=cursor,
        category=category,
        seller_id=seller_id,
        status=status,
        search=search,
        location=location,
        session=session,
    )
    return ListingPage(listings=[to_listing(d) for d in docs], next_cursor=next_cursor, has_more=has_more)


@router.get("/vip", response_model=List[Listing])
async def get_vip_listings(limit: int = Query(VIP_LISTINGS_LIMIT, ge=1, le=50)):
    return [to_listing(d) for d in await listing_service.get_vip_listings(limit)]


@router.get("/{listing_id}", response_model=Listing)
async def get_listing(listing_id: str):
    return to_listing(await listing_service.get_listing_or_raise(listing_id))


@router.post("/{listing_id}/view", response_model=ActionResult)
async def record_view(listing_id: str):
    await listing_service.increment_view_count(listing_id)
    return ActionResult()


@router.post("", response_model=Listing, status_code=201)
async def create_listing(payload: ListingCreate, session: AuthSession = Depends(get_session)):
    listing = await listing_service.create_listing(session.user_id, payload.model_dump())
    return to_listing(listing)


@router.patch("/{listing_id}", response_model=Listing)
async def update_listing(listing_id: str, payload: ListingUpdate, session: AuthSession = Depends(get_session)):
    listing = await listing_service.update_listing_content(
        listing_id, session, payload.model_dump(exclude_unset=True)
    )
    return to_listing(listing)


@router.patch("/{listing_id}/status", response_model=Listing)
async def update_listing_status(
    listing_id: str,
    payload: ListingStatusUpdate,
    session: AuthSession = Depends(get_session),
):
    """Admin moderation, or a seller marking their listing sold / hidden."""
    return to_listing(await listing_service.update_listing_status(listing_id, payload.status, session))


@router.delete("/{listing_id}", response_model=ActionResult)
async def delete_listing(listing_id: str, session: AuthSession = Depends(get_session)):
    await listing_service.delete_listing(listing_id, session)
    return ActionResult(message="Listing deleted")


@router.post("/{listing_id}/push", response_model=Transaction)
async def push_listing(listing_id: str, session: AuthSession = Depends(get_session)):
    """Pays from the wallet to move the listing back to the top."""
    tx = await transaction_service.push_listing(listing_id, session.user_id)
    return Transaction(**to_public(tx))


@router.post("/{listing_id}/favorite", response_model=FavoriteState)
async def toggle_favorite(listing_id: str, session: AuthSession = Depends(get_session)):
    return FavoriteState(favorite=await favorite_service.toggle_favorite(session.user_id, listing_id))


@router.get("/{listing_id}/reviews", response_model=ReviewSummary)
async def get_listing_reviews(listing_id: str):
    summary = await review_service.get_review_summary(listing_id, ReviewTargetType.LISTING)
    summary["reviews"] = [to_public(r) for r in summary["reviews"]]
    return ReviewSummary(**summary)
