"""
app/api/users.py

Purpose: Profiles, verification, follows and favorites
"""

from typing import List

from fastapi import APIRouter, Depends

from app.api.deps import get_session
from app.core.security import AuthSession
from app.db.mongo import to_public
from app.schemas.listing import Listing, to_listing
from app.schemas.user import (
    UserProfile,
    PublicUser,
    ProfileUpdate,
    VerificationSubmit,
    FollowStats,
    FollowState,
)
from app.services import user_service, follow_service, favorite_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserProfile)
async def get_my_profile(session: AuthSession = Depends(get_session)):
    user = await user_service.get_user_or_raise(session.user_id)
    return UserProfile(**to_public(user))


@router.patch("/me", response_model=UserProfile)
async def update_my_profile(payload: ProfileUpdate, session: AuthSession = Depends(get_session)):
    user = await user_service.update_user_profile(session.user_id, payload.model_dump(exclude_unset=True))
    return UserProfile(**to_public(user))


@router.post("/me/verification", response_model=UserProfile)
async def submit_verification(payload: VerificationSubmit, session: AuthSession = Depends(get_session)):
    """Uploads both sides of an ID card for review."""
    user = await user_service.submit_verification(session.user_id, payload.front_image, payload.back_image)
    return UserProfile(**to_public(user))


@router.get("/me/favorites", response_model=List[Listing])
async def get_my_favorites(session: AuthSession = Depends(get_session)):
    listings = await favorite_service.get_favorite_listings(session.user_id)
    return [to_listing(doc) for doc in listings]


@router.get("/me/favorite-ids", response_model=List[str])
async def get_my_favorite_ids(session: AuthSession = Depends(get_session)):
    return await favorite_service.get_favorites(session.user_id)


@router.get("/{user_id}", response_model=PublicUser)
async def get_user(user_id: str):
    user = await user_service.get_user_or_raise(user_id)
    return PublicUser(**to_public(user))


@router.get("/{user_id}/follow-stats", response_model=FollowStats)
async def get_follow_stats(user_id: str):
    return FollowStats(**await follow_service.get_follow_stats(user_id))


@router.get("/{user_id}/follow", response_model=FollowState)
async def check_following(user_id: str, session: AuthSession = Depends(get_session)):
    return FollowState(following=await follow_service.check_is_following(session.user_id, user_id))


@router.put("/{user_id}/follow", response_model=FollowState)
async def follow_user(user_id: str, session: AuthSession = Depends(get_session)):
    await follow_service.follow_user(session.user_id, user_id)
    return FollowState(following=True)


@router.delete("/{user_id}/follow", response_model=FollowState)
async def unfollow_user(user_id: str, session: AuthSession = Depends(get_session)):
    await follow_service.unfollow_user(session.user_id, user_id)
    return FollowState(following=False)


@router.post("/{user_id}/follow/toggle", response_model=FollowState)
async def toggle_follow(user_id: str, session: AuthSession = Depends(get_session)):
    return FollowState(following=await follow_service.toggle_follow(session.user_id, user_id))

