"""
app/api/auth.py

Purpose: Sign-up, sign-in and logout endpoints
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_session
from app.core.logging import get_logger
from app.core.security import AuthSession
from app.db.mongo import to_public
from app.schemas.auth import RegisterRequest, LoginRequest, GoogleLoginRequest, TokenResponse
from app.schemas.response import ActionResult
from app.schemas.user import UserProfile
from app.services import auth_service, user_service

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["Auth"])


def _token_response(token: str, user: dict) -> TokenResponse:
    return TokenResponse(access_token=token, user=UserProfile(**to_public(user)))


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(payload: RegisterRequest):
    token, user = await auth_service.register(payload.email, payload.password, payload.name)
    return _token_response(token, user)


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest):
    token, user = await auth_service.login(payload.email, payload.password)
    return _token_response(token, user)


@router.post("/google", response_model=TokenResponse)
async def login_with_google(payload: GoogleLoginRequest):
    """Google One-Tap / Sign-In. Creates the account on first use."""
    token, user = await auth_service.login_with_google(payload.credential)
    return _token_response(token, user)


@router.post("/logout", response_model=ActionResult)
async def logout(session: AuthSession = Depends(get_session)):
    await auth_service.logout(session)
    return ActionResult(message="Logged out")


@router.get("/me", response_model=UserProfile)
async def current_user(session: AuthSession = Depends(get_session)):
    user = await user_service.get_user_or_raise(session.user_id)
    return UserProfile(**to_public(user))
