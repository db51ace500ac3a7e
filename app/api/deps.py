"""
app/api/deps.py

Purpose: Shared FastAPI dependencies

- Bearer token -> AuthSession
- Optional session for public endpoints
- Admin-only guard
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from app.core.config import settings
from app.core.exceptions import AuthenticationError, PermissionDeniedError
from app.core.security import AuthSession
from app.services import auth_service

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login", auto_error=False)


async def get_optional_session(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[AuthSession]:
    """Session of the caller if a token was sent."""
    if not token:
        return None
    return await auth_service.resolve_session(token)


async def get_session(session: Optional[AuthSession] = Depends(get_optional_session)) -> AuthSession:
    """Resolves the caller's session; 401 without a valid token."""
    if session is None:
        raise AuthenticationError("Not authenticated")
    return session


async def require_admin(session: AuthSession = Depends(get_session)) -> AuthSession:
    """Checks the caller is an administrator."""
    if not session.is_admin:
        raise PermissionDeniedError("This operation requires administrator privileges")
    return session
