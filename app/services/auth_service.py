"""
app/services/auth_service.py

Purpose: Sign-up, sign-in and session resolution

- E-mail/password accounts (bcrypt)
- Google sign-in, creating the profile on first login
- Access tokens with server-side revocation on logout
- Resolves a bearer token into an AuthSession
- Re-checks long-lived sessions (WebSocket feeds) on every snapshot
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any, Tuple, Callable, Awaitable, List

from pymongo.errors import DuplicateKeyError

from app.core.exceptions import AuthenticationError, PermissionDeniedError, ValidationError, ConflictError
from app.core.logging import get_logger
from app.core.security import (
    AuthSession,
    hash_password,
    verify_password,
    create_access_token,
    decode_access_token,
)
from app.db.mongo import get_users_collection, get_collection, new_id, REVOKED_TOKENS
from app.models.user import UserStatus, AuthProvider, new_user_document
from app.realtime.hub import get_event_hub, StreamClosed, user_tag, token_tag
from app.services.google_auth_service import get_google_auth_service
from utils.time_utils import utc_now
from utils.validation_utils import validate_email, normalize_email, sanitize_input

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


def _ensure_active(user: Dict[str, Any]):
    if user.get("status") == UserStatus.BANNED.value:
        raise PermissionDeniedError("Account is banned")


def _issue_token(user: Dict[str, Any]) -> str:
    return create_access_token(user["_id"], user.get("role", "user"))


async def register(email: str, password: str, name: Optional[str] = None) -> Tuple[str, Dict[str, Any]]:
    """
    Creates an e-mail/password account.

    Returns:
        (access_token, user)

    Raises:
        ValidationError: Bad e-mail or short password
        ConflictError: E-mail already registered
    """
    if not validate_email(email):
        raise ValidationError("Invalid e-mail address")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    email = normalize_email(email)
    users = get_users_collection()

    if await users.find_one({"email": email}):
        raise ConflictError("E-mail is already registered", code="EMAIL_TAKEN")

    user = new_user_document(
        new_id(),
        email,
        name=sanitize_input(name, max_length=100) if name else None,
        password_hash=hash_password(password),
    )
    try:
        await users.insert_one(user)
    except DuplicateKeyError:
        raise ConflictError("E-mail is already registered", code="EMAIL_TAKEN")

    logger.info("User registered", extra={"user_id": user["_id"]})
    return _issue_token(user), user


async def login(email: str, password: str) -> Tuple[str, Dict[str, Any]]:
    """
    Raises:
        AuthenticationError: Unknown e-mail or wrong password
        PermissionDeniedError: Banned account
    """
    user = await get_users_collection().find_one({"email": normalize_email(email or "")})

    if not user or not user.get("password_hash") or not verify_password(password, user["password_hash"]):
        logger.warning("Failed login attempt")
        raise AuthenticationError("Invalid email or password")

    _ensure_active(user)

    logger.info("User logged in", extra={"user_id": user["_id"]})
    return _issue_token(user), user


async def login_with_google(id_token: str) -> Tuple[str, Dict[str, Any]]:
    """
    Signs in with a Google ID token. First-time users get a fresh profile.
    """
    identity = await get_google_auth_service().verify_id_token(id_token)
    email = normalize_email(identity["email"])
    users = get_users_collection()

    user = await users.find_one({"email": email})
    if not user:
        user = new_user_document(
            new_id(),
            email,
            name=identity.get("name"),
            avatar=identity.get("picture"),
            provider=AuthProvider.GOOGLE,
        )
        try:
            await users.insert_one(user)
            logger.info("User created from Google sign-in", extra={"user_id": user["_id"]})
        except DuplicateKeyError:
            # Concurrent first sign-in
            user = await users.find_one({"email": email})

    _ensure_active(user)
    return _issue_token(user), user


async def logout(session: AuthSession):
    """Revokes the token the session was resolved from."""
    await get_collection(REVOKED_TOKENS).update_one(
        {"_id": session.token_id},
        {"$set": {"expires_at": session.expires_at}},
        upsert=True
    )
    get_event_hub().close_tagged(token_tag(session.token_id))
    logger.info("User logged out", extra={"user_id": session.user_id})


async def resolve_session(token: str) -> AuthSession:
    """
    Turns a bearer token into the caller's session.

    Role and status are read from the user record, so bans and role changes
    apply to tokens already issued.

    Raises:
        AuthenticationError: Invalid, expired or revoked token, or deleted user
        PermissionDeniedError: Banned account
    """
    payload = decode_access_token(token)
    expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc).replace(tzinfo=None)
    return await _load_session(payload["sub"], payload["jti"], expires_at)


async def _load_session(user_id: str, token_id: str, expires_at: datetime) -> AuthSession:
    if await get_collection(REVOKED_TOKENS).count_documents({"_id": token_id}) > 0:
        raise AuthenticationError("Token has been revoked")

    user = await get_users_collection().find_one({"_id": user_id})
    if not user:
        raise AuthenticationError("User no longer exists")

    _ensure_active(user)

    return AuthSession(
        user_id=user["_id"],
        role=user.get("role", "user"),
        email=user.get("email", ""),
        token_id=token_id,
        expires_at=expires_at,
    )


async def recheck_session(session: AuthSession) -> AuthSession:
    """
    Re-validates a session opened earlier: expiry, revocation, ban and role.

    Raises:
        AuthenticationError: Expired or revoked token, or deleted user
        PermissionDeniedError: Banned account
    """
    if session.expires_at <= utc_now():
        raise AuthenticationError("Token has expired")
    return await _load_session(session.user_id, session.token_id, session.expires_at)


def session_tags(session: AuthSession) -> List[str]:
    return [user_tag(session.user_id), token_tag(session.token_id)]


def guarded_loader(session: AuthSession, load: Callable[[AuthSession], Awaitable[Any]]) -> Callable[[], Awaitable[Any]]:
    """
    Wraps a feed loader so each snapshot is built for a freshly checked
    session; the stream ends once the session is no longer valid.
    """
    async def loader():
        try:
            current = await recheck_session(session)
            return await load(current)
        except (AuthenticationError, PermissionDeniedError) as e:
            raise StreamClosed(e.message) from e
    return loader
