"""
app/services/google_auth_service.py

Purpose: Google sign-in

- Verifies Google ID tokens against Google's tokeninfo endpoint
- Checks the audience matches our OAuth client
"""

from typing import Optional, Dict, Any

import httpx

from app.core.config import settings
from app.core.exceptions import AuthenticationError, ExternalServiceError
from app.core.logging import get_logger

logger = get_logger(__name__)


class GoogleAuthService:
    """
    Verifies ID tokens issued to the One-Tap / Sign-In client.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport
        self._timeout = settings.HTTP_TIMEOUT_SECONDS

    async def verify_id_token(self, id_token: str) -> Dict[str, Any]:
        """
        Verifies a Google ID token.

        Returns:
            Dict with google_id, email, name and picture

        Raises:
            AuthenticationError: If Google rejects the token or it was issued
                to another client
            ExternalServiceError: If Google cannot be reached
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(settings.GOOGLE_TOKENINFO_URL, params={"id_token": id_token})
        except httpx.TimeoutException:
            logger.error("Google tokeninfo timeout")
            raise ExternalServiceError("Google sign-in is taking too long. Please try again.")
        except httpx.RequestError as e:
            logger.error(f"Network error verifying Google token: {e}")
            raise ExternalServiceError("Unable to reach Google sign-in.")

        if response.status_code != 200:
            logger.warning(f"Google rejected ID token: {response.status_code}")
            raise AuthenticationError("Invalid Google credential")

        data = response.json()

        if settings.GOOGLE_CLIENT_ID and data.get("aud") != settings.GOOGLE_CLIENT_ID:
            logger.warning("Google ID token issued to another client")
            raise AuthenticationError("Invalid Google credential")

        if not data.get("email") or str(data.get("email_verified", "false")).lower() != "true":
            raise AuthenticationError("Google account e-mail is not verified")

        return {
            "google_id": data.get("sub"),
            "email": data["email"],
            "name": data.get("name"),
            "picture": data.get("picture"),
        }


# Global service instance
_google_auth_service: Optional[GoogleAuthService] = None


def get_google_auth_service() -> GoogleAuthService:
    """Get or create the global Google sign-in service."""
    global _google_auth_service
    if _google_auth_service is None:
        _google_auth_service = GoogleAuthService()
    return _google_auth_service


def set_google_auth_service(service: Optional[GoogleAuthService]):
    """Replaces the global instance (tests inject a mocked transport)."""
    global _google_auth_service
    _google_auth_service = service
