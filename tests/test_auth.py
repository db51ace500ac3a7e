import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import auth_headers
from app.core.config import settings
from app.core.exceptions import AuthenticationError, PermissionDeniedError
from app.db import mongo
from app.main import app
from app.services import auth_service
from app.services.google_auth_service import GoogleAuthService, set_google_auth_service

client = TestClient(app)

API = settings.API_PREFIX


def register(email="buyer@example.com", password="secret123", name="Người mua"):
    return client.post(f"{API}/auth/register", json={"email": email, "password": password, "name": name})


async def test_register_login_and_me(db):
    response = register()
    assert response.status_code == 201
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == "buyer@example.com"
    assert "password_hash" not in data["user"]

    response = client.post(f"{API}/auth/login", json={"email": "Buyer@Example.com", "password": "secret123"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    response = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["wallet_balance"] == 0


async def test_register_duplicate_email(db):
    register()
    response = register()
    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_TAKEN"


async def test_register_short_password(db):
    response = register(password="123")
    assert response.status_code == 422


async def test_login_wrong_password(db):
    register()
    response = client.post(f"{API}/auth/login", json={"email": "buyer@example.com", "password": "wrong-pass"})
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid email or password"


async def test_logout_revokes_token(db):
    token = register().json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    assert client.post(f"{API}/auth/logout", headers=headers).status_code == 200

    response = client.get(f"{API}/auth/me", headers=headers)
    assert response.status_code == 401


async def test_banned_user_is_locked_out(db, make_user):
    user = await make_user(status="banned")

    response = client.get(f"{API}/auth/me", headers=auth_headers(user))
    assert response.status_code == 403

    with pytest.raises(PermissionDeniedError):
        await auth_service.resolve_session(auth_headers(user)["Authorization"].split()[1])


async def test_role_is_read_from_database(db, make_user):
    user = await make_user()
    # Token claims admin, the stored role does not
    token = auth_headers({**user, "role": "admin"})

    response = client.get(f"{API}/admin/stats", headers=token)
    assert response.status_code == 403


async def test_deleted_user_token_rejected(db, make_user):
    user = await make_user()
    headers = auth_headers(user)
    await db[mongo.USERS].delete_one({"_id": user["_id"]})

    with pytest.raises(AuthenticationError):
        await auth_service.resolve_session(headers["Authorization"].split()[1])


# ============================================================
# GOOGLE SIGN-IN
# ============================================================

def google_service(payload, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["id_token"] == "google-token"
        return httpx.Response(status_code, json=payload)

    return GoogleAuthService(transport=httpx.MockTransport(handler))


@pytest.fixture
def google(monkeypatch):
    monkeypatch.setattr(settings, "GOOGLE_CLIENT_ID", "client-1")
    yield set_google_auth_service
    set_google_auth_service(None)


async def test_google_login_creates_profile(db, google):
    google(google_service({
        "aud": "client-1",
        "sub": "g-1",
        "email": "Google.User@gmail.com",
        "email_verified": "true",
        "name": "Google User",
        "picture": "https://example.com/me.png",
    }))

    token, user = await auth_service.login_with_google("google-token")
    assert token
    assert user["email"] == "google.user@gmail.com"
    assert user["auth_provider"] == "google"
    assert user["avatar"] == "https://example.com/me.png"

    # Second login reuses the account
    _, again = await auth_service.login_with_google("google-token")
    assert again["_id"] == user["_id"]
    assert await db[mongo.USERS].count_documents({}) == 1


async def test_google_login_wrong_audience(db, google):
    google(google_service({"aud": "someone-else", "email": "a@b.com", "email_verified": "true"}))

    with pytest.raises(AuthenticationError):
        await auth_service.login_with_google("google-token")


async def test_google_login_rejected_token(db, google):
    google(google_service({"error": "invalid_token"}, status_code=400))

    response = client.post(f"{API}/auth/google", json={"credential": "google-token"})
    assert response.status_code == 401


async def test_google_login_unverified_email(db, google):
    google(google_service({"aud": "client-1", "email": "a@b.com", "email_verified": "false"}))

    with pytest.raises(AuthenticationError):
        await auth_service.login_with_google("google-token")
