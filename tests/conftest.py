import os

# Standalone mongomock has no replica set; must be set before app.core.config loads
os.environ["MONGODB_TRANSACTIONS_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "development"

from datetime import timedelta

import pytest
from mongomock_motor import AsyncMongoMockClient

from app.core.security import AuthSession, create_access_token
from app.db import mongo
from app.models.user import new_user_document, UserRole, SubscriptionTier
from app.realtime import hub
from utils.time_utils import utc_now, calculate_subscription_expiry


@pytest.fixture(autouse=True)
def db(monkeypatch):
    client = AsyncMongoMockClient()
    database = client["chocuatui_test"]
    monkeypatch.setattr(mongo, "_client", client)
    monkeypatch.setattr(mongo, "_database", database)
    return database


@pytest.fixture(autouse=True)
def event_hub(monkeypatch):
    fresh = hub.EventHub()
    monkeypatch.setattr(hub, "_hub", fresh)
    return fresh


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    async def _make(
        name="Người bán",
        balance=0,
        tier=SubscriptionTier.FREE,
        role=UserRole.USER,
        **overrides
    ):
        counter["n"] += 1
        user_id = f"user{counter['n']}"
        user = new_user_document(user_id, f"{user_id}@example.com", name=name)
        user["wallet_balance"] = balance
        user["role"] = UserRole(role).value
        user["subscription_tier"] = SubscriptionTier(tier).value
        if tier != SubscriptionTier.FREE:
            user["subscription_expires"] = calculate_subscription_expiry(utc_now(), 30)
        user.update(overrides)
        await db[mongo.USERS].insert_one(user)
        return user

    return _make


@pytest.fixture
def make_listing(db):
    counter = {"n": 0}

    async def _make(seller, title="Bán xe máy Honda", status="approved", minutes_ago=0, **overrides):
        counter["n"] += 1
        created_at = utc_now() - timedelta(minutes=minutes_ago)
        listing = {
            "_id": f"listing{counter['n']:03d}",
            "title": title,
            "description": "",
            "price": 1000000,
            "category": "2",
            "images": [],
            "slug": "",
            "keywords": [],
            "view_count": 0,
            "location": "TPHCM",
            "seller_id": seller["_id"],
            "seller_name": seller["name"],
            "created_at": created_at,
            "updated_at": None,
            "status": status,
            "approved_at": created_at if status == "approved" else None,
            "condition": "used",
            "tier": "free",
            "attributes": {},
        }
        listing.update(overrides)
        await db[mongo.LISTINGS].insert_one(listing)
        return listing

    return _make


def session_for(user) -> AuthSession:
    return AuthSession(
        user_id=user["_id"],
        role=user.get("role", "user"),
        email=user["email"],
        token_id=f"jti-{user['_id']}",
        expires_at=utc_now() + timedelta(days=1),
    )


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user['_id'], user.get('role', 'user'))}"}
