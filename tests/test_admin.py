import random

import pytest

from app.core.exceptions import ConflictError, UserNotFoundError, ValidationError
from app.db import mongo
from app.services import admin_service, seed_service, settings_service, user_service


async def test_verification_flow(db, make_user):
    user = await make_user()

    submitted = await user_service.submit_verification(user["_id"], "https://example.com/front.jpg", "https://example.com/back.jpg")
    assert submitted["verification_status"] == "pending"
    assert (await admin_service.get_dashboard_stats())["pending_verifications"] == 1

    reviewed = await user_service.review_verification(user["_id"], approve=True)
    assert reviewed["verification_status"] == "verified"

    note = await db[mongo.NOTIFICATIONS].find_one({"user_id": user["_id"]})
    assert note["type"] == "success"

    with pytest.raises(ConflictError) as exc:
        await user_service.submit_verification(user["_id"], "a", "b")
    assert exc.value.code == "ALREADY_VERIFIED"


async def test_review_without_pending_verification(make_user):
    user = await make_user()

    with pytest.raises(ConflictError) as exc:
        await user_service.review_verification(user["_id"], approve=False)
    assert exc.value.code == "NO_PENDING_VERIFICATION"

    with pytest.raises(UserNotFoundError):
        await user_service.review_verification("ghost", approve=True)


async def test_user_search_and_filter(make_user):
    await make_user(name="Nguyễn Văn An", phone="0912345678")
    await make_user(name="Trần Thị Bình")
    await make_user(name="Lê Cường", verification_status="pending")

    users, _, _ = await user_service.get_users_paged(search="bình")
    assert [u["name"] for u in users] == ["Trần Thị Bình"]

    users, _, _ = await user_service.get_users_paged(search="0912")
    assert [u["name"] for u in users] == ["Nguyễn Văn An"]

    users, _, _ = await user_service.get_users_paged(verification_status="pending")
    assert [u["name"] for u in users] == ["Lê Cường"]


async def test_set_status_and_role(make_user):
    user = await make_user()

    assert (await user_service.set_user_status(user["_id"], "banned"))["status"] == "banned"
    assert (await user_service.set_user_role(user["_id"], "admin"))["role"] == "admin"
    with pytest.raises(UserNotFoundError):
        await user_service.set_user_status("ghost", "active")


async def test_settings_defaults_and_update():
    current = await settings_service.get_settings()
    assert current["push_price"] == 20000
    assert current["tier_configs"]["pro"]["auto_approve"] is True

    await settings_service.update_settings({"push_price": 30000, "tier_configs": {"basic": {"max_images": 8}}})

    updated = await settings_service.get_settings()
    assert updated["push_price"] == 30000
    assert updated["tier_configs"]["basic"]["max_images"] == 8
    # Untouched keys keep their defaults
    assert updated["tier_configs"]["basic"]["price"] == 99000
    assert await settings_service.get_push_price() == 30000


async def test_settings_validation():
    with pytest.raises(ValidationError):
        await settings_service.update_settings({"push_discount": 120})
    with pytest.raises(ValidationError):
        await settings_service.update_settings({"tier_configs": {"gold": {"price": 1}}})


async def test_seed_database_is_repeatable(db, make_user):
    real = await make_user()

    first = await seed_service.seed_database(random.Random(1))
    second = await seed_service.seed_database(random.Random(2))

    assert first["users"] == 50 and first["listings"] == 100
    assert second["removed_users"] == 50
    assert second["removed_listings"] == 100
    assert await db[mongo.USERS].count_documents({}) == 51
    assert await db[mongo.LISTINGS].count_documents({}) == 100
    assert await db[mongo.USERS].find_one({"_id": real["_id"]})
