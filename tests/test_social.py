import pytest

from conftest import session_for
from app.core.exceptions import ResourceNotFoundError, ValidationError, UserNotFoundError
from app.db import mongo
from app.services import (
    favorite_service,
    follow_service,
    notification_service,
    report_service,
    review_service,
)


# ============================================================
# FOLLOWS
# ============================================================

async def test_follow_and_unfollow(db, make_user):
    alice = await make_user(name="Alice")
    bob = await make_user(name="Bob")

    await follow_service.follow_user(alice["_id"], bob["_id"])

    assert await follow_service.check_is_following(alice["_id"], bob["_id"])
    assert await follow_service.get_follow_stats(bob["_id"]) == {"followers": 1, "following": 0}
    assert await follow_service.get_follow_stats(alice["_id"]) == {"followers": 0, "following": 1}

    note = await db[mongo.NOTIFICATIONS].find_one({"user_id": bob["_id"]})
    assert note["type"] == "follow"
    assert "Alice" in note["message"]

    await follow_service.unfollow_user(alice["_id"], bob["_id"])
    assert not await follow_service.check_is_following(alice["_id"], bob["_id"])


async def test_follow_twice_notifies_once(db, make_user):
    alice = await make_user()
    bob = await make_user()

    await follow_service.follow_user(alice["_id"], bob["_id"])
    await follow_service.follow_user(alice["_id"], bob["_id"])

    assert await db[mongo.FOLLOWS].count_documents({}) == 1
    assert await db[mongo.NOTIFICATIONS].count_documents({"user_id": bob["_id"]}) == 1


async def test_toggle_follow(make_user):
    alice = await make_user()
    bob = await make_user()

    assert await follow_service.toggle_follow(alice["_id"], bob["_id"]) is True
    assert await follow_service.toggle_follow(alice["_id"], bob["_id"]) is False


async def test_cannot_follow_self_or_unknown(make_user):
    alice = await make_user()
    with pytest.raises(ValidationError):
        await follow_service.follow_user(alice["_id"], alice["_id"])
    with pytest.raises(UserNotFoundError):
        await follow_service.follow_user(alice["_id"], "ghost")


# ============================================================
# REVIEWS
# ============================================================

async def test_review_listing_notifies_seller(db, make_user, make_listing):
    seller = await make_user()
    buyer = await make_user(name="Khách")
    listing = await make_listing(seller)

    review = await review_service.add_review(buyer["_id"], listing["_id"], "listing", 5, "Hàng tốt")

    assert review["author_name"] == "Khách"
    note = await db[mongo.NOTIFICATIONS].find_one({"user_id": seller["_id"]})
    assert note["type"] == "review"
    assert note["link"] == f"/listings/{listing['_id']}"


async def test_self_review_does_not_notify(db, make_user):
    alice = await make_user()

    await review_service.add_review(alice["_id"], alice["_id"], "user", 4, "")

    assert await db[mongo.NOTIFICATIONS].count_documents({}) == 0


async def test_review_rating_range(make_user):
    alice = await make_user()
    bob = await make_user()
    for rating in (0, 6):
        with pytest.raises(ValidationError):
            await review_service.add_review(alice["_id"], bob["_id"], "user", rating, "")


async def test_review_unknown_listing(make_user):
    alice = await make_user()
    with pytest.raises(ResourceNotFoundError):
        await review_service.add_review(alice["_id"], "missing", "listing", 5, "")


async def test_review_summary(make_user):
    target = await make_user()
    a = await make_user()
    b = await make_user()
    await review_service.add_review(a["_id"], target["_id"], "user", 5, "Tốt")
    await review_service.add_review(b["_id"], target["_id"], "user", 4, "Ổn")

    summary = await review_service.get_review_summary(target["_id"], "user")

    assert summary["count"] == 2
    assert summary["average_rating"] == 4.5
    assert review_service.summarize([])["average_rating"] == 0.0


async def test_review_stream(event_hub, make_user):
    target = await make_user()
    author = await make_user()

    feed = await review_service.subscribe_reviews(target["_id"], "user")
    try:
        assert (await feed.get(timeout=1))["count"] == 0
        await review_service.add_review(author["_id"], target["_id"], "user", 3, "")
        assert (await feed.get(timeout=1))["count"] == 1
    finally:
        feed.unsubscribe()


# ============================================================
# FAVORITES
# ============================================================

async def test_toggle_favorite(make_user, make_listing):
    user = await make_user()
    seller = await make_user()
    first = await make_listing(seller)
    second = await make_listing(seller)

    assert await favorite_service.toggle_favorite(user["_id"], first["_id"]) is True
    assert await favorite_service.toggle_favorite(user["_id"], second["_id"]) is True
    assert await favorite_service.get_favorites(user["_id"]) == [first["_id"], second["_id"]]

    assert await favorite_service.toggle_favorite(user["_id"], first["_id"]) is False
    listings = await favorite_service.get_favorite_listings(user["_id"])
    assert [l["_id"] for l in listings] == [second["_id"]]


async def test_favorite_unknown_listing(make_user):
    user = await make_user()
    with pytest.raises(ResourceNotFoundError):
        await favorite_service.toggle_favorite(user["_id"], "missing")


# ============================================================
# REPORTS
# ============================================================

async def test_report_lifecycle(make_user, make_listing):
    reporter = await make_user()
    seller = await make_user()
    listing = await make_listing(seller)

    report = await report_service.report_listing(reporter["_id"], listing["_id"], "Lừa đảo", "Giá quá rẻ")
    assert report["status"] == "pending"

    pending = await report_service.get_all_reports(status="pending")
    assert [r["_id"] for r in pending] == [report["_id"]]

    resolved = await report_service.resolve_report(report["_id"])
    assert resolved["status"] == "resolved"
    assert await report_service.get_all_reports(status="pending") == []


async def test_report_user_and_dismiss(make_user):
    reporter = await make_user()
    target = await make_user()

    report = await report_service.report_user(reporter["_id"], target["_id"], "Spam")
    dismissed = await report_service.dismiss_report(report["_id"])

    assert dismissed["status"] == "dismissed"
    assert dismissed["target_user_id"] == target["_id"]


async def test_report_needs_target_and_reason(make_user):
    reporter = await make_user()
    with pytest.raises(ValidationError):
        await report_service.create_report(reporter["_id"], "Spam")
    with pytest.raises(ValidationError):
        await report_service.report_user(reporter["_id"], reporter["_id"], "  ")
    with pytest.raises(ResourceNotFoundError):
        await report_service.resolve_report("missing")


# ============================================================
# NOTIFICATIONS
# ============================================================

async def test_notification_read_markers(make_user):
    user = await make_user()
    other = await make_user()
    first = await notification_service.send_notification(user["_id"], "A", "a")
    await notification_service.send_notification(user["_id"], "B", "b")

    assert await notification_service.unread_count(user["_id"]) == 2

    await notification_service.mark_notification_as_read(first["_id"], user["_id"])
    assert await notification_service.unread_count(user["_id"]) == 1

    with pytest.raises(ResourceNotFoundError):
        await notification_service.mark_notification_as_read(first["_id"], other["_id"])

    assert await notification_service.mark_all_as_read(user["_id"]) == 1
    assert await notification_service.unread_count(user["_id"]) == 0


async def test_notification_feed_limit(make_user):
    user = await make_user()
    for i in range(3):
        await notification_service.send_notification(user["_id"], f"N{i}", "")

    feed = await notification_service.get_notifications(user["_id"], limit=2)
    assert len(feed) == 2


async def test_notification_stream(event_hub, make_user):
    user = await make_user()

    async with await notification_service.subscribe_notifications(session_for(user)) as feed:
        assert (await feed.get(timeout=1))["unread_count"] == 0
        await notification_service.send_notification(user["_id"], "Xin chào", "")
        snapshot = await feed.get(timeout=1)
        assert snapshot["unread_count"] == 1
        assert snapshot["notifications"][0]["title"] == "Xin chào"

    assert event_hub.active_count() == 0
