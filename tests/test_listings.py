import pytest

from conftest import session_for
from app.core.exceptions import ConflictError, PermissionDeniedError, ValidationError
from app.db import mongo
from app.services import listing_service


def listing_payload(**overrides):
    data = {
        "title": "Bán iPhone 15 Pro Max",
        "description": "Máy đẹp, pin 98%",
        "price": 25000000,
        "category": "3",
        "images": [],
        "location": "TPHCM",
    }
    data.update(overrides)
    return data


async def test_pagination_visits_every_listing_once(make_user, make_listing):
    seller = await make_user()
    for i in range(25):
        await make_listing(seller, title=f"Tin {i}", minutes_ago=i)

    seen = []
    cursor = None
    while True:
        docs, cursor, has_more = await listing_service.get_listings_paged(page_size=10, cursor=cursor)
        seen.extend(d["_id"] for d in docs)
        if not has_more:
            break

    assert len(seen) == 25
    assert len(set(seen)) == 25
    # Newest first
    assert seen[0] == "listing001"
    assert cursor is None


async def test_pagination_with_equal_timestamps(make_user, make_listing):
    seller = await make_user()
    first = await make_listing(seller)
    for _ in range(4):
        await make_listing(seller, created_at=first["created_at"])

    page1, cursor, has_more = await listing_service.get_listings_paged(page_size=3)
    page2, _, more_after = await listing_service.get_listings_paged(page_size=3, cursor=cursor)

    assert has_more is True
    assert more_after is False
    ids = [d["_id"] for d in page1 + page2]
    assert sorted(ids) == sorted(set(ids))
    assert len(ids) == 5


async def test_feed_only_shows_approved(make_user, make_listing):
    seller = await make_user()
    await make_listing(seller, status="approved")
    await make_listing(seller, status="pending")
    await make_listing(seller, status="hidden")

    docs, _, _ = await listing_service.get_listings_paged()
    assert [d["status"] for d in docs] == ["approved"]


async def test_seller_sees_own_unpublished_listings(make_user, make_listing):
    seller = await make_user()
    await make_listing(seller, status="approved")
    await make_listing(seller, status="pending")

    docs, _, _ = await listing_service.get_listings_paged(seller_id=seller["_id"], session=session_for(seller))
    assert len(docs) == 2

    # Someone else only sees what is published
    other = await make_user()
    docs, _, _ = await listing_service.get_listings_paged(seller_id=seller["_id"], session=session_for(other))
    assert len(docs) == 1


async def test_pending_status_filter_requires_owner_or_admin(make_user, make_listing):
    seller = await make_user()
    admin = await make_user(role="admin")
    await make_listing(seller, status="pending")

    with pytest.raises(PermissionDeniedError):
        await listing_service.get_listings_paged(status="pending")

    docs, _, _ = await listing_service.get_listings_paged(status="pending", session=session_for(admin))
    assert len(docs) == 1


async def test_category_and_location_filters(make_user, make_listing):
    seller = await make_user()
    await make_listing(seller, category="2", location="TPHCM")
    await make_listing(seller, category="3", location="TP Hà Nội")

    docs, _, _ = await listing_service.get_listings_paged(category="3")
    assert [d["category"] for d in docs] == ["3"]

    docs, _, _ = await listing_service.get_listings_paged(location="TPHCM")
    assert [d["location"] for d in docs] == ["TPHCM"]

    # "Toàn quốc" means no location filter
    docs, _, _ = await listing_service.get_listings_paged(location="Toàn quốc")
    assert len(docs) == 2


async def test_search_is_accent_insensitive(make_user, make_listing):
    seller = await make_user()
    await make_listing(seller, title="Điện thoại Samsung Galaxy")
    await make_listing(seller, title="Bán iPhone 15 Pro")
    await make_listing(seller, title="Điện thoại cũ", status="pending")

    docs, cursor, has_more = await listing_service.get_listings_paged(search="dien thoai")

    assert [d["title"] for d in docs] == ["Điện thoại Samsung Galaxy"]
    assert cursor is None
    assert has_more is False


async def test_search_orders_by_relevance(make_user, make_listing):
    seller = await make_user()
    await make_listing(seller, title="Ốp lưng cho iPhone", minutes_ago=0)
    await make_listing(seller, title="iPhone 13", minutes_ago=5)

    docs = await listing_service.search_listings("iphone")
    assert [d["title"] for d in docs] == ["iPhone 13", "Ốp lưng cho iPhone"]


async def test_create_listing_free_tier_is_pending(db, make_user):
    seller = await make_user()

    listing = await listing_service.create_listing(seller["_id"], listing_payload())

    assert listing["status"] == "pending"
    assert listing["approved_at"] is None
    assert listing["slug"] == "ban-iphone-15-pro-max"
    assert "iphone" in listing["keywords"]
    assert listing["seller_name"] == seller["name"]
    assert await db[mongo.MAIL].count_documents({}) == 1


async def test_create_listing_pro_tier_is_auto_approved(make_user):
    seller = await make_user(tier="pro")

    listing = await listing_service.create_listing(seller["_id"], listing_payload())

    assert listing["status"] == "approved"
    assert listing["approved_at"] is not None
    assert listing["tier"] == "pro"


async def test_create_listing_image_cap(make_user):
    seller = await make_user()
    images = [f"https://example.com/{i}.jpg" for i in range(4)]

    with pytest.raises(ValidationError):
        await listing_service.create_listing(seller["_id"], listing_payload(images=images))


async def test_create_listing_daily_limit(make_user):
    seller = await make_user()
    for _ in range(3):
        await listing_service.create_listing(seller["_id"], listing_payload())

    with pytest.raises(ConflictError) as exc:
        await listing_service.create_listing(seller["_id"], listing_payload())
    assert exc.value.code == "POST_LIMIT_REACHED"


async def test_create_listing_unknown_category(make_user):
    seller = await make_user()
    with pytest.raises(ValidationError):
        await listing_service.create_listing(seller["_id"], listing_payload(category="999"))


async def test_update_content_refreshes_slug(make_user, make_listing):
    seller = await make_user()
    listing = await make_listing(seller)

    updated = await listing_service.update_listing_content(
        listing["_id"], session_for(seller), {"title": "Xe đạp điện", "price": 500000}
    )

    assert updated["slug"] == "xe-dap-dien"
    assert updated["price"] == 500000
    assert updated["updated_at"] is not None


async def test_only_owner_edits(make_user, make_listing):
    seller = await make_user()
    other = await make_user()
    listing = await make_listing(seller)

    with pytest.raises(PermissionDeniedError):
        await listing_service.update_listing_content(listing["_id"], session_for(other), {"price": 1})
    with pytest.raises(PermissionDeniedError):
        await listing_service.delete_listing(listing["_id"], session_for(other))


async def test_admin_approval_notifies_seller(db, make_user, make_listing):
    seller = await make_user()
    admin = await make_user(role="admin")
    listing = await make_listing(seller, status="pending")

    updated = await listing_service.update_listing_status(listing["_id"], "approved", session_for(admin))

    assert updated["status"] == "approved"
    assert updated["approved_at"] is not None
    note = await db[mongo.NOTIFICATIONS].find_one({"user_id": seller["_id"]})
    assert note["link"] == f"/listings/{listing['_id']}"


async def test_seller_status_transitions(make_user, make_listing):
    seller = await make_user()
    session = session_for(seller)
    pending = await make_listing(seller, status="pending")
    approved = await make_listing(seller, status="approved")

    # A seller cannot approve their own listing
    with pytest.raises(PermissionDeniedError):
        await listing_service.update_listing_status(pending["_id"], "approved", session)

    hidden = await listing_service.update_listing_status(approved["_id"], "hidden", session)
    assert hidden["status"] == "hidden"
    shown = await listing_service.update_listing_status(approved["_id"], "approved", session)
    assert shown["status"] == "approved"

    # Hiding a never-approved listing does not let it be shown later
    await listing_service.update_listing_status(pending["_id"], "hidden", session)
    with pytest.raises(PermissionDeniedError):
        await listing_service.update_listing_status(pending["_id"], "approved", session)


async def test_batch_delete(make_user, make_listing):
    seller = await make_user()
    a = await make_listing(seller)
    b = await make_listing(seller)
    await make_listing(seller)

    assert await listing_service.delete_listings_batch([a["_id"], b["_id"], "missing"]) == 2
    assert await listing_service.delete_listings_batch([]) == 0


async def test_vip_listings_only_pro(make_user, make_listing):
    seller = await make_user()
    await make_listing(seller, tier="pro")
    await make_listing(seller, tier="free")
    await make_listing(seller, tier="pro", status="pending")

    docs = await listing_service.get_vip_listings()
    assert len(docs) == 1
    assert docs[0]["tier"] == "pro"


async def test_view_count(db, make_user, make_listing):
    seller = await make_user()
    listing = await make_listing(seller)

    await listing_service.increment_view_count(listing["_id"])
    await listing_service.increment_view_count(listing["_id"])

    stored = await db[mongo.LISTINGS].find_one({"_id": listing["_id"]})
    assert stored["view_count"] == 2
