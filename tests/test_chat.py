import pytest

from conftest import session_for
from app.core.exceptions import PermissionDeniedError, ResourceNotFoundError, ValidationError
from app.db import mongo
from app.services import auth_service, chat_service, user_service


@pytest.fixture
async def room_setup(make_user, make_listing):
    seller = await make_user(name="Người bán")
    buyer = await make_user(name="Người mua")
    listing = await make_listing(seller, images=["https://example.com/a.jpg"])
    room = await chat_service.create_chat_room(listing["_id"], buyer["_id"])
    return seller, buyer, listing, room


async def test_create_room(room_setup):
    seller, buyer, listing, room = room_setup

    assert room["participant_ids"] == [buyer["_id"], seller["_id"]]
    assert room["listing_title"] == listing["title"]
    assert room["listing_image"] == "https://example.com/a.jpg"
    assert room["participants_data"][seller["_id"]]["name"] == "Người bán"
    assert room["seen_by"] == [buyer["_id"]]


async def test_create_room_reuses_existing(room_setup):
    _, buyer, listing, room = room_setup

    again = await chat_service.create_chat_room(listing["_id"], buyer["_id"])
    assert again["_id"] == room["_id"]


async def test_concurrent_room_creation_yields_one_room(db, monkeypatch, make_user, make_listing):
    seller = await make_user()
    buyer = await make_user()
    listing = await make_listing(seller)
    room_id = chat_service.chat_room_id(listing["_id"], buyer["_id"])

    original = user_service.get_user_or_raise

    async def other_click_wins(user_id):
        # A second request inserts its room while this one is still loading profiles
        await db[mongo.CHATS].insert_one({
            "_id": room_id, "listing_id": listing["_id"], "participant_ids": [buyer["_id"], seller["_id"]],
            "messages": [], "last_message": None, "seen_by": [buyer["_id"]], "origin": "other",
        })
        monkeypatch.setattr(user_service, "get_user_or_raise", original)
        return await original(user_id)

    monkeypatch.setattr(user_service, "get_user_or_raise", other_click_wins)

    room = await chat_service.create_chat_room(listing["_id"], buyer["_id"])

    assert room["_id"] == room_id
    assert room["origin"] == "other"
    assert await db[mongo.CHATS].count_documents({"listing_id": listing["_id"]}) == 1


async def test_seller_cannot_chat_with_themself(room_setup):
    seller, _, listing, _ = room_setup
    with pytest.raises(ValidationError):
        await chat_service.create_chat_room(listing["_id"], seller["_id"])


async def test_unknown_listing(make_user):
    buyer = await make_user()
    with pytest.raises(ResourceNotFoundError):
        await chat_service.create_chat_room("missing", buyer["_id"])


async def test_add_message_marks_unread_for_other_side(db, room_setup):
    seller, buyer, _, room = room_setup

    message = await chat_service.add_message(room["_id"], session_for(buyer), text="Còn hàng không?")

    assert message["sender_id"] == buyer["_id"]
    stored = await db[mongo.CHATS].find_one({"_id": room["_id"]})
    assert stored["seen_by"] == [buyer["_id"]]
    assert stored["last_message"] == "Còn hàng không?"
    assert len(stored["messages"]) == 1

    assert await chat_service.unread_room_count(seller["_id"]) == 1
    assert await chat_service.unread_room_count(buyer["_id"]) == 0

    note = await db[mongo.NOTIFICATIONS].find_one({"user_id": seller["_id"]})
    assert note["type"] == "message"
    assert note["link"] == f"/chat/{room['_id']}"
    assert "Người mua" in note["title"]


async def test_image_only_message_preview(db, room_setup):
    _, buyer, _, room = room_setup

    await chat_service.add_message(room["_id"], session_for(buyer), image="https://example.com/photo.jpg")

    stored = await db[mongo.CHATS].find_one({"_id": room["_id"]})
    assert stored["last_message"] == "[Hình ảnh]"


async def test_empty_message_rejected(room_setup):
    _, buyer, _, room = room_setup
    with pytest.raises(ValidationError):
        await chat_service.add_message(room["_id"], session_for(buyer), text="   ")


async def test_mark_room_as_seen(room_setup):
    seller, buyer, _, room = room_setup
    await chat_service.add_message(room["_id"], session_for(buyer), text="Xin chào")

    await chat_service.mark_room_as_seen(room["_id"], session_for(seller))

    assert await chat_service.unread_room_count(seller["_id"]) == 0


async def test_outsider_cannot_read_room(make_user, room_setup):
    _, _, _, room = room_setup
    outsider = await make_user()

    with pytest.raises(PermissionDeniedError):
        await chat_service.get_chat_room(room["_id"], session_for(outsider))
    with pytest.raises(PermissionDeniedError):
        await chat_service.add_message(room["_id"], session_for(outsider), text="hi")


async def test_room_list_omits_messages(room_setup):
    seller, buyer, _, room = room_setup
    await chat_service.add_message(room["_id"], session_for(buyer), text="Xin chào")

    rooms = await chat_service.get_chat_rooms(seller["_id"])

    assert [r["_id"] for r in rooms] == [room["_id"]]
    assert "messages" not in rooms[0]


async def test_room_list_stream_updates_on_message(event_hub, room_setup):
    seller, buyer, _, room = room_setup

    async with await chat_service.subscribe_chat_rooms(session_for(seller)) as feed:
        first = await feed.get(timeout=1)
        assert first["unread_count"] == 0

        await chat_service.add_message(room["_id"], session_for(buyer), text="Giá bao nhiêu?")

        update = await feed.get(timeout=1)
        assert update["unread_count"] == 1
        assert update["rooms"][0]["last_message"] == "Giá bao nhiêu?"

    assert event_hub.active_count() == 0


async def test_room_stream_checks_access(make_user, room_setup):
    _, _, _, room = room_setup
    outsider = await make_user()

    with pytest.raises(PermissionDeniedError):
        await chat_service.subscribe_chat_room(room["_id"], session_for(outsider))


async def test_room_stream_closes_when_user_is_banned(event_hub, room_setup):
    _, buyer, _, room = room_setup
    feed = await chat_service.subscribe_chat_room(room["_id"], session_for(buyer))
    await feed.get(timeout=1)

    await user_service.set_user_status(buyer["_id"], "banned")

    with pytest.raises(StopAsyncIteration):
        await feed.get(timeout=1)
    assert event_hub.active_count() == 0


async def test_room_stream_closes_on_logout(event_hub, room_setup):
    seller, buyer, _, room = room_setup
    buyer_session = session_for(buyer)
    buyer_feed = await chat_service.subscribe_chat_room(room["_id"], buyer_session)
    seller_feed = await chat_service.subscribe_chat_room(room["_id"], session_for(seller))

    await auth_service.logout(buyer_session)

    with pytest.raises(StopAsyncIteration):
        await buyer_feed.get(timeout=1)
    assert seller_feed.active
    seller_feed.unsubscribe()


async def test_room_stream_ends_when_ban_is_seen_on_refresh(db, event_hub, room_setup):
    seller, buyer, _, room = room_setup
    feed = await chat_service.subscribe_chat_room(room["_id"], session_for(buyer))
    await feed.get(timeout=1)

    # Status changed outside this process; the next snapshot re-checks it
    await db[mongo.USERS].update_one({"_id": buyer["_id"]}, {"$set": {"status": "banned"}})
    await chat_service.add_message(room["_id"], session_for(seller), text="Còn hàng không?")

    with pytest.raises(StopAsyncIteration):
        await feed.get(timeout=1)
    assert not feed.active
