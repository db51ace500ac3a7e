import asyncio

import pytest

from app.realtime.hub import EventHub, StreamClosed


class Counter:
    def __init__(self):
        self.value = 0

    async def load(self):
        return self.value


async def test_first_snapshot_on_subscribe():
    hub = EventHub()
    counter = Counter()

    feed = await hub.subscribe("topic", counter.load)

    assert await feed.get(timeout=1) == 0
    assert hub.active_count("topic") == 1
    feed.unsubscribe()


async def test_publish_delivers_fresh_snapshot():
    hub = EventHub()
    counter = Counter()
    feed = await hub.subscribe("topic", counter.load)
    await feed.get(timeout=1)

    counter.value = 1
    await hub.publish("topic", "unrelated")

    assert await feed.get(timeout=1) == 1
    feed.unsubscribe()


async def test_lagging_consumer_sees_latest_only():
    hub = EventHub()
    counter = Counter()
    feed = await hub.subscribe("topic", counter.load)

    for value in (1, 2, 3):
        counter.value = value
        await hub.publish("topic")

    assert await feed.get(timeout=1) == 3
    with pytest.raises(asyncio.TimeoutError):
        await feed.get(timeout=0.05)
    feed.unsubscribe()


async def test_overlapping_publishes_keep_newest_snapshot():
    hub = EventHub()
    state = {"version": 0, "delays": []}

    async def load():
        version = state["version"]
        if state["delays"]:
            await asyncio.sleep(state["delays"].pop(0))
        return version

    feed = await hub.subscribe("topic", load)
    assert await feed.get(timeout=1) == 0

    # First reload reads version 1 and is slow; the second reads version 2
    state["delays"] = [0.05, 0]
    state["version"] = 1
    slow = asyncio.create_task(hub.publish("topic"))
    await asyncio.sleep(0)
    state["version"] = 2
    await hub.publish("topic")
    await slow

    assert await feed.get(timeout=1) == 2
    with pytest.raises(asyncio.TimeoutError):
        await feed.get(timeout=0.05)
    feed.unsubscribe()


async def test_unsubscribe_ends_iteration():
    hub = EventHub()
    counter = Counter()
    feed = await hub.subscribe("topic", counter.load)

    received = []

    async def consume():
        async for snapshot in feed:
            received.append(snapshot)

    task = asyncio.create_task(consume())
    await asyncio.sleep(0)
    feed.unsubscribe()
    feed.unsubscribe()
    await asyncio.wait_for(task, timeout=1)

    assert hub.active_count() == 0
    assert not feed.active


async def test_context_manager_releases_subscription():
    hub = EventHub()
    counter = Counter()

    async with await hub.subscribe("topic", counter.load):
        assert hub.active_count() == 1
    assert hub.active_count() == 0


async def test_failing_loader_on_subscribe_is_not_registered():
    hub = EventHub()

    async def broken():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await hub.subscribe("topic", broken)
    assert hub.active_count() == 0


async def test_failing_loader_on_publish_does_not_reach_publisher():
    hub = EventHub()
    calls = {"n": 0}

    async def flaky():
        calls["n"] += 1
        if calls["n"] > 1:
            raise RuntimeError("boom")
        return "ok"

    feed = await hub.subscribe("topic", flaky)
    await hub.publish("topic")

    assert await feed.get(timeout=1) == "ok"
    feed.unsubscribe()


async def test_close_ends_every_stream():
    hub = EventHub()
    counter = Counter()
    a = await hub.subscribe("a", counter.load)
    b = await hub.subscribe("b", counter.load)

    await hub.close()

    assert hub.active_count() == 0
    assert not a.active and not b.active


async def test_close_tagged_only_ends_matching_streams():
    hub = EventHub()
    counter = Counter()
    mine = await hub.subscribe("a", counter.load, tags=["user:1", "token:x"])
    other = await hub.subscribe("a", counter.load, tags=["user:2"])

    assert hub.close_tagged("token:x") == 1

    assert not mine.active
    assert other.active
    assert hub.active_count("a") == 1
    other.unsubscribe()


async def test_loader_can_end_its_stream():
    hub = EventHub()
    state = {"allowed": True}

    async def load():
        if not state["allowed"]:
            raise StreamClosed("access revoked")
        return "snapshot"

    feed = await hub.subscribe("topic", load)
    assert await feed.get(timeout=1) == "snapshot"

    state["allowed"] = False
    await hub.publish("topic")

    with pytest.raises(StopAsyncIteration):
        await feed.get(timeout=1)
    assert hub.active_count() == 0
