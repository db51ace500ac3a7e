"""
app/realtime/hub.py

Purpose: Snapshot streams for live views (chat, notifications, reviews)

- subscribe(topic, loader) returns a Subscription: an async iterator of
  snapshots with an explicit unsubscribe() handle
- The first snapshot is delivered on subscribe; every publish on the topic
  re-runs the loader and delivers a fresh snapshot
- A lagging consumer only ever sees the latest snapshot
- When refreshes overlap, a result from an older refresh is dropped
- Subscriptions carry tags (user, token) so feeds can be closed on ban or logout
- A loader raising StreamClosed ends its subscription
- In-process only: one hub per worker
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Set

from app.core.logging import get_logger

logger = get_logger(__name__)

Loader = Callable[[], Awaitable[Any]]

_CLOSED = object()


class StreamClosed(Exception):
    """Raised by a loader when its viewer may no longer see the stream."""


class Subscription:
    """
    A live view on one topic.

    Usage:
        async with await hub.subscribe(topic, loader) as feed:
            async for snapshot in feed:
                ...
    """

    def __init__(self, hub: "EventHub", topic: str, loader: Loader, tags: Iterable[str] = ()):
        self.topic = topic
        self.tags = frozenset(tags)
        self._hub = hub
        self._loader = loader
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._closed = False
        self._generation = 0

    @property
    def active(self) -> bool:
        return not self._closed

    async def refresh(self):
        """Re-runs the loader and queues the snapshot, replacing an unread one."""
        if self._closed:
            return
        self._generation += 1
        generation = self._generation
        snapshot = await self._loader()
        # A newer refresh started while this one was loading
        if self._closed or generation != self._generation:
            return
        self._replace(snapshot)

    def _replace(self, item: Any):
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(item)

    def unsubscribe(self):
        """Stops the stream. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._hub._remove(self)
        self._replace(_CLOSED)

    async def get(self, timeout: Optional[float] = None) -> Any:
        """
        Waits for the next snapshot.

        Raises:
            StopAsyncIteration: If the subscription was closed
            asyncio.TimeoutError: If ``timeout`` elapses first
        """
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await asyncio.wait_for(self._queue.get(), timeout)
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    def __aiter__(self):
        return self

    async def __anext__(self) -> Any:
        return await self.get()

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.unsubscribe()


class EventHub:
    """Topic registry that fans publishes out to live subscriptions."""

    def __init__(self):
        self._topics: Dict[str, Set[Subscription]] = {}

    async def subscribe(self, topic: str, loader: Loader, tags: Iterable[str] = ()) -> Subscription:
        """
        Opens a stream on ``topic``. The caller owns the returned handle and
        must unsubscribe (or leave its ``async with`` block) on teardown.
        """
        subscription = Subscription(self, topic, loader, tags)
        self._topics.setdefault(topic, set()).add(subscription)
        try:
            await subscription.refresh()
        except Exception:
            subscription.unsubscribe()
            raise
        logger.debug(f"Subscribed to {topic} ({self.active_count(topic)} live)")
        return subscription

    async def publish(self, *topics: str):
        """
        Signals that data behind ``topics`` changed. Every live subscription
        on those topics reloads its snapshot. Loader failures are logged and
        do not reach the publisher.
        """
        for topic in topics:
            for subscription in list(self._topics.get(topic, ())):
                try:
                    await subscription.refresh()
                except StreamClosed as e:
                    logger.info(f"Closing stream on {topic}: {e}")
                    subscription.unsubscribe()
                except Exception as e:
                    logger.error(f"Failed to refresh subscription on {topic}: {e}", exc_info=True)

    def close_tagged(self, tag: str) -> int:
        """Ends every stream carrying ``tag``. Returns how many were closed."""
        closed = 0
        for subs in list(self._topics.values()):
            for subscription in list(subs):
                if tag in subscription.tags:
                    subscription.unsubscribe()
                    closed += 1
        return closed

    def active_count(self, topic: Optional[str] = None) -> int:
        if topic is not None:
            return len(self._topics.get(topic, ()))
        return sum(len(subs) for subs in self._topics.values())

    def _remove(self, subscription: Subscription):
        subs = self._topics.get(subscription.topic)
        if not subs:
            return
        subs.discard(subscription)
        if not subs:
            del self._topics[subscription.topic]

    async def close(self):
        """Ends every open stream (application shutdown)."""
        for subs in list(self._topics.values()):
            for subscription in list(subs):
                subscription.unsubscribe()
        self._topics.clear()


# Topic names
def notifications_topic(user_id: str) -> str:
    return f"notifications:{user_id}"


def chat_rooms_topic(user_id: str) -> str:
    return f"chat_rooms:{user_id}"


def chat_room_topic(room_id: str) -> str:
    return f"chat_room:{room_id}"


def reviews_topic(target_type: str, target_id: str) -> str:
    return f"reviews:{target_type}:{target_id}"


# Subscription tags
def user_tag(user_id: str) -> str:
    return f"user:{user_id}"


def token_tag(token_id: str) -> str:
    return f"token:{token_id}"


# Global hub instance
_hub: Optional[EventHub] = None


def get_event_hub() -> EventHub:
    """Get or create the global event hub."""
    global _hub
    if _hub is None:
        _hub = EventHub()
    return _hub


async def close_event_hub():
    """Close every stream and drop the global hub."""
    global _hub
    if _hub:
        await _hub.close()
        _hub = None
