"""Publish/subscribe bus between the host and the cover core."""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable, Mapping, MutableMapping, Sequence
from typing import Any

from autocover.events.models import CoverTopic

__all__ = ["EventBus", "Subscriber", "Topic"]

logger = logging.getLogger(__name__)

Topic = str | CoverTopic
Subscriber = Callable[..., None | Awaitable[None]]


class EventBus:
    """In-memory event dispatcher accepting sync and async subscribers.

    Topics may be CoverTopic members or plain strings. Payloads are passed
    as keyword arguments. A failing subscriber is logged and does not stop
    delivery to the others.
    """

    def __init__(self) -> None:
        self._subscribers: MutableMapping[str, list[Subscriber]] = defaultdict(list)

    @staticmethod
    def _normalise_topic(topic: Topic) -> str:
        return topic.value if isinstance(topic, CoverTopic) else str(topic)

    # ------------------------------------------------------------------
    # Subscription management
    # ------------------------------------------------------------------
    def subscribe(self, topic: Topic, callback: Subscriber) -> None:
        """Register ``callback`` for ``topic`` events."""
        key = self._normalise_topic(topic)
        if callback not in self._subscribers[key]:
            self._subscribers[key].append(callback)

    def unsubscribe(self, topic: Topic, callback: Subscriber) -> None:
        """Remove a previously registered subscription if present."""
        key = self._normalise_topic(topic)
        callbacks = self._subscribers.get(key)
        if not callbacks or callback not in callbacks:
            return
        callbacks.remove(callback)
        if not callbacks:
            del self._subscribers[key]

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------
    async def publish(
        self,
        topic: Topic,
        payload: Mapping[str, Any] | None = None,
        /,
        **kwargs: Any,
    ) -> None:
        """Deliver ``topic`` to every subscriber, awaiting async ones in order."""
        key = self._normalise_topic(topic)
        merged_payload: dict[str, Any] = dict(payload or {})
        if kwargs:
            merged_payload.update(kwargs)

        for callback in list(self._subscribers.get(key, ())):
            try:
                result = callback(**merged_payload)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Subscriber %r failed on topic %s", callback, key)

    # ------------------------------------------------------------------
    # Introspection helpers (mostly for tests/debug)
    # ------------------------------------------------------------------
    def clear(self) -> None:
        """Remove all subscriptions from the bus."""
        self._subscribers.clear()

    def get_subscribers(self, topic: Topic) -> Sequence[Subscriber]:
        """Return all subscribers registered for ``topic``."""
        key = self._normalise_topic(topic)
        return tuple(self._subscribers.get(key, ()))
