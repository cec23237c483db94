"""Events: topics, change notifications and the pub/sub boundary."""

from autocover.events.bus import EventBus, Subscriber, Topic
from autocover.events.models import CoverChanged, CoverTopic

__all__ = [
    "EventBus",
    "Subscriber",
    "Topic",
    "CoverTopic",
    "CoverChanged",
]
