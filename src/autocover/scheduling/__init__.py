"""Scheduling: per-target serialization of aggregate mutations."""

from autocover.scheduling.lock import ActorLock

__all__ = [
    "ActorLock",
]
