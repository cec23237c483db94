"""Storage backends."""

from autocover.storage.allocator import AggregateIdAllocator
from autocover.storage.local import LocalAggregateStore, LocalCoverStateStore
from autocover.storage.protocol import AggregateStore, CoverStateStore

__all__ = [
    "CoverStateStore",
    "AggregateStore",
    "LocalCoverStateStore",
    "LocalAggregateStore",
    "AggregateIdAllocator",
]
