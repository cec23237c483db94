"""Exception hierarchy.

Nothing here escapes the public coroutines of CoverWorld; these types are
raised by stores and providers and absorbed by the engine and coordinator.
"""

from __future__ import annotations


class CoverError(Exception):
    """Base class for cover errors."""


class AggregateStoreError(CoverError):
    """An aggregate read or write failed."""


class AggregateNotFoundError(AggregateStoreError):
    """The aggregate vanished between read and write."""

    def __init__(self, target_id: str, aggregate_id: str) -> None:
        super().__init__(f"Aggregate {aggregate_id} not found on target {target_id}")
        self.target_id = target_id
        self.aggregate_id = aggregate_id


class UnknownEntityError(CoverError, KeyError):
    """No live entity with the given id."""

    def __init__(self, entity_id: str) -> None:
        super().__init__(f"Unknown entity {entity_id}")
        self.entity_id = entity_id

    def __str__(self) -> str:
        return str(self.args[0])
