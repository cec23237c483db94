"""Storage protocols for swappable backends.

Two stores back the cover core:
- CoverStateStore: observer -> target -> severity, the single source of truth
- AggregateStore: per-target aggregate collection derived from the state store

Every write is an async boundary so a host-persisted backend can suspend.

Usage:
    states = LocalCoverStateStore()
    aggregates = LocalAggregateStore()
    world = CoverWorld(scene, states=states, aggregates=aggregates)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from autocover.core.cover.models import CoverAggregate, CoverRule, CoverSeverity


@runtime_checkable
class CoverStateStore(Protocol):
    """Flat observer -> target -> severity mapping.

    Absence of a key means NONE. Holds no merge or validation logic and never
    triggers side effects; writers invoke the aggregate engine afterwards.
    """

    def get(self, observer_id: str, target_id: str) -> CoverSeverity:
        """Severity ``target_id`` has against ``observer_id`` (NONE if unset)."""
        ...

    async def set(self, observer_id: str, target_id: str, severity: CoverSeverity) -> None:
        """Persist a severity. Writing NONE removes the entry. Returns once durable."""
        ...

    def cover_map(self, observer_id: str) -> dict[str, CoverSeverity]:
        """Copy of one observer's row."""
        ...

    def observers_of(self, target_id: str) -> dict[str, CoverSeverity]:
        """Every observer holding a non-NONE entry for ``target_id``."""
        ...

    async def forget(self, entity_id: str) -> list[tuple[str, str, CoverSeverity]]:
        """Drop the entity's row and every entry targeting it.

        Returns:
            Removed (observer_id, target_id, severity) triples.
        """
        ...


@runtime_checkable
class AggregateStore(Protocol):
    """Per-target aggregate collection.

    Reads return copies; mutating a returned aggregate has no effect until it
    is written back. Updating or deleting a record that no longer exists raises
    AggregateNotFoundError.
    """

    async def get_aggregates(self, target_id: str) -> list[CoverAggregate]:
        """All aggregates of ``target_id`` ordered by id."""
        ...

    async def create_aggregate(
        self,
        target_id: str,
        severity: CoverSeverity,
        *,
        label: str = "",
        description: str = "",
        rules: Iterable[CoverRule] = (),
    ) -> CoverAggregate:
        """Create an aggregate and return a copy of it."""
        ...

    async def update_aggregate(
        self,
        target_id: str,
        aggregate_id: str,
        *,
        rules: Iterable[CoverRule] | None = None,
        label: str | None = None,
        description: str | None = None,
    ) -> None:
        """Replace rules and/or display metadata of an aggregate."""
        ...

    async def delete_aggregates(self, target_id: str, aggregate_ids: Iterable[str]) -> None:
        """Delete aggregates. Raises AggregateNotFoundError if any is missing;
        the ones that exist are still deleted."""
        ...

    async def targets(self) -> list[str]:
        """Ids of every target owning at least one aggregate."""
        ...
