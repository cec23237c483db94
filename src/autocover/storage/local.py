"""Local in-memory storage implementations.

Dict-based stores suitable for single-process use and testing. Every async
method yields to the event loop once, so concurrent callers interleave at the
same points a host-persisted backend would suspend.

Usage:
    states = LocalCoverStateStore()
    await states.set("archer", "goblin", CoverSeverity.LESSER)
    states.get("archer", "goblin")  # CoverSeverity.LESSER
"""

from __future__ import annotations

import asyncio
import copy as cp
from collections.abc import Iterable

from autocover.core.cover.models import CoverAggregate, CoverRule, CoverSeverity
from autocover.errors import AggregateNotFoundError
from autocover.storage.allocator import AggregateIdAllocator


class LocalCoverStateStore:
    """In-memory cover state store.

    Structure:
        _rows[observer_id][target_id] = severity

    NONE is never stored.
    """

    def __init__(self) -> None:
        self._rows: dict[str, dict[str, CoverSeverity]] = {}

    def get(self, observer_id: str, target_id: str) -> CoverSeverity:
        """Get the severity ``target_id`` has against ``observer_id``.

        Args:
            observer_id: Observer whose row is read.
            target_id: Target to look up.

        Returns:
            Stored severity, NONE if absent.
        """
        return self._rows.get(observer_id, {}).get(target_id, CoverSeverity.NONE)

    async def set(self, observer_id: str, target_id: str, severity: CoverSeverity) -> None:
        """Persist a severity, removing the entry when it is NONE.

        Args:
            observer_id: Observer owning the row.
            target_id: Target the severity applies to.
            severity: New severity.
        """
        await asyncio.sleep(0)
        if severity is CoverSeverity.NONE:
            row = self._rows.get(observer_id)
            if row is not None:
                row.pop(target_id, None)
                if not row:
                    del self._rows[observer_id]
            return
        self._rows.setdefault(observer_id, {})[target_id] = severity

    def cover_map(self, observer_id: str) -> dict[str, CoverSeverity]:
        return dict(self._rows.get(observer_id, {}))

    def observers_of(self, target_id: str) -> dict[str, CoverSeverity]:
        return {
            observer_id: row[target_id]
            for observer_id, row in self._rows.items()
            if target_id in row
        }

    async def forget(self, entity_id: str) -> list[tuple[str, str, CoverSeverity]]:
        """Drop every entry involving ``entity_id`` as observer or target.

        Args:
            entity_id: Entity being removed.

        Returns:
            Removed (observer_id, target_id, severity) triples.
        """
        await asyncio.sleep(0)
        removed: list[tuple[str, str, CoverSeverity]] = []
        own_row = self._rows.pop(entity_id, {})
        removed.extend((entity_id, target_id, s) for target_id, s in own_row.items())
        for observer_id in list(self._rows):
            row = self._rows[observer_id]
            severity = row.pop(entity_id, None)
            if severity is not None:
                removed.append((observer_id, entity_id, severity))
            if not row:
                del self._rows[observer_id]
        return removed

    def clear(self) -> None:
        """Remove all rows."""
        self._rows.clear()


class LocalAggregateStore:
    """In-memory aggregate store.

    Structure:
        _aggregates[target_id][aggregate_id] = aggregate

    Args:
        allocator: Id allocator (default: a fresh AggregateIdAllocator).
    """

    def __init__(self, allocator: AggregateIdAllocator | None = None) -> None:
        self._allocator = allocator or AggregateIdAllocator()
        self._aggregates: dict[str, dict[str, CoverAggregate]] = {}

    def _require(self, target_id: str, aggregate_id: str) -> CoverAggregate:
        aggregate = self._aggregates.get(target_id, {}).get(aggregate_id)
        if aggregate is None:
            raise AggregateNotFoundError(target_id, aggregate_id)
        return aggregate

    async def get_aggregates(self, target_id: str) -> list[CoverAggregate]:
        """Get copies of every aggregate of a target, ordered by id.

        Args:
            target_id: Target to read.

        Returns:
            Deep copies; changes must be written back via update_aggregate().
        """
        await asyncio.sleep(0)
        records = self._aggregates.get(target_id, {})
        return [cp.deepcopy(records[key]) for key in sorted(records)]

    async def create_aggregate(
        self,
        target_id: str,
        severity: CoverSeverity,
        *,
        label: str = "",
        description: str = "",
        rules: Iterable[CoverRule] = (),
    ) -> CoverAggregate:
        """Create an aggregate.

        Args:
            target_id: Target that owns the aggregate.
            severity: Severity the aggregate summarizes.
            label: Display label.
            description: Display description.
            rules: Initial rules.

        Returns:
            Copy of the created aggregate.
        """
        await asyncio.sleep(0)
        aggregate = CoverAggregate(
            id=self._allocator.allocate(),
            target_id=target_id,
            severity=severity,
            label=label,
            description=description,
            rules=list(rules),
        )
        self._aggregates.setdefault(target_id, {})[aggregate.id] = aggregate
        return cp.deepcopy(aggregate)

    async def update_aggregate(
        self,
        target_id: str,
        aggregate_id: str,
        *,
        rules: Iterable[CoverRule] | None = None,
        label: str | None = None,
        description: str | None = None,
    ) -> None:
        """Update an aggregate in place.

        Raises:
            AggregateNotFoundError: If the aggregate no longer exists.
        """
        await asyncio.sleep(0)
        aggregate = self._require(target_id, aggregate_id)
        if rules is not None:
            aggregate.rules = list(rules)
        if label is not None:
            aggregate.label = label
        if description is not None:
            aggregate.description = description

    async def delete_aggregates(self, target_id: str, aggregate_ids: Iterable[str]) -> None:
        """Delete aggregates of a target.

        Raises:
            AggregateNotFoundError: For the first id that no longer exists,
                after deleting every id that does.
        """
        await asyncio.sleep(0)
        records = self._aggregates.get(target_id, {})
        missing: str | None = None
        for aggregate_id in aggregate_ids:
            if records.pop(aggregate_id, None) is None and missing is None:
                missing = aggregate_id
        if not records:
            self._aggregates.pop(target_id, None)
        if missing is not None:
            raise AggregateNotFoundError(target_id, missing)

    async def targets(self) -> list[str]:
        await asyncio.sleep(0)
        return sorted(target_id for target_id, records in self._aggregates.items() if records)

    def snapshot(self) -> dict[str, list[CoverAggregate]]:
        """Synchronous copy of every target's aggregates (for tests/debug)."""
        return {
            target_id: [cp.deepcopy(records[key]) for key in sorted(records)]
            for target_id, records in self._aggregates.items()
        }
