"""Scene protocols consumed by the cover core.

The host adapts its own object model to these protocols; the core never
reaches into host objects directly.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from typing import Protocol, runtime_checkable

from autocover.core.entity import Entity, VisibilityState, Wall


@runtime_checkable
class VisibilityProvider(Protocol):
    """Visibility subsystem: how an observer perceives a candidate."""

    def visibility(self, observer: Entity, candidate: Entity) -> VisibilityState:
        """Visibility of ``candidate`` from ``observer``."""
        ...


@runtime_checkable
class SceneProvider(VisibilityProvider, Protocol):
    """Live placed entities plus the scene data the resolver needs."""

    @property
    def grid_size(self) -> float:
        """Scene units per grid square."""
        ...

    def entities(self) -> Iterable[Entity]:
        """Every live placed entity."""
        ...

    def get(self, entity_id: str) -> Entity | None:
        """Live entity with ``entity_id``, None if absent."""
        ...

    def controlled_ids(self) -> Collection[str]:
        """Ids of entities currently selected/controlled by the acting user."""
        ...

    def walls(self) -> Iterable[Wall]:
        """Wall segments placed on the scene."""
        ...
