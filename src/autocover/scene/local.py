"""Local in-memory scene.

Usage:
    scene = LocalScene(grid_size=100)
    scene.add(Entity(id="archer", x=0, y=0))
    scene.set_visibility("archer", "rogue", VisibilityState.UNDETECTED)
"""

from __future__ import annotations

import warnings
from collections.abc import Collection, Iterable, Iterator

from autocover.core.entity import Entity, VisibilityState, Wall
from autocover.errors import UnknownEntityError


class LocalScene:
    """Dict-backed scene implementing SceneProvider and VisibilityProvider.

    Visibility defaults to OBSERVED for every pair without an explicit entry.

    Args:
        grid_size: Scene units per grid square.
        entities: Initial entities.
        walls: Initial walls.
    """

    def __init__(
        self,
        grid_size: float = 100.0,
        entities: Iterable[Entity] = (),
        walls: Iterable[Wall] = (),
    ) -> None:
        if grid_size <= 0:
            raise ValueError(f"grid_size must be positive, got {grid_size}")
        self._grid_size = grid_size
        self._entities: dict[str, Entity] = {}
        self._walls: list[Wall] = list(walls)
        self._controlled: set[str] = set()
        self._visibility: dict[tuple[str, str], VisibilityState] = {}
        for entity in entities:
            self.add(entity)

    @property
    def grid_size(self) -> float:
        return self._grid_size

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------
    def add(self, *entities: Entity) -> None:
        """Place entities on the scene. Re-adding an id replaces the entity."""
        for entity in entities:
            if entity.id in self._entities:
                warnings.warn(
                    f"add() replaced existing entity {entity.id!r}",
                    stacklevel=2,
                )
            self._entities[entity.id] = entity

    def remove(self, entity_id: str) -> Entity | None:
        """Remove an entity and every visibility entry involving it."""
        self._controlled.discard(entity_id)
        self._visibility = {
            pair: state for pair, state in self._visibility.items() if entity_id not in pair
        }
        return self._entities.pop(entity_id, None)

    def get(self, entity_id: str) -> Entity | None:
        return self._entities.get(entity_id)

    def require(self, entity_id: str) -> Entity:
        """Get a live entity or raise UnknownEntityError."""
        entity = self._entities.get(entity_id)
        if entity is None:
            raise UnknownEntityError(entity_id)
        return entity

    def entities(self) -> Iterator[Entity]:
        yield from list(self._entities.values())

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    # ------------------------------------------------------------------
    # Selection, walls, visibility
    # ------------------------------------------------------------------
    def set_controlled(self, *entity_ids: str) -> None:
        """Replace the set of entities controlled by the acting user."""
        self._controlled = set(entity_ids)

    def controlled_ids(self) -> Collection[str]:
        return frozenset(self._controlled)

    def add_wall(self, wall: Wall) -> None:
        self._walls.append(wall)

    def walls(self) -> list[Wall]:
        return list(self._walls)

    def set_visibility(self, observer_id: str, candidate_id: str, state: VisibilityState) -> None:
        """Record how ``observer_id`` perceives ``candidate_id``."""
        if state is VisibilityState.OBSERVED:
            self._visibility.pop((observer_id, candidate_id), None)
        else:
            self._visibility[(observer_id, candidate_id)] = state

    def visibility(self, observer: Entity, candidate: Entity) -> VisibilityState:
        return self._visibility.get((observer.id, candidate.id), VisibilityState.OBSERVED)
