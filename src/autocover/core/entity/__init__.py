"""Entity model: the scene actors the cover core reasons about."""

from autocover.core.entity.models import (
    AGGREGATE_EXEMPT_ACTOR_TYPES,
    NON_BLOCKING_ACTOR_TYPES,
    ActorType,
    Entity,
    SizeClass,
    VisibilityState,
    Wall,
)

__all__ = [
    "Entity",
    "Wall",
    "SizeClass",
    "ActorType",
    "VisibilityState",
    "NON_BLOCKING_ACTOR_TYPES",
    "AGGREGATE_EXEMPT_ACTOR_TYPES",
]
