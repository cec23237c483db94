"""Core functionalities: stateless primitives for cover computation.

Architecture Note:
    core/ contains pure, stateless functionality: geometry, the entity model,
    blocker filtering, cover resolution and rule operations. For stateful
    services, see storage/, scene/, aggregates/, scheduling/ and world/.
"""

from autocover.core.cover import (
    BlockerFilterOptions,
    CoverAggregate,
    CoverRule,
    CoverSeverity,
    IntersectionMode,
    RuleKind,
    classify_blockers,
    eligible_blockers,
    is_eligible_blocker,
    resolve_cover,
)
from autocover.core.entity import (
    AGGREGATE_EXEMPT_ACTOR_TYPES,
    NON_BLOCKING_ACTOR_TYPES,
    ActorType,
    Entity,
    SizeClass,
    VisibilityState,
    Wall,
)
from autocover.core.geometry import (
    Point,
    Rect,
    Segment,
    distance_to_segment,
    point_in_rect,
    segment_intersects_any,
    segment_intersects_rect,
    segment_rect_overlap,
    segments_intersect,
)

__all__ = [
    # Geometry
    "Point",
    "Rect",
    "Segment",
    "point_in_rect",
    "segments_intersect",
    "segment_intersects_rect",
    "segment_intersects_any",
    "segment_rect_overlap",
    "distance_to_segment",
    # Entity
    "Entity",
    "Wall",
    "SizeClass",
    "ActorType",
    "VisibilityState",
    "NON_BLOCKING_ACTOR_TYPES",
    "AGGREGATE_EXEMPT_ACTOR_TYPES",
    # Cover
    "CoverSeverity",
    "CoverRule",
    "CoverAggregate",
    "RuleKind",
    "IntersectionMode",
    "BlockerFilterOptions",
    "eligible_blockers",
    "is_eligible_blocker",
    "classify_blockers",
    "resolve_cover",
]
