"""AutoCover: automatic cover resolution and aggregate bookkeeping for grid combat.

Usage:
    from autocover import CoverWorld, Entity, LocalScene, SizeClass

    scene = LocalScene(grid_size=100)
    scene.add(
        Entity(id="archer", x=0, y=0),
        Entity(id="ogre", x=100, y=0, size=SizeClass.LARGE),
        Entity(id="goblin", x=300, y=0, size=SizeClass.SMALL),
    )

    world = CoverWorld(scene)
    severity = await world.on_attack_declared("archer", "goblin")  # LESSER
    await world.get_aggregates("goblin")  # one "Lesser Cover" aggregate
"""

__version__ = "0.1.0"

# Core primitives
from autocover.core import (
    AGGREGATE_EXEMPT_ACTOR_TYPES,
    NON_BLOCKING_ACTOR_TYPES,
    ActorType,
    BlockerFilterOptions,
    CoverAggregate,
    CoverRule,
    CoverSeverity,
    Entity,
    IntersectionMode,
    Point,
    Rect,
    RuleKind,
    Segment,
    SizeClass,
    VisibilityState,
    Wall,
    resolve_cover,
)

# Configuration
from autocover.config import CoverSettings, SeverityBonus

# Errors
from autocover.errors import (
    AggregateNotFoundError,
    AggregateStoreError,
    CoverError,
    UnknownEntityError,
)

# Events
from autocover.events import CoverChanged, CoverTopic, EventBus

# Aggregates
from autocover.aggregates import CoverAggregateEngine

# Scene
from autocover.scene import LocalScene, SceneProvider, VisibilityProvider

# Scheduling
from autocover.scheduling import ActorLock

# Storage
from autocover.storage import (
    AggregateStore,
    CoverStateStore,
    LocalAggregateStore,
    LocalCoverStateStore,
)

# World
from autocover.world import AttackContext, CoverWorld

__all__ = [
    "__version__",
    # Core
    "Point",
    "Rect",
    "Segment",
    "Entity",
    "Wall",
    "SizeClass",
    "ActorType",
    "VisibilityState",
    "NON_BLOCKING_ACTOR_TYPES",
    "AGGREGATE_EXEMPT_ACTOR_TYPES",
    "CoverSeverity",
    "CoverRule",
    "CoverAggregate",
    "RuleKind",
    "IntersectionMode",
    "BlockerFilterOptions",
    "resolve_cover",
    # Config
    "CoverSettings",
    "SeverityBonus",
    # Errors
    "CoverError",
    "AggregateStoreError",
    "AggregateNotFoundError",
    "UnknownEntityError",
    # Events
    "EventBus",
    "CoverTopic",
    "CoverChanged",
    # Aggregates
    "CoverAggregateEngine",
    # Scene
    "SceneProvider",
    "VisibilityProvider",
    "LocalScene",
    # Scheduling
    "ActorLock",
    # Storage
    "CoverStateStore",
    "AggregateStore",
    "LocalCoverStateStore",
    "LocalAggregateStore",
    # World
    "CoverWorld",
    "AttackContext",
]
