"""Typed entity interface consumed by the cover core.

Usage:
    goblin = Entity(id="goblin", x=100, y=0, size=SizeClass.SMALL)
    ogre = Entity(id="ogre", x=200, y=0, width=2, height=2, size=SizeClass.LARGE)
    goblin.rect(grid_size=100)  # Rect(x1=100, y1=0, x2=200, y2=100)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from autocover.core.geometry import Point, Rect, Segment


class SizeClass(IntEnum):
    """Ordered creature size. The integer value is the size rank."""

    TINY = 0
    SMALL = 1
    MEDIUM = 2
    LARGE = 3
    HUGE = 4
    GARGANTUAN = 5

    @classmethod
    def parse(cls, value: str | int | SizeClass | None) -> SizeClass:
        """Parse a size from a name, short alias or rank. Unknown sizes are medium."""
        if isinstance(value, SizeClass):
            return value
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return cls.MEDIUM
        if isinstance(value, str):
            return _SIZE_ALIASES.get(value.strip().lower(), cls.MEDIUM)
        return cls.MEDIUM


_SIZE_ALIASES: dict[str, SizeClass] = {
    "tiny": SizeClass.TINY,
    "sm": SizeClass.SMALL,
    "small": SizeClass.SMALL,
    "med": SizeClass.MEDIUM,
    "medium": SizeClass.MEDIUM,
    "lg": SizeClass.LARGE,
    "large": SizeClass.LARGE,
    "huge": SizeClass.HUGE,
    "grg": SizeClass.GARGANTUAN,
    "gargantuan": SizeClass.GARGANTUAN,
}


class ActorType(Enum):
    """Kind of actor behind a placed entity."""

    CREATURE = "creature"
    HAZARD = "hazard"
    """Non-corporeal hazard. Never blocks."""

    LOOT = "loot"
    """Inert object. Never blocks and never receives cover aggregates."""

    VEHICLE = "vehicle"
    PARTY = "party"


NON_BLOCKING_ACTOR_TYPES: frozenset[ActorType] = frozenset({ActorType.LOOT, ActorType.HAZARD})
"""Actor types that never act as cover blockers."""

AGGREGATE_EXEMPT_ACTOR_TYPES: frozenset[ActorType] = frozenset(
    {ActorType.LOOT, ActorType.VEHICLE, ActorType.PARTY}
)
"""Actor types that neither receive nor contribute cover aggregates."""


class VisibilityState(Enum):
    """How an observer currently perceives another entity."""

    OBSERVED = "observed"
    CONCEALED = "concealed"
    HIDDEN = "hidden"
    UNDETECTED = "undetected"


@dataclass(slots=True)
class Entity:
    """A placed, rectangular scene actor.

    Position is the top-left corner in scene units; ``width`` and ``height``
    are in grid squares. Status flags are mutable.

    Attributes:
        id: Unique id of the placed token.
        signature: Identity of the underlying actor; survives token churn.
            Defaults to ``id``.
        x: Left edge in scene units.
        y: Top edge in scene units.
        width: Width in grid squares.
        height: Height in grid squares.
        size: Size class used for cover thresholds.
        actor_type: Kind of actor.
        hidden: Hidden from the scene (GM-only).
        prone: Prone condition.
        hit_points: Current health, None when the actor has no health track.
        alliance: Alliance tag ("party", "opposition", ...).
        ignore_cover: Explicitly exempt from acting as cover.
    """

    id: str
    x: float = 0.0
    y: float = 0.0
    width: float = 1.0
    height: float = 1.0
    size: SizeClass = SizeClass.MEDIUM
    actor_type: ActorType = ActorType.CREATURE
    signature: str | None = None
    hidden: bool = False
    prone: bool = False
    hit_points: int | None = None
    alliance: str | None = None
    ignore_cover: bool = False

    def __post_init__(self) -> None:
        self.size = SizeClass.parse(self.size)
        if self.signature is None:
            self.signature = self.id

    @property
    def actor_signature(self) -> str:
        """Signature that identifies this entity's actor."""
        return self.signature or self.id

    @property
    def size_rank(self) -> int:
        return int(self.size)

    @property
    def is_dead(self) -> bool:
        return self.hit_points is not None and self.hit_points <= 0

    def rect(self, grid_size: float) -> Rect:
        """World-space rectangle for a grid of ``grid_size`` scene units."""
        return Rect.from_origin(self.x, self.y, self.width * grid_size, self.height * grid_size)

    def center(self, grid_size: float) -> Point:
        return self.rect(grid_size).center

    def move_to(self, x: float, y: float) -> None:
        self.x = x
        self.y = y


@dataclass(frozen=True, slots=True)
class Wall:
    """Wall segment placed on the scene."""

    segment: Segment
    blocks_cover: bool = True

    @classmethod
    def between(cls, x1: float, y1: float, x2: float, y2: float, blocks_cover: bool = True) -> Wall:
        return cls(Segment(Point(x1, y1), Point(x2, y2)), blocks_cover=blocks_cover)
