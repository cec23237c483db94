"""Geometric cover resolution for one attacker -> target pair.

Usage:
    severity = resolve_cover(attacker, target, scene, settings.filter_options())
    strict = resolve_cover(attacker, target, scene, mode=IntersectionMode.CENTER)
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from autocover.core.cover.filtering import eligible_blockers
from autocover.core.cover.models import BlockerFilterOptions, CoverSeverity, IntersectionMode
from autocover.core.entity import Entity
from autocover.core.geometry import (
    Point,
    Rect,
    distance_to_segment,
    segment_intersects_any,
    segment_intersects_rect,
    segment_rect_overlap,
)

if TYPE_CHECKING:
    from autocover.scene.protocol import SceneProvider

logger = logging.getLogger(__name__)

OVERSIZED_RANK_DELTA = 2
"""A blocker this many size ranks above the attacker grants standard cover."""

CENTER_TOLERANCE = 1.0
"""Scene units the line may miss a blocker's center by in CENTER mode."""

LENGTH_THRESHOLD_PERCENT = 10.0
"""Share of a blocker's grid squares the line must cross in LENGTH10 mode."""


def _crosses_length10(start: Point, end: Point, rect: Rect, grid_size: float) -> bool:
    overlap = segment_rect_overlap(start, end, rect)
    if overlap <= 0:
        return False
    squares = max(1, round(rect.width / grid_size) * round(rect.height / grid_size))
    # A full diagonal through one square counts as one square
    crossed = overlap / (grid_size * math.sqrt(2))
    return crossed / squares * 100 >= LENGTH_THRESHOLD_PERCENT


def crossing_blockers(
    start: Point,
    end: Point,
    blockers: list[Entity],
    grid_size: float,
    mode: IntersectionMode = IntersectionMode.ANY,
) -> list[Entity]:
    """Blockers the ``start``-``end`` line passes under the given mode."""
    if mode is IntersectionMode.CENTER:
        nearest: tuple[float, Entity] | None = None
        for blocker in blockers:
            rect = blocker.rect(grid_size)
            if not segment_intersects_rect(start, end, rect):
                continue
            distance = distance_to_segment(rect.center, start, end)
            if nearest is None or distance < nearest[0]:
                nearest = (distance, blocker)
        if nearest is None or nearest[0] > CENTER_TOLERANCE:
            return []
        return [nearest[1]]
    if mode is IntersectionMode.LENGTH10:
        return [
            b for b in blockers if _crosses_length10(start, end, b.rect(grid_size), grid_size)
        ]
    return [b for b in blockers if segment_intersects_rect(start, end, b.rect(grid_size))]


def classify_blockers(
    attacker: Entity,
    start: Point,
    end: Point,
    blockers: list[Entity],
    grid_size: float,
    mode: IntersectionMode = IntersectionMode.ANY,
) -> CoverSeverity:
    """Classify token cover from the blockers crossed by ``start``-``end``.

    NONE if no blocker crosses the line, STANDARD as soon as one crossing
    blocker is at least two size ranks larger than the attacker, LESSER
    otherwise.
    """
    crossed = crossing_blockers(start, end, blockers, grid_size, mode)
    if not crossed:
        return CoverSeverity.NONE
    attacker_rank = attacker.size_rank
    if any(b.size_rank - attacker_rank >= OVERSIZED_RANK_DELTA for b in crossed):
        return CoverSeverity.STANDARD
    return CoverSeverity.LESSER


def resolve_cover(
    attacker: Entity,
    target: Entity,
    scene: SceneProvider,
    options: BlockerFilterOptions | None = None,
    mode: IntersectionMode = IntersectionMode.ANY,
) -> CoverSeverity:
    """Compute the cover ``target`` has against ``attacker``.

    Never raises: any failure degrades to NONE.

    Args:
        attacker: Attacking entity (the observer).
        target: Entity being attacked.
        scene: Provider of entities, walls, grid size and visibility.
        options: Blocker filter options. Defaults to BlockerFilterOptions().
        mode: How the center line must meet a blocker to count.

    Returns:
        NONE, LESSER or STANDARD.
    """
    try:
        if attacker is None or target is None or attacker.id == target.id:
            return CoverSeverity.NONE
        grid_size = scene.grid_size
        start = attacker.center(grid_size)
        end = target.center(grid_size)

        blockers = eligible_blockers(
            attacker,
            target,
            scene.entities(),
            options or BlockerFilterOptions(),
            visibility=scene.visibility,
            controlled=scene.controlled_ids(),
        )
        severity = classify_blockers(attacker, start, end, blockers, grid_size, mode)

        walls = [wall.segment for wall in scene.walls() if wall.blocks_cover]
        if walls and segment_intersects_any(start, end, walls):
            severity = max(severity, CoverSeverity.STANDARD)
        return severity
    except Exception:
        logger.debug(
            "Cover resolution failed for %s -> %s",
            getattr(attacker, "id", None),
            getattr(target, "id", None),
            exc_info=True,
        )
        return CoverSeverity.NONE
