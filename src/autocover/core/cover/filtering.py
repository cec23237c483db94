"""Blocker eligibility filtering.

Decides which entities on the scene may act as cover blockers for one
attacker/target pair.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Iterable

from autocover.core.cover.models import BlockerFilterOptions
from autocover.core.entity import NON_BLOCKING_ACTOR_TYPES, Entity, VisibilityState

logger = logging.getLogger(__name__)

VisibilityLookup = Callable[[Entity, Entity], VisibilityState]
"""Signature: (observer, candidate) -> visibility of candidate from observer."""


def _is_undetected(perspective: Entity, candidate: Entity, visibility: VisibilityLookup) -> bool:
    try:
        return visibility(perspective, candidate) is VisibilityState.UNDETECTED
    except Exception:
        # A failed lookup keeps the candidate as a blocker
        logger.debug(
            "Visibility lookup failed for %s -> %s", perspective.id, candidate.id, exc_info=True
        )
        return False


def is_eligible_blocker(
    candidate: Entity,
    attacker: Entity,
    target: Entity,
    options: BlockerFilterOptions,
    *,
    visibility: VisibilityLookup | None = None,
    controlled: Collection[str] = (),
) -> bool:
    """Check a single candidate against the exclusion policy.

    Args:
        candidate: Entity that might block.
        attacker: Attacking entity.
        target: Targeted entity.
        options: Filter options.
        visibility: Visibility lookup, required for undetected filtering.
        controlled: Ids of entities controlled by the acting user.

    Returns:
        True if the candidate may block the attacker/target line.
    """
    if candidate.id in (attacker.id, target.id) or candidate.id in controlled:
        return False
    if candidate.actor_type in NON_BLOCKING_ACTOR_TYPES:
        return False
    if options.respect_ignore_flag and candidate.ignore_cover:
        return False
    if candidate.hidden:
        return False
    if options.ignore_undetected_blockers and visibility is not None:
        perspective = options.visibility_perspective or attacker
        if _is_undetected(perspective, candidate, visibility):
            return False
    if options.ignore_dead_blockers and candidate.is_dead:
        return False
    if candidate.prone and not options.allow_prone_blockers:
        return False
    return not (
        options.ignore_ally_blockers
        and attacker.alliance is not None
        and candidate.alliance == attacker.alliance
    )


def eligible_blockers(
    attacker: Entity,
    target: Entity,
    candidates: Iterable[Entity],
    options: BlockerFilterOptions,
    *,
    visibility: VisibilityLookup | None = None,
    controlled: Collection[str] = (),
) -> list[Entity]:
    """Filter ``candidates`` down to entities that may block. Order is irrelevant."""
    return [
        candidate
        for candidate in candidates
        if is_eligible_blocker(
            candidate, attacker, target, options, visibility=visibility, controlled=controlled
        )
    ]
