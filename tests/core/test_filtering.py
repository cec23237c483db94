"""Tests for blocker eligibility."""

import pytest

from autocover.core.cover import BlockerFilterOptions, eligible_blockers, is_eligible_blocker
from autocover.core.entity import ActorType, Entity, VisibilityState

ATTACKER = Entity(id="archer", alliance="party")
TARGET = Entity(id="goblin", alliance="opposition")


def eligible(candidate, options=None, **kwargs):
    return is_eligible_blocker(
        candidate, ATTACKER, TARGET, options or BlockerFilterOptions(), **kwargs
    )


def test_plain_creature_blocks():
    assert eligible(Entity(id="ogre"))


def test_attacker_and_target_never_block():
    assert not eligible(ATTACKER)
    assert not eligible(TARGET)


def test_controlled_entities_never_block():
    assert not eligible(Entity(id="familiar"), controlled={"familiar"})


@pytest.mark.parametrize("actor_type", [ActorType.LOOT, ActorType.HAZARD])
def test_non_blocking_actor_types(actor_type):
    assert not eligible(Entity(id="chest", actor_type=actor_type))


def test_hidden_entities_never_block():
    assert not eligible(Entity(id="gm-token", hidden=True))


def test_ignore_cover_flag_is_respected_by_default():
    flagged = Entity(id="ghost", ignore_cover=True)
    assert not eligible(flagged)
    assert eligible(flagged, BlockerFilterOptions(respect_ignore_flag=False))


def test_dead_blockers_ignored_by_default():
    corpse = Entity(id="corpse", hit_points=0)
    assert not eligible(corpse)
    assert eligible(corpse, BlockerFilterOptions(ignore_dead_blockers=False))


def test_prone_blockers_allowed_by_default():
    prone = Entity(id="prone", prone=True)
    assert eligible(prone)
    assert not eligible(prone, BlockerFilterOptions(allow_prone_blockers=False))


def test_ally_blockers_only_ignored_when_enabled():
    ally = Entity(id="fighter", alliance="party")
    options = BlockerFilterOptions(ignore_ally_blockers=True)
    assert eligible(ally)
    assert not eligible(ally, options)
    assert eligible(Entity(id="orc", alliance="opposition"), options)


def test_ally_filter_needs_attacker_alliance():
    """An attacker without an alliance has no allies."""
    unaligned = Entity(id="wild")
    options = BlockerFilterOptions(ignore_ally_blockers=True)
    assert is_eligible_blocker(Entity(id="other"), unaligned, TARGET, options)


def test_undetected_blockers_use_visibility_lookup():
    rogue = Entity(id="rogue")

    def visibility(observer, candidate):
        return VisibilityState.UNDETECTED if candidate.id == "rogue" else VisibilityState.OBSERVED

    options = BlockerFilterOptions(ignore_undetected_blockers=True)
    assert eligible(rogue, visibility=visibility)
    assert not eligible(rogue, options, visibility=visibility)
    assert eligible(Entity(id="ogre"), options, visibility=visibility)


def test_visibility_perspective_overrides_attacker():
    seen_from = []

    def visibility(observer, candidate):
        seen_from.append(observer.id)
        return VisibilityState.OBSERVED

    scout = Entity(id="scout")
    options = BlockerFilterOptions(ignore_undetected_blockers=True, visibility_perspective=scout)
    eligible(Entity(id="rogue"), options, visibility=visibility)
    assert seen_from == ["scout"]


def test_failing_visibility_lookup_keeps_blocker():
    """Visibility errors never remove a blocker."""

    def visibility(observer, candidate):
        raise RuntimeError("perception unavailable")

    options = BlockerFilterOptions(ignore_undetected_blockers=True)
    assert eligible(Entity(id="rogue"), options, visibility=visibility)


def test_eligible_blockers_filters_collection():
    candidates = [ATTACKER, TARGET, Entity(id="ogre"), Entity(id="corpse", hit_points=0)]
    result = eligible_blockers(ATTACKER, TARGET, candidates, BlockerFilterOptions())
    assert [c.id for c in result] == ["ogre"]
