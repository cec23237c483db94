"""Tests for the entity model."""

import pytest

from autocover.core.entity import (
    AGGREGATE_EXEMPT_ACTOR_TYPES,
    NON_BLOCKING_ACTOR_TYPES,
    ActorType,
    Entity,
    SizeClass,
    Wall,
)
from autocover.core.geometry import Point, Rect


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("sm", SizeClass.SMALL),
        ("med", SizeClass.MEDIUM),
        ("lg", SizeClass.LARGE),
        ("grg", SizeClass.GARGANTUAN),
        ("Huge", SizeClass.HUGE),
        (0, SizeClass.TINY),
        (SizeClass.LARGE, SizeClass.LARGE),
    ],
)
def test_size_parse_accepts_names_aliases_and_ranks(raw, expected):
    assert SizeClass.parse(raw) is expected


@pytest.mark.parametrize("raw", ["colossal", 42, None, ""])
def test_unknown_size_is_medium(raw):
    """Unknown sizes fall back to medium rather than failing."""
    assert SizeClass.parse(raw) is SizeClass.MEDIUM


def test_size_ranks_are_ordered():
    ranks = [s.value for s in SizeClass]
    assert ranks == sorted(ranks)
    assert SizeClass.HUGE - SizeClass.MEDIUM == 2


def test_entity_signature_defaults_to_id():
    assert Entity(id="goblin").actor_signature == "goblin"
    assert Entity(id="goblin-2", signature="goblin").actor_signature == "goblin"


def test_entity_size_string_is_parsed():
    assert Entity(id="ogre", size="lg").size is SizeClass.LARGE


def test_entity_rect_scales_with_grid():
    ogre = Entity(id="ogre", x=200, y=100, width=2, height=2)
    assert ogre.rect(grid_size=50) == Rect(200, 100, 300, 200)
    assert ogre.center(grid_size=50) == Point(250, 150)


def test_entity_is_dead_only_with_health_track():
    assert Entity(id="a", hit_points=0).is_dead
    assert not Entity(id="b", hit_points=3).is_dead
    assert not Entity(id="c").is_dead


def test_move_to_updates_position():
    entity = Entity(id="a")
    entity.move_to(40, 60)
    assert (entity.x, entity.y) == (40, 60)


def test_actor_type_groups():
    assert ActorType.LOOT in NON_BLOCKING_ACTOR_TYPES
    assert ActorType.HAZARD in NON_BLOCKING_ACTOR_TYPES
    assert ActorType.CREATURE not in NON_BLOCKING_ACTOR_TYPES
    assert AGGREGATE_EXEMPT_ACTOR_TYPES == {ActorType.LOOT, ActorType.VEHICLE, ActorType.PARTY}


def test_wall_between():
    wall = Wall.between(0, 0, 0, 100)
    assert wall.segment.start == Point(0, 0)
    assert wall.segment.end == Point(0, 100)
    assert wall.blocks_cover
