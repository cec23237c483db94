"""Tests for LocalScene."""

import pytest

from autocover.core.entity import Entity, VisibilityState, Wall
from autocover.errors import UnknownEntityError
from autocover.scene import LocalScene, SceneProvider, VisibilityProvider


def test_local_scene_satisfies_protocols():
    scene = LocalScene()
    assert isinstance(scene, SceneProvider)
    assert isinstance(scene, VisibilityProvider)


def test_grid_size_must_be_positive():
    with pytest.raises(ValueError):
        LocalScene(grid_size=0)


def test_add_get_remove():
    scene = LocalScene(entities=[Entity(id="archer")])
    assert "archer" in scene
    assert len(scene) == 1
    assert scene.get("archer").id == "archer"

    removed = scene.remove("archer")
    assert removed.id == "archer"
    assert scene.get("archer") is None
    assert scene.remove("archer") is None


def test_require_unknown_entity_raises():
    with pytest.raises(UnknownEntityError) as exc_info:
        LocalScene().require("ghost")
    assert exc_info.value.entity_id == "ghost"
    assert str(exc_info.value) == "Unknown entity ghost"


def test_readding_an_id_warns():
    scene = LocalScene(entities=[Entity(id="archer")])
    with pytest.warns(UserWarning, match="replaced existing entity"):
        scene.add(Entity(id="archer", x=100))
    assert scene.require("archer").x == 100


def test_visibility_defaults_to_observed():
    scene = LocalScene(entities=[Entity(id="archer"), Entity(id="rogue")])
    archer, rogue = scene.require("archer"), scene.require("rogue")
    assert scene.visibility(archer, rogue) is VisibilityState.OBSERVED

    scene.set_visibility("archer", "rogue", VisibilityState.UNDETECTED)
    assert scene.visibility(archer, rogue) is VisibilityState.UNDETECTED
    # Visibility is directional
    assert scene.visibility(rogue, archer) is VisibilityState.OBSERVED


def test_remove_clears_visibility_and_control():
    scene = LocalScene(entities=[Entity(id="archer"), Entity(id="rogue")])
    scene.set_visibility("archer", "rogue", VisibilityState.HIDDEN)
    scene.set_controlled("rogue")
    rogue = scene.remove("rogue")

    scene.add(rogue)
    assert scene.visibility(scene.require("archer"), rogue) is VisibilityState.OBSERVED
    assert scene.controlled_ids() == frozenset()


def test_walls_are_returned_as_copy():
    scene = LocalScene(walls=[Wall.between(0, 0, 0, 100)])
    scene.walls().clear()
    assert len(scene.walls()) == 1
