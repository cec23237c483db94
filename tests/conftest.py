"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from autocover import (
    CoverSettings,
    CoverWorld,
    Entity,
    LocalAggregateStore,
    LocalCoverStateStore,
    LocalScene,
    SizeClass,
)
from autocover.aggregates import CoverAggregateEngine


@pytest.fixture
def settings():
    """Default settings, isolated from AUTOCOVER_* environment variables."""
    return CoverSettings(_env_file=None)


@pytest.fixture
def scene():
    """Scene with a 100-unit grid: archer | ogre | goblin on one row.

    The ogre (large) sits on the archer -> goblin line; the wolf (medium)
    sits on a second row, out of the way.
    """
    return LocalScene(
        grid_size=100,
        entities=[
            Entity(id="archer", x=0, y=0),
            Entity(id="ogre", x=100, y=0, size=SizeClass.LARGE),
            Entity(id="goblin", x=300, y=0, size=SizeClass.SMALL),
            Entity(id="wolf", x=0, y=300),
        ],
    )


@pytest.fixture
def states():
    return LocalCoverStateStore()


@pytest.fixture
def aggregates():
    return LocalAggregateStore()


@pytest.fixture
def engine(scene, states, aggregates, settings):
    """Aggregate engine over the shared scene and stores."""
    return CoverAggregateEngine(scene, states, aggregates, settings)


@pytest.fixture
def world(scene, states, aggregates, settings):
    """CoverWorld over the shared scene and stores."""
    return CoverWorld(scene, states=states, aggregates=aggregates, settings=settings)
