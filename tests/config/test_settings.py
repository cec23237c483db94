"""Tests for CoverSettings."""

import importlib
import sys

import pytest
from pydantic import ValidationError

from autocover.config import CoverSettings, SeverityBonus
from autocover.core.cover import BlockerFilterOptions, CoverSeverity, IntersectionMode
from autocover.core.entity import Entity


def test_defaults(settings):
    """Default filters and bonus table match the tabletop rules."""
    assert settings.respect_ignore_flag
    assert settings.ignore_dead_blockers
    assert settings.allow_prone_blockers
    assert not settings.ignore_undetected_blockers
    assert not settings.ignore_ally_blockers
    assert settings.grid_size == 100
    assert settings.intersection_mode is IntersectionMode.ANY
    assert settings.bonus_for(CoverSeverity.NONE) == SeverityBonus()
    assert settings.bonus_for(CoverSeverity.LESSER) == SeverityBonus(ac=1)
    assert settings.bonus_for(CoverSeverity.STANDARD) == SeverityBonus(ac=2, reflex=2, stealth=2)
    assert settings.bonus_for(CoverSeverity.GREATER) == SeverityBonus(ac=4, reflex=4, stealth=4)


def test_lesser_grants_no_secondary_bonus(settings):
    assert not settings.bonus_for(CoverSeverity.LESSER).grants_secondary
    assert settings.bonus_for(CoverSeverity.STANDARD).grants_secondary


def test_unknown_severity_grants_nothing(settings):
    assert settings.bonus_for("heroic") == SeverityBonus()
    assert settings.bonus_for(None) == SeverityBonus()


def test_partial_bonus_table_is_merged_over_defaults():
    settings = CoverSettings(_env_file=None, bonuses={"standard": {"ac": 3, "reflex": 1}})
    assert settings.bonus_for(CoverSeverity.STANDARD) == SeverityBonus(ac=3, reflex=1)
    assert settings.bonus_for(CoverSeverity.LESSER).ac == 1
    assert settings.bonus_for(CoverSeverity.GREATER).ac == 4


def test_unknown_bonus_keys_are_ignored():
    settings = CoverSettings(_env_file=None, bonuses={"heroic": {"ac": 9}})
    assert set(settings.bonuses) == set(CoverSeverity)


def test_ac_bonus_must_increase_with_severity():
    """CRITICAL: Higher severity never grants a smaller AC bonus.

    Why: Secondary bonuses follow the highest severity; a non-monotonic
    table would make "highest" and "strongest" disagree.
    """
    with pytest.raises(ValidationError):
        CoverSettings(_env_file=None, bonuses={"greater": {"ac": 2}})


def test_none_must_not_grant_bonus():
    with pytest.raises(ValidationError):
        CoverSettings(_env_file=None, bonuses={"none": {"stealth": 1}})


def test_negative_bonus_rejected():
    with pytest.raises(ValidationError):
        SeverityBonus(ac=-1)


def test_grid_size_must_be_positive():
    with pytest.raises(ValidationError):
        CoverSettings(_env_file=None, grid_size=0)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("AUTOCOVER_GRID_SIZE", "50")
    monkeypatch.setenv("AUTOCOVER_IGNORE_ALLY_BLOCKERS", "true")
    settings = CoverSettings(_env_file=None)
    assert settings.grid_size == 50
    assert settings.ignore_ally_blockers


def test_intersection_mode_from_environment(monkeypatch):
    monkeypatch.setenv("AUTOCOVER_INTERSECTION_MODE", "Center")
    assert CoverSettings(_env_file=None).intersection_mode is IntersectionMode.CENTER


def test_unknown_intersection_mode_falls_back_to_any():
    settings = CoverSettings(_env_file=None, intersection_mode="tactical")
    assert settings.intersection_mode is IntersectionMode.ANY


def test_filter_options_mirror_settings():
    settings = CoverSettings(_env_file=None, allow_prone_blockers=False, ignore_ally_blockers=True)
    scout = Entity(id="scout")
    options = settings.filter_options(visibility_perspective=scout)
    assert options == BlockerFilterOptions(
        allow_prone_blockers=False,
        ignore_ally_blockers=True,
        visibility_perspective=scout,
    )


def test_missing_pydantic_settings_names_the_package(monkeypatch):
    """The install hint points at the distribution that is actually missing."""
    monkeypatch.setitem(sys.modules, "pydantic_settings", None)
    monkeypatch.delitem(sys.modules, "autocover.config.settings")
    with pytest.raises(ImportError, match="pip install pydantic-settings"):
        importlib.import_module("autocover.config.settings")
