"""Configuration settings using Pydantic Settings.

Provides one typed configuration for blocker filtering, grid geometry and
per-severity bonus magnitudes, with environment variable support.

Usage:
    from autocover.config import CoverSettings

    # Load from environment variables (AUTOCOVER_*)
    settings = CoverSettings()

    # Or override with explicit values
    settings = CoverSettings(grid_size=50, ignore_ally_blockers=True)
    settings.bonus_for(CoverSeverity.STANDARD).ac  # 2
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

try:
    from pydantic_settings import BaseSettings, SettingsConfigDict
except ImportError as e:
    raise ImportError(
        "pydantic-settings is required for the config module. "
        "Install with: pip install pydantic-settings"
    ) from e

from autocover.core.cover.models import BlockerFilterOptions, CoverSeverity, IntersectionMode

if TYPE_CHECKING:
    from autocover.core.entity import Entity


class SeverityBonus(BaseModel):
    """Bonus magnitudes granted by one cover severity.

    Attributes:
        ac: Circumstance bonus to AC against the observer.
        reflex: Circumstance bonus to reflex saves against area effects.
        stealth: Circumstance bonus to stealth when hiding or sneaking.
    """

    model_config = ConfigDict(frozen=True)

    ac: int = Field(default=0, ge=0)
    reflex: int = Field(default=0, ge=0)
    stealth: int = Field(default=0, ge=0)

    @property
    def grants_secondary(self) -> bool:
        return self.reflex > 0 or self.stealth > 0


_NO_BONUS = SeverityBonus()


def _is_severity_key(key: object) -> bool:
    if isinstance(key, CoverSeverity):
        return True
    return isinstance(key, str) and key.strip().lower() in {s.value for s in CoverSeverity}


def _default_bonuses() -> dict[CoverSeverity, SeverityBonus]:
    return {
        CoverSeverity.NONE: SeverityBonus(),
        CoverSeverity.LESSER: SeverityBonus(ac=1),
        CoverSeverity.STANDARD: SeverityBonus(ac=2, reflex=2, stealth=2),
        CoverSeverity.GREATER: SeverityBonus(ac=4, reflex=4, stealth=4),
    }


class CoverSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for cover resolution and aggregate bonuses.

    Attributes:
        respect_ignore_flag: Skip blockers flagged ``ignore_cover``.
        ignore_undetected_blockers: Skip blockers undetected by the perspective.
        ignore_dead_blockers: Skip blockers at zero hit points.
        allow_prone_blockers: Let prone entities block.
        ignore_ally_blockers: Skip blockers allied with the attacker.
        grid_size: Scene units per grid square.
        intersection_mode: How the attacker -> target line must meet a blocker
            (any, center or length10). Unknown values fall back to any.
        bonuses: Bonus magnitudes per severity. Missing severities grant nothing.
        attack_context_ttl: Seconds before an unfinished attack context clears
            its recorded cover.

    Environment Variables:
        AUTOCOVER_RESPECT_IGNORE_FLAG
        AUTOCOVER_IGNORE_UNDETECTED_BLOCKERS
        AUTOCOVER_IGNORE_DEAD_BLOCKERS
        AUTOCOVER_ALLOW_PRONE_BLOCKERS
        AUTOCOVER_IGNORE_ALLY_BLOCKERS
        AUTOCOVER_GRID_SIZE
        AUTOCOVER_INTERSECTION_MODE
        AUTOCOVER_BONUSES (JSON, e.g. '{"lesser": {"ac": 1}}')
        AUTOCOVER_ATTACK_CONTEXT_TTL
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTOCOVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    respect_ignore_flag: bool = True
    ignore_undetected_blockers: bool = False
    ignore_dead_blockers: bool = True
    allow_prone_blockers: bool = True
    ignore_ally_blockers: bool = False
    grid_size: float = Field(default=100.0, gt=0)
    intersection_mode: IntersectionMode = IntersectionMode.ANY
    bonuses: dict[CoverSeverity, SeverityBonus] = Field(default_factory=_default_bonuses)
    attack_context_ttl: float = Field(default=30.0, gt=0)

    @field_validator("intersection_mode", mode="before")
    @classmethod
    def _parse_intersection_mode(cls, value: object) -> IntersectionMode:
        return IntersectionMode.parse(value)  # type: ignore[arg-type]

    @field_validator("bonuses", mode="before")
    @classmethod
    def _fill_missing_bonuses(cls, value: object) -> object:
        """Merge partial bonus tables over the defaults."""
        if not isinstance(value, dict):
            return value
        merged: dict[CoverSeverity, object] = dict(_default_bonuses())
        for key, bonus in value.items():
            if not _is_severity_key(key):
                # Unknown severity keys are inert
                continue
            merged[CoverSeverity.parse(key)] = bonus
        return merged

    @model_validator(mode="after")
    def _check_monotonic(self) -> CoverSettings:
        """AC bonus must strictly increase with severity and NONE grants nothing."""
        if self.bonus_for(CoverSeverity.NONE) != _NO_BONUS:
            raise ValueError("CoverSeverity.NONE must not grant any bonus")
        ordered = sorted(self.bonuses)
        for lower, higher in zip(ordered, ordered[1:]):
            if self.bonuses[higher].ac <= self.bonuses[lower].ac:
                raise ValueError(
                    f"AC bonus must strictly increase: {lower.value}="
                    f"{self.bonuses[lower].ac} >= {higher.value}={self.bonuses[higher].ac}"
                )
        return self

    def bonus_for(self, severity: CoverSeverity | str | None) -> SeverityBonus:
        """Bonus magnitudes for ``severity``. Unknown severities grant nothing."""
        return self.bonuses.get(CoverSeverity.parse(severity), _NO_BONUS)

    def filter_options(self, visibility_perspective: Entity | None = None) -> BlockerFilterOptions:
        """Blocker filter options derived from these settings."""
        return BlockerFilterOptions(
            respect_ignore_flag=self.respect_ignore_flag,
            ignore_undetected_blockers=self.ignore_undetected_blockers,
            ignore_dead_blockers=self.ignore_dead_blockers,
            allow_prone_blockers=self.allow_prone_blockers,
            ignore_ally_blockers=self.ignore_ally_blockers,
            visibility_perspective=visibility_perspective,
        )
