"""Cover data models.

Types for severities, rules, aggregates and blocker filter options.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from autocover.core.entity import Entity


@total_ordering
class CoverSeverity(Enum):
    """Ordered classification of how much a target is shielded."""

    NONE = "none"
    LESSER = "lesser"
    STANDARD = "standard"
    GREATER = "greater"
    """Explicitly declared full cover. Never produced by the geometric resolver."""

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CoverSeverity):
            return NotImplemented
        return self.rank < other.rank

    @property
    def label(self) -> str:
        """Display label for aggregates of this severity."""
        return _SEVERITY_LABELS[self]

    @classmethod
    def parse(cls, value: str | CoverSeverity | None) -> CoverSeverity:
        """Parse a severity key. Unknown keys are treated as NONE."""
        if isinstance(value, CoverSeverity):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.NONE
        return cls.NONE


_SEVERITY_ORDER: tuple[CoverSeverity, ...] = (
    CoverSeverity.NONE,
    CoverSeverity.LESSER,
    CoverSeverity.STANDARD,
    CoverSeverity.GREATER,
)

_SEVERITY_LABELS: dict[CoverSeverity, str] = {
    CoverSeverity.NONE: "No Cover",
    CoverSeverity.LESSER: "Lesser Cover",
    CoverSeverity.STANDARD: "Standard Cover",
    CoverSeverity.GREATER: "Greater Cover",
}


class RuleKind(Enum):
    """Kind of rule carried by a cover aggregate."""

    AC = "ac"
    """AC bonus contributed by one observer."""

    MARKER = "marker"
    """Observer-identity marker (``cover-against:<id>`` roll option)."""

    REFLEX = "reflex"
    """Secondary reflex save bonus against area effects."""

    STEALTH = "stealth"
    """Secondary stealth bonus for hiding and sneaking."""

    @property
    def is_secondary(self) -> bool:
        return self in (RuleKind.REFLEX, RuleKind.STEALTH)


class IntersectionMode(Enum):
    """How the attacker -> target center line must meet a blocker to count."""

    ANY = "any"
    """Any contact with the blocker's rectangle counts."""

    CENTER = "center"
    """Only the crossed blocker nearest the line counts, and only if the line
    passes through its center."""

    LENGTH10 = "length10"
    """The line must run through at least 10% of the blocker's grid squares."""

    @classmethod
    def parse(cls, value: str | IntersectionMode | None) -> IntersectionMode:
        """Parse a mode key. Unknown keys fall back to ANY."""
        if isinstance(value, IntersectionMode):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.ANY
        return cls.ANY


@dataclass(frozen=True, slots=True)
class CoverRule:
    """Atomic, immutable rule. Equality is structural.

    Attributes:
        kind: What the rule modifies.
        severity: Severity of the aggregate the rule was built for.
        value: Bonus magnitude (0 for markers).
        contributor_signature: Signature of the contributing observer
            (AC rules only).
        contributor_id: Id of the contributing observer token (AC and
            marker rules).
        predicate: Roll options that must hold for the rule to apply.
    """

    kind: RuleKind
    severity: CoverSeverity
    value: int = 0
    contributor_signature: str | None = None
    contributor_id: str | None = None
    predicate: tuple[str, ...] = ()

    @property
    def is_ac(self) -> bool:
        return self.kind is RuleKind.AC

    @property
    def is_marker(self) -> bool:
        return self.kind is RuleKind.MARKER

    @property
    def is_secondary(self) -> bool:
        return self.kind.is_secondary


@dataclass
class CoverAggregate:
    """Derived per-target, per-severity record summarizing every observer
    currently imposing ``severity`` on ``target_id``.
    """

    id: str
    target_id: str
    severity: CoverSeverity
    label: str = ""
    description: str = ""
    rules: list[CoverRule] = field(default_factory=list)

    @property
    def ac_rules(self) -> list[CoverRule]:
        return [r for r in self.rules if r.is_ac]

    @property
    def marker_rules(self) -> list[CoverRule]:
        return [r for r in self.rules if r.is_marker]

    @property
    def secondary_rules(self) -> list[CoverRule]:
        return [r for r in self.rules if r.is_secondary]

    @property
    def is_inert(self) -> bool:
        """An aggregate with no AC rules contributes nothing and may be pruned."""
        return not any(r.is_ac for r in self.rules)


@dataclass(frozen=True, slots=True)
class BlockerFilterOptions:
    """Options deciding which entities may block a line of attack.

    Built once from settings via ``CoverSettings.filter_options()``.
    """

    respect_ignore_flag: bool = True
    """Skip entities flagged ``ignore_cover``."""

    ignore_undetected_blockers: bool = False
    """Skip entities undetected from ``visibility_perspective``."""

    ignore_dead_blockers: bool = True
    """Skip entities at zero hit points."""

    allow_prone_blockers: bool = True
    """Let prone entities block."""

    ignore_ally_blockers: bool = False
    """Skip entities sharing the attacker's alliance."""

    visibility_perspective: Entity | None = None
    """Entity whose perception decides undetected blockers. None = attacker."""
