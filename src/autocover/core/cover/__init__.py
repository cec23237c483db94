"""Cover functionality: models, rule operations, blocker filtering, resolution."""

from autocover.core.cover.filtering import eligible_blockers, is_eligible_blocker
from autocover.core.cover.models import (
    BlockerFilterOptions,
    CoverAggregate,
    CoverRule,
    CoverSeverity,
    IntersectionMode,
    RuleKind,
)
from autocover.core.cover.resolver import classify_blockers, resolve_cover

__all__ = [
    # Models
    "CoverSeverity",
    "CoverRule",
    "CoverAggregate",
    "RuleKind",
    "IntersectionMode",
    "BlockerFilterOptions",
    # Operations
    "eligible_blockers",
    "is_eligible_blocker",
    "classify_blockers",
    "resolve_cover",
]
