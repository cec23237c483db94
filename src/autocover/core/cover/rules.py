"""Stateless operations over cover rules.

Rules are immutable, so every operation returns a new list and never mutates
its input.
"""

from __future__ import annotations

from collections.abc import Iterable

from autocover.core.cover.models import CoverRule, CoverSeverity, RuleKind

ORIGIN_SIGNATURE_PREFIX = "origin:signature:"
COVER_AGAINST_PREFIX = "cover-against:"

REFLEX_PREDICATE: tuple[str, ...] = ("area-effect",)
STEALTH_PREDICATE: tuple[str, ...] = ("action:hide", "action:sneak", "avoid-detection")


def build_ac_rule(
    signature: str, observer_id: str, severity: CoverSeverity, value: int
) -> CoverRule:
    """AC bonus scoped to checks originating from the given observer."""
    return CoverRule(
        kind=RuleKind.AC,
        severity=severity,
        value=value,
        contributor_signature=signature,
        contributor_id=observer_id,
        predicate=(f"{ORIGIN_SIGNATURE_PREFIX}{signature}", f"{COVER_AGAINST_PREFIX}{observer_id}"),
    )


def build_marker_rule(observer_id: str, severity: CoverSeverity) -> CoverRule:
    """Roll option marking that cover is held against ``observer_id``."""
    return CoverRule(
        kind=RuleKind.MARKER,
        severity=severity,
        contributor_id=observer_id,
        predicate=(f"{COVER_AGAINST_PREFIX}{observer_id}",),
    )


def build_secondary_rules(severity: CoverSeverity, reflex: int, stealth: int) -> list[CoverRule]:
    """Reflex and stealth rules for ``severity``. Empty when both are zero."""
    if reflex <= 0 and stealth <= 0:
        return []
    return [
        CoverRule(kind=RuleKind.REFLEX, severity=severity, value=reflex, predicate=REFLEX_PREDICATE),
        CoverRule(
            kind=RuleKind.STEALTH, severity=severity, value=stealth, predicate=STEALTH_PREDICATE
        ),
    ]


def _with_prefix(predicate: Iterable[str], prefix: str) -> list[str]:
    return [p[len(prefix) :] for p in predicate if p.startswith(prefix) and len(p) > len(prefix)]


def signature_of(rule: CoverRule) -> str | None:
    """Observer signature a rule belongs to.

    Derived from the ``origin:signature:`` predicate first, so rules survive a
    missing or stale ``contributor_signature`` field.
    """
    signatures = _with_prefix(rule.predicate, ORIGIN_SIGNATURE_PREFIX)
    if signatures:
        return signatures[0]
    return rule.contributor_signature or None


def cover_against_of(rule: CoverRule) -> list[str]:
    """Observer token ids referenced by ``cover-against:`` predicates."""
    ids = _with_prefix(rule.predicate, COVER_AGAINST_PREFIX)
    if not ids and rule.is_marker and rule.contributor_id:
        ids = [rule.contributor_id]
    return ids


def belongs_to_observer(rule: CoverRule, signature: str, observer_id: str) -> bool:
    """Check if an AC or marker rule was contributed by the given observer."""
    if rule.is_ac:
        return signature_of(rule) == signature or observer_id in cover_against_of(rule)
    if rule.is_marker:
        return observer_id in cover_against_of(rule)
    return False


def strip_observer(rules: Iterable[CoverRule], signature: str, observer_id: str) -> list[CoverRule]:
    """Drop every AC and marker rule contributed by the given observer."""
    return [r for r in rules if not belongs_to_observer(r, signature, observer_id)]


def strip_secondary(rules: Iterable[CoverRule]) -> list[CoverRule]:
    """Drop reflex and stealth rules."""
    return [r for r in rules if not r.is_secondary]


def merge_distinct(*rule_lists: Iterable[CoverRule]) -> list[CoverRule]:
    """Concatenate rule lists, skipping structurally equal duplicates.

    First occurrence wins and order is preserved.
    """
    seen: set[CoverRule] = set()
    merged: list[CoverRule] = []
    for rules in rule_lists:
        for rule in rules:
            if rule in seen:
                continue
            seen.add(rule)
            merged.append(rule)
    return merged


def canonicalize(rules: Iterable[CoverRule]) -> list[CoverRule]:
    """Keep one AC rule per signature and one marker per observer id.

    The latest rule wins. AC rules come first, then markers, then everything
    else in original order. AC rules with no derivable signature are kept with
    the other rules so reconciliation can judge them.
    """
    ac_rules: dict[str, CoverRule] = {}
    markers: dict[str, CoverRule] = {}
    others: list[CoverRule] = []
    for rule in rules:
        if rule.is_ac:
            signature = signature_of(rule)
            if signature:
                ac_rules.pop(signature, None)
                ac_rules[signature] = rule
                continue
        elif rule.is_marker:
            ids = cover_against_of(rule)
            if ids:
                markers.pop(ids[0], None)
                markers[ids[0]] = rule
                continue
        others.append(rule)
    return [*ac_rules.values(), *markers.values(), *others]


def describe(severity: CoverSeverity) -> str:
    """Description text for an aggregate of ``severity``."""
    return f"Aggregated {severity.label} vs multiple observers."
