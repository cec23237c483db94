"""Cover aggregate engine.

Keeps, for each target, aggregates that summarize the cover state store as
rules a combat system can consume directly: one AC rule per contributing
observer, scoped to checks that observer originates, plus secondary reflex and
stealth bonuses on the highest live severity only.

Every method assumes it runs inside the target's ActorLock. Every write
tolerates the record having vanished since it was read; such races count as
the desired end state and are repaired, if needed, by the next reconcile().

Usage:
    engine = CoverAggregateEngine(scene, states, aggregates, settings)
    await lock.run_exclusive(
        target.id, lambda: engine.add_observer_contribution(target, archer, CoverSeverity.LESSER)
    )
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable

from autocover.config import CoverSettings
from autocover.core.cover.models import CoverAggregate, CoverRule, CoverSeverity
from autocover.core.cover.rules import (
    build_ac_rule,
    build_marker_rule,
    build_secondary_rules,
    canonicalize,
    cover_against_of,
    describe,
    merge_distinct,
    signature_of,
    strip_observer,
    strip_secondary,
)
from autocover.core.entity import AGGREGATE_EXEMPT_ACTOR_TYPES, Entity
from autocover.errors import AggregateNotFoundError, AggregateStoreError
from autocover.scene.protocol import SceneProvider
from autocover.storage.protocol import AggregateStore, CoverStateStore

logger = logging.getLogger(__name__)


def _is_exempt(entity: Entity | None) -> bool:
    return entity is not None and entity.actor_type in AGGREGATE_EXEMPT_ACTOR_TYPES


def _primary(aggregates: Iterable[CoverAggregate], severity: CoverSeverity) -> CoverAggregate | None:
    """Lowest-id aggregate of ``severity``."""
    matching = [a for a in aggregates if a.severity is severity]
    return min(matching, key=lambda a: a.id) if matching else None


class CoverAggregateEngine:
    """Derives and mutates per-target cover aggregates from the state store.

    Args:
        scene: Provider of live entities.
        states: Cover state store (source of truth).
        aggregates: Aggregate collection store.
        settings: Bonus magnitudes. Defaults to CoverSettings().
    """

    def __init__(
        self,
        scene: SceneProvider,
        states: CoverStateStore,
        aggregates: AggregateStore,
        settings: CoverSettings | None = None,
    ) -> None:
        self._scene = scene
        self._states = states
        self._aggregates = aggregates
        self._settings = settings or CoverSettings()

    # ------------------------------------------------------------------
    # Guarded writes
    # ------------------------------------------------------------------
    async def _write(
        self,
        aggregate: CoverAggregate,
        rules: list[CoverRule],
        *,
        refresh_meta: bool = False,
    ) -> bool:
        """Write ``rules`` (and optionally fresh display metadata) if anything changed."""
        label = aggregate.severity.label if refresh_meta else None
        description = describe(aggregate.severity) if refresh_meta else None
        if label == aggregate.label:
            label = None
        if description == aggregate.description:
            description = None
        rules_changed = rules != aggregate.rules
        if not rules_changed and label is None and description is None:
            return False
        try:
            await self._aggregates.update_aggregate(
                aggregate.target_id,
                aggregate.id,
                rules=rules if rules_changed else None,
                label=label,
                description=description,
            )
        except AggregateNotFoundError:
            logger.debug("Aggregate %s vanished before update", aggregate.id)
            return False
        except AggregateStoreError:
            logger.warning("Failed to update aggregate %s", aggregate.id, exc_info=True)
            return False
        aggregate.rules = list(rules)
        if label is not None:
            aggregate.label = label
        if description is not None:
            aggregate.description = description
        return True

    async def _create(
        self, target_id: str, severity: CoverSeverity, rules: list[CoverRule]
    ) -> CoverAggregate | None:
        try:
            return await self._aggregates.create_aggregate(
                target_id,
                severity,
                label=severity.label,
                description=describe(severity),
                rules=rules,
            )
        except AggregateStoreError:
            logger.warning(
                "Failed to create %s aggregate on %s", severity.value, target_id, exc_info=True
            )
            return None

    async def _delete(self, target_id: str, aggregate_ids: list[str]) -> None:
        if not aggregate_ids:
            return
        try:
            await self._aggregates.delete_aggregates(target_id, aggregate_ids)
        except AggregateNotFoundError as e:
            logger.debug("Aggregate %s already deleted", e.aggregate_id)
        except AggregateStoreError:
            logger.warning(
                "Failed to delete aggregates %s on %s", aggregate_ids, target_id, exc_info=True
            )

    # ------------------------------------------------------------------
    # Observer contributions
    # ------------------------------------------------------------------
    async def add_observer_contribution(
        self, target: Entity, observer: Entity, severity: CoverSeverity
    ) -> None:
        """Make ``observer`` contribute exactly one AC rule, at ``severity``.

        Removes the observer's rules from every other aggregate of the target,
        then recomputes secondary bonuses, dedupes and prunes. NONE delegates to
        remove_observer_contribution().

        Args:
            target: Entity receiving cover.
            observer: Entity the cover is held against.
            severity: Severity to contribute.
        """
        severity = CoverSeverity.parse(severity)
        if severity is CoverSeverity.NONE:
            await self.remove_observer_contribution(target, observer)
            return
        if _is_exempt(target) or _is_exempt(observer):
            return

        signature = observer.actor_signature
        fresh = [
            build_ac_rule(signature, observer.id, severity, self._settings.bonus_for(severity).ac),
            build_marker_rule(observer.id, severity),
        ]

        aggregates = await self._aggregates.get_aggregates(target.id)
        primary = _primary(aggregates, severity)
        if primary is None:
            await self._create(target.id, severity, fresh)

        for aggregate in aggregates:
            rules = strip_observer(aggregate.rules, signature, observer.id)
            if aggregate is primary:
                rules = canonicalize([*rules, *fresh])
            await self._write(aggregate, rules)

        await self.update_secondary_bonuses(target.id)
        await self.dedupe(target.id)
        await self.prune(target.id)

    async def remove_observer_contribution(self, target: Entity, observer: Entity) -> None:
        """Strip ``observer``'s AC and marker rules from every aggregate of ``target``.

        Emptied aggregates are left for prune(), which spares any severity the
        state store still attributes to a live observer.
        """
        signature = observer.actor_signature
        for aggregate in await self._aggregates.get_aggregates(target.id):
            await self._write(aggregate, strip_observer(aggregate.rules, signature, observer.id))

        await self.update_secondary_bonuses(target.id)
        await self.dedupe(target.id)
        await self.prune(target.id)

    # ------------------------------------------------------------------
    # Maintenance passes
    # ------------------------------------------------------------------
    async def update_secondary_bonuses(self, target_id: str) -> None:
        """Place reflex/stealth rules on the highest severity owning an AC rule.

        Every other aggregate loses its secondary rules. Severities configured
        without reflex/stealth magnitudes (e.g. LESSER) place nothing.
        """
        aggregates = await self._aggregates.get_aggregates(target_id)
        live = [a for a in aggregates if not a.is_inert and a.severity is not CoverSeverity.NONE]
        holder: CoverAggregate | None = None
        secondary: list[CoverRule] = []
        if live:
            highest = max(a.severity for a in live)
            holder = _primary(live, highest)
            bonus = self._settings.bonus_for(highest)
            secondary = build_secondary_rules(highest, bonus.reflex, bonus.stealth)

        for aggregate in aggregates:
            rules = strip_secondary(aggregate.rules)
            if aggregate is holder:
                rules.extend(secondary)
            await self._write(aggregate, rules)

    async def dedupe(self, target_id: str) -> None:
        """Collapse duplicate aggregates of one severity into the lowest-id record.

        Distinct rules of the duplicates are merged into the primary and the
        duplicates deleted. Aggregates of severity NONE are anomalies and are
        deleted outright. Always followed by update_secondary_bonuses().
        """
        aggregates = await self._aggregates.get_aggregates(target_id)

        anomalies = [a.id for a in aggregates if a.severity is CoverSeverity.NONE]
        await self._delete(target_id, anomalies)

        groups: dict[CoverSeverity, list[CoverAggregate]] = defaultdict(list)
        for aggregate in aggregates:
            if aggregate.severity is not CoverSeverity.NONE:
                groups[aggregate.severity].append(aggregate)

        for severity, group in groups.items():
            group.sort(key=lambda a: a.id)
            primary, duplicates = group[0], group[1:]
            if duplicates:
                logger.debug(
                    "Merging %d duplicate %s aggregates on %s",
                    len(duplicates),
                    severity.value,
                    target_id,
                )
            merged = merge_distinct(*(a.rules for a in group))
            await self._write(primary, merged, refresh_meta=True)
            await self._delete(target_id, [a.id for a in duplicates])

        await self.update_secondary_bonuses(target_id)

    def _claimed_severities(self, target_id: str) -> set[CoverSeverity]:
        """Severities the state store attributes to ``target_id`` for live observers."""
        return {
            severity
            for observer_id, severity in self._states.observers_of(target_id).items()
            if observer_id != target_id and self._scene.get(observer_id) is not None
        }

    async def prune(self, target_id: str) -> None:
        """Delete inert aggregates the state store no longer backs."""
        aggregates = await self._aggregates.get_aggregates(target_id)
        claimed = self._claimed_severities(target_id)
        inert = [a.id for a in aggregates if a.is_inert and a.severity not in claimed]
        await self._delete(target_id, inert)

    async def reconcile(self, target_id: str) -> None:
        """Repair a target's aggregates against the state store.

        Drops AC rules whose observer signature no longer maps to the
        aggregate's severity (or maps to no live observer), duplicate AC rules
        for one signature, and marker rules whose observer is gone or
        mismatched. Then prunes and replaces secondary bonuses. Idempotent.
        """
        await self.dedupe(target_id)

        observers = [
            e for e in self._scene.entities() if e.id != target_id and not _is_exempt(e)
        ]
        by_signature: dict[str, list[Entity]] = defaultdict(list)
        for observer in observers:
            by_signature[observer.actor_signature].append(observer)
        by_id = {observer.id: observer for observer in observers}

        for aggregate in await self._aggregates.get_aggregates(target_id):
            severity = aggregate.severity
            seen_signatures: set[str] = set()
            seen_markers: set[str] = set()
            kept: list[CoverRule] = []
            for rule in aggregate.rules:
                if rule.is_ac:
                    signature = signature_of(rule)
                    if not signature or signature in seen_signatures:
                        continue
                    candidates = by_signature.get(signature, [])
                    against = cover_against_of(rule)
                    if against:
                        candidates = [c for c in candidates if c.id in against]
                    if not any(self._states.get(c.id, target_id) is severity for c in candidates):
                        continue
                    seen_signatures.add(signature)
                elif rule.is_marker:
                    ids = cover_against_of(rule)
                    observer_id = ids[0] if ids else None
                    if observer_id is None or observer_id in seen_markers:
                        continue
                    if observer_id not in by_id:
                        continue
                    if self._states.get(observer_id, target_id) is not severity:
                        continue
                    seen_markers.add(observer_id)
                kept.append(rule)
            if len(kept) != len(aggregate.rules):
                logger.debug(
                    "Reconcile dropped %d rules from %s on %s",
                    len(aggregate.rules) - len(kept),
                    aggregate.id,
                    target_id,
                )
            await self._write(aggregate, kept)

        await self.prune(target_id)
        await self.update_secondary_bonuses(target_id)

    async def clear_target(self, target_id: str) -> None:
        """Delete every aggregate of ``target_id``."""
        aggregates = await self._aggregates.get_aggregates(target_id)
        await self._delete(target_id, [a.id for a in aggregates])
