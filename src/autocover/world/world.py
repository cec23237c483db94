"""CoverWorld: central coordinator for cover resolution and aggregates.

Usage:
    world = CoverWorld(scene)

    # Resolve only (display, previews)
    severity = world.resolve_cover("archer", "goblin")

    # Resolve, record and apply
    await world.on_attack_declared("archer", "goblin")

    # Scoped attack with automatic cleanup
    async with world.attack("archer", "goblin") as ctx:
        ...  # ctx.severity is applied while the attack resolves

    # Hook into a host event bus
    world.bind(bus)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable, Mapping
from contextlib import asynccontextmanager

from autocover.aggregates import CoverAggregateEngine
from autocover.config import CoverSettings
from autocover.core.cover import BlockerFilterOptions, CoverAggregate, CoverSeverity, resolve_cover
from autocover.core.entity import Entity
from autocover.events import CoverChanged, CoverTopic, EventBus, Subscriber
from autocover.scene import LocalScene, SceneProvider
from autocover.scheduling import ActorLock
from autocover.storage import (
    AggregateStore,
    CoverStateStore,
    LocalAggregateStore,
    LocalCoverStateStore,
)
from autocover.world.context import AttackContext

logger = logging.getLogger(__name__)

EntityRef = str | Entity


def _id_of(ref: EntityRef) -> str:
    return ref.id if isinstance(ref, Entity) else ref


class CoverWorld:
    """Resolves cover, records it in the state store and keeps aggregates in sync.

    Owns the aggregate engine and the per-target lock. Every aggregate
    mutation for a target is routed through the lock. Public coroutines never
    raise: failures are logged and left for the next reconcile.

    Args:
        scene: Scene provider. Defaults to an empty LocalScene.
        states: Cover state store. Defaults to LocalCoverStateStore.
        aggregates: Aggregate store. Defaults to LocalAggregateStore.
        settings: Configuration. Defaults to CoverSettings().
        bus: Event bus for change notifications. Defaults to a new EventBus.
    """

    def __init__(
        self,
        scene: SceneProvider | None = None,
        *,
        states: CoverStateStore | None = None,
        aggregates: AggregateStore | None = None,
        settings: CoverSettings | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self._settings = settings or CoverSettings()
        self._scene = scene or LocalScene(grid_size=self._settings.grid_size)
        self._states = states or LocalCoverStateStore()
        self._aggregates = aggregates or LocalAggregateStore()
        self._bus = bus or EventBus()
        self._lock = ActorLock()
        self._engine = CoverAggregateEngine(
            self._scene, self._states, self._aggregates, self._settings
        )
        self._contexts: list[AttackContext] = []
        self._background: set[asyncio.Task[None]] = set()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def scene(self) -> SceneProvider:
        return self._scene

    @property
    def states(self) -> CoverStateStore:
        return self._states

    @property
    def aggregates(self) -> AggregateStore:
        return self._aggregates

    @property
    def settings(self) -> CoverSettings:
        return self._settings

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def engine(self) -> CoverAggregateEngine:
        return self._engine

    @property
    def lock(self) -> ActorLock:
        return self._lock

    @property
    def active_attacks(self) -> tuple[AttackContext, ...]:
        """Attack contexts that are still open."""
        return tuple(self._contexts)

    def _entity(self, ref: EntityRef) -> Entity | None:
        if isinstance(ref, Entity):
            return ref
        return self._scene.get(ref)

    async def get_aggregates(self, target: EntityRef) -> list[CoverAggregate]:
        """Copies of a target's current aggregates."""
        return await self._aggregates.get_aggregates(_id_of(target))

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def resolve_cover(
        self,
        attacker: EntityRef,
        target: EntityRef,
        *,
        options: BlockerFilterOptions | None = None,
    ) -> CoverSeverity:
        """Compute cover without side effects. Unknown entities yield NONE."""
        attacker_entity = self._entity(attacker)
        target_entity = self._entity(target)
        if attacker_entity is None or target_entity is None:
            return CoverSeverity.NONE
        return resolve_cover(
            attacker_entity,
            target_entity,
            self._scene,
            options or self._settings.filter_options(),
            self._settings.intersection_mode,
        )

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------
    async def _emit(
        self,
        observer_id: str,
        target_id: str,
        severity: CoverSeverity,
        previous: CoverSeverity,
    ) -> None:
        await self._bus.publish(
            CoverTopic.COVER_CHANGED,
            event=CoverChanged(observer_id, target_id, severity, previous),
        )

    async def _store(
        self, observer_id: str, target_id: str, severity: CoverSeverity
    ) -> CoverSeverity:
        """Write the state store and notify on change. Returns the previous severity."""
        previous = self._states.get(observer_id, target_id)
        await self._states.set(observer_id, target_id, severity)
        if previous is not severity:
            await self._emit(observer_id, target_id, severity, previous)
        return previous

    async def _sync_aggregates(self, observer: EntityRef, target: EntityRef) -> None:
        """Bring ``target``'s aggregates in line with the stored severity.

        The state store is read under the target lock, so the last store
        write wins even when concurrent records finish out of order.
        """
        observer_id, target_id = _id_of(observer), _id_of(target)

        async def sync() -> None:
            severity = self._states.get(observer_id, target_id)
            target_entity = self._entity(target)
            observer_entity = self._entity(observer)
            if severity is CoverSeverity.NONE:
                await self._engine.remove_observer_contribution(
                    target_entity or Entity(id=target_id),
                    observer_entity or Entity(id=observer_id),
                )
            elif target_entity is None or observer_entity is None:
                logger.debug(
                    "Skipping contribution for unknown entity %s/%s", target_id, observer_id
                )
            else:
                await self._engine.add_observer_contribution(
                    target_entity, observer_entity, severity
                )

        try:
            await self._lock.run_exclusive(target_id, sync)
        except Exception:
            logger.exception("Failed to sync cover on %s against %s", target_id, observer_id)

    async def record_cover(
        self,
        observer: EntityRef,
        target: EntityRef,
        severity: CoverSeverity | str,
        *,
        update_aggregates: bool = True,
    ) -> None:
        """Persist the cover ``target`` has against ``observer``.

        Args:
            observer: Observer entity or id.
            target: Target entity or id.
            severity: New severity. Unknown keys are treated as NONE.
            update_aggregates: When False only the state store is written.
        """
        severity = CoverSeverity.parse(severity)
        observer_id, target_id = _id_of(observer), _id_of(target)
        try:
            await self._store(observer_id, target_id, severity)
        except Exception:
            logger.exception("Failed to record cover %s -> %s", observer_id, target_id)
            return
        if update_aggregates:
            await self._sync_aggregates(observer, target)

    async def record_cover_batch(
        self,
        observer: EntityRef,
        updates: Mapping[str, CoverSeverity | str] | Iterable[tuple[EntityRef, CoverSeverity | str]],
        *,
        update_aggregates: bool = True,
    ) -> None:
        """Record one observer's cover against several targets.

        Store writes happen in order; aggregate updates for different targets
        then run concurrently, each under its own target lock.
        """
        pairs = list(updates.items()) if isinstance(updates, Mapping) else list(updates)
        observer_id = _id_of(observer)
        recorded: list[EntityRef] = []
        for target, raw in pairs:
            severity = CoverSeverity.parse(raw)
            try:
                await self._store(observer_id, _id_of(target), severity)
            except Exception:
                logger.exception("Failed to record cover %s -> %s", observer_id, _id_of(target))
                continue
            recorded.append(target)
        if update_aggregates and recorded:
            await asyncio.gather(
                *(self._sync_aggregates(observer, target) for target in recorded)
            )

    # ------------------------------------------------------------------
    # Aggregate engine surface (always through the target lock)
    # ------------------------------------------------------------------
    async def apply_cover_contribution(
        self,
        target: EntityRef,
        observer: EntityRef,
        severity: CoverSeverity | str,
    ) -> None:
        """Make ``observer`` contribute ``severity`` cover to ``target``'s aggregates."""
        target_entity = self._entity(target)
        observer_entity = self._entity(observer)
        if target_entity is None or observer_entity is None:
            logger.debug("Skipping contribution for unknown entity %s/%s", target, observer)
            return
        severity = CoverSeverity.parse(severity)
        try:
            await self._lock.run_exclusive(
                target_entity.id,
                lambda: self._engine.add_observer_contribution(
                    target_entity, observer_entity, severity
                ),
            )
        except Exception:
            logger.exception(
                "Failed to apply %s cover on %s against %s",
                severity.value,
                target_entity.id,
                observer_entity.id,
            )

    async def remove_cover_contribution(self, target: EntityRef, observer: EntityRef) -> None:
        """Remove ``observer``'s contribution from ``target``'s aggregates.

        An observer no longer on the scene is matched by id (its signature
        defaults to its id).
        """
        target_entity = self._entity(target) or Entity(id=_id_of(target))
        observer_entity = self._entity(observer) or Entity(id=_id_of(observer))
        try:
            await self._lock.run_exclusive(
                target_entity.id,
                lambda: self._engine.remove_observer_contribution(target_entity, observer_entity),
            )
        except Exception:
            logger.exception(
                "Failed to remove cover on %s against %s", target_entity.id, observer_entity.id
            )

    async def reconcile_cover_for_target(self, target: EntityRef) -> None:
        """Repair ``target``'s aggregates against the state store."""
        target_id = _id_of(target)
        try:
            await self._lock.run_exclusive(target_id, lambda: self._engine.reconcile(target_id))
        except Exception:
            logger.exception("Failed to reconcile cover on %s", target_id)

    async def reconcile_all(self) -> None:
        """Reconcile every target that owns aggregates or is on the scene."""
        try:
            target_ids = set(await self._aggregates.targets())
        except Exception:
            logger.exception("Failed to list aggregate targets")
            target_ids = set()
        target_ids.update(e.id for e in self._scene.entities())
        await asyncio.gather(*(self.reconcile_cover_for_target(t) for t in sorted(target_ids)))

    async def cleanup_all(self) -> None:
        """Delete every aggregate of every target. The state store is untouched."""
        try:
            target_ids = await self._aggregates.targets()
        except Exception:
            logger.exception("Failed to list aggregate targets")
            return

        async def clear(target_id: str) -> None:
            try:
                await self._lock.run_exclusive(
                    target_id, lambda: self._engine.clear_target(target_id)
                )
            except Exception:
                logger.exception("Failed to clear aggregates on %s", target_id)

        await asyncio.gather(*(clear(t) for t in target_ids))

    # ------------------------------------------------------------------
    # Attack contexts
    # ------------------------------------------------------------------
    async def open_attack(
        self, attacker: EntityRef, target: EntityRef, *, ttl: float | None = None
    ) -> AttackContext:
        """Resolve and record cover for an attack and track the pair until closed.

        Args:
            attacker: Attacking entity or id.
            target: Targeted entity or id.
            ttl: Seconds until the context closes on its own. Defaults to
                settings.attack_context_ttl.

        Returns:
            The open AttackContext.
        """
        context = AttackContext(
            attacker_id=_id_of(attacker),
            target_id=_id_of(target),
            ttl=ttl if ttl is not None else self._settings.attack_context_ttl,
        )
        context.severity = self.resolve_cover(attacker, target)
        self._contexts.append(context)
        loop = asyncio.get_running_loop()
        context.arm(loop.call_later(context.ttl, self._expire, context))
        await self.record_cover(attacker, target, context.severity)
        return context

    def _expire(self, context: AttackContext) -> None:
        if context.closed:
            return
        logger.debug("Attack context %s -> %s expired", *context.pair)
        task = asyncio.ensure_future(self.close_attack(context))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def close_attack(self, context: AttackContext, *, clear: bool = True) -> None:
        """Stop tracking an attack. With ``clear`` its recorded cover reverts to NONE."""
        if context.closed:
            return
        context.closed = True
        context.disarm()
        if context in self._contexts:
            self._contexts.remove(context)
        if clear:
            await self.record_cover(context.attacker_id, context.target_id, CoverSeverity.NONE)

    @asynccontextmanager
    async def attack(
        self,
        attacker: EntityRef,
        target: EntityRef,
        *,
        ttl: float | None = None,
        clear_on_exit: bool = True,
    ) -> AsyncIterator[AttackContext]:
        """Scope cover to one attack.

        Example:
            >>> async with world.attack("archer", "goblin") as ctx:
            ...     roll_against(ac_bonus=settings.bonus_for(ctx.severity).ac)
        """
        context = await self.open_attack(attacker, target, ttl=ttl)
        try:
            yield context
        finally:
            await self.close_attack(context, clear=clear_on_exit)

    async def close_all(self) -> None:
        """Close every open attack context and wait for pending expiries."""
        for context in list(self._contexts):
            await self.close_attack(context)
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------
    async def on_attack_declared(self, attacker_id: str, target_id: str) -> CoverSeverity:
        """Resolve, record and apply cover for a declared attack."""
        severity = self.resolve_cover(attacker_id, target_id)
        await self.record_cover(attacker_id, target_id, severity)
        return severity

    async def on_geometry_changed(self, entity_id: str) -> None:
        """Re-resolve cover after ``entity_id`` moved, resized or changed visibility.

        Every open attack context is re-resolved, since the entity may be a
        blocker on any of them, plus every non-NONE entry of the state store
        where the entity is observer or target.
        """
        pairs: dict[tuple[str, str], None] = {context.pair: None for context in self._contexts}
        for target_id in self._states.cover_map(entity_id):
            pairs[(entity_id, target_id)] = None
        for observer_id in self._states.observers_of(entity_id):
            pairs[(observer_id, entity_id)] = None

        for observer_id, target_id in pairs:
            severity = self.resolve_cover(observer_id, target_id)
            for context in self._contexts:
                if context.pair == (observer_id, target_id):
                    context.severity = severity
            if self._states.get(observer_id, target_id) is not severity:
                await self.record_cover(observer_id, target_id, severity)

    async def on_entity_removed(self, entity_id: str) -> None:
        """Clean up after the host removed ``entity_id`` from the scene.

        Closes attack contexts involving it, drops its store entries (emitting
        NONE notifications), deletes its own aggregates and reconciles every
        other target.
        """
        for context in [c for c in self._contexts if c.involves(entity_id)]:
            await self.close_attack(context, clear=False)

        try:
            removed = await self._states.forget(entity_id)
        except Exception:
            logger.exception("Failed to drop cover state for %s", entity_id)
            removed = []
        for observer_id, target_id, previous in removed:
            await self._emit(observer_id, target_id, CoverSeverity.NONE, previous)

        try:
            await self._lock.run_exclusive(entity_id, lambda: self._engine.clear_target(entity_id))
        except Exception:
            logger.exception("Failed to clear aggregates on %s", entity_id)
        await self.reconcile_all()

    async def on_scene_ready(self) -> None:
        """Reconcile everything once the scene is loaded."""
        await self.reconcile_all()

    def on_cover_changed(self, callback: Subscriber) -> None:
        """Subscribe ``callback(event=CoverChanged)`` to change notifications."""
        self._bus.subscribe(CoverTopic.COVER_CHANGED, callback)

    def bind(self, bus: EventBus | None = None) -> EventBus:
        """Subscribe the inbound handlers to ``bus`` (default: this world's bus)."""
        bus = bus or self._bus
        bus.subscribe(CoverTopic.ATTACK_DECLARED, self.on_attack_declared)
        bus.subscribe(CoverTopic.GEOMETRY_CHANGED, self.on_geometry_changed)
        bus.subscribe(CoverTopic.ENTITY_REMOVED, self.on_entity_removed)
        bus.subscribe(CoverTopic.SCENE_READY, self.on_scene_ready)
        return bus
