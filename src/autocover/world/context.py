"""Attack contexts: explicit, short-lived attacker -> target pairs.

A context lives for one attack resolution. It is owned by the CoverWorld that
opened it and cleaned up on completion or when its timer expires.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from time import time

from autocover.core.cover.models import CoverSeverity


@dataclass(eq=False)
class AttackContext:
    """One in-flight attack and the cover recorded for it.

    Attributes:
        attacker_id: Attacking entity (the observer).
        target_id: Targeted entity.
        severity: Cover currently recorded for the pair.
        started_at: Unix timestamp when the context was opened.
        ttl: Seconds before the context expires on its own.
        closed: Whether cleanup already ran.
    """

    attacker_id: str
    target_id: str
    severity: CoverSeverity = CoverSeverity.NONE
    started_at: float = field(default_factory=time)
    ttl: float | None = None
    closed: bool = False
    _timer: asyncio.TimerHandle | None = field(default=None, repr=False)

    @property
    def pair(self) -> tuple[str, str]:
        return (self.attacker_id, self.target_id)

    def involves(self, entity_id: str) -> bool:
        """Check if ``entity_id`` is the attacker or the target."""
        return entity_id in self.pair

    def arm(self, timer: asyncio.TimerHandle) -> None:
        """Attach the expiry timer, replacing any previous one."""
        self.disarm()
        self._timer = timer

    def disarm(self) -> None:
        """Cancel the expiry timer if armed."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
