"""Event topics and payload models.

Inbound topics are raised by the host; COVER_CHANGED is emitted by the core.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from time import time
from typing import Any

from autocover.core.cover.models import CoverSeverity


class CoverTopic(Enum):
    """Topics exchanged between the host and the cover core."""

    ATTACK_DECLARED = "attack_declared"
    """Host -> core. Payload: attacker_id, target_id."""

    GEOMETRY_CHANGED = "geometry_changed"
    """Host -> core. Payload: entity_id. Position, size or visibility changed."""

    ENTITY_REMOVED = "entity_removed"
    """Host -> core. Payload: entity_id."""

    SCENE_READY = "scene_ready"
    """Host -> core. No payload. Triggers a full reconcile."""

    COVER_CHANGED = "cover_changed"
    """Core -> host. Payload: a CoverChanged event."""


@dataclass(frozen=True, slots=True)
class CoverChanged:
    """Effective cover of ``target_id`` against ``observer_id`` changed.

    Attributes:
        observer_id: Observer whose perspective changed.
        target_id: Target whose cover changed.
        severity: New severity.
        previous: Severity before the change.
        timestamp: Unix timestamp of the change.
    """

    observer_id: str
    target_id: str
    severity: CoverSeverity
    previous: CoverSeverity = CoverSeverity.NONE
    timestamp: float = field(default_factory=time)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "observer_id": self.observer_id,
            "target_id": self.target_id,
            "severity": self.severity.value,
            "previous": self.previous.value,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CoverChanged:
        """Create from dictionary (for deserialization)."""
        return cls(
            observer_id=data["observer_id"],
            target_id=data["target_id"],
            severity=CoverSeverity.parse(data.get("severity")),
            previous=CoverSeverity.parse(data.get("previous")),
            timestamp=data.get("timestamp", time()),
        )
