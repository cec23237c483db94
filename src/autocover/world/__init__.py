"""World: stateful coordinator for resolution, recording and aggregates.

Architecture Note:
    world/ is the service layer that wires the scene, the stores, the
    aggregate engine, the per-target lock and the event bus together. Unlike
    core/ (stateless functionality), world/ maintains runtime state such as
    open attack contexts.
"""

from autocover.world.context import AttackContext
from autocover.world.world import CoverWorld, EntityRef

__all__ = [
    "CoverWorld",
    "AttackContext",
    "EntityRef",
]
