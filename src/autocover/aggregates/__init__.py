"""Cover aggregate engine: derives per-target aggregates from the state store."""

from autocover.aggregates.engine import CoverAggregateEngine

__all__ = [
    "CoverAggregateEngine",
]
