"""Aggregate id allocation service.

AggregateIdAllocator is a stateful service that issues aggregate ids.
"""

from __future__ import annotations


class AggregateIdAllocator:
    """Allocates monotonically increasing, lexically sortable aggregate ids.

    Ids are never reused, so the lowest id of a group is a stable choice of
    primary record when duplicates are merged.

    Args:
        prefix: Prefix for every issued id (default "agg").
        width: Zero-padded width of the numeric part.
    """

    def __init__(self, prefix: str = "agg", width: int = 8):
        self._prefix = prefix
        self._width = width
        self._next_index = 0

    def allocate(self) -> str:
        """Allocate the next id.

        Returns:
            Newly allocated id such as ``agg-00000001``.
        """
        self._next_index += 1
        return f"{self._prefix}-{self._next_index:0{self._width}d}"

    @property
    def issued(self) -> int:
        """Number of ids issued so far."""
        return self._next_index
