"""Parallel processing mode helpers for pair counting."""

from enum import Enum
from math import ceil
from typing import Literal

from .errors import ModeError

ParallelStrategy = Literal["auto", "thread", "process", "off"]


class ParallelMode(str, Enum):
    """Named parallelization modes for pair counting."""

    AUTO = "auto"
    THREAD = "thread"
    PROCESS = "process"
    OFF = "off"

    @classmethod
    def get(cls, name: "str | ParallelMode") -> "ParallelMode":
        """Get parallel mode by name (case-insensitive)."""
        if isinstance(name, ParallelMode):
            return name
        try:
            return cls[name.upper()]
        except KeyError:
            raise ModeError(
                "unknown mode",
                invalid_name=name,
                available_modes=[mode.value for mode in cls],
            )


def list_parallel_modes() -> list[str]:
    """Return available parallel mode names."""
    return [mode.value for mode in ParallelMode]


def shard[T](items: list[T], n_shards: int) -> list[list[T]]:
    """
    Split ``items`` into at most ``n_shards`` contiguous, disjoint slices.

    Every item lands in exactly one shard and shard order follows item order.
    Empty input gives no shards.
    """
    if not items:
        return []
    n_shards = max(1, min(n_shards, len(items)))
    size = ceil(len(items) / n_shards)
    return [items[idx : idx + size] for idx in range(0, len(items), size)]


__all__ = [
    "ParallelStrategy",
    "ParallelMode",
    "list_parallel_modes",
    "shard",
]
