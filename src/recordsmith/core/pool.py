# pool.py
# SPDX-License-Identifier: MIT
"""Capacity-bounded object pools with hit/miss telemetry.

Pools are not synchronized; callers sharing one across threads must
serialize access themselves.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any, Generic, TypeVar

from .accumulator import AccumulatorBase
from .config import DEFAULT_POOL_MAX_SIZE
from .configuration import Configuration
from .log import get_logger

__all__ = ["PoolStats", "ObjectPool", "AccumulatorPool"]

log = get_logger(__name__)

T = TypeVar("T")
A = TypeVar("A", bound=AccumulatorBase)


@dataclass(frozen=True, slots=True)
class PoolStats:
    """Point-in-time snapshot of one pool's counters."""

    size: int
    max_size: int
    hits: int
    misses: int
    hit_rate: float
    total_created: int
    utilization: float

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class ObjectPool(Generic[T]):
    """Reusable object pool to reduce allocation overhead.

    ``get`` pops an idle object (a hit) or creates one through ``factory``
    (a miss). ``release`` runs ``reset`` and keeps the object while fewer
    than ``max_size`` are idle; beyond that the object is dropped.
    """

    def __init__(
        self,
        factory: Callable[[], T],
        *,
        reset: Callable[[T], None] | None = None,
        max_size: int = DEFAULT_POOL_MAX_SIZE,
        label: str | None = None,
    ) -> None:
        if max_size < 0:
            raise ValueError("ObjectPool requires max_size >= 0")
        self._factory = factory
        self._reset = reset
        self._max_size = max_size
        self._pool: list[T] = []
        self._idle_ids: set[int] = set()
        self.label = label or getattr(factory, "__qualname__", "pool")
        self._hits = 0
        self._misses = 0
        self._total_created = 0

    @property
    def max_size(self) -> int:
        return self._max_size

    def get(self) -> T:
        """Get an idle object, or create a new one when none is idle."""
        if self._pool:
            self._hits += 1
            obj = self._pool.pop()
            self._idle_ids.discard(id(obj))
            return obj
        self._misses += 1
        self._total_created += 1
        return self._factory()

    def release(self, obj: T) -> bool:
        """Return ``obj`` for reuse.

        Returns:
            bool: True if the object was kept, False if the pool was full.

        Raises:
            ValueError: ``obj`` is already idle in this pool.
        """
        if id(obj) in self._idle_ids:
            raise ValueError(f"Object already released to pool {self.label}")
        if len(self._pool) >= self._max_size:
            log.debug("Pool %s full (%d); dropping released object", self.label, self._max_size)
            return False
        if self._reset is not None:
            self._reset(obj)
        self._pool.append(obj)
        self._idle_ids.add(id(obj))
        return True

    @contextmanager
    def borrow(self) -> Generator[T, None, None]:
        """Yield an object from the pool and release it on exit."""
        obj = self.get()
        try:
            yield obj
        finally:
            self.release(obj)

    def clear(self) -> None:
        """Drop every idle object; counters are untouched."""
        if self._pool:
            log.debug("Evicting %d idle object(s) from pool %s", len(self._pool), self.label)
        self._pool.clear()
        self._idle_ids.clear()

    def size(self) -> int:
        """Number of idle objects currently held."""
        return len(self._pool)

    def __len__(self) -> int:
        return len(self._pool)

    def stats(self) -> PoolStats:
        total = self._hits + self._misses
        size = len(self._pool)
        return PoolStats(
            size=size,
            max_size=self._max_size,
            hits=self._hits,
            misses=self._misses,
            hit_rate=self._hits / total if total > 0 else 0.0,
            total_created=self._total_created,
            utilization=size / self._max_size if self._max_size > 0 else 0.0,
        )

    def reset_stats(self) -> None:
        """Zero the counters; idle objects stay pooled."""
        self._hits = 0
        self._misses = 0
        self._total_created = 0

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.label} size={len(self._pool)}/{self._max_size}>"


class AccumulatorPool(ObjectPool[A]):
    """Pool of accumulators sharing one configuration."""

    def __init__(
        self,
        config: Configuration,
        accumulator_class: type[A],
        finalizer: Any,
        *,
        max_size: int = DEFAULT_POOL_MAX_SIZE,
    ) -> None:
        super().__init__(
            lambda: accumulator_class(config, finalizer),
            reset=AccumulatorBase.reset,
            max_size=max_size,
            label=config.label,
        )
        self.config = config
        self.accumulator_class = accumulator_class

    def release(self, obj: A) -> bool:
        """Reset ``obj`` and keep it for reuse.

        Raises:
            ValueError: ``obj`` was not made by this pool's accumulator class
                or is already idle here.
        """
        if type(obj) is not self.accumulator_class:
            raise ValueError(f"Cannot release {obj!r} into pool {self.label}")
        return super().release(obj)
