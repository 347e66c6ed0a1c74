# registry.py
# SPDX-License-Identifier: MIT
"""Registry of accumulator pools keyed by configuration identity."""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from .accumulator import Accumulator, AsyncAccumulator, make_accumulator_class
from .config import PoolConfig, RecordsmithConfig
from .configuration import Configuration
from .finalizers import async_finalizer_for, finalizer_for
from .log import get_logger
from .pool import AccumulatorPool
from .stats_aggregate import summarize_pools

__all__ = ["PoolRegistry", "default_registry", "set_default_registry"]

log = get_logger(__name__)


def _pool_config(config: RecordsmithConfig | PoolConfig | None) -> PoolConfig:
    if config is None:
        return PoolConfig()
    if isinstance(config, RecordsmithConfig):
        return config.pool
    return config


@dataclass
class PoolRegistry:
    """Owns the sync and async pool maps and their lifecycle.

    Identical configurations (same variant, field set and payload object,
    in any field order) share one pool per side.
    """

    config: PoolConfig = field(default_factory=PoolConfig)
    _sync: dict[Any, AccumulatorPool[Accumulator]] = field(default_factory=dict, repr=False)
    _async: dict[Any, AccumulatorPool[AsyncAccumulator]] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self.config = _pool_config(self.config)
        self.config.validate()

    def pool_for(self, config: Configuration) -> AccumulatorPool[Accumulator]:
        """Return the synchronous pool for ``config``, creating it on first use."""
        pool = self._sync.get(config.key)
        if pool is None:
            cls = make_accumulator_class(config, Accumulator)
            finalizer = finalizer_for(config)
            pool = AccumulatorPool(config, cls, finalizer, max_size=self.config.max_size)
            self._sync[config.key] = pool
            log.debug("Created pool %s (max_size=%d)", config.label, pool.max_size)
        return pool

    def async_pool_for(self, config: Configuration) -> AccumulatorPool[AsyncAccumulator]:
        """Return the async pool for ``config``, creating it on first use.

        Raises:
            AsyncUnsupported: ``config`` is not the validated variant.
        """
        pool = self._async.get(config.key)
        if pool is None:
            finalizer = async_finalizer_for(config)
            cls = make_accumulator_class(config, AsyncAccumulator)
            pool = AccumulatorPool(config, cls, finalizer, max_size=self.config.async_max_size)
            self._async[config.key] = pool
            log.debug("Created async pool %s (max_size=%d)", config.label, pool.max_size)
        return pool

    def iter_pools(self) -> Iterator[AccumulatorPool[Any]]:
        yield from self._sync.values()
        yield from self._async.values()

    def clear_pools(self) -> None:
        """Evict idle accumulators from every pool; counters are untouched."""
        for pool in self.iter_pools():
            pool.clear()

    def reset_pool_stats(self) -> None:
        """Zero every pool's counters; idle accumulators stay pooled."""
        for pool in self.iter_pools():
            pool.reset_stats()

    def get_pool_stats(self) -> dict[str, int]:
        """Idle accumulator counts per side."""
        return {
            "sync": sum(pool.size() for pool in self._sync.values()),
            "async": sum(pool.size() for pool in self._async.values()),
        }

    def get_detailed_pool_stats(self) -> dict[str, dict[str, Any]]:
        """Per-side totals plus one stats entry per pool."""
        return {
            "sync": summarize_pools(
                [{"key": pool.label, **pool.stats().as_dict()} for pool in self._sync.values()]
            ),
            "async": summarize_pools(
                [{"key": pool.label, **pool.stats().as_dict()} for pool in self._async.values()]
            ),
        }


_DEFAULT_REGISTRY = PoolRegistry()


def default_registry() -> PoolRegistry:
    """Return the process-wide registry used by the module-level helpers."""
    return _DEFAULT_REGISTRY


def set_default_registry(registry: PoolRegistry) -> PoolRegistry:
    """Swap the process-wide registry and return the previous one."""
    global _DEFAULT_REGISTRY
    previous = _DEFAULT_REGISTRY
    _DEFAULT_REGISTRY = registry
    return previous
