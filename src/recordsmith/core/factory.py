# factory.py
# SPDX-License-Identifier: MIT
"""Caller-facing factories and module-level pool helpers."""

from __future__ import annotations

from collections.abc import Generator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .accumulator import Accumulator, AccumulatorBase, AsyncAccumulator
from .configuration import Configuration, assemble
from .detection import classify
from .errors import AsyncUnsupported
from .interfaces import Variant
from .pool import AccumulatorPool
from .registry import PoolRegistry, default_registry

__all__ = [
    "BuilderFactory",
    "create_factory",
    "create_async_factory",
    "builder",
    "builder_async",
    "clear_pools",
    "get_pool_stats",
    "get_detailed_pool_stats",
    "reset_pool_stats",
]

A = TypeVar("A", bound=AccumulatorBase)


@dataclass(frozen=True, slots=True)
class BuilderFactory(Generic[A]):
    """Zero-argument callable handing out pooled accumulators.

    Examples:
        >>> make_user = create_factory(["id", "name"])
        >>> with make_user.session() as acc:
        ...     user = acc.withId(1).build()
        >>> user
        {'id': 1}
    """

    config: Configuration
    pool: AccumulatorPool[A]

    def __call__(self) -> A:
        return self.pool.get()

    def release(self, accumulator: A) -> bool:
        """Reset ``accumulator`` and return it to the pool."""
        return self.pool.release(accumulator)

    @contextmanager
    def session(self) -> Generator[A, None, None]:
        """Yield an accumulator and release it when the block exits."""
        with self.pool.borrow() as accumulator:
            yield accumulator

    @property
    def field_names(self) -> tuple[str, ...]:
        return self.config.field_names


def create_factory(
    value: Any,
    fields: Sequence[str] | None = None,
    *,
    registry: PoolRegistry | None = None,
) -> BuilderFactory[Accumulator]:
    """Build a factory for a schema, a class or function, or a field list.

    Args:
        value: Pydantic model/TypeAdapter or duck-typed schema, a class or
            plain function, or a sequence of field names.
        fields: Explicit field names; replaces discovery for schemas and
            constructors.
        registry: Pool registry to use. Defaults to the process-wide one.

    Raises:
        UnrecognizedShape: ``value`` has no recognized shape.
        EmptyFieldList: A field list (input or explicit) is empty.
    """
    config = assemble(value, fields)
    reg = registry or default_registry()
    return BuilderFactory(config=config, pool=reg.pool_for(config))


def create_async_factory(
    value: Any,
    fields: Sequence[str] | None = None,
    *,
    registry: PoolRegistry | None = None,
) -> BuilderFactory[AsyncAccumulator]:
    """Like :func:`create_factory` but accumulators finalize with ``await build_async()``.

    Raises:
        AsyncUnsupported: ``value`` is not a schema. Raised before any field
            discovery, pool or accumulator is created.
    """
    variant = classify(value)
    if not Variant.supports_async(variant):
        raise AsyncUnsupported(f"Async builders only support schema inputs; got a {variant} input")
    config = assemble(value, fields)
    reg = registry or default_registry()
    return BuilderFactory(config=config, pool=reg.async_pool_for(config))


def builder(value: Any, fields: Sequence[str] | None = None) -> BuilderFactory[Accumulator]:
    """Shorthand for :func:`create_factory` on the default registry."""
    return create_factory(value, fields)


def builder_async(value: Any, fields: Sequence[str] | None = None) -> BuilderFactory[AsyncAccumulator]:
    """Shorthand for :func:`create_async_factory` on the default registry."""
    return create_async_factory(value, fields)


def clear_pools() -> None:
    default_registry().clear_pools()


def get_pool_stats() -> dict[str, int]:
    return default_registry().get_pool_stats()


def get_detailed_pool_stats() -> dict[str, dict[str, Any]]:
    return default_registry().get_detailed_pool_stats()


def reset_pool_stats() -> None:
    default_registry().reset_pool_stats()
