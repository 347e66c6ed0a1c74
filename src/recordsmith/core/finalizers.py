# finalizers.py
# SPDX-License-Identifier: MIT
"""Strategies that turn a finished partial record into the target value."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from .configuration import Configuration
from .errors import AsyncUnsupported
from .interfaces import UNSET, Record, SchemaAdapter, Variant

__all__ = [
    "ListedFinalizer",
    "ConstructedFinalizer",
    "SchemaFinalizer",
    "AsyncSchemaFinalizer",
    "finalizer_for",
    "async_finalizer_for",
]


@dataclass(frozen=True, slots=True)
class ListedFinalizer:
    """Plain dict holding exactly the configured fields that were assigned."""

    field_names: tuple[str, ...]

    def finalize(self, partial: Mapping[str, Any]) -> Record:
        result: Record = {}
        for name in self.field_names:
            value = partial.get(name, UNSET)
            if value is not UNSET:
                result[name] = value
        return result


@dataclass(frozen=True, slots=True)
class ConstructedFinalizer:
    """Call the constructor with the partial record as its only argument.

    No validation happens here and constructor errors propagate unchanged.
    """

    constructor: Callable[..., Any]

    def finalize(self, partial: Mapping[str, Any]) -> Any:
        return self.constructor(dict(partial))


@dataclass(frozen=True, slots=True)
class SchemaFinalizer:
    """Synchronous schema parse; failures raise ``ValidationFailure``."""

    schema: SchemaAdapter

    def finalize(self, partial: Mapping[str, Any]) -> Any:
        return self.schema.parse(partial)


@dataclass(frozen=True, slots=True)
class AsyncSchemaFinalizer:
    """Awaitable schema parse with the same contract as :class:`SchemaFinalizer`."""

    schema: SchemaAdapter

    async def finalize_async(self, partial: Mapping[str, Any]) -> Any:
        return await self.schema.parse_async(partial)


def finalizer_for(config: Configuration):
    """Return the synchronous finalizer for ``config``'s variant."""
    if config.variant == Variant.LISTED:
        return ListedFinalizer(config.field_names)
    if config.variant == Variant.CONSTRUCTED:
        return ConstructedFinalizer(config.constructor)
    return SchemaFinalizer(config.schema)


def async_finalizer_for(config: Configuration) -> AsyncSchemaFinalizer:
    """Return the async finalizer for ``config``.

    Raises:
        AsyncUnsupported: ``config`` is not the validated variant.
    """
    if not Variant.supports_async(config.variant) or config.schema is None:
        raise AsyncUnsupported(
            f"Async builders only support schema inputs; got a {config.variant} configuration"
        )
    return AsyncSchemaFinalizer(config.schema)
