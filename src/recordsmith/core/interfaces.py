# interfaces.py
# SPDX-License-Identifier: MIT
"""Shared types and protocols: variants, the unset sentinel, schemas, finalizers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final, Optional, Protocol, runtime_checkable

__all__ = [
    "Record",
    "Variant",
    "UNSET",
    "UnsetType",
    "SchemaAdapter",
    "Finalizer",
    "AsyncFinalizer",
]

Record = dict[str, Any]


class Variant:
    """Shape kinds a configuration can have.

    Kinds:
    * ``VALIDATED``: a schema validates and coerces the finished record.
    * ``CONSTRUCTED``: a class or plain function receives the finished record.
    * ``LISTED``: an explicit list of field names; the result is a plain dict.
    """

    VALIDATED = "validated"
    CONSTRUCTED = "constructed"
    LISTED = "listed"
    ALL = frozenset({VALIDATED, CONSTRUCTED, LISTED})

    @classmethod
    def normalize(cls, value: Optional[str]) -> str:
        kind = (value or "").strip().lower()
        if kind not in cls.ALL:
            raise ValueError(f"Invalid variant: {value!r}. Expected one of {sorted(cls.ALL)}")
        return kind

    @classmethod
    def supports_async(cls, kind: str) -> bool:
        return kind == cls.VALIDATED


class UnsetType:
    """Type of :data:`UNSET`; there is exactly one instance."""

    _instance: "UnsetType | None" = None
    __slots__ = ()

    def __new__(cls) -> "UnsetType":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNSET"


# Marks a field that was never assigned. ``None`` is an ordinary value.
UNSET: Final = UnsetType()


@runtime_checkable
class SchemaAdapter(Protocol):
    """Uniform view over a validating schema."""

    source: Any
    label: str

    def field_names(self) -> tuple[str, ...]:
        """Declared top-level field names; empty when the shape is opaque."""
        ...

    def parse(self, data: Mapping[str, Any]) -> Any:
        """Validate ``data`` and return the coerced result.

        Raises:
            ValidationFailure: If any constraint is violated.
        """
        ...

    async def parse_async(self, data: Mapping[str, Any]) -> Any:
        """Awaitable counterpart of :meth:`parse` with the same contract."""
        ...


@runtime_checkable
class Finalizer(Protocol):
    """Turns an accumulator's partial record into the target representation."""

    def finalize(self, partial: Mapping[str, Any]) -> Any:  # pragma: no cover - interface
        ...


@runtime_checkable
class AsyncFinalizer(Protocol):
    async def finalize_async(self, partial: Mapping[str, Any]) -> Any:  # pragma: no cover - interface
        ...
