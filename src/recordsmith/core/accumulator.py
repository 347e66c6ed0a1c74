# accumulator.py
# SPDX-License-Identifier: MIT
"""Per-build accumulators with one generated setter per configured field.

Setters are real methods on a subclass generated once per
:class:`~recordsmith.core.configuration.Configuration`, so they show up in
``dir()`` and unknown setter names raise :class:`AttributeError` like any
other missing attribute. ``build``/``build_async`` never collide with
setters because every setter name starts with ``with``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from .configuration import Configuration
from .interfaces import UNSET, AsyncFinalizer, Finalizer, Record

__all__ = [
    "AccumulatorBase",
    "Accumulator",
    "AsyncAccumulator",
    "make_accumulator_class",
]

A = TypeVar("A", bound="AccumulatorBase")


class AccumulatorBase:
    """Holds the partial record for a single in-flight build."""

    _CORE_ATTRS = frozenset({"config", "_partial", "_finalizer"})

    def __init__(self, config: Configuration, finalizer: Any) -> None:
        self.config = config
        self._partial: dict[str, Any] = {}
        self._finalizer = finalizer

    @property
    def partial(self) -> Record:
        """Copy of the assigned values; unset fields are absent, ``None`` is kept."""
        return {key: value for key, value in self._partial.items() if value is not UNSET}

    def set(self: A, field_name: str, value: Any) -> A:
        """Assign ``field_name``; the last write wins.

        Raises:
            KeyError: ``field_name`` is not a configured field.
        """
        if field_name not in self.config.field_set:
            raise KeyError(f"{field_name!r} is not a field of {self.config.label}")
        self._partial[field_name] = value
        return self

    def is_set(self, field_name: str) -> bool:
        return self._partial.get(field_name, UNSET) is not UNSET

    def reset(self) -> None:
        """Clear assigned values and drop attributes attached by callers."""
        self._partial.clear()
        for name in [n for n in vars(self) if n not in self._CORE_ATTRS]:
            delattr(self, name)

    def __repr__(self) -> str:
        assigned = ", ".join(sorted(self.partial))
        return f"<{type(self).__name__} {self.config.label} assigned=[{assigned}]>"


class Accumulator(AccumulatorBase):
    """Accumulator finalized synchronously with :meth:`build`."""

    _finalizer: Finalizer

    def build(self) -> Any:
        return self._finalizer.finalize(self.partial)


class AsyncAccumulator(AccumulatorBase):
    """Accumulator finalized by awaiting :meth:`build_async`."""

    _finalizer: AsyncFinalizer

    async def build_async(self) -> Any:
        return await self._finalizer.finalize_async(self.partial)


def _make_setter(field_name: str, method_name: str) -> Callable[[Any, Any], Any]:
    def setter(self, value):
        self._partial[field_name] = value
        return self

    setter.__name__ = method_name
    setter.__doc__ = f"Assign ``{field_name}`` and return this accumulator."
    return setter


def make_accumulator_class(config: Configuration, base: type[A]) -> type[A]:
    """Generate the ``base`` subclass carrying ``config``'s setters."""
    namespace: dict[str, Any] = {"__module__": __name__}
    for method_name, field_name in config.mutators.items():
        setter = _make_setter(field_name, method_name)
        setter.__qualname__ = f"{base.__name__}.{method_name}"
        namespace[method_name] = setter
    return type(base.__name__, (base,), namespace)
