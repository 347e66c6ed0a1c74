# __init__.py
# SPDX-License-Identifier: MIT
"""
Top-level package exports for :mod:`recordsmith`.

recordsmith turns a description of a record shape into a reusable factory
of pooled accumulators. Callers assign fields through generated setters and
finalize the accumulator into the target value.

Public surface and stability
----------------------------
The symbols listed in :data:`PRIMARY_API` are the recommended surface and
are exported via :data:`__all__`. In general, callers should:

- Create a factory with :func:`create_factory` (or
  :func:`create_async_factory` for schemas validated with ``await``).
- Draw accumulators from it, chain ``withField(value)`` setters, and call
  ``build()`` / ``await build_async()``.
- Return accumulators with ``factory.release(acc)`` or use
  ``factory.session()``.

Shapes
------
- A pydantic model class, a pydantic ``TypeAdapter`` or any object with
  ``parse``/``safe_parse`` and a ``_def`` marker is *validated*.
- A class or plain function is *constructed*; it receives the finished
  record as its only argument.
- A sequence of field names is *listed*; the result is a plain dict.

Advanced / expert surface
-------------------------
Anything not listed in :data:`PRIMARY_API` (pool internals, adapters,
the registry class) may change between releases.

Examples:
    >>> from recordsmith import create_factory
    >>> make_point = create_factory(["x", "y"])
    >>> make_point().withX(1).withY(2).build()
    {'x': 1, 'y': 2}
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Package version
# ---------------------------------------------------------------------------
try:
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as _pkg_version

    __version__ = _pkg_version("recordsmith")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"


# ---------------------------------------------------------------------------
# Primary public API (stable; exported via __all__)
# ---------------------------------------------------------------------------
from .core.factory import (
    BuilderFactory,
    builder,
    builder_async,
    clear_pools,
    create_async_factory,
    create_factory,
    get_detailed_pool_stats,
    get_pool_stats,
    reset_pool_stats,
)
from .core.errors import (
    AsyncUnsupported,
    EmptyFieldList,
    RecordsmithError,
    UnrecognizedShape,
    ValidationFailure,
    ValidationIssue,
)
from .core.interfaces import UNSET, Variant

# ---------------------------------------------------------------------------
# Advanced / expert API (imported for convenience; not exported via __all__)
# ---------------------------------------------------------------------------
from .core.accumulator import Accumulator, AsyncAccumulator, make_accumulator_class
from .core.config import LoggingConfig, PoolConfig, RecordsmithConfig, load_config_from_path
from .core.configuration import Configuration, assemble, mutator_name
from .core.detection import classify, detect_builder_type, extract_fields, is_class, is_schema
from .core.log import configure_logging, get_logger
from .core.pool import AccumulatorPool, ObjectPool, PoolStats
from .core.registry import PoolRegistry, default_registry, set_default_registry

# ---------------------------------------------------------------------------
# Stable export list
# ---------------------------------------------------------------------------
PRIMARY_API = [
    "__version__",
    "create_factory",
    "create_async_factory",
    "builder",
    "builder_async",
    "BuilderFactory",
    "clear_pools",
    "get_pool_stats",
    "get_detailed_pool_stats",
    "reset_pool_stats",
    "UNSET",
    "Variant",
    "RecordsmithError",
    "UnrecognizedShape",
    "EmptyFieldList",
    "AsyncUnsupported",
    "ValidationFailure",
    "ValidationIssue",
    "RecordsmithConfig",
    "load_config_from_path",
]

__all__ = list(PRIMARY_API)
