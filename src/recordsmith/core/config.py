# config.py
# SPDX-License-Identifier: MIT
"""Declarative settings for pool capacities and package logging.

Settings are plain dataclasses that can be round-tripped through JSON or
TOML. They never hold live pools or accumulators; :class:`PoolRegistry`
reads them when it creates pools.
"""
from __future__ import annotations

import json
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Type, TypeVar, get_type_hints

from .log import PACKAGE_LOGGER_NAME, configure_logging

__all__ = [
    "DEFAULT_POOL_MAX_SIZE",
    "PoolConfig",
    "LoggingConfig",
    "RecordsmithConfig",
    "load_config_from_path",
    "validate_options_for_dataclass",
]

DEFAULT_POOL_MAX_SIZE = 1000

T = TypeVar("T")
C = TypeVar("C")


@dataclass(slots=True)
class PoolConfig:
    """Capacity bounds for accumulator pools.

    Attributes:
        max_size (int): Idle accumulators kept per synchronous pool.
        async_max_size (int): Idle accumulators kept per async pool.
    """
    max_size: int = DEFAULT_POOL_MAX_SIZE
    async_max_size: int = DEFAULT_POOL_MAX_SIZE

    def validate(self) -> None:
        for name in ("max_size", "async_max_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"pool.{name} must be an integer; got {value!r}.")
            if value < 0:
                raise ValueError(f"pool.{name} must be >= 0; got {value}.")


@dataclass(slots=True)
class LoggingConfig:
    """Controls the package logger; set propagate/logger_name to
    integrate with host apps.
    """
    level: int | str = "INFO"
    propagate: bool = False
    fmt: str | None = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    logger_name: str = PACKAGE_LOGGER_NAME

    def apply(self) -> None:
        """Apply this logging configuration to the package logger."""
        configure_logging(
            level=self.level,
            propagate=self.propagate,
            fmt=self.fmt,
            logger_name=self.logger_name or PACKAGE_LOGGER_NAME,
        )


@dataclass(slots=True)
class RecordsmithConfig:
    """Top-level settings document.

    The TOML layout mirrors this dataclass: a ``[pool]`` table and a
    ``[logging]`` table.
    """
    pool: PoolConfig = field(default_factory=PoolConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        self.pool.validate()

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation of these settings."""
        return _dataclass_to_dict(self)

    def to_json(self, path: Path | str, *, indent: int = 2) -> str:
        """Write these settings as JSON and return the target path."""
        target = Path(path)
        target.write_text(json.dumps(self.to_dict(), indent=indent, sort_keys=True), encoding="utf-8")
        return str(target)

    @classmethod
    def from_dict(cls: Type[T], data: Mapping[str, Any]) -> T:
        """Instantiate settings from a mapping, rejecting unknown keys."""
        cfg = _dataclass_from_dict(cls, data, context="config")
        cfg.validate()  # type: ignore[attr-defined]
        return cfg

    @classmethod
    def from_json(cls: Type[T], path: Path | str) -> T:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(payload, Mapping):
            raise TypeError(f"Top-level JSON document must be an object; got {type(payload).__name__}.")
        return cls.from_dict(payload)  # type: ignore[attr-defined]

    @classmethod
    def from_toml(cls: Type[T], path: Path | str) -> T:
        data = tomllib.loads(Path(path).read_bytes().decode("utf-8"))
        return cls.from_dict(data)  # type: ignore[attr-defined]


def load_config_from_path(path: str | Path) -> RecordsmithConfig:
    """Load settings from a ``.toml`` or ``.json`` file.

    Raises:
        ValueError: If the file extension is not ``.toml`` or ``.json``.
    """
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".toml":
        return RecordsmithConfig.from_toml(p)
    if suffix == ".json":
        return RecordsmithConfig.from_json(p)
    raise ValueError(f"Unsupported config extension {p.suffix!r}; expected .toml or .json.")


def validate_options_for_dataclass(
    cfg_type: Type[C],
    *,
    options: Mapping[str, Any] | None,
    ignore_keys: Iterable[str] = (),
    context: str | None = None,
) -> None:
    """
    Validate that options only contain known dataclass fields or ignore_keys.

    Raises:
        ValueError: If unknown option keys are present.
    """
    if not options:
        return

    allowed = {f.name for f in fields(cfg_type)} | set(ignore_keys)
    unknown = sorted(str(k) for k in options.keys() if k not in allowed)

    if unknown:
        label = context or cfg_type.__name__
        raise ValueError(
            f"Unsupported options for {label}: {', '.join(unknown)}. "
            f"Allowed keys: {', '.join(sorted(allowed))}"
        )


def _dataclass_to_dict(obj: Any) -> dict[str, Any]:
    """Serialize a settings dataclass, skipping None values."""
    result: dict[str, Any] = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if value is None:
            continue
        result[f.name] = _dataclass_to_dict(value) if is_dataclass(value) else value
    return result


def _dataclass_from_dict(cls: Type[T], data: Mapping[str, Any] | None, *, context: str) -> T:
    """Instantiate dataclass ``cls`` from ``data``, recursing into nested tables."""
    if data is None:
        return cls()  # type: ignore[call-arg]
    if not isinstance(data, Mapping):
        raise TypeError(f"{context} must be a mapping; got {type(data).__name__}.")
    validate_options_for_dataclass(cls, options=data, context=context)
    type_hints = get_type_hints(cls)

    kwargs: dict[str, Any] = {}
    for f in fields(cls):  # type: ignore[arg-type]
        if f.name not in data:
            continue
        expected = type_hints.get(f.name, f.type)
        value = data[f.name]
        if isinstance(expected, type) and is_dataclass(expected):
            value = _dataclass_from_dict(expected, value, context=f"{context}.{f.name}")
        kwargs[f.name] = value
    return cls(**kwargs)  # type: ignore[arg-type]
