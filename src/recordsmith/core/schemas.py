# schemas.py
# SPDX-License-Identifier: MIT
"""Adapters that put pydantic models and duck-typed schemas behind one interface.

Two families are recognized:

* pydantic: a ``BaseModel`` subclass or a ``TypeAdapter`` instance.
* duck-typed: any object exposing callable ``parse`` and ``safe_parse``
  plus a ``_def`` definition marker. Its shape is read from
  ``_def.shape`` (callable or mapping) or a ``shape`` attribute.

Each adapter converts schema-specific failures into
:class:`~recordsmith.core.errors.ValidationFailure`. Exceptions that carry
no recognizable issue list propagate unchanged.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationFailure, ValidationIssue

__all__ = [
    "SchemaAdapterBase",
    "PydanticModelSchema",
    "PydanticTypeAdapterSchema",
    "DuckSchema",
    "is_pydantic_model",
    "is_duck_schema",
    "is_schema",
    "as_schema",
    "issues_from_exception",
]


# ---------------------------------------------------------------------------
# Capability probes
# ---------------------------------------------------------------------------

def is_pydantic_model(value: Any) -> bool:
    return isinstance(value, type) and issubclass(value, BaseModel) and value is not BaseModel


def is_duck_schema(value: Any) -> bool:
    return (
        value is not None
        and not isinstance(value, type)
        and callable(getattr(value, "parse", None))
        and callable(getattr(value, "safe_parse", None))
        and getattr(value, "_def", None) is not None
    )


def is_schema(value: Any) -> bool:
    """Return True when ``value`` can be wrapped by :func:`as_schema`."""
    return is_pydantic_model(value) or isinstance(value, TypeAdapter) or is_duck_schema(value)


def as_schema(value: Any):
    """Wrap ``value`` in the matching adapter, or return None."""
    if is_pydantic_model(value):
        return PydanticModelSchema(value)
    if isinstance(value, TypeAdapter):
        return PydanticTypeAdapterSchema(value)
    if is_duck_schema(value):
        return DuckSchema(value)
    return None


# ---------------------------------------------------------------------------
# Error conversion
# ---------------------------------------------------------------------------

def _join_path(path: Any) -> str:
    if path is None:
        return ""
    if isinstance(path, str):
        return path
    if isinstance(path, Iterable):
        return ".".join(str(part) for part in path)
    return str(path)


def _issue_from_item(item: Any) -> ValidationIssue:
    if isinstance(item, Mapping):
        path = item.get("path", item.get("loc"))
        message = item.get("message", item.get("msg", ""))
    else:
        path = getattr(item, "path", None)
        message = getattr(item, "message", "")
    return ValidationIssue(path=_join_path(path), message=str(message))


def issues_from_exception(exc: BaseException) -> list[ValidationIssue] | None:
    """Extract per-constraint issues from a schema error.

    Returns None when ``exc`` does not look like a validation error.
    """
    if isinstance(exc, PydanticValidationError):
        return [
            ValidationIssue(path=_join_path(err.get("loc")), message=str(err.get("msg", "")))
            for err in exc.errors()
        ]
    issues = getattr(exc, "issues", None)
    if issues is None or isinstance(issues, (str, bytes)):
        return None
    try:
        return [_issue_from_item(item) for item in issues]
    except TypeError:
        return None


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------

class SchemaAdapterBase:
    """Shared parse plumbing; subclasses supply ``_parse_raw``."""

    source: Any
    label: str

    def _parse_raw(self, data: dict[str, Any]) -> Any:  # pragma: no cover - abstract
        raise NotImplementedError

    def _fail(self, exc: BaseException) -> ValidationFailure | None:
        issues = issues_from_exception(exc)
        if issues is None:
            return None
        return ValidationFailure(issues, schema_label=self.label)

    def parse(self, data: Mapping[str, Any]) -> Any:
        try:
            return self._parse_raw(dict(data))
        except Exception as exc:
            failure = self._fail(exc)
            if failure is None:
                raise
            raise failure from exc

    async def parse_async(self, data: Mapping[str, Any]) -> Any:
        return await asyncio.to_thread(self.parse, data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.label})"


class PydanticModelSchema(SchemaAdapterBase):
    """Adapter over a pydantic ``BaseModel`` subclass; results are model instances."""

    def __init__(self, model: type[BaseModel]) -> None:
        self.source = model
        self.label = model.__qualname__

    def field_names(self) -> tuple[str, ...]:
        return tuple(self.source.model_fields)

    def _parse_raw(self, data: dict[str, Any]) -> Any:
        return self.source.model_validate(data)


def _core_schema_field_names(core: Mapping[str, Any], definitions: Mapping[str, Any]) -> tuple[str, ...]:
    kind = core.get("type")
    if kind == "definitions":
        defs = dict(definitions)
        for item in core.get("definitions", ()):
            ref = item.get("ref")
            if ref:
                defs[ref] = item
        return _core_schema_field_names(core["schema"], defs)
    if kind == "definition-ref":
        target = definitions.get(core.get("schema_ref", ""))
        return _core_schema_field_names(target, definitions) if target else ()
    if kind in ("model", "dataclass"):
        return _core_schema_field_names(core["schema"], definitions)
    if kind in ("typed-dict", "model-fields"):
        return tuple(core.get("fields", {}))
    if kind == "dataclass-args":
        return tuple(f["name"] for f in core.get("fields", ()))
    return ()


class PydanticTypeAdapterSchema(SchemaAdapterBase):
    """Adapter over a pydantic ``TypeAdapter`` (TypedDict, dataclass, model, ...)."""

    def __init__(self, adapter: TypeAdapter) -> None:
        self.source = adapter
        self.label = f"TypeAdapter[{adapter.core_schema.get('type', '?')}]"

    def field_names(self) -> tuple[str, ...]:
        core = self.source.core_schema
        if not isinstance(core, Mapping):
            return ()
        return _core_schema_field_names(core, {})

    def _parse_raw(self, data: dict[str, Any]) -> Any:
        return self.source.validate_python(data)


class DuckSchema(SchemaAdapterBase):
    """Adapter over any object with ``parse``/``safe_parse`` and a ``_def`` marker."""

    def __init__(self, schema: Any) -> None:
        self.source = schema
        self.label = getattr(schema, "name", None) or type(schema).__name__

    def field_names(self) -> tuple[str, ...]:
        definition = getattr(self.source, "_def", None)
        producer = getattr(definition, "shape", None)
        if producer is None and isinstance(definition, Mapping):
            producer = definition.get("shape")
        if producer is None:
            producer = getattr(self.source, "shape", None)
        if producer is None:
            return ()
        shape = producer() if callable(producer) else producer
        if shape is None:
            return ()
        return tuple(str(key) for key in shape)

    def _parse_raw(self, data: dict[str, Any]) -> Any:
        return self.source.parse(data)

    async def parse_async(self, data: Mapping[str, Any]) -> Any:
        native = getattr(self.source, "parse_async", None)
        if native is None or not inspect.iscoroutinefunction(native):
            return await super().parse_async(data)
        try:
            return await native(dict(data))
        except Exception as exc:
            failure = self._fail(exc)
            if failure is None:
                raise
            raise failure from exc
