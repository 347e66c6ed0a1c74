# detection.py
# SPDX-License-Identifier: MIT
"""Shape classification and field discovery.

:func:`classify` sorts an arbitrary input into one of the three
:class:`~recordsmith.core.interfaces.Variant` kinds. :func:`extract_fields`
then recovers the field names for that kind. Constructors carry no static
field list, so their fields are discovered by watching a trial construction,
falling back through progressively blunter probes. Probe failures never
escape; the worst outcome is an empty field list.
"""

from __future__ import annotations

import dataclasses
import inspect
import typing
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, ClassVar

from .errors import EmptyFieldList, UnrecognizedShape
from .interfaces import Variant
from .log import get_logger
from .schemas import SchemaAdapterBase, as_schema, is_schema

__all__ = [
    "classify",
    "detect_builder_type",
    "is_class",
    "is_schema",
    "is_field_list",
    "dedupe_fields",
    "extract_fields",
    "extract_fields_from_schema",
    "extract_fields_from_constructor",
    "declared_fields",
]

log = get_logger(__name__)


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _is_field_key(name: Any) -> bool:
    return isinstance(name, str) and not _is_dunder(name)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def is_class(value: Any) -> bool:
    """True for classes and plain functions, the two constructor shapes.

    Plain functions qualify the same way classes do. Builtins, bound methods
    and callable instances do not.
    """
    return inspect.isclass(value) or inspect.isfunction(value)


def is_field_list(value: Any) -> bool:
    """True for a non-string sequence of non-blank field-name strings."""
    return (
        isinstance(value, Sequence)
        and not isinstance(value, (str, bytes, bytearray))
        and all(isinstance(item, str) and item.strip() for item in value)
    )


def classify(value: Any) -> str:
    """Return the variant tag for ``value``; first matching rule wins.

    Raises:
        EmptyFieldList: ``value`` is an empty sequence.
        UnrecognizedShape: ``value`` matches no rule.
    """
    if is_schema(value):
        return Variant.VALIDATED
    if is_class(value):
        return Variant.CONSTRUCTED
    if is_field_list(value):
        if len(value) == 0:
            raise EmptyFieldList("A field list requires at least one field name")
        return Variant.LISTED
    raise UnrecognizedShape(
        "Unable to detect builder type. Expected a schema, a class or function, "
        f"or a sequence of field names; got {type(value).__name__}."
    )


detect_builder_type = classify


# ---------------------------------------------------------------------------
# Field extraction
# ---------------------------------------------------------------------------

def dedupe_fields(names: Iterable[str]) -> tuple[str, ...]:
    """Collapse duplicates, keeping first-seen order."""
    return tuple(dict.fromkeys(names))


def extract_fields_from_schema(schema: Any) -> tuple[str, ...]:
    adapter = schema if isinstance(schema, SchemaAdapterBase) else as_schema(schema)
    if adapter is None:
        return ()
    return dedupe_fields(adapter.field_names())


def _iter_slot_names(cls: type) -> Iterable[str]:
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name not in ("__dict__", "__weakref__"):
                yield name


def _own_keys(instance: Any) -> list[str]:
    """String keys stored directly on ``instance`` (or a returned mapping)."""
    if isinstance(instance, Mapping):
        return [key for key in instance if _is_field_key(key)]
    keys: dict[str, None] = {}
    attrs = getattr(instance, "__dict__", None)
    if isinstance(attrs, dict):
        for key in attrs:
            if _is_field_key(key):
                keys.setdefault(key, None)
    for name in _iter_slot_names(type(instance)):
        if _is_field_key(name) and hasattr(instance, name):
            keys.setdefault(name, None)
    return list(keys)


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or typing.get_origin(annotation) is ClassVar


def declared_fields(target: Any) -> tuple[str, ...]:
    """Field names a class declares at definition time.

    Dataclasses report their ``fields()``; other classes report annotated
    names across the MRO, base classes first, skipping ``ClassVar``.
    Functions declare nothing.
    """
    if not inspect.isclass(target):
        return ()
    if dataclasses.is_dataclass(target):
        return dedupe_fields(f.name for f in dataclasses.fields(target))
    names: dict[str, None] = {}
    for klass in reversed(target.__mro__):
        if klass is object:
            continue
        for name, annotation in inspect.get_annotations(klass).items():
            if _is_field_key(name) and not _is_class_var(annotation):
                names.setdefault(name, None)
    return tuple(names)


def _record_assignments(target: Callable[..., Any]) -> list[str]:
    """Run ``target.__init__`` against a recorder and return assigned names."""
    if not inspect.isclass(target):
        raise TypeError(f"{getattr(target, '__name__', target)!r} has no instance to intercept")

    recorded: dict[str, None] = {}

    def __setattr__(self, name, value):
        if _is_field_key(name):
            recorded.setdefault(name, None)
        super(recorder, self).__setattr__(name, value)

    recorder = type(
        f"_{target.__name__}AssignmentRecorder",
        (target,),
        {"__setattr__": __setattr__, "__module__": __name__},
    )
    receiver = object.__new__(recorder)
    receiver.__init__({})
    return list(recorded)


def _instantiate_with_empty_record(target: Callable[..., Any]) -> list[str]:
    return _own_keys(target({}))


def _instantiate_without_arguments(target: Callable[..., Any]) -> list[str]:
    return _own_keys(target())


_CONSTRUCTOR_STRATEGIES: tuple[tuple[str, Callable[[Callable[..., Any]], list[str]]], ...] = (
    ("assignment-interception", _record_assignments),
    ("trial-empty-record", _instantiate_with_empty_record),
    ("trial-no-arguments", _instantiate_without_arguments),
)


def extract_fields_from_constructor(target: Callable[..., Any]) -> tuple[str, ...]:
    """Discover field names for a class or function.

    Declared fields win when a class has any. Otherwise the trial
    construction strategies run in order; the next one is tried only when
    the previous raised or found nothing. When all fail the result is empty.
    """
    name = getattr(target, "__qualname__", repr(target))
    try:
        declared = declared_fields(target)
    except Exception as exc:
        log.debug("Reading declared fields failed for %s: %s", name, exc)
        declared = ()
    if declared:
        log.debug("Using %d declared field(s) for %s", len(declared), name)
        return declared
    for label, strategy in _CONSTRUCTOR_STRATEGIES:
        try:
            keys = strategy(target)
        except Exception as exc:
            log.debug("Field probe %s failed for %s: %s", label, name, exc)
            continue
        if keys:
            log.debug("Field probe %s found %d field(s) for %s", label, len(keys), name)
            return dedupe_fields(keys)
        log.debug("Field probe %s found no fields for %s", label, name)
    log.debug("No fields discovered for %s; continuing with an empty field list", name)
    return ()


def extract_fields(value: Any, variant: str | None = None) -> tuple[str, ...]:
    """Return the field names for ``value`` given its variant."""
    kind = classify(value) if variant is None else Variant.normalize(variant)
    if kind == Variant.VALIDATED:
        return extract_fields_from_schema(value)
    if kind == Variant.CONSTRUCTED:
        return extract_fields_from_constructor(value)
    return dedupe_fields(value)
