# configuration.py
# SPDX-License-Identifier: MIT
"""Immutable configuration assembled once per caller-facing factory."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .detection import classify, dedupe_fields, extract_fields, is_field_list
from .errors import EmptyFieldList, UnrecognizedShape
from .interfaces import SchemaAdapter, Variant
from .schemas import as_schema

__all__ = ["Configuration", "assemble", "mutator_name"]


def mutator_name(field_name: str) -> str:
    """Return the setter name for ``field_name``: ``"with"`` + capitalized name."""
    return f"with{field_name[:1].upper()}{field_name[1:]}"


@dataclass(frozen=True, slots=True)
class Configuration:
    """Description of a target shape shared by every accumulator in its pool.

    Attributes:
        variant (str): One of the :class:`Variant` kinds.
        field_names (tuple[str, ...]): Configured fields, duplicates
            collapsed, first-seen order kept for display.
        schema (SchemaAdapter | None): Set for the validated variant.
        constructor (Callable | None): Set for the constructed variant.
    """
    variant: str
    field_names: tuple[str, ...]
    schema: SchemaAdapter | None = None
    constructor: Callable[..., Any] | None = None
    _mutators: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        variant = Variant.normalize(self.variant)
        object.__setattr__(self, "variant", variant)
        object.__setattr__(self, "field_names", dedupe_fields(self.field_names))
        if variant == Variant.VALIDATED and self.schema is None:
            raise ValueError("A validated configuration requires a schema")
        if variant == Variant.CONSTRUCTED and self.constructor is None:
            raise ValueError("A constructed configuration requires a constructor")

        mutators: dict[str, str] = {}
        for name in self.field_names:
            method = mutator_name(name)
            clash = mutators.get(method)
            if clash is not None:
                raise ValueError(f"Fields {clash!r} and {name!r} both map to setter {method!r}")
            mutators[method] = name
        object.__setattr__(self, "_mutators", MappingProxyType(mutators))

    @property
    def field_set(self) -> frozenset[str]:
        return frozenset(self.field_names)

    @property
    def mutators(self) -> Mapping[str, str]:
        """Read-only mapping of setter name to field name."""
        return self._mutators

    @property
    def payload(self) -> Any:
        if self.schema is not None:
            return self.schema.source
        return self.constructor

    @property
    def key(self) -> Hashable:
        """Identity used to share pools; independent of field order."""
        payload = self.payload
        return (self.variant, self.field_set, None if payload is None else id(payload))

    @property
    def label(self) -> str:
        payload = self.payload
        if payload is None:
            target = "fields"
        elif self.schema is not None:
            target = self.schema.label
        else:
            target = getattr(payload, "__qualname__", type(payload).__name__)
        return f"{self.variant}:{target}[{','.join(sorted(self.field_names)) or '-'}]"


def _explicit_field_names(explicit: Sequence[str]) -> tuple[str, ...]:
    if not is_field_list(explicit):
        raise UnrecognizedShape("Explicit fields must be a sequence of field-name strings")
    if len(explicit) == 0:
        raise EmptyFieldList("An explicit field list requires at least one field name")
    return dedupe_fields(explicit)


def assemble(value: Any, explicit_fields: Sequence[str] | None = None) -> Configuration:
    """Classify ``value``, discover its fields, and freeze the result.

    ``explicit_fields`` replaces discovery for schemas and constructors,
    which is how computed or property-backed fields get setters. A field
    list input already names its fields, so explicit fields are only
    checked for emptiness there.

    Raises:
        UnrecognizedShape: ``value`` (or ``explicit_fields``) has no known shape.
        EmptyFieldList: A field list (input or explicit) is empty.
    """
    variant = classify(value)
    explicit = None if explicit_fields is None else _explicit_field_names(explicit_fields)

    if variant == Variant.LISTED:
        return Configuration(variant=variant, field_names=dedupe_fields(value))

    if variant == Variant.VALIDATED:
        schema = as_schema(value)
        names = explicit if explicit is not None else extract_fields(schema, variant)
        return Configuration(variant=variant, field_names=names, schema=schema)

    names = explicit if explicit is not None else extract_fields(value, variant)
    return Configuration(variant=variant, field_names=names, constructor=value)
