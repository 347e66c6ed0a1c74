# errors.py
# SPDX-License-Identifier: MIT
"""Exception taxonomy for factory construction and finalization."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

__all__ = [
    "RecordsmithError",
    "UnrecognizedShape",
    "EmptyFieldList",
    "AsyncUnsupported",
    "ValidationIssue",
    "ValidationFailure",
]


class RecordsmithError(Exception):
    """Base class for errors raised by recordsmith itself."""


class UnrecognizedShape(RecordsmithError, TypeError):
    """Input is neither a schema, a constructor, nor a list of field names."""


class EmptyFieldList(RecordsmithError, ValueError):
    """A field list was supplied but contained no names."""


class AsyncUnsupported(RecordsmithError, TypeError):
    """Async finalization was requested for a non-schema input."""


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One violated constraint: dotted field path plus a reason."""

    path: str
    message: str

    @property
    def field(self) -> str:
        """Top-level field name of :attr:`path` (empty for record-level issues)."""
        return self.path.split(".", 1)[0] if self.path else ""

    def as_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


class ValidationFailure(RecordsmithError, ValueError):
    """Schema rejected the accumulated record.

    Attributes:
        issues (tuple[ValidationIssue, ...]): One entry per violated
            constraint, in the order the schema reported them.
    """

    def __init__(self, issues: Iterable[ValidationIssue], *, schema_label: str | None = None) -> None:
        self.issues: tuple[ValidationIssue, ...] = tuple(issues)
        self.schema_label = schema_label
        super().__init__(self._render())

    @property
    def fields(self) -> list[str]:
        """Distinct top-level field names that failed, first-seen order."""
        seen: dict[str, None] = {}
        for issue in self.issues:
            if issue.field:
                seen.setdefault(issue.field, None)
        return list(seen)

    def as_dicts(self) -> list[dict[str, str]]:
        return [issue.as_dict() for issue in self.issues]

    def _render(self) -> str:
        head = f"Validation failed for {self.schema_label}" if self.schema_label else "Validation failed"
        if not self.issues:
            return head
        details = "; ".join(f"{i.path or '<record>'}: {i.message}" for i in self.issues)
        return f"{head}: {details}"
