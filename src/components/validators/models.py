"""
Validators component models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Severity = Literal["warning", "error"]


@dataclass(frozen=True)
class ValidationIssue:
    """One occurrence found by a content check."""

    ref: str
    field: str
    location: str
    preview: str


@dataclass(frozen=True)
class ValidatorInfo:
    """Description of a content check, as shown to editors."""

    label: str
    description: str
    type: Severity


# --- Input Models ---


@dataclass(frozen=True)
class TkCheckInput:
    """Entries to check, keyed by reference."""

    entries: dict[str, dict[str, Any]]


# --- Output Models ---


@dataclass(frozen=True)
class TkCheckOutput:
    """TK occurrences in document order of the entries given."""

    info: ValidatorInfo
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.issues
