"""
Paste component models.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from src.components.textmodel import RunSequence

# --- Errors ---


class PasteRuleConfigError(ValueError):
    """Raised when a paste rule cannot be compiled."""


class NoMatchingRuleError(ValueError):
    """Raised when no paste rule matches a paragraph."""

    def __init__(self, text: str, preview: str) -> None:
        self.text = text
        self.preview = preview
        super().__init__(f'No rule found for "{preview}"')


@dataclass(frozen=True)
class PasteError:
    """Paste error."""

    code: str
    message: str
    preview: str | None = None


# --- Rules and Descriptors ---


@dataclass(frozen=True)
class PasteRule:
    """A compiled paste rule. The pattern always matches whole strings."""

    pattern: re.Pattern[str]
    component: str
    field: str
    group: str | None = None
    sanitize: bool = False
    source: str = ""

    def match(self, text: str) -> str | None:
        """Return the captured value, or None if the rule does not apply."""
        found = self.pattern.fullmatch(text)
        if found is None:
            return None
        if self.pattern.groups:
            return found.group(1) or ""
        return found.group(0)


@dataclass(frozen=True)
class ComponentDescriptor:
    """A paragraph classified into a component."""

    component: str
    field: str
    value: str | RunSequence | None
    sanitize: bool = False
    group: str | None = None

    @property
    def path(self) -> str:
        """Field (or group) to focus once the component exists."""
        return self.group or self.field


# --- Input Models ---


@dataclass(frozen=True)
class SplitParagraphsInput:
    """Input for splitting pasted markup into paragraphs."""

    markup: str


@dataclass(frozen=True)
class ClassifyInput:
    """Input for classifying pasted markup into components."""

    markup: str
    rules: tuple[PasteRule, ...]


# --- Output Models ---


@dataclass(frozen=True)
class SplitParagraphsOutput:
    """Output containing paragraph units in document order."""

    paragraphs: list[str]
    success: bool = True


@dataclass(frozen=True)
class ClassifyOutput:
    """Output containing component descriptors in document order."""

    components: list[ComponentDescriptor] = field(default_factory=list)
    errors: list[PasteError] = field(default_factory=list)
    success: bool = True
