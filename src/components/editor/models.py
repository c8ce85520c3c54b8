"""
Editor component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from src.components.textmodel import parse

Transition = Literal[
    "merge",
    "split",
    "create",
    "paste",
    "line_break",
    "bullet",
    "unfocus",
    "noop",
]


class EditorConfigError(ValueError):
    """Raised when a field editor is built without a required capability."""


# --- Field State ---


@dataclass(frozen=True)
class Caret:
    """Selection by character offset into the field's plain text."""

    start: int
    end: int

    @classmethod
    def at(cls, offset: int) -> Caret:
        return cls(start=offset, end=offset)

    @property
    def collapsed(self) -> bool:
        return self.start == self.end


@dataclass
class FieldHandle:
    """
    A wysiwyg field being edited.

    ``value`` is the field's live markup. The focus service persists it when
    the field loses focus.
    """

    ref: str
    field: str
    value: str = ""

    @property
    def text(self) -> str:
        return parse(self.value).text


@dataclass(frozen=True)
class EditorError:
    """Editor transition error."""

    code: str
    message: str


# --- Input Models ---


@dataclass(frozen=True)
class DeleteKeyInput:
    """Backspace/delete pressed in a field."""

    handle: FieldHandle


@dataclass(frozen=True)
class EnterKeyInput:
    """Enter pressed in a field."""

    handle: FieldHandle
    shift: bool = False


@dataclass(frozen=True)
class TabKeyInput:
    """Tab pressed in a field."""

    handle: FieldHandle


@dataclass(frozen=True)
class PasteInput:
    """
    Content pasted into a field.

    ``markup`` is the field's content once the pasted fragment is in place.
    """

    handle: FieldHandle
    markup: str


# --- Output Models ---


@dataclass(frozen=True)
class TransitionOutput:
    """Result of one editor transition."""

    transition: Transition
    refs: list[str] = field(default_factory=list)
    errors: list[EditorError] = field(default_factory=list)
    success: bool = True
