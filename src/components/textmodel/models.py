"""
Text model data types.

A field value is held as an ordered sequence of styled text runs. Runs cover
the text with no gaps or overlaps, and a normalized sequence never holds two
adjacent runs with the same style or a run with empty text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

# Canonical nesting order used when serializing marks (outermost first)
MARK_ORDER: tuple[str, ...] = ("a", "strong", "em", "s", "sub", "sup")

# Marks a run may carry, apart from links (which carry an href)
INLINE_MARKS: frozenset[str] = frozenset(["strong", "em", "s", "sub", "sup"])


@dataclass(frozen=True)
class TextRun:
    """A contiguous span of text with one style annotation."""

    text: str
    marks: frozenset[str] = field(default_factory=frozenset)
    href: str | None = None

    @property
    def style(self) -> tuple[tuple[str, str | None], ...]:
        """Ordered (tag, attribute) pairs, outermost first."""
        pairs: list[tuple[str, str | None]] = []
        for tag in MARK_ORDER:
            if tag == "a":
                if self.href is not None:
                    pairs.append(("a", self.href))
            elif tag in self.marks:
                pairs.append((tag, None))
        return tuple(pairs)

    def same_style(self, other: TextRun) -> bool:
        return self.marks == other.marks and self.href == other.href

    def with_text(self, text: str) -> TextRun:
        return TextRun(text=text, marks=self.marks, href=self.href)


def _normalize(runs: Iterable[TextRun]) -> tuple[TextRun, ...]:
    """Drop empty runs and merge neighbours that share a style."""
    merged: list[TextRun] = []
    for run in runs:
        if not run.text:
            continue
        if merged and merged[-1].same_style(run):
            merged[-1] = merged[-1].with_text(merged[-1].text + run.text)
        else:
            merged.append(run)
    return tuple(merged)


@dataclass(frozen=True)
class RunSequence:
    """Normalized, immutable sequence of text runs."""

    runs: tuple[TextRun, ...] = ()

    @classmethod
    def from_runs(cls, runs: Iterable[TextRun]) -> RunSequence:
        return cls(runs=_normalize(runs))

    @property
    def text(self) -> str:
        """Plain text of the sequence (line breaks as newlines)."""
        return "".join(run.text for run in self.runs)

    def __len__(self) -> int:
        return len(self.text)
