"""
Text model - parse markup into styled runs, split runs, serialize back.

Key behaviors:
- Parsing is best-effort and never raises on malformed markup
- Unknown tags are dropped but their text is kept
- Script and style content is dropped entirely
- <br> becomes a newline inside the run text; literal newlines are whitespace
- Tags are mapped through a process-wide "same as" table before use
  (e.g. every heading level becomes strong)
- Links with forbidden protocols lose their href
- Serialization nests marks in a canonical order and keeps shared
  outer tags open across neighbouring runs
"""

from __future__ import annotations

import html
import logging
from collections.abc import Mapping
from html.parser import HTMLParser
from types import MappingProxyType

from .models import INLINE_MARKS, RunSequence, TextRun

logger = logging.getLogger(__name__)

# --- Style Equivalence ("same as") ---

DEFAULT_SAME_AS: Mapping[str, str] = MappingProxyType(
    {
        "B": "STRONG",
        "I": "EM",
        "STRIKE": "S",
        "DEL": "S",
        "H1": "STRONG",
        "H2": "STRONG",
        "H3": "STRONG",
        "H4": "STRONG",
        "H5": "STRONG",
        "H6": "STRONG",
    }
)

_same_as: Mapping[str, str] = DEFAULT_SAME_AS

# Forbidden protocols in link targets
FORBIDDEN_PROTOCOLS: frozenset[str] = frozenset(["javascript:", "data:", "vbscript:"])

# Elements whose content is never text
DROP_CONTENT_TAGS: frozenset[str] = frozenset(["script", "style", "object", "iframe"])


def update_same_as(mapping: Mapping[str, str]) -> Mapping[str, str]:
    """
    Merge tag equivalences into the process-wide table.

    Keys and values are tag names, case-insensitive. Call once at startup;
    the table is read-only for every parse afterwards.
    """
    global _same_as

    merged = dict(_same_as)
    for source, target in mapping.items():
        merged[source.upper()] = target.upper()
    _same_as = MappingProxyType(merged)
    logger.debug("Text model style table updated: %d entries", len(merged))
    return _same_as


def get_same_as() -> Mapping[str, str]:
    return _same_as


def reset_same_as() -> None:
    """Restore the default style table."""
    global _same_as
    _same_as = DEFAULT_SAME_AS


def is_safe_url(url: str) -> bool:
    """Check a link target against the forbidden protocols."""
    url_lower = url.strip().lower()
    return not any(url_lower.startswith(protocol) for protocol in FORBIDDEN_PROTOCOLS)


# --- Parsing ---


class _RunCollector(HTMLParser):
    """Collects styled runs while walking markup."""

    def __init__(self, same_as: Mapping[str, str]) -> None:
        super().__init__(convert_charrefs=True)
        self._same_as = same_as
        # (source tag, mark or None, href or None)
        self._open: list[tuple[str, str | None, str | None]] = []
        self._dropping = 0
        self.runs: list[TextRun] = []

    def _mark_for(self, tag: str) -> str:
        return self._same_as.get(tag.upper(), tag.upper()).lower()

    def _current(self) -> tuple[frozenset[str], str | None]:
        marks = frozenset(mark for _, mark, _ in self._open if mark and mark != "a")
        href = None
        for _, mark, target in self._open:
            if mark == "a" and target is not None:
                href = target
        return marks, href

    def _emit(self, text: str) -> None:
        marks, href = self._current()
        self.runs.append(TextRun(text=text, marks=marks, href=href))

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in DROP_CONTENT_TAGS:
            self._dropping += 1
            return
        if tag == "br":
            if not self._dropping:
                self._emit("\n")
            return

        mark = self._mark_for(tag)
        if mark == "a":
            href = (dict(attrs).get("href") or "").strip() or None
            if href is not None and not is_safe_url(href):
                href = None
            self._open.append((tag, "a", href))
        elif mark in INLINE_MARKS:
            self._open.append((tag, mark, None))
        else:
            self._open.append((tag, None, None))

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "br" and not self._dropping:
            self._emit("\n")

    def handle_endtag(self, tag: str) -> None:
        if tag in DROP_CONTENT_TAGS:
            self._dropping = max(0, self._dropping - 1)
            return
        # Close the nearest matching open tag; stray closers are ignored
        for index in range(len(self._open) - 1, -1, -1):
            if self._open[index][0] == tag:
                del self._open[index]
                return

    def handle_data(self, data: str) -> None:
        if self._dropping:
            return
        text = data.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")
        if text:
            self._emit(text)


def parse(markup: str) -> RunSequence:
    """Parse markup into a normalized run sequence."""
    collector = _RunCollector(_same_as)
    collector.feed(markup or "")
    collector.close()
    return RunSequence.from_runs(collector.runs)


# --- Splitting ---


def split(sequence: RunSequence, offset: int) -> tuple[RunSequence, RunSequence]:
    """
    Split a run sequence at a character offset.

    A run spanning the offset is cut into two runs with the same style.
    Offsets outside the text are clamped.
    """
    offset = max(0, min(offset, len(sequence)))
    before: list[TextRun] = []
    after: list[TextRun] = []
    position = 0

    for run in sequence.runs:
        end = position + len(run.text)
        if end <= offset:
            before.append(run)
        elif position >= offset:
            after.append(run)
        else:
            cut = offset - position
            before.append(run.with_text(run.text[:cut]))
            after.append(run.with_text(run.text[cut:]))
        position = end

    return RunSequence.from_runs(before), RunSequence.from_runs(after)


def concat(*sequences: RunSequence) -> RunSequence:
    """Join sequences, merging runs that meet with the same style."""
    return RunSequence.from_runs(run for sequence in sequences for run in sequence.runs)


# --- Serialization ---


def _open_tag(tag: str, attr: str | None) -> str:
    if tag == "a":
        return f'<a href="{html.escape(attr or "")}">'
    return f"<{tag}>"


def _escape_text(text: str) -> str:
    return html.escape(text, quote=False).replace("\n", "<br>")


def serialize(sequence: RunSequence) -> str:
    """Serialize a run sequence to markup."""
    parts: list[str] = []
    stack: list[tuple[str, str | None]] = []

    for run in sequence.runs:
        style = run.style
        common = 0
        while common < len(stack) and common < len(style) and stack[common] == style[common]:
            common += 1

        while len(stack) > common:
            tag, _ = stack.pop()
            parts.append(f"</{tag}>")

        for tag, attr in style[common:]:
            parts.append(_open_tag(tag, attr))
            stack.append((tag, attr))

        parts.append(_escape_text(run.text))

    while stack:
        tag, _ = stack.pop()
        parts.append(f"</{tag}>")

    return "".join(parts)


def normalize_markup(markup: str) -> str:
    """Sanitize markup by round-tripping it through the text model."""
    return serialize(parse(markup))


def strip_tags(markup: str) -> str:
    """Plain text of a markup fragment."""
    return parse(markup).text
