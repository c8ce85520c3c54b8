"""
Paste decomposition - split pasted markup into paragraphs and classify them.

Pipeline:
1. pre_clean: unescape escaped tags, force headings to one level, decode a
   fixed set of entities, drop unsafe/unsupported elements
2. split_paragraphs: split on closing block tags or double line breaks,
   cutting inline quotes out into their own unit
3. match_components: clean each unit, find the first rule that matches the
   whole string, build a descriptor, drop blank results
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from src.components.textmodel import RunSequence, parse
from src.rules.models import PasteRuleConfig

from .models import (
    ComponentDescriptor,
    NoMatchingRuleError,
    PasteRule,
    PasteRuleConfigError,
)

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 40
PREVIEW_OMISSION = "\u2026"

QUOTE_OPEN = "<blockquote"
QUOTE_CLOSE = "</blockquote>"

# --- Pre-clean ---

_ESCAPED_TAG = re.compile(r"&lt;(.*?)&gt;", re.IGNORECASE)
_HEADING_OPEN = re.compile(r"<h[1-9]\b[^>]*>", re.IGNORECASE)
_HEADING_CLOSE = re.compile(r"</h[1-9]>", re.IGNORECASE)
_REMOVED_ELEMENTS = re.compile(
    r"<(meta|script|style|object|iframe|table)\b[^>]*>.*?</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)
_REMOVED_TAGS = re.compile(r"</?(?:meta|script|style|object|iframe|table)\b[^>]*>", re.IGNORECASE)

ENTITY_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("&amp;", "&"),
    ("&nbsp;", " "),
    ("&ldquo;", "\u201c"),
    ("&rdquo;", "\u201d"),
    ("&lsquo;", "\u2018"),
    ("&rsquo;", "\u2019"),
    ("&hellip;", "\u2026"),
    ("&mdash;", "\u2014"),
    ("&ndash;", "\u2013"),
)

# --- Splitting ---

# </p>, </div>, </h1>-</h9>, or two (interchangeable) <br> tags or newlines
_PARAGRAPH_BREAK = re.compile(
    r"</(?:p|div|h[1-9])>|(?:\s?<br(?:\s?/)?>\s?|\s?\n\s?){2}",
    re.IGNORECASE,
)

# --- Cleaning ---

_LEADING_BLOCK = re.compile(r"^\s?<(?:p><br|p|div|br)(?:.*?)>\s?", re.IGNORECASE)
_BLOCK_TAG = re.compile(r"</?(?:p|div)\b[^>]*>", re.IGNORECASE)
_SEPARATORS = re.compile("[\u2028\u2029]")
_TABS = re.compile(r"\t|\\t")
_NBSP = re.compile(r"&nbsp;", re.IGNORECASE)
_SENTENCE_BREAK = re.compile(r"(?<=\.)\n(?=[A-Z0-9])")

_CLOSING_TAG_ONLY = re.compile(r"</.*?>")


def pre_clean(markup: str) -> str:
    """Normalize raw pasted markup before it is split."""
    cleaned = _ESCAPED_TAG.sub(r"<\1>", markup)
    cleaned = _REMOVED_ELEMENTS.sub("", cleaned)
    cleaned = _REMOVED_TAGS.sub("", cleaned)
    cleaned = _HEADING_OPEN.sub("<h2>", cleaned)
    cleaned = _HEADING_CLOSE.sub("</h2>", cleaned)
    for entity, replacement in ENTITY_REPLACEMENTS:
        cleaned = cleaned.replace(entity, replacement)
    return cleaned


def _split_quote(paragraph: str) -> list[str]:
    start = paragraph.find(QUOTE_OPEN)
    if start < 0:
        start = 0
    close = paragraph.find(QUOTE_CLOSE)
    end = close + len(QUOTE_CLOSE) if close >= start else len(paragraph)

    return [
        paragraph[:start].strip(),
        paragraph[start:end],
        paragraph[end:].strip(),
    ]


def split_paragraphs(markup: str) -> list[str]:
    """
    Split markup into trimmed paragraph units.

    Closing tags are used instead of opening ones because some paste sources
    leave the last paragraph unwrapped. A unit holding an inline quote is cut
    into (before, quote, after) so the quote is classified on its own.
    """
    paragraphs: list[str] = []
    for unit in _PARAGRAPH_BREAK.split(markup):
        unit = unit.strip()
        if QUOTE_OPEN in unit or "</blockquote" in unit:
            paragraphs.extend(_split_quote(unit))
        else:
            paragraphs.append(unit)
    return paragraphs


def clean_paragraph(paragraph: str) -> str:
    """Strip block wrappers and stray whitespace characters from a unit."""
    cleaned = _LEADING_BLOCK.sub("", paragraph, count=1)
    # Block tags cannot live inside a text field
    cleaned = _BLOCK_TAG.sub("", cleaned)
    cleaned = _SEPARATORS.sub("", cleaned)
    cleaned = _TABS.sub(" ", cleaned)
    cleaned = _NBSP.sub(" ", cleaned)
    # Newlines between a sentence end and a capital (or digit) are real breaks,
    # any other newline was inserted by the paste source
    cleaned = _SENTENCE_BREAK.sub("<br>", cleaned)
    cleaned = cleaned.replace("\n", " ")
    return cleaned.strip()


# --- Rules ---


def compile_rule(config: PasteRuleConfig | Mapping[str, Any]) -> PasteRule:
    """Compile one paste rule into an anchored matcher."""
    if not isinstance(config, PasteRuleConfig):
        try:
            config = PasteRuleConfig.model_validate(config)
        except ValidationError as e:
            raise PasteRuleConfigError(f"Invalid paste rule: {e}") from e

    if not config.match:
        raise PasteRuleConfigError(f"Paste rule for '{config.component}' needs a pattern")

    source = config.match
    if config.match_link:
        # Also accept the pattern wrapped in a link; only the inner text is kept
        source = f"(?:<a(?:.*?)>)?{source}(?:</a>)?"

    try:
        pattern = re.compile(source)
    except re.error as e:
        raise PasteRuleConfigError(f"Invalid paste rule pattern {config.match!r}: {e}") from e

    return PasteRule(
        pattern=pattern,
        component=config.component,
        field=config.field,
        group=config.group,
        sanitize=config.sanitize,
        source=config.match,
    )


def compile_rules(
    configs: Iterable[PasteRuleConfig | Mapping[str, Any]],
) -> tuple[PasteRule, ...]:
    """Compile paste rules, keeping their order. Fails on the first bad rule."""
    return tuple(compile_rule(config) for config in configs)


# --- Matching ---


def truncate_preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    if len(text) <= length:
        return text
    return text[: length - len(PREVIEW_OMISSION)] + PREVIEW_OMISSION


def classify(text: str, rules: Sequence[PasteRule]) -> ComponentDescriptor:
    """Classify one cleaned paragraph. The first matching rule wins."""
    for rule in rules:
        value = rule.match(text)
        if value is None:
            continue

        matched: str | RunSequence = parse(value) if rule.sanitize else value
        return ComponentDescriptor(
            component=rule.component,
            field=rule.field,
            value=matched,
            sanitize=rule.sanitize,
            group=rule.group,
        )

    preview = truncate_preview(text)
    logger.warning("No paste rule matched %r", preview)
    raise NoMatchingRuleError(text, preview)


def has_words(value: str | RunSequence | None) -> bool:
    """True when a value holds more than whitespace or a lone closing tag."""
    if isinstance(value, RunSequence):
        value = value.text
    if not isinstance(value, str):
        return False
    return bool(re.search(r"\S", value)) and not _CLOSING_TAG_ONLY.fullmatch(value)


def match_components(
    paragraphs: Iterable[str],
    rules: Sequence[PasteRule],
) -> list[ComponentDescriptor]:
    """
    Classify paragraph units into component descriptors.

    Raises:
        NoMatchingRuleError: If any non-empty unit matches no rule. The whole
            batch fails; nothing is returned for the units before it.
    """
    components: list[ComponentDescriptor] = []
    for paragraph in paragraphs:
        text = clean_paragraph(paragraph)
        if not text:
            continue
        descriptor = classify(text, rules)
        if has_words(descriptor.value):
            components.append(descriptor)
    return components
