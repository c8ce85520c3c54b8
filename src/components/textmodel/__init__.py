"""
Textmodel component - Styled text runs for wysiwyg field values.

Invariants:
- I1: Runs cover the text with no gaps or overlaps
- I2: parse(serialize(seq)) reproduces seq
- I3: Adjacent runs with identical style are merged
- I4: Malformed markup never raises
"""

from ._impl import (
    DEFAULT_SAME_AS,
    concat,
    get_same_as,
    is_safe_url,
    normalize_markup,
    parse,
    reset_same_as,
    serialize,
    split,
    strip_tags,
    update_same_as,
)
from .models import MARK_ORDER, RunSequence, TextRun

__all__ = [
    # Models
    "RunSequence",
    "TextRun",
    "MARK_ORDER",
    # Operations
    "parse",
    "split",
    "serialize",
    "concat",
    "normalize_markup",
    "strip_tags",
    "is_safe_url",
    # Style table
    "DEFAULT_SAME_AS",
    "get_same_as",
    "update_same_as",
    "reset_same_as",
]
