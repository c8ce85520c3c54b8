"""
TK check - find "TK" placeholders left in entry text.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from src.components.textmodel import strip_tags
from src.domain.references import get_component_name, label

from .models import ValidationIssue, ValidatorInfo

logger = logging.getLogger(__name__)

PLACEHOLDER = "tk"

# No ellipsis when the placeholder is this close to either end
PREVIEW_CUT = 20
PREVIEW_OMISSION = "\u2026"

TK_INFO = ValidatorInfo(
    label="TKs",
    description="There are TKs in your article. Make sure they're intentional:",
    type="warning",
)


def preview_text(text: str, index: int) -> str:
    """Cut text to the placeholder at index and its surroundings."""
    preview = text
    end_index = index

    if index > PREVIEW_CUT:
        preview = PREVIEW_OMISSION + text[index - PREVIEW_CUT :]
        end_index = PREVIEW_CUT + 1

    if len(preview) > end_index + PREVIEW_CUT:
        preview = preview[: end_index + PREVIEW_CUT + 2] + PREVIEW_OMISSION

    return preview


def find_tks(entries: Mapping[str, Mapping[str, Any]]) -> list[ValidationIssue]:
    """Check every string field of every entry, case-insensitively."""
    issues: list[ValidationIssue] = []
    for ref, data in entries.items():
        for field, value in data.items():
            if not isinstance(value, str) or PLACEHOLDER not in value.lower():
                continue

            text = strip_tags(value)
            index = text.lower().find(PLACEHOLDER)
            if index < 0:
                # Only the markup held the placeholder
                continue

            issues.append(
                ValidationIssue(
                    ref=ref,
                    field=field,
                    location=label(get_component_name(ref) or ""),
                    preview=preview_text(text, index),
                )
            )

    logger.debug("TK check found %d issues in %d entries", len(issues), len(entries))
    return issues
