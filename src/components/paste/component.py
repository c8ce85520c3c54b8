"""
Paste component - Decompose pasted rich text into component descriptors.

Rules are evaluated in order and the first whole-string match wins. A
paragraph that no rule matches fails the whole paste; the output then holds
no components and a single error naming a short preview of the text.
"""

from __future__ import annotations

from ._impl import match_components, pre_clean, split_paragraphs
from .models import (
    ClassifyInput,
    ClassifyOutput,
    NoMatchingRuleError,
    PasteError,
    SplitParagraphsInput,
    SplitParagraphsOutput,
)


def run_split(inp: SplitParagraphsInput) -> SplitParagraphsOutput:
    """
    Split pasted markup into paragraph units.

    Args:
        inp: Input containing the raw markup.

    Returns:
        SplitParagraphsOutput with units in document order.
    """
    return SplitParagraphsOutput(paragraphs=split_paragraphs(pre_clean(inp.markup)))


def run_classify(inp: ClassifyInput) -> ClassifyOutput:
    """
    Classify pasted markup into component descriptors.

    Args:
        inp: Input containing the raw markup and compiled rules.

    Returns:
        ClassifyOutput with descriptors, or an error if a paragraph matched no rule.
    """
    paragraphs = split_paragraphs(pre_clean(inp.markup))

    try:
        components = match_components(paragraphs, inp.rules)
    except NoMatchingRuleError as e:
        return ClassifyOutput(
            components=[],
            errors=[
                PasteError(
                    code="no_matching_rule",
                    message=f"Error pasting text: {e}",
                    preview=e.preview,
                )
            ],
            success=False,
        )

    return ClassifyOutput(components=components, errors=[], success=True)
