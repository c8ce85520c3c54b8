"""
Paste component - Paragraph splitting and paste rule classification.
"""

from ._impl import (
    classify,
    clean_paragraph,
    compile_rule,
    compile_rules,
    has_words,
    match_components,
    pre_clean,
    split_paragraphs,
    truncate_preview,
)
from .component import run_classify, run_split
from .models import (
    ClassifyInput,
    ClassifyOutput,
    ComponentDescriptor,
    NoMatchingRuleError,
    PasteError,
    PasteRule,
    PasteRuleConfigError,
    SplitParagraphsInput,
    SplitParagraphsOutput,
)

__all__ = [
    # Entry points
    "run_classify",
    "run_split",
    # Input models
    "ClassifyInput",
    "SplitParagraphsInput",
    # Output models
    "ClassifyOutput",
    "SplitParagraphsOutput",
    "PasteError",
    # Rules and descriptors
    "ComponentDescriptor",
    "PasteRule",
    # Errors
    "NoMatchingRuleError",
    "PasteRuleConfigError",
    # Functions
    "classify",
    "clean_paragraph",
    "compile_rule",
    "compile_rules",
    "has_words",
    "match_components",
    "pre_clean",
    "split_paragraphs",
    "truncate_preview",
]
