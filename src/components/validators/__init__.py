"""
Validators component - Content checks over document entries.
"""

from ._impl import TK_INFO, find_tks, preview_text
from .component import run, run_tk_check
from .models import (
    Severity,
    TkCheckInput,
    TkCheckOutput,
    ValidationIssue,
    ValidatorInfo,
)

__all__ = [
    # Entry points
    "run",
    "run_tk_check",
    # Input models
    "TkCheckInput",
    # Output models
    "TkCheckOutput",
    "ValidationIssue",
    "ValidatorInfo",
    "Severity",
    # Functions
    "find_tks",
    "preview_text",
    "TK_INFO",
]
