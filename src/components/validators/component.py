"""
Validators component - Content checks run over document entries.
"""

from __future__ import annotations

from ._impl import TK_INFO, find_tks
from .models import TkCheckInput, TkCheckOutput


def run_tk_check(inp: TkCheckInput) -> TkCheckOutput:
    """
    Find TK placeholders in entry text.

    Args:
        inp: Input containing entry data keyed by reference.

    Returns:
        TkCheckOutput with one issue per field holding a TK.
    """
    return TkCheckOutput(info=TK_INFO, issues=find_tks(inp.entries))


def run(inp: TkCheckInput) -> TkCheckOutput:
    """Main entry point for the validators component."""
    if isinstance(inp, TkCheckInput):
        return run_tk_check(inp)
    raise ValueError(f"Unknown input type: {type(inp)}")
