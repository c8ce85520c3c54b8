"""
Editor component - Merge, split, create and paste transitions for wysiwyg fields.
"""

from .component import BULLET, LINE_BREAK, FieldEditor, run
from .models import (
    Caret,
    DeleteKeyInput,
    EditorConfigError,
    EditorError,
    EnterKeyInput,
    FieldHandle,
    PasteInput,
    TabKeyInput,
    Transition,
    TransitionOutput,
)
from .ports import EditServicePort, FocusPort, ProgressPort, RenderPort

__all__ = [
    # Entry point
    "run",
    "FieldEditor",
    # Input models
    "DeleteKeyInput",
    "EnterKeyInput",
    "PasteInput",
    "TabKeyInput",
    # Output models
    "EditorError",
    "Transition",
    "TransitionOutput",
    # Field state
    "Caret",
    "FieldHandle",
    # Errors
    "EditorConfigError",
    # Constants
    "BULLET",
    "LINE_BREAK",
    # Ports
    "EditServicePort",
    "FocusPort",
    "ProgressPort",
    "RenderPort",
]
