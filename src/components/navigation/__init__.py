"""
Navigation component - Current entry, parent entry and previous sibling lookups.
"""

from .component import (
    find_closest,
    find_first,
    get_current,
    get_parent,
    get_previous,
)
from .models import NavTarget, NodePredicate, TreeNode
from .ports import EntryDataPort, TreeViewPort

__all__ = [
    # Lookups
    "get_current",
    "get_parent",
    "get_previous",
    "find_closest",
    "find_first",
    # Models
    "NavTarget",
    "NodePredicate",
    "TreeNode",
    # Ports
    "EntryDataPort",
    "TreeViewPort",
]
