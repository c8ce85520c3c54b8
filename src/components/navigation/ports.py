"""
Navigation component port definitions.
"""

from __future__ import annotations

from typing import Any, Protocol

from .models import TreeNode


class EntryDataPort(Protocol):
    """Port for reading authoritative entry data."""

    async def get_entry_data_only(self, ref: str) -> dict[str, Any]:
        """Get plain entry data (no schema augmentation)."""
        ...


class TreeViewPort(Protocol):
    """Port for locating entries in the rendered document view."""

    def find_node(self, ref: str) -> TreeNode | None:
        """Get the view node rendering an entry, if it is rendered."""
        ...
