"""
Editor component port definitions.

The document tree is only ever changed through EditServicePort.
"""

from __future__ import annotations

from typing import Any, Protocol

from src.components.navigation import TreeNode

from .models import Caret, FieldHandle


class EditServicePort(Protocol):
    """Port for reading and writing content entries."""

    async def get_entry_data(self, ref: str) -> dict[str, Any]:
        """Get entry data with field schemas (each field as {"value", "_schema"})."""
        ...

    async def get_entry_data_only(self, ref: str) -> dict[str, Any]:
        """Get plain entry data."""
        ...

    async def create_entry(self, component: str, data: dict[str, Any]) -> str:
        """Create an entry and return its new reference."""
        ...

    async def save_field(self, ref: str, data: dict[str, Any]) -> dict[str, Any]:
        """Save entry data (plain or augmented) and return the saved data."""
        ...

    async def remove_from_parent_list(self, ref: str, parent_field: str, parent_ref: str) -> str:
        """Remove an entry from its parent's list. Returns the parent's new markup."""
        ...

    async def add_to_parent_list(
        self,
        ref: str,
        parent_field: str,
        parent_ref: str,
        prev_ref: str | None = None,
    ) -> str:
        """Insert an entry after prev_ref (or at the end). Returns its markup."""
        ...

    async def add_multiple_to_parent_list(
        self,
        refs: list[str],
        parent_field: str,
        parent_ref: str,
        prev_ref: str | None = None,
        insert_index: int | None = None,
    ) -> str:
        """
        Insert entries in order. insert_index wins over prev_ref; with neither
        they are appended. Returns the parent's new markup.
        """
        ...


class RenderPort(Protocol):
    """Port for re-rendering entries and locating them in the view."""

    async def reload_entry(self, ref: str, markup: str | None = None) -> None:
        """Re-render an entry, from markup if given."""
        ...

    async def attach_handlers(self, markup: str) -> None:
        """Attach editing handlers to freshly inserted markup."""
        ...

    def find_node(self, ref: str) -> TreeNode | None:
        """Get the view node rendering an entry."""
        ...


class FocusPort(Protocol):
    """Port for focus and caret control."""

    async def focus(self, ref: str, path: str) -> FieldHandle:
        """Focus a field (unfocusing any other) and return its handle."""
        ...

    async def unfocus(self) -> None:
        """Unfocus the current field, persisting its value."""
        ...

    def get_caret(self, handle: FieldHandle) -> Caret:
        """Get the caret of a field."""
        ...

    def set_caret(self, handle: FieldHandle, caret: Caret) -> None:
        """Move the caret of a field."""
        ...


class ProgressPort(Protocol):
    """Port for user-visible status messages."""

    def open(self, status: str, message: str) -> None:
        """Show a message ("error", "info", ...)."""
        ...
