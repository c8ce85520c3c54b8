"""
In-memory view, focus and progress services.

The renderer mirrors the document store as a TreeNode view; the focus service
tracks which field is being edited and persists it on unfocus.
"""

from __future__ import annotations

import logging

from src.components.editor import Caret, FieldHandle
from src.components.navigation import TreeNode

from .memory_document import InMemoryDocumentStore

logger = logging.getLogger(__name__)


class InMemoryRenderer:
    """Implements RenderPort by rebuilding the view from the store."""

    def __init__(self, store: InMemoryDocumentStore) -> None:
        self.store = store
        self.reloads: list[str] = []
        self._nodes: dict[str, TreeNode] = {}
        self.rebuild()

    def rebuild(self) -> None:
        self._nodes = {}
        for entry in self.store.roots():
            self._build(entry.ref, parent=None)

    def _build(self, ref: str, parent: TreeNode | None) -> TreeNode:
        node = TreeNode(ref=ref)
        if parent is not None:
            parent.append(node)
        self._nodes[ref] = node

        entry = self.store.get(ref)
        for field in self.store.list_fields(ref):
            list_node = node.append(TreeNode(list_field=field))
            for child_ref in entry.child_refs(field):
                if child_ref in self.store:
                    self._build(child_ref, parent=list_node)
        return node

    def find_node(self, ref: str) -> TreeNode | None:
        return self._nodes.get(ref)

    async def reload_entry(self, ref: str, markup: str | None = None) -> None:
        self.reloads.append(ref)
        self.rebuild()
        logger.debug("Reloaded %s", ref)

    async def attach_handlers(self, markup: str) -> None:
        self.rebuild()


class InMemoryFocus:
    """Implements FocusPort. One field is focused at a time."""

    def __init__(self, store: InMemoryDocumentStore) -> None:
        self.store = store
        self.current: FieldHandle | None = None
        self._carets: dict[tuple[str, str], Caret] = {}

    def track(self, handle: FieldHandle, caret: Caret | None = None) -> FieldHandle:
        """Make an already open field the focused one."""
        self.current = handle
        if caret is not None:
            self.set_caret(handle, caret)
        return handle

    async def focus(self, ref: str, path: str) -> FieldHandle:
        await self.unfocus()

        field = self.store.resolve_field(ref, path)
        data = await self.store.get_entry_data_only(ref)
        value = data.get(field)
        handle = FieldHandle(ref=ref, field=field, value=value if isinstance(value, str) else "")

        self.current = handle
        self.set_caret(handle, Caret.at(0))
        logger.debug("Focused %s.%s", ref, field)
        return handle

    async def unfocus(self) -> None:
        handle, self.current = self.current, None
        if handle is None or handle.ref not in self.store:
            return

        data = await self.store.get_entry_data_only(handle.ref)
        if data.get(handle.field, "") != handle.value:
            await self.store.save_field(handle.ref, {handle.field: handle.value})

    def get_caret(self, handle: FieldHandle) -> Caret:
        caret = self._carets.get((handle.ref, handle.field))
        if caret is None:
            return Caret.at(len(handle.text))
        length = len(handle.text)
        return Caret(start=min(caret.start, length), end=min(caret.end, length))

    def set_caret(self, handle: FieldHandle, caret: Caret) -> None:
        self._carets[(handle.ref, handle.field)] = caret


class LoggingProgress:
    """Implements ProgressPort by logging messages and keeping them for display."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def open(self, status: str, message: str) -> None:
        self.messages.append((status, message))
        if status == "error":
            logger.error(message)
        else:
            logger.info(message)
