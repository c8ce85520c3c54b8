"""
Navigation component - Locate the current entry, its parent, and its previous sibling.

Lookups are recomputed on every call. The tree can change between two steps
of the same edit, so nothing here is cached.
"""

from __future__ import annotations

import logging

from src.domain.references import REFERENCE_PROPERTY, get_component_name

from .models import NavTarget, NodePredicate, TreeNode
from .ports import EntryDataPort, TreeViewPort

logger = logging.getLogger(__name__)


def find_closest(node: TreeNode | None, predicate: NodePredicate) -> TreeNode | None:
    """Nearest node (starting with node itself) walking up that satisfies predicate."""
    while node is not None:
        if predicate(node):
            return node
        node = node.parent
    return None


def find_first(node: TreeNode, predicate: NodePredicate) -> TreeNode | None:
    """First descendant (or node itself) in document order that satisfies predicate."""
    for candidate in node.walk():
        if predicate(candidate):
            return candidate
    return None


def _is_entry(node: TreeNode) -> bool:
    return node.ref is not None


def _is_list(node: TreeNode) -> bool:
    return node.list_field is not None


def get_current(ref: str, field: str, view: TreeViewPort | None = None) -> NavTarget:
    """Describe the entry that owns the field being edited."""
    node = view.find_node(ref) if view is not None else None
    return NavTarget(field=field, ref=ref, name=get_component_name(ref) or "", node=node)


def get_parent(current: NavTarget, view: TreeViewPort) -> NavTarget | None:
    """
    Find the nearest ancestor entry of current and the list field holding it.

    Returns None for the root entry or for entries that are not rendered.
    """
    node = current.node or view.find_node(current.ref)
    if node is None:
        return None

    parent_node = find_closest(node.parent, _is_entry)
    list_node = find_closest(node.parent, _is_list)
    if parent_node is None or list_node is None or parent_node.ref is None:
        return None

    return NavTarget(
        field=list_node.list_field or "",
        ref=parent_node.ref,
        name=get_component_name(parent_node.ref) or "",
        node=parent_node,
    )


async def get_previous(
    current: NavTarget,
    parent: NavTarget,
    data: EntryDataPort,
) -> NavTarget | None:
    """
    Find the nearest preceding sibling with the same component name.

    The parent's list is read fresh from persistence, not from the view.
    """
    parent_data = await data.get_entry_data_only(parent.ref)
    items = parent_data.get(parent.field) or []
    refs = [item.get(REFERENCE_PROPERTY) for item in items if isinstance(item, dict)]

    if current.ref not in refs:
        logger.debug("Entry %s not found in %s.%s", current.ref, parent.ref, parent.field)
        return None

    index = refs.index(current.ref)
    for ref in reversed(refs[:index]):
        if ref and get_component_name(ref) == current.name:
            return NavTarget(field=current.field, ref=ref, name=current.name)

    return None
