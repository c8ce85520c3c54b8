"""
Navigation component models.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field


@dataclass(eq=False)
class TreeNode:
    """
    A node of the rendered document view.

    Entry nodes carry the reference of the content entry they render; list
    nodes carry the name of the parent field whose child entries they hold.
    Every node keeps a back-reference to its parent.
    """

    ref: str | None = None
    list_field: str | None = None
    parent: TreeNode | None = field(default=None, repr=False)
    children: list[TreeNode] = field(default_factory=list, repr=False)

    def append(self, child: TreeNode) -> TreeNode:
        child.parent = self
        self.children.append(child)
        return child

    def walk(self) -> Iterator[TreeNode]:
        """Depth-first, document order, self first."""
        yield self
        for child in self.children:
            yield from child.walk()

    @property
    def is_entry(self) -> bool:
        return self.ref is not None


NodePredicate = Callable[[TreeNode], bool]


@dataclass(frozen=True)
class NavTarget:
    """A located content entry and the field of interest on it."""

    field: str
    ref: str
    name: str
    node: TreeNode | None = field(default=None, compare=False, repr=False)
