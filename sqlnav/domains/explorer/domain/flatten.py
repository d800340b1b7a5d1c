"""Flatten a schema tree into the rows currently visible on screen."""

from __future__ import annotations

from collections.abc import Iterator, Set
from dataclasses import dataclass

from .tree import SchemaTree, TreeNode


@dataclass(frozen=True)
class VisibleRow:
    """A visible node with its position in the flattened view."""

    node: TreeNode
    index: int
    depth: int


def _descends(node: TreeNode, collapsed: Set[int]) -> bool:
    return not node.is_leaf and node.is_loaded and node.id not in collapsed


def _walk(tree: SchemaTree, start: list[int], collapsed: Set[int], first_index: int) -> Iterator[VisibleRow]:
    stack = list(reversed(start))
    index = first_index
    while stack:
        node = tree.node(stack.pop())
        yield VisibleRow(node=node, index=index, depth=node.depth)
        index += 1
        if _descends(node, collapsed):
            stack.extend(reversed(node.children))


def iter_visible(tree: SchemaTree | None, collapsed: Set[int]) -> Iterator[VisibleRow]:
    """Yield visible rows in depth-first pre-order.

    A collapsed node is yielded itself but its subtree is never visited, so
    the cost is proportional to the number of visible rows. Nodes whose
    children have not been loaded yet behave like collapsed ones.
    """
    if tree is None or tree.is_empty:
        return iter(())
    return _walk(tree, tree.root.children, collapsed, 0)


def iter_subtree_visible(
    tree: SchemaTree, collapsed: Set[int], node_id: int, first_index: int = 0
) -> Iterator[VisibleRow]:
    """Yield the visible descendants of ``node_id``, ignoring its own collapse state."""
    node = tree.node(node_id)
    if node.is_leaf or not node.is_loaded:
        return iter(())
    return _walk(tree, node.children, collapsed, first_index)


def flatten(tree: SchemaTree | None, collapsed: Set[int]) -> list[VisibleRow]:
    return list(iter_visible(tree, collapsed))
