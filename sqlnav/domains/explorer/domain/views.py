"""Read-only snapshots handed to the display layer and to loaders."""

from __future__ import annotations

from dataclasses import dataclass

from .tree import NodePath, SchemaTree
from .tree_nodes import NodeData


@dataclass(frozen=True)
class NodeDescriptor:
    """Immutable description of one tree node.

    Safe to pass across threads and to keep after the tree is rebuilt.
    """

    node_id: int
    kind: str
    label: str
    data: NodeData
    path: NodePath
    depth: int

    @classmethod
    def from_tree(cls, tree: SchemaTree, node_id: int) -> NodeDescriptor:
        node = tree.node(node_id)
        if node.data is None:
            raise ValueError(f"node {node_id} is the container root")
        return cls(
            node_id=node.id,
            kind=node.kind,
            label=node.label,
            data=node.data,
            path=tree.path(node_id),
            depth=node.depth,
        )


@dataclass(frozen=True)
class RowView:
    """One rendered line of the explorer."""

    node_id: int
    depth: int
    label: str
    kind: str
    data: NodeData
    is_selected: bool
    is_loading: bool
    is_expanded: bool
    is_leaf: bool
    error: str | None = None
