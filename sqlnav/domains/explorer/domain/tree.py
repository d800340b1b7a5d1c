"""Arena-backed schema tree.

Nodes live in a flat mapping keyed by an integer id assigned at insertion.
Parents and children refer to each other by id, so the structure is a plain
tree with no shared references. Ids are never reused within one tree, which
makes them safe keys for the collapse set and the selection.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum

from .tree_nodes import SORTED_KINDS, NodeData, is_leaf_kind

ROOT_ID = 0

NodePath = tuple[str, ...]


class LoadState(Enum):
    """Child population state of a node."""

    LOADED = "loaded"
    UNLOADED = "unloaded"
    LOADING = "loading"
    FAILED = "failed"


@dataclass(frozen=True)
class NodeSpec:
    """Descriptor used to build a subtree.

    ``children=None`` marks a branch whose children are fetched lazily on
    first expansion.
    """

    data: NodeData
    children: tuple[NodeSpec, ...] | None = ()

    @classmethod
    def lazy(cls, data: NodeData) -> NodeSpec:
        return cls(data, None)

    @classmethod
    def branch(cls, data: NodeData, children: Iterable[NodeSpec]) -> NodeSpec:
        return cls(data, tuple(children))


@dataclass(eq=False)
class TreeNode:
    """One entry of the arena."""

    id: int
    data: NodeData | None
    parent: int | None
    depth: int
    is_leaf: bool
    children: list[int] = field(default_factory=list)
    load_state: LoadState = LoadState.LOADED
    error: str | None = None
    lazy: bool = False

    @property
    def kind(self) -> str:
        return self.data.get_node_kind() if self.data is not None else "root"

    @property
    def label(self) -> str:
        return self.data.get_label_text() if self.data is not None else ""

    @property
    def path_part(self) -> str:
        return self.data.get_node_path_part() if self.data is not None else ""

    @property
    def is_loaded(self) -> bool:
        return self.load_state is LoadState.LOADED


def order_specs(specs: Iterable[NodeSpec]) -> list[NodeSpec]:
    """Sort databases, schemas and tables by name, keep everything else in place.

    Sortable specs are reordered among the slots they already occupy so that a
    mixed sibling list (columns followed by folders, say) keeps its layout.
    Nested children are ordered the same way. The tree itself keeps insertion
    order; loaders call this when they produce specs.
    """
    ordered = [
        spec if not spec.children else NodeSpec(spec.data, tuple(order_specs(spec.children)))
        for spec in specs
    ]
    slots = [i for i, spec in enumerate(ordered) if spec.data.get_node_kind() in SORTED_KINDS]
    by_name = sorted(
        (ordered[i] for i in slots),
        key=lambda spec: (spec.data.get_label_text().lower(), spec.data.get_label_text()),
    )
    for slot, spec in zip(slots, by_name):
        ordered[slot] = spec
    return ordered


class SchemaTree:
    """Hierarchy of schema objects under an invisible container root."""

    def __init__(self) -> None:
        self._nodes: dict[int, TreeNode] = {
            ROOT_ID: TreeNode(id=ROOT_ID, data=None, parent=None, depth=-1, is_leaf=False)
        }
        self._next_id = ROOT_ID + 1

    @classmethod
    def from_specs(cls, specs: Iterable[NodeSpec]) -> SchemaTree:
        """Build a tree whose top-level entries are ``specs``."""
        tree = cls()
        tree.add_children(ROOT_ID, specs)
        return tree

    @property
    def root(self) -> TreeNode:
        return self._nodes[ROOT_ID]

    @property
    def is_empty(self) -> bool:
        return not self.root.children

    def __len__(self) -> int:
        return len(self._nodes) - 1

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes and node_id != ROOT_ID

    def node(self, node_id: int) -> TreeNode:
        return self._nodes[node_id]

    def get(self, node_id: int | None) -> TreeNode | None:
        if node_id is None or node_id == ROOT_ID:
            return None
        return self._nodes.get(node_id)

    def add(self, parent_id: int, spec: NodeSpec) -> int:
        """Add ``spec`` and its descendants under ``parent_id``. Returns the new id."""
        parent = self._nodes[parent_id]
        if parent.is_leaf:
            raise ValueError(f"cannot add children to leaf node {parent_id}")
        kind = spec.data.get_node_kind()
        leaf = is_leaf_kind(kind)
        node = TreeNode(
            id=self._next_id,
            data=spec.data,
            parent=parent_id,
            depth=parent.depth + 1,
            is_leaf=leaf,
        )
        self._next_id += 1
        self._nodes[node.id] = node
        parent.children.append(node.id)
        if leaf:
            return node.id
        if spec.children is None:
            node.lazy = True
            node.load_state = LoadState.UNLOADED
        else:
            self.add_children(node.id, spec.children)
        return node.id

    def add_children(self, parent_id: int, specs: Iterable[NodeSpec]) -> list[int]:
        return [self.add(parent_id, spec) for spec in specs]

    def populate(self, node_id: int, specs: Sequence[NodeSpec]) -> None:
        """Attach lazily loaded children and mark the node loaded."""
        self.reset_children(node_id)
        node = self._nodes[node_id]
        self.add_children(node_id, specs)
        node.load_state = LoadState.LOADED
        node.error = None

    def reset_children(self, node_id: int) -> None:
        """Drop cached children; the node goes back to needing a load."""
        node = self._nodes[node_id]
        for child_id in node.children:
            for descendant in list(self.iter_subtree(child_id)):
                del self._nodes[descendant]
        node.children = []
        if node_id != ROOT_ID:
            node.load_state = LoadState.UNLOADED

    def mark_loading(self, node_id: int) -> None:
        node = self._nodes[node_id]
        node.load_state = LoadState.LOADING
        node.error = None

    def mark_failed(self, node_id: int, error: str) -> None:
        node = self._nodes[node_id]
        node.load_state = LoadState.FAILED
        node.error = error

    def mark_unloaded(self, node_id: int) -> None:
        self._nodes[node_id].load_state = LoadState.UNLOADED

    def iter_subtree(self, node_id: int) -> Iterator[int]:
        """Yield ``node_id`` and every loaded descendant, pre-order."""
        stack = [node_id]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(self._nodes[current].children))

    def ancestors(self, node_id: int) -> Iterator[TreeNode]:
        """Yield ancestors from the parent upward, excluding the container root."""
        parent_id = self._nodes[node_id].parent
        while parent_id is not None and parent_id != ROOT_ID:
            parent = self._nodes[parent_id]
            yield parent
            parent_id = parent.parent

    def is_ancestor(self, ancestor_id: int, node_id: int) -> bool:
        return any(parent.id == ancestor_id for parent in self.ancestors(node_id))

    def path(self, node_id: int) -> NodePath:
        """Stable path of ``node_id``: kind-qualified names from the top level down."""
        node = self._nodes[node_id]
        parts = [node.path_part] + [parent.path_part for parent in self.ancestors(node_id)]
        return tuple(reversed(parts))

    def find_child(self, parent_id: int, path_part: str) -> int | None:
        for child_id in self._nodes[parent_id].children:
            if self._nodes[child_id].path_part == path_part:
                return child_id
        return None

    def resolve_path(self, path: NodePath) -> int | None:
        """Return the node at the deepest existing prefix of ``path``."""
        current = ROOT_ID
        for part in path:
            child = self.find_child(current, part)
            if child is None:
                break
            current = child
        return None if current == ROOT_ID else current

    def find_path(self, path: NodePath) -> int | None:
        """Return the node at exactly ``path``, if present."""
        node_id = self.resolve_path(path)
        if node_id is None or len(self.path(node_id)) != len(path):
            return None
        return node_id
