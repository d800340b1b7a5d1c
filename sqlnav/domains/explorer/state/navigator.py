"""Selection, collapse and lazy-load state machine for the schema explorer.

The navigator owns the tree, the collapse set and the selection. Every
mutation leaves the selection on a visible node (or ``None`` when the tree is
empty). The list of visible node ids is cached; collapsing or expanding a
visible node splices the cache instead of re-flattening the tree.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from sqlnav.domains.explorer.app.loader import SchemaLoader
from sqlnav.domains.explorer.domain.errors import ExplorerError, LoadFailed
from sqlnav.domains.explorer.domain.flatten import iter_subtree_visible, iter_visible
from sqlnav.domains.explorer.domain.tree import (
    ROOT_ID,
    LoadState,
    NodePath,
    NodeSpec,
    SchemaTree,
    TreeNode,
)
from sqlnav.domains.explorer.domain.tree_nodes import NodeData
from sqlnav.domains.explorer.domain.views import NodeDescriptor, RowView

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True, eq=False)
class LoadRequest:
    """An outstanding lazy load.

    Compared by identity: a request is current only while it is the one the
    navigator holds for its node in the same generation.
    """

    node_id: int
    generation: int
    node: NodeDescriptor


@dataclass(frozen=True)
class SelectionRepaired:
    """Selection was moved because its node became hidden or disappeared."""

    previous: int | None
    current: int | None
    reason: str  # "hidden", "removed", "empty", "rebuild"


class TreeNavigator:
    """Cursor and visibility state over a :class:`SchemaTree`."""

    def __init__(
        self,
        tree: SchemaTree | None = None,
        *,
        loader: SchemaLoader | None = None,
        collapse_new_branches: bool = False,
        on_selection_repaired: Callable[[SelectionRepaired], None] | None = None,
    ):
        self._loader = loader
        self.collapse_new_branches = collapse_new_branches
        self.on_selection_repaired = on_selection_repaired
        self._tree: SchemaTree | None = None
        self._collapsed: set[int] = set()
        self._selected: int | None = None
        self._selected_path: NodePath = ()
        self._rows: list[int] | None = None
        self._positions: dict[int, int] | None = None
        self._pending: dict[int, LoadRequest] = {}
        self._generation = 0
        # Branch state carried over a rebuild until re-opened lazy loads land.
        self._reopen: set[NodePath] = set()
        self._recollapse: set[NodePath] = set()
        self._restoring: set[int] = set()
        self._restore_queue: list[LoadRequest] = []
        self._restore_selection: NodePath = ()
        self._restore_anchor: int | None = None
        self.scroll_offset = 0
        self._adopt_tree(tree, collapsed_paths=set(), known_paths=set())
        self._set_selected(self._first_visible())

    # ------------------------------------------------------------------ state

    @property
    def tree(self) -> SchemaTree | None:
        return self._tree

    @property
    def loader(self) -> SchemaLoader | None:
        return self._loader

    @loader.setter
    def loader(self, loader: SchemaLoader | None) -> None:
        self._loader = loader

    @property
    def is_empty(self) -> bool:
        return self._tree is None or self._tree.is_empty

    @property
    def collapsed(self) -> frozenset[int]:
        return frozenset(self._collapsed)

    @property
    def selected_id(self) -> int | None:
        return self._selected

    @property
    def selected_index(self) -> int | None:
        if self._selected is None:
            return None
        return self._position_map().get(self._selected)

    @property
    def row_count(self) -> int:
        return len(self._visible_ids())

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> dict[int, LoadRequest]:
        return dict(self._pending)

    def is_loading(self, node_id: int) -> bool:
        return node_id in self._pending

    def is_expanded(self, node_id: int) -> bool:
        node = self._get(node_id)
        if node is None or node.is_leaf or node.id in self._collapsed:
            return False
        return node.load_state in (LoadState.LOADED, LoadState.LOADING)

    def is_visible(self, node_id: int) -> bool:
        if self._tree is None or node_id not in self._tree:
            return False
        return all(self._descends(parent) for parent in self._tree.ancestors(node_id))

    def index_of(self, node_id: int) -> int | None:
        return self._position_map().get(node_id)

    # ---------------------------------------------------------------- outbound

    def visible_rows(self, start: int = 0, stop: int | None = None) -> list[RowView]:
        """Rows for the display layer, in order."""
        tree = self._tree
        if tree is None:
            return []
        nodes = (tree.node(node_id) for node_id in self._visible_ids()[start:stop])
        return [self._row_view(node, node.data) for node in nodes if node.data is not None]

    def viewport(self, height: int) -> list[RowView]:
        """Rows that fit in ``height`` lines, scrolled to keep the selection in view."""
        offset = self.ensure_selection_visible(height)
        return self.visible_rows(offset, offset + max(0, height))

    def ensure_selection_visible(self, height: int) -> int:
        """Adjust ``scroll_offset`` so the selected row lies inside the viewport."""
        total = self.row_count
        if height <= 0:
            self.scroll_offset = 0
            return 0
        offset = self.scroll_offset
        index = self.selected_index
        if index is not None:
            if index < offset:
                offset = index
            elif index >= offset + height:
                offset = index - height + 1
        offset = max(0, min(offset, max(0, total - height)))
        self.scroll_offset = offset
        return offset

    def selected_node(self) -> NodeDescriptor | None:
        if self._tree is None or self._selected is None:
            return None
        return NodeDescriptor.from_tree(self._tree, self._selected)

    # ---------------------------------------------------------------- movement

    def select_next(self) -> bool:
        return self._move(1)

    def select_previous(self) -> bool:
        return self._move(-1)

    def select_page_down(self, count: int = DEFAULT_PAGE_SIZE) -> bool:
        return self._move(max(1, count))

    def select_page_up(self, count: int = DEFAULT_PAGE_SIZE) -> bool:
        return self._move(-max(1, count))

    def select_first(self) -> bool:
        rows = self._visible_ids()
        if not rows or rows[0] == self._selected:
            return False
        self._set_selected(rows[0])
        return True

    def select_last(self) -> bool:
        rows = self._visible_ids()
        if not rows or rows[-1] == self._selected:
            return False
        self._set_selected(rows[-1])
        return True

    def select_index(self, index: int) -> bool:
        rows = self._visible_ids()
        if not 0 <= index < len(rows) or rows[index] == self._selected:
            return False
        self._set_selected(rows[index])
        return True

    def select_parent(self) -> bool:
        node = self._get(self._selected)
        if node is None or node.parent in (None, ROOT_ID):
            return False
        self._set_selected(node.parent)
        return True

    def select(self, node_id: int) -> bool:
        """Select ``node_id``, expanding collapsed ancestors to reveal it."""
        node = self._get(node_id)
        if node is None or self._tree is None:
            return False
        hidden = [parent.id for parent in self._tree.ancestors(node_id) if parent.id in self._collapsed]
        if hidden:
            self._collapsed.difference_update(hidden)
            self._invalidate()
        self._set_selected(node_id)
        return True

    # ------------------------------------------------------- expand / collapse

    def expand(self, node_id: int | None = None) -> LoadRequest | None:
        """Expand a node.

        Returns a :class:`LoadRequest` when the node's children must be
        fetched first; a second call while that load is in flight returns the
        same request. Leaves and unknown ids are ignored.
        """
        node = self._target(node_id)
        if node is None or node.is_leaf or self._tree is None:
            return None
        self._collapsed.discard(node.id)
        if node.load_state is LoadState.LOADING:
            return self._pending.get(node.id)
        if node.load_state in (LoadState.UNLOADED, LoadState.FAILED):
            request = LoadRequest(
                node_id=node.id,
                generation=self._generation,
                node=NodeDescriptor.from_tree(self._tree, node.id),
            )
            self._pending[node.id] = request
            self._tree.mark_loading(node.id)
            logger.debug(f"Loading children of {'/'.join(request.node.path)}")
            return request
        self._splice_in(node.id)
        return None

    def collapse(self, node_id: int | None = None) -> bool:
        """Collapse a non-leaf node; a selection inside it moves up to the node."""
        node = self._target(node_id)
        if node is None or node.is_leaf:
            return False
        cancelled = self._cancel(node.id)
        if node.id in self._collapsed:
            return cancelled
        self._splice_out(node.id)
        self._collapsed.add(node.id)
        self._repair_selection()
        return True

    def toggle(self, node_id: int | None = None) -> LoadRequest | None:
        node = self._target(node_id)
        if node is None:
            return None
        if self.is_expanded(node.id):
            self.collapse(node.id)
            return None
        return self.expand(node.id)

    def expand_or_select_child(self) -> LoadRequest | None:
        """Expand the selected node, or step into its first child if already open."""
        node = self._get(self._selected)
        if node is None or node.is_leaf:
            return None
        if not self.is_expanded(node.id):
            return self.expand(node.id)
        if node.children:
            self._set_selected(node.children[0])
        return None

    def collapse_or_select_parent(self) -> bool:
        """Collapse the selected node, or step out to its parent."""
        node = self._get(self._selected)
        if node is None:
            return False
        if self.is_expanded(node.id):
            return self.collapse(node.id)
        return self.select_parent()

    def collapse_all(self) -> None:
        """Collapse every branch of the tree."""
        if self._tree is None:
            return
        self.cancel_pending()
        for node_id in self._tree.iter_subtree(ROOT_ID):
            node = self._tree.node(node_id)
            if node_id != ROOT_ID and not node.is_leaf:
                self._collapsed.add(node_id)
        self._invalidate()
        self._repair_selection()

    # ---------------------------------------------------------------- loading

    def complete_load(self, request: LoadRequest, children: Sequence[NodeSpec]) -> bool:
        """Attach the result of ``request``. Stale results are discarded."""
        tree = self._tree
        if tree is None or not self._is_current(request):
            logger.debug(f"Discarding stale load result for {'/'.join(request.node.path)}")
            return False
        del self._pending[request.node_id]
        tree.populate(request.node_id, children)
        node = tree.node(request.node_id)
        for descendant in list(tree.iter_subtree(node.id))[1:]:
            if tree.node(descendant).is_leaf:
                continue
            path = tree.path(descendant)
            if path in self._recollapse:
                self._collapsed.add(descendant)
            elif path in self._reopen:
                self._reopen_branch(descendant)
            elif self.collapse_new_branches:
                self._collapsed.add(descendant)
        self._splice_in(request.node_id)
        logger.debug(f"Loaded {len(node.children)} children for {'/'.join(request.node.path)}")
        self._resume_selection()
        self._finish_restore(request.node_id)
        return True

    def fail_load(self, request: LoadRequest, cause: BaseException) -> LoadFailed | None:
        """Record a failed load. Returns the error, or ``None`` if the request was stale."""
        tree = self._tree
        if tree is None or not self._is_current(request):
            logger.debug(f"Discarding stale load failure for {'/'.join(request.node.path)}: {cause}")
            return None
        del self._pending[request.node_id]
        tree.mark_failed(request.node_id, str(cause))
        self._collapsed.add(request.node_id)
        logger.error(f"Failed to load children of {'/'.join(request.node.path)}: {cause}")
        self._finish_restore(request.node_id)
        return LoadFailed(request.node_id, cause, request.node.label)

    def load(self, request: LoadRequest) -> bool:
        """Run the configured loader for ``request`` on the calling thread.

        Raises:
            LoadFailed: the loader raised while the request was still current.
        """
        if self._loader is None:
            raise ExplorerError("No schema loader configured")
        try:
            children = self._loader.list_children(request.node)
        except Exception as error:
            failure = self.fail_load(request, error)
            if failure is not None:
                raise failure from error
            return False
        return self.complete_load(request, children)

    def expand_now(self, node_id: int | None = None) -> bool:
        """Expand a node, loading its children synchronously if needed."""
        request = self.expand(node_id)
        if request is None:
            return False
        return self.load(request)

    def reload(self, node_id: int | None = None) -> LoadRequest | None:
        """Drop a lazy branch's cached children and fetch them again.

        A node inside a loaded lazy branch reloads that branch. Nodes built
        from the schema itself have nothing to re-fetch and are ignored.
        """
        node = self._lazy_branch(self._target(node_id))
        if node is None or self._tree is None:
            return None
        subtree = list(self._tree.iter_subtree(node.id))
        for descendant in subtree:
            self._cancel(descendant)
        self._splice_out(node.id)
        self._collapsed.difference_update(subtree)
        self._tree.reset_children(node.id)
        self._repair_selection()
        return self.expand(node.id)

    def cancel_pending(self) -> None:
        """Forget every outstanding load; their results are discarded on arrival."""
        for node_id in list(self._pending):
            self._cancel(node_id)
        self._generation += 1
        self._clear_restore()

    def take_restore_requests(self) -> list[LoadRequest]:
        """Loads issued to re-open branches that were open before a rebuild.

        Filled by :meth:`rebuild` and by :meth:`complete_load` when a loaded
        branch contains nodes that were open; the caller runs them like any
        other load request.
        """
        requests = [request for request in self._restore_queue if self._is_current(request)]
        self._restore_queue = []
        return requests

    # ---------------------------------------------------------------- rebuild

    def rebuild(self, tree: SchemaTree | None) -> list[LoadRequest]:
        """Replace the tree, carrying selection and collapse state over by path.

        Lazy branches that were open come back unloaded; the returned requests
        re-open them. As they complete, the selection follows its old path
        down again unless the user has moved it in the meantime.
        """
        old = self._tree
        old_path = self._selected_path
        collapsed_paths: set[NodePath] = set()
        known_paths: set[NodePath] = set()
        open_paths: set[NodePath] = set()
        if old is not None:
            collapsed_paths = {old.path(node_id) for node_id in self._collapsed if node_id in old}
            branches = [
                node_id
                for node_id in old.iter_subtree(ROOT_ID)
                if node_id != ROOT_ID and not old.node(node_id).is_leaf
            ]
            open_paths = {old.path(node_id) for node_id in branches if self.is_expanded(node_id)}
            if self.collapse_new_branches:
                known_paths = {old.path(node_id) for node_id in branches}
        previous = self._selected
        self._pending.clear()
        self._clear_restore()
        self._generation += 1
        self._adopt_tree(tree, collapsed_paths=collapsed_paths, known_paths=known_paths)
        self._reopen = open_paths
        self._recollapse = collapsed_paths
        if tree is not None:
            for node_id in list(tree.iter_subtree(ROOT_ID)):
                node = tree.node(node_id)
                if node.lazy and tree.path(node_id) in open_paths:
                    self._reopen_branch(node_id)

        target = None
        exact = False
        if tree is not None and old_path:
            match = tree.resolve_path(old_path)
            if match is not None:
                exact = len(tree.path(match)) == len(old_path)
                target = self._nearest_visible(match)
                exact = exact and target == match
        if target is None:
            target = self._first_visible()
        self._selected = None
        self._set_selected(target)
        logger.info(f"Rebuilt schema tree ({len(tree) if tree is not None else 0} nodes)")
        if previous is not None and not exact:
            self._emit_repair(previous, target, "rebuild")
        if self._restoring:
            if not exact:
                self._restore_selection = old_path
                self._restore_anchor = target
        else:
            self._clear_restore()
        return self.take_restore_requests()

    # --------------------------------------------------------------- internal

    def _adopt_tree(
        self,
        tree: SchemaTree | None,
        *,
        collapsed_paths: set[NodePath],
        known_paths: set[NodePath],
    ) -> None:
        self._tree = tree
        self._collapsed = set()
        self._invalidate()
        if tree is None or (not collapsed_paths and not self.collapse_new_branches):
            return
        for node_id in tree.iter_subtree(ROOT_ID):
            if node_id == ROOT_ID or tree.node(node_id).is_leaf:
                continue
            path = tree.path(node_id)
            if path in collapsed_paths or (self.collapse_new_branches and path not in known_paths):
                self._collapsed.add(node_id)

    def _get(self, node_id: int | None) -> TreeNode | None:
        if self._tree is None:
            return None
        return self._tree.get(node_id)

    def _target(self, node_id: int | None) -> TreeNode | None:
        return self._get(self._selected if node_id is None else node_id)

    def _descends(self, node: TreeNode) -> bool:
        return not node.is_leaf and node.is_loaded and node.id not in self._collapsed

    def _cancel(self, node_id: int) -> bool:
        request = self._pending.pop(node_id, None)
        if request is None:
            return False
        if self._tree is not None and node_id in self._tree:
            self._tree.mark_unloaded(node_id)
        logger.debug(f"Cancelled load of {'/'.join(request.node.path)}")
        self._finish_restore(node_id)
        return True

    def _lazy_branch(self, node: TreeNode | None) -> TreeNode | None:
        """``node`` if its children come from the loader, else its nearest such ancestor."""
        if node is None or self._tree is None:
            return None
        if node.lazy:
            return node
        return next((parent for parent in self._tree.ancestors(node.id) if parent.lazy), None)

    def _reopen_branch(self, node_id: int) -> None:
        request = self.expand(node_id)
        if request is None:
            return
        self._restoring.add(node_id)
        self._restore_queue.append(request)

    def _resume_selection(self) -> None:
        """Follow the pre-rebuild selection path into newly loaded children."""
        tree = self._tree
        if tree is None or not self._restore_selection:
            return
        if self._selected != self._restore_anchor:
            self._restore_selection = ()
            return
        match = tree.resolve_path(self._restore_selection)
        if match is None:
            return
        target = self._nearest_visible(match)
        if target != self._selected:
            self._set_selected(target)
            logger.debug(f"Selection restored to {'/'.join(self._selected_path)}")
        self._restore_anchor = target
        if self._selected_path == self._restore_selection:
            self._restore_selection = ()

    def _finish_restore(self, node_id: int) -> None:
        self._restoring.discard(node_id)
        if not self._restoring:
            self._clear_restore()

    def _clear_restore(self) -> None:
        self._reopen = set()
        self._recollapse = set()
        self._restoring = set()
        self._restore_queue = []
        self._restore_selection = ()
        self._restore_anchor = None

    def _is_current(self, request: LoadRequest) -> bool:
        return (
            self._tree is not None
            and request.generation == self._generation
            and self._pending.get(request.node_id) is request
        )

    def _visible_ids(self) -> list[int]:
        if self._rows is None:
            self._rows = [row.node.id for row in iter_visible(self._tree, self._collapsed)]
            self._positions = None
        return self._rows

    def _position_map(self) -> dict[int, int]:
        if self._positions is None:
            self._positions = {node_id: i for i, node_id in enumerate(self._visible_ids())}
        return self._positions

    def _invalidate(self) -> None:
        self._rows = None
        self._positions = None

    def _splice_out(self, node_id: int) -> None:
        """Remove the rows below ``node_id`` that belong to its subtree."""
        if self._rows is None or self._tree is None:
            return
        start = self._position_map().get(node_id)
        if start is None:
            return
        depth = self._tree.node(node_id).depth
        end = start + 1
        while end < len(self._rows) and self._tree.node(self._rows[end]).depth > depth:
            end += 1
        if end > start + 1:
            del self._rows[start + 1 : end]
            self._positions = None

    def _splice_in(self, node_id: int) -> None:
        """Insert the visible descendants of a node that has just opened."""
        if self._rows is None or self._tree is None:
            return
        start = self._position_map().get(node_id)
        if start is None:
            return
        if start + 1 < len(self._rows) and self._tree.node(self._rows[start + 1]).parent == node_id:
            return
        added = [row.node.id for row in iter_subtree_visible(self._tree, self._collapsed, node_id)]
        if added:
            self._rows[start + 1 : start + 1] = added
            self._positions = None

    def _first_visible(self) -> int | None:
        rows = self._visible_ids()
        return rows[0] if rows else None

    def _nearest_visible(self, node_id: int) -> int:
        """The node itself if visible, else its outermost hidden-subtree root."""
        target = node_id
        if self._tree is None:
            return target
        for parent in self._tree.ancestors(node_id):
            if not self._descends(parent):
                target = parent.id
        return target

    def _set_selected(self, node_id: int | None) -> None:
        self._selected = node_id
        if node_id is None or self._tree is None:
            self._selected_path = ()
        else:
            self._selected_path = self._tree.path(node_id)

    def _move(self, delta: int) -> bool:
        rows = self._visible_ids()
        index = self.selected_index
        if index is None:
            return False
        target = max(0, min(len(rows) - 1, index + delta))
        if target == index:
            return False
        self._set_selected(rows[target])
        return True

    def _repair_selection(self) -> None:
        previous = self._selected
        tree = self._tree
        if tree is None or tree.is_empty:
            target, reason = None, "empty"
        elif previous is not None and previous in tree:
            target, reason = self._nearest_visible(previous), "hidden"
        else:
            target, reason = None, "removed"
            if self._selected_path:
                prefix = tree.resolve_path(self._selected_path)
                if prefix is not None:
                    target = self._nearest_visible(prefix)
            if target is None:
                target = self._first_visible()
        if target == previous:
            return
        self._set_selected(target)
        if previous is not None:
            self._emit_repair(previous, target, reason)

    def _emit_repair(self, previous: int | None, current: int | None, reason: str) -> None:
        event = SelectionRepaired(previous=previous, current=current, reason=reason)
        logger.debug(f"Selection repaired ({reason}): {previous} -> {current}")
        if self.on_selection_repaired is not None:
            self.on_selection_repaired(event)

    def _row_view(self, node: TreeNode, data: NodeData) -> RowView:
        return RowView(
            node_id=node.id,
            depth=node.depth,
            label=node.label,
            kind=node.kind,
            data=data,
            is_selected=node.id == self._selected,
            is_loading=node.load_state is LoadState.LOADING,
            is_expanded=self.is_expanded(node.id),
            is_leaf=node.is_leaf,
            error=node.error,
        )
