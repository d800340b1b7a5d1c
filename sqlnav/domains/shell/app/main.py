"""Main Textual application for sqlnav."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from functools import partial

from rich.markup import escape as escape_markup
from textual import events
from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.css.query import NoMatches
from textual.widgets import Static

from sqlnav.domains.explorer.app.loader import SchemaLoader
from sqlnav.domains.explorer.domain.tree import NodeSpec, SchemaTree
from sqlnav.domains.explorer.state.navigator import LoadRequest, SelectionRepaired, TreeNavigator
from sqlnav.domains.explorer.ui.object_info import format_properties
from sqlnav.domains.explorer.ui.schema_tree import SchemaTreeView
from sqlnav.domains.shell.app.keymap import KeymapProvider, format_key, get_keymap
from sqlnav.domains.shell.store.settings import AppSettings

logger = logging.getLogger(__name__)

STATUS_ACTIONS = (
    "toggle_node",
    "collapse_tree",
    "reload_node",
    "refresh_tree",
    "show_help",
    "quit",
)


class SqlnavApp(App):
    """Schema browser: explorer tree on the left, properties on the right."""

    TITLE = "sqlnav"

    CSS = """
    #main {
        height: 1fr;
    }

    #explorer {
        width: 45%;
        border: round $primary;
        border-title-color: $primary;
    }

    #details {
        width: 1fr;
        border: round $secondary;
        border-title-color: $secondary;
        padding: 0 1;
    }

    #status {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }
    """

    def __init__(
        self,
        loader: SchemaLoader | None = None,
        *,
        settings: AppSettings | None = None,
        keymap: KeymapProvider | None = None,
    ):
        super().__init__()
        self.loader = loader
        self.settings = settings or AppSettings()
        self.keymap = keymap or get_keymap()
        self.navigator = TreeNavigator(
            loader=loader,
            collapse_new_branches=self.settings.start_collapsed,
            on_selection_repaired=self._on_selection_repaired,
        )
        self._inflight: set[LoadRequest] = set()
        self._schema_token: object | None = None

    def compose(self) -> ComposeResult:
        with Horizontal(id="main"):
            yield SchemaTreeView(self.navigator, id="explorer")
            yield Static(id="details")
        yield Static(self._status_text(), id="status")

    @property
    def explorer(self) -> SchemaTreeView:
        return self.query_one("#explorer", SchemaTreeView)

    @property
    def details(self) -> Static:
        return self.query_one("#details", Static)

    def on_mount(self) -> None:
        self.explorer.border_title = "Explorer"
        self.details.border_title = "Properties"
        self.explorer.focus()
        self._refresh_views()
        if self.loader is not None:
            self.action_refresh_tree()

    async def on_key(self, event: events.Key) -> None:
        actions = self.keymap.actions_for_key(event.key)
        if not actions:
            return
        event.stop()
        event.prevent_default()
        await self.run_action(actions[0])

    def on_schema_tree_view_row_clicked(self, message: SchemaTreeView.RowClicked) -> None:
        if self.navigator.select_index(message.index):
            self._refresh_views()

    # -------------------------------------------------------------- movement

    def action_tree_cursor_down(self) -> None:
        self.navigator.select_next()
        self._refresh_views()

    def action_tree_cursor_up(self) -> None:
        self.navigator.select_previous()
        self._refresh_views()

    def action_tree_cursor_first(self) -> None:
        self.navigator.select_first()
        self._refresh_views()

    def action_tree_cursor_last(self) -> None:
        self.navigator.select_last()
        self._refresh_views()

    def action_tree_page_down(self) -> None:
        self.navigator.select_page_down(self.settings.page_size)
        self._refresh_views()

    def action_tree_page_up(self) -> None:
        self.navigator.select_page_up(self.settings.page_size)
        self._refresh_views()

    # ------------------------------------------------------ expand / collapse

    def action_toggle_node(self) -> None:
        self._start_load(self.navigator.toggle())
        self._refresh_views()

    def action_expand_node(self) -> None:
        self._start_load(self.navigator.expand_or_select_child())
        self._refresh_views()

    def action_collapse_node(self) -> None:
        self.navigator.collapse_or_select_parent()
        self._refresh_views()

    def action_collapse_tree(self) -> None:
        self.navigator.collapse_all()
        self._inflight.clear()
        self._refresh_views()

    def action_reload_node(self) -> None:
        self._start_load(self.navigator.reload())
        self._refresh_views()

    def action_refresh_tree(self) -> None:
        """Reload the whole schema and rebuild the tree."""
        if self.loader is None:
            self.notify("No schema source configured", severity="warning")
            return
        token = object()
        self._schema_token = token
        self.run_worker(
            partial(self._load_schema_worker, self.loader, token),
            name="load-schema",
            group="schema-load",
            thread=True,
            exclusive=False,
        )

    def action_show_help(self) -> None:
        lines = []
        for action in (
            "tree_cursor_down",
            "tree_cursor_up",
            "tree_cursor_first",
            "tree_cursor_last",
            "tree_page_down",
            "tree_page_up",
            "expand_node",
            "collapse_node",
            *STATUS_ACTIONS,
        ):
            keys = " / ".join(format_key(key) for key in self.keymap.keys_for_action(action))
            if keys:
                lines.append(f"{escape_markup(keys)}: {action.replace('_', ' ')}")
        self.notify("\n".join(lines), title="Keys", timeout=10)

    async def action_quit(self) -> None:
        self.navigator.cancel_pending()
        self.exit()

    # --------------------------------------------------------------- loading

    def _start_load(self, request: LoadRequest | None) -> None:
        if request is None or self.loader is None or request in self._inflight:
            return
        self._inflight.add(request)
        self.run_worker(
            partial(self._load_children_worker, self.loader, request),
            name=f"load-children-{request.node_id}",
            group="tree-load",
            thread=True,
            exclusive=False,
        )

    def _load_children_worker(self, loader: SchemaLoader, request: LoadRequest) -> None:
        try:
            children = loader.list_children(request.node)
        except Exception as error:
            self.call_from_thread(self._on_load_failed, request, error)
            return
        self.call_from_thread(self._on_children_loaded, request, children)

    def _on_children_loaded(self, request: LoadRequest, children: Sequence[NodeSpec]) -> None:
        self._inflight.discard(request)
        if self.navigator.complete_load(request, children):
            for follow_up in self.navigator.take_restore_requests():
                self._start_load(follow_up)
            self._refresh_views()

    def _on_load_failed(self, request: LoadRequest, error: Exception) -> None:
        self._inflight.discard(request)
        failure = self.navigator.fail_load(request, error)
        if failure is None:
            return
        self.notify(escape_markup(str(failure)), severity="error")
        self._refresh_views()

    def _load_schema_worker(self, loader: SchemaLoader, token: object) -> None:
        try:
            specs = list(loader.load_schema())
        except Exception as error:
            self.call_from_thread(self._on_schema_failed, token, error)
            return
        self.call_from_thread(self._on_schema_loaded, token, specs)

    def _on_schema_loaded(self, token: object, specs: list[NodeSpec]) -> None:
        if token is not self._schema_token:
            return
        self._schema_token = None
        self._inflight.clear()
        for request in self.navigator.rebuild(SchemaTree.from_specs(specs)):
            self._start_load(request)
        self._refresh_views()

    def _on_schema_failed(self, token: object, error: Exception) -> None:
        if token is not self._schema_token:
            return
        self._schema_token = None
        logger.error(f"Failed to load schema: {error}")
        self.notify(escape_markup(f"Error loading schema: {error}"), severity="error")

    # -------------------------------------------------------------- display

    def _on_selection_repaired(self, event: SelectionRepaired) -> None:
        logger.debug(f"Selection moved to {event.current} ({event.reason})")

    def _refresh_views(self) -> None:
        try:
            explorer = self.explorer
            details = self.details
        except NoMatches:
            return
        explorer.refresh()
        details.update(format_properties(self.navigator.selected_node()))

    def _status_text(self) -> str:
        hints = []
        for action in STATUS_ACTIONS:
            key = self.keymap.action(action)
            if key:
                hints.append(f"{format_key(key)} {action.replace('_', ' ')}")
        return escape_markup("  ".join(hints))
