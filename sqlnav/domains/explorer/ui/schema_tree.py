"""Explorer widget rendering the navigator's visible rows."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import RenderableType
from rich.text import Text
from textual import events
from textual.message import Message
from textual.widget import Widget

from sqlnav.domains.explorer.domain.views import NodeDescriptor

from .labels import SPINNER_FRAMES, format_row

if TYPE_CHECKING:
    from textual.timer import Timer

    from sqlnav.domains.explorer.state.navigator import TreeNavigator


class SchemaTreeView(Widget, can_focus=True):
    """Line-per-node view of a :class:`TreeNavigator`.

    The widget only reads the navigator; it keeps no node references between
    renders because the tree may be rebuilt at any time.
    """

    DEFAULT_CSS = """
    SchemaTreeView {
        height: 1fr;
        overflow: hidden;
    }
    """

    class RowClicked(Message):
        """A visible row was clicked."""

        def __init__(self, index: int) -> None:
            super().__init__()
            self.index = index

    def __init__(self, navigator: TreeNavigator, *, id: str | None = None, fps: float = 12):
        super().__init__(id=id)
        self.navigator = navigator
        self._fps = fps
        self._frame_index = 0
        self._timer: Timer | None = None

    @property
    def spinner_frame(self) -> str:
        return SPINNER_FRAMES[self._frame_index % len(SPINNER_FRAMES)]

    def on_mount(self) -> None:
        self._timer = self.set_interval(1 / self._fps, self._tick)

    def _tick(self) -> None:
        if not self.navigator.pending:
            return
        self._frame_index = (self._frame_index + 1) % len(SPINNER_FRAMES)
        self.refresh()

    def render(self) -> RenderableType:
        rows = self.navigator.viewport(self.size.height)
        if not rows:
            return Text.from_markup("[dim](No schema loaded)[/]")
        frame = self.spinner_frame
        return Text("\n").join(format_row(row, frame) for row in rows)

    def on_click(self, event: events.Click) -> None:
        offset = event.get_content_offset(self)
        if offset is None:
            return
        self.post_message(self.RowClicked(self.navigator.scroll_offset + offset.y))

    def selected_node(self) -> NodeDescriptor | None:
        return self.navigator.selected_node()
