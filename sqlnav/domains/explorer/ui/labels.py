"""Row label formatting for the explorer tree."""

from __future__ import annotations

from rich.markup import escape as escape_markup
from rich.text import Text

from sqlnav.domains.explorer.domain.tree_nodes import (
    ColumnNode,
    ConstraintNode,
    FolderNode,
    ForeignKeyNode,
    IndexNode,
    NodeData,
    SchemaNode,
)
from sqlnav.domains.explorer.domain.views import RowView

SPINNER_FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]
EXPANDED_MARKER = "▾"
COLLAPSED_MARKER = "▸"
INDENT = "  "


def format_node_label(data: NodeData) -> str:
    """Rich markup for a node's label, without indentation or markers."""
    name = escape_markup(data.get_label_text())
    if isinstance(data, ColumnNode):
        parts = [name]
        if data.data_type:
            parts.append(f"[italic dim]{escape_markup(data.data_type)}[/]")
        if data.key_flags:
            parts.append(f"[#FBBF24]{' '.join(data.key_flags)}[/]")
        if not data.nullable:
            parts.append("[dim]NOT NULL[/]")
        return " ".join(parts)
    if isinstance(data, SchemaNode):
        return f"[dim]\\[{name}][/]"
    if isinstance(data, FolderNode):
        return f"[dim]{name}[/]"
    if isinstance(data, IndexNode):
        columns = escape_markup(", ".join(data.columns))
        unique = " [#FBBF24]UNIQUE[/]" if data.unique else ""
        return f"{name} [dim]({columns})[/]{unique}"
    if isinstance(data, ForeignKeyNode):
        target = escape_markup(f"{data.ref_table}({', '.join(data.ref_columns)})")
        return f"{name} [dim]→ {target}[/]"
    if isinstance(data, ConstraintNode):
        return f"{name} [dim]{escape_markup(data.constraint_type)}[/]"
    return name


def row_marker(row: RowView, spinner_frame: str = SPINNER_FRAMES[0]) -> str:
    if row.is_leaf:
        return " "
    if row.is_loading:
        return spinner_frame
    if row.is_expanded:
        return EXPANDED_MARKER
    return COLLAPSED_MARKER


def format_row(row: RowView, spinner_frame: str = SPINNER_FRAMES[0]) -> Text:
    """Render one explorer line: indentation, expander, label and error marker."""
    markup = f"{INDENT * row.depth}{row_marker(row, spinner_frame)} {format_node_label(row.data)}"
    if row.is_loading:
        markup += " [dim italic]Loading...[/]"
    if row.error:
        markup += f" [red]! {escape_markup(row.error)}[/]"
    text = Text.from_markup(markup)
    text.no_wrap = True
    text.overflow = "ellipsis"
    if row.is_selected:
        text.stylize("reverse")
    return text
