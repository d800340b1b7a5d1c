"""Property listing for the selected schema object."""

from __future__ import annotations

from rich.markup import escape as escape_markup

from sqlnav.domains.explorer.domain.tree_nodes import (
    ColumnNode,
    ConstraintNode,
    ForeignKeyNode,
    IndexNode,
)
from sqlnav.domains.explorer.domain.views import NodeDescriptor

KIND_TITLES = {
    "database": "Database",
    "schema": "Schema",
    "table": "Table",
    "column": "Column",
    "folder": "Group",
    "constraint": "Constraint",
    "foreign_key": "Foreign key",
    "index": "Index",
}


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _join(values: tuple[str, ...]) -> str:
    return ", ".join(values) if values else "(none)"


def describe_node(node: NodeDescriptor) -> list[tuple[str, str]]:
    """Property/Value rows describing ``node``."""
    rows: list[tuple[str, str]] = [
        ("Kind", KIND_TITLES.get(node.kind, node.kind)),
        ("Name", node.label),
        ("Path", " / ".join(part.split(":", 1)[-1] for part in node.path)),
    ]
    data = node.data
    if isinstance(data, ColumnNode):
        rows.append(("Type", data.data_type or "(unknown)"))
        rows.append(("Nullable", _yes_no(data.nullable)))
        rows.append(("Keys", ", ".join(data.key_flags) or "(none)"))
        if data.default is not None:
            rows.append(("Default", data.default))
    elif isinstance(data, ConstraintNode):
        rows.append(("Type", data.constraint_type or "(unknown)"))
        rows.append(("Columns", _join(data.columns)))
    elif isinstance(data, ForeignKeyNode):
        rows.append(("Columns", _join(data.columns)))
        rows.append(("References", f"{data.ref_table}({', '.join(data.ref_columns)})"))
    elif isinstance(data, IndexNode):
        rows.append(("Columns", _join(data.columns)))
        rows.append(("Unique", _yes_no(data.unique)))
    return rows


def format_properties(node: NodeDescriptor | None) -> str:
    """Markup for the properties pane."""
    if node is None:
        return "[dim]Nothing selected[/]"
    rows = describe_node(node)
    width = max(len(key) for key, _ in rows)
    return "\n".join(f"[bold]{escape_markup(key.ljust(width))}[/]  {escape_markup(value)}" for key, value in rows)
