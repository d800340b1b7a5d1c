"""Schema trees used across the test suite."""

from __future__ import annotations

from sqlnav.domains.explorer.domain.tree import NodeSpec, SchemaTree
from sqlnav.domains.explorer.domain.tree_nodes import (
    ColumnNode,
    DatabaseNode,
    FolderNode,
    IndexNode,
    TableNode,
)


def app_specs() -> list[NodeSpec]:
    """db app with users(id, email) and orders(id, user_id, indexes) fully loaded."""
    return [
        NodeSpec.branch(
            DatabaseNode("app"),
            [
                NodeSpec.branch(
                    TableNode("users"),
                    [NodeSpec(ColumnNode("id", "INTEGER", primary_key=True)), NodeSpec(ColumnNode("email", "TEXT"))],
                ),
                NodeSpec.branch(
                    TableNode("orders"),
                    [
                        NodeSpec(ColumnNode("id", "INTEGER", primary_key=True)),
                        NodeSpec(ColumnNode("user_id", "INTEGER", foreign_key=True)),
                        NodeSpec.branch(
                            FolderNode("indexes"),
                            [NodeSpec(IndexNode("orders_user_id_idx", ("user_id",)))],
                        ),
                    ],
                ),
            ],
        )
    ]


def lazy_specs() -> list[NodeSpec]:
    """db app whose tables load their columns on demand."""
    return [
        NodeSpec.branch(
            DatabaseNode("app"),
            [NodeSpec.lazy(TableNode("users")), NodeSpec.lazy(TableNode("orders"))],
        )
    ]


def user_columns() -> list[NodeSpec]:
    return [NodeSpec(ColumnNode("id", "INTEGER", primary_key=True)), NodeSpec(ColumnNode("email", "TEXT"))]


def find(tree: SchemaTree, *parts: str) -> int:
    """Id of the node at ``parts`` (stable path), failing loudly if absent."""
    node_id = tree.find_path(tuple(parts))
    assert node_id is not None, f"no node at {parts}"
    return node_id


def labels(rows) -> list[str]:
    return [row.label for row in rows]
