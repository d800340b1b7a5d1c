"""Tests for explorer row and property formatting."""

from __future__ import annotations

import pytest

from sqlnav.domains.explorer.domain.tree import ROOT_ID, NodeSpec, SchemaTree
from sqlnav.domains.explorer.domain.tree_nodes import (
    ColumnNode,
    FolderNode,
    ForeignKeyNode,
    IndexNode,
    SchemaNode,
    TableNode,
)
from sqlnav.domains.explorer.domain.views import NodeDescriptor, RowView
from sqlnav.domains.explorer.state.navigator import TreeNavigator
from sqlnav.domains.explorer.ui.labels import (
    COLLAPSED_MARKER,
    EXPANDED_MARKER,
    SPINNER_FRAMES,
    format_node_label,
    format_row,
    row_marker,
)
from sqlnav.domains.explorer.ui.object_info import describe_node, format_properties

from ..trees import find, lazy_specs


def _row(data, **overrides) -> RowView:
    values = dict(
        node_id=1,
        depth=0,
        label=data.get_label_text(),
        kind=data.get_node_kind(),
        data=data,
        is_selected=False,
        is_loading=False,
        is_expanded=False,
        is_leaf=data.get_node_kind() == "column",
    )
    values.update(overrides)
    return RowView(**values)


class TestNodeLabels:
    """Rich markup for node labels."""

    def test_column_shows_type_and_keys(self):
        label = format_node_label(ColumnNode("id", "INTEGER", nullable=False, primary_key=True))
        assert "INTEGER" in label
        assert "PK" in label
        assert "NOT NULL" in label

    def test_markup_in_names_is_escaped(self):
        assert format_node_label(TableNode("[bold]x")) == "\\[bold]x"

    def test_schema_and_folder(self):
        assert "public" in format_node_label(SchemaNode("public"))
        assert "Foreign keys" in format_node_label(FolderNode("foreign_keys"))

    def test_foreign_key_shows_target(self):
        label = format_node_label(ForeignKeyNode("fk", ("user_id",), "users", ("id",)))
        assert "users(id)" in label

    def test_unique_index(self):
        assert "UNIQUE" in format_node_label(IndexNode("idx", ("email",), unique=True))


class TestRows:
    """Whole explorer lines."""

    def test_markers(self):
        assert row_marker(_row(ColumnNode("id"))) == " "
        assert row_marker(_row(TableNode("t"), is_expanded=True)) == EXPANDED_MARKER
        assert row_marker(_row(TableNode("t"))) == COLLAPSED_MARKER
        assert row_marker(_row(TableNode("t"), is_loading=True), SPINNER_FRAMES[3]) == SPINNER_FRAMES[3]

    def test_indentation_follows_depth(self):
        text = format_row(_row(ColumnNode("id"), depth=2))
        assert text.plain.startswith("    ")

    def test_loading_and_error_suffixes(self):
        assert "Loading..." in format_row(_row(TableNode("t"), is_loading=True)).plain
        assert "! timeout" in format_row(_row(TableNode("t"), error="timeout")).plain

    def test_error_text_is_not_markup(self):
        assert "[red]" in format_row(_row(TableNode("t"), error="[red]")).plain

    def test_selected_row_is_reversed(self):
        text = format_row(_row(TableNode("t"), is_selected=True))
        assert any("reverse" in str(span.style) for span in text.spans)


class TestProperties:
    """Properties pane contents."""

    def test_column_properties(self):
        tree = SchemaTree.from_specs(lazy_specs())
        nav = TreeNavigator(tree)
        users = find(tree, "db:app", "table:users")
        request = nav.expand(users)
        nav.complete_load(
            request, [NodeSpec(ColumnNode("email", "TEXT", nullable=False, unique=True, default="''"))]
        )
        descriptor = NodeDescriptor.from_tree(tree, find(tree, "db:app", "table:users", "column:email"))

        rows = dict(describe_node(descriptor))

        assert rows["Kind"] == "Column"
        assert rows["Path"] == "app / users / email"
        assert rows["Type"] == "TEXT"
        assert rows["Nullable"] == "No"
        assert rows["Keys"] == "UQ"
        assert rows["Default"] == "''"

    def test_nothing_selected(self):
        assert "Nothing selected" in format_properties(None)

    def test_property_names_are_bold(self):
        tree = SchemaTree.from_specs(lazy_specs())
        descriptor = NodeDescriptor.from_tree(tree, find(tree, "db:app"))
        assert "[bold]Kind" in format_properties(descriptor)

    def test_container_root_has_no_descriptor(self):
        tree = SchemaTree.from_specs(lazy_specs())
        with pytest.raises(ValueError):
            NodeDescriptor.from_tree(tree, ROOT_ID)
