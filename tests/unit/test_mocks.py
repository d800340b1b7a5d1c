"""Tests for mock profiles and the mock schema loader."""

from __future__ import annotations

import pytest

from sqlnav.domains.explorer.app.loader import SchemaLoader
from sqlnav.domains.explorer.domain.errors import LoadFailed
from sqlnav.domains.explorer.domain.views import NodeDescriptor
from sqlnav.domains.explorer.state.navigator import TreeNavigator
from sqlnav.mocks import (
    MockSchemaLoader,
    create_perf_test_profile,
    get_mock_profile,
    list_mock_profiles,
)

from ..trees import find, labels


class TestProfiles:
    """Mock profile registry."""

    def test_lists_profiles(self):
        assert list_mock_profiles() == ["demo", "multi-db", "empty", "perf-test"]

    def test_unknown_profile(self):
        assert get_mock_profile("nope") is None

    def test_profiles_are_fresh_instances(self):
        assert get_mock_profile("demo") is not get_mock_profile("demo")

    def test_perf_profile_size(self):
        profile = create_perf_test_profile(table_count=12, column_count=3)
        tables = profile.databases[0].schemas["main"]
        assert len(tables) == 12
        assert len(tables[0].columns) == 3


class TestMockSchemaLoader:
    """Schema shape and lazy table loading."""

    def test_is_a_schema_loader(self):
        assert isinstance(MockSchemaLoader(get_mock_profile("demo")), SchemaLoader)

    def test_demo_tables_are_sorted_and_lazy(self):
        tree = MockSchemaLoader(get_mock_profile("demo")).build_tree()
        shop = find(tree, "db:shop")
        assert [tree.node(child).label for child in tree.node(shop).children] == ["orders", "products", "users"]
        assert not tree.node(find(tree, "db:shop", "table:users")).is_loaded

    def test_multi_db_groups_schemas_only_where_needed(self):
        tree = MockSchemaLoader(get_mock_profile("multi-db")).build_tree()
        assert [tree.node(child).label for child in tree.root.children] == ["analytics", "archive", "shop"]
        assert tree.find_path(("db:analytics", "schema:reporting", "table:daily_totals")) is not None
        assert tree.find_path(("db:shop", "table:users")) is not None
        assert tree.node(find(tree, "db:archive")).children == []

    def test_empty_profile(self):
        assert MockSchemaLoader(get_mock_profile("empty")).build_tree().is_empty

    def test_table_children_keep_column_order_then_folders(self):
        loader = MockSchemaLoader(get_mock_profile("demo"))
        tree = loader.build_tree()
        nav = TreeNavigator(tree, loader=loader)
        users = find(tree, "db:shop", "table:users")

        assert nav.expand_now(users)

        children = [tree.node(child) for child in tree.node(users).children]
        assert [child.label for child in children] == [
            "id",
            "name",
            "email",
            "created_at",
            "Constraints",
            "Indexes",
        ]
        assert loader.calls == [("db:shop", "table:users")]

    def test_table_inside_schema_loads(self):
        loader = MockSchemaLoader(get_mock_profile("multi-db"))
        tree = loader.build_tree()
        nav = TreeNavigator(tree, loader=loader)
        table = find(tree, "db:analytics", "schema:reporting", "table:daily_totals")
        nav.select(table)

        assert nav.expand_now(table)
        assert labels(nav.visible_rows(nav.index_of(table) + 1))[:2] == ["day", "total"]

    def test_fail_by_name_raises(self):
        loader = MockSchemaLoader(get_mock_profile("demo"), fail=["orders"])
        tree = loader.build_tree()
        nav = TreeNavigator(tree, loader=loader)
        with pytest.raises(LoadFailed) as excinfo:
            nav.expand_now(find(tree, "db:shop", "table:orders"))
        assert isinstance(excinfo.value.cause, ConnectionError)

    def test_non_table_nodes_cannot_load(self):
        loader = MockSchemaLoader(get_mock_profile("demo"))
        tree = loader.build_tree()
        descriptor = NodeDescriptor.from_tree(tree, find(tree, "db:shop"))
        with pytest.raises(LookupError):
            loader.list_children(descriptor)
