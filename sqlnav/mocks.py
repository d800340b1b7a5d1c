"""Mock profiles for demo recordings and testing.

Usage:
    sqlnav --mock=demo                        # Single database with a handful of tables
    sqlnav --mock=multi-db                    # Several databases, one with schemas
    sqlnav --mock=empty                       # No databases at all
    sqlnav --mock=perf-test --demo-tables=2000   # Large schema for scrolling tests
    sqlnav --mock=demo --mock-load-delay=1.5 --mock-fail=orders
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from .domains.explorer.domain.tree import NodeSpec, SchemaTree, order_specs
from .domains.explorer.domain.tree_nodes import (
    ColumnNode,
    ConstraintNode,
    DatabaseNode,
    FolderNode,
    ForeignKeyNode,
    IndexNode,
    SchemaNode,
    TableNode,
)
from .domains.explorer.domain.views import NodeDescriptor

DEFAULT_PERF_TABLES = 500


@dataclass
class MockTable:
    """Table definition served by the mock loader."""

    name: str
    columns: list[ColumnNode] = field(default_factory=list)
    constraints: list[ConstraintNode] = field(default_factory=list)
    foreign_keys: list[ForeignKeyNode] = field(default_factory=list)
    indexes: list[IndexNode] = field(default_factory=list)

    def child_specs(self) -> list[NodeSpec]:
        specs = [NodeSpec(column) for column in self.columns]
        for folder_type, items in (
            ("constraints", self.constraints),
            ("foreign_keys", self.foreign_keys),
            ("indexes", self.indexes),
        ):
            if items:
                specs.append(NodeSpec.branch(FolderNode(folder_type), (NodeSpec(item) for item in items)))
        return specs


@dataclass
class MockDatabase:
    """Database definition; tables are grouped by schema name."""

    name: str
    schemas: dict[str, list[MockTable]] = field(default_factory=dict)
    default_schema: str = ""

    def find_table(self, schema: str | None, name: str) -> MockTable | None:
        schema_name = self.default_schema if schema is None else schema
        for table in self.schemas.get(schema_name, []):
            if table.name == name:
                return table
        return None


@dataclass
class MockProfile:
    """A mock profile: the databases a mock connection exposes."""

    name: str
    databases: list[MockDatabase] = field(default_factory=list)


class MockSchemaLoader:
    """Schema loader backed by a :class:`MockProfile`.

    Tables are lazy branches, so expanding one goes through
    ``list_children``. ``delay`` simulates a slow server and ``fail`` names
    nodes (by label or slash-joined path) whose loading raises.
    """

    def __init__(self, profile: MockProfile, *, delay: float = 0.0, fail: Iterable[str] = ()):
        self.profile = profile
        self.delay = delay
        self.fail = set(fail)
        self.calls: list[tuple[str, ...]] = []

    def load_schema(self) -> Sequence[NodeSpec]:
        specs = []
        for database in self.profile.databases:
            schemas = sorted(database.schemas)
            grouped = len(schemas) > 1 or (len(schemas) == 1 and schemas[0] != database.default_schema)
            if grouped:
                children = [
                    NodeSpec.branch(
                        SchemaNode(schema),
                        (NodeSpec.lazy(TableNode(t.name)) for t in database.schemas[schema]),
                    )
                    for schema in schemas
                ]
            else:
                tables = database.schemas.get(database.default_schema, [])
                children = [NodeSpec.lazy(TableNode(t.name)) for t in tables]
            specs.append(NodeSpec.branch(DatabaseNode(database.name), children))
        return order_specs(specs)

    def list_children(self, node: NodeDescriptor) -> Sequence[NodeSpec]:
        self.calls.append(node.path)
        if self.delay:
            time.sleep(self.delay)
        if node.label in self.fail or "/".join(node.path) in self.fail:
            raise ConnectionError(f"Lost connection while loading '{node.label}'")
        if node.kind != "table":
            raise LookupError(f"Nothing to load for {node.kind} '{node.label}'")
        table = self._find_table(node.path)
        if table is None:
            raise LookupError(f"Table '{node.label}' no longer exists")
        return order_specs(table.child_specs())

    def build_tree(self) -> SchemaTree:
        return SchemaTree.from_specs(self.load_schema())

    def _find_table(self, path: tuple[str, ...]) -> MockTable | None:
        names = [part.split(":", 1)[1] for part in path]
        if len(names) == 2:
            database_name, schema_name, table_name = names[0], None, names[1]
        elif len(names) == 3:
            database_name, schema_name, table_name = names
        else:
            return None
        for database in self.profile.databases:
            if database.name == database_name:
                return database.find_table(schema_name, table_name)
        return None


def _pk(name: str = "id", data_type: str = "INTEGER") -> ColumnNode:
    return ColumnNode(name, data_type, nullable=False, primary_key=True)


def _shop_tables() -> list[MockTable]:
    return [
        MockTable(
            "users",
            columns=[
                _pk(),
                ColumnNode("name", "TEXT", nullable=False),
                ColumnNode("email", "TEXT", nullable=False, unique=True),
                ColumnNode("created_at", "TEXT", default="CURRENT_TIMESTAMP"),
            ],
            constraints=[
                ConstraintNode("users_pkey", "PRIMARY KEY", ("id",)),
                ConstraintNode("users_email_key", "UNIQUE", ("email",)),
            ],
            indexes=[IndexNode("users_email_idx", ("email",), unique=True)],
        ),
        MockTable(
            "products",
            columns=[
                _pk(),
                ColumnNode("name", "TEXT", nullable=False),
                ColumnNode("price", "REAL", nullable=False),
                ColumnNode("stock", "INTEGER", default="0"),
            ],
            constraints=[
                ConstraintNode("products_pkey", "PRIMARY KEY", ("id",)),
                ConstraintNode("products_price_check", "CHECK", ("price",)),
            ],
        ),
        MockTable(
            "orders",
            columns=[
                _pk(),
                ColumnNode("user_id", "INTEGER", nullable=False, foreign_key=True),
                ColumnNode("product_id", "INTEGER", nullable=False, foreign_key=True),
                ColumnNode("quantity", "INTEGER", nullable=False),
                ColumnNode("created_at", "TEXT"),
            ],
            constraints=[ConstraintNode("orders_pkey", "PRIMARY KEY", ("id",))],
            foreign_keys=[
                ForeignKeyNode("orders_user_id_fkey", ("user_id",), "users", ("id",)),
                ForeignKeyNode("orders_product_id_fkey", ("product_id",), "products", ("id",)),
            ],
            indexes=[
                IndexNode("orders_user_id_idx", ("user_id",)),
                IndexNode("orders_created_at_idx", ("created_at",)),
            ],
        ),
    ]


def _create_demo_profile() -> MockProfile:
    """Create the demo profile: one database, no schema grouping."""
    return MockProfile(
        name="demo",
        databases=[MockDatabase("shop", schemas={"main": _shop_tables()}, default_schema="main")],
    )


def _create_multi_db_profile() -> MockProfile:
    """Create a profile with several databases; ``analytics`` uses schemas."""
    analytics = MockDatabase(
        "analytics",
        schemas={
            "public": [
                MockTable("events", columns=[_pk("id", "BIGINT"), ColumnNode("name", "VARCHAR(64)")]),
                MockTable("sessions", columns=[_pk("id", "UUID"), ColumnNode("user_id", "BIGINT")]),
            ],
            "reporting": [
                MockTable(
                    "daily_totals",
                    columns=[ColumnNode("day", "DATE", nullable=False), ColumnNode("total", "NUMERIC(12,2)")],
                ),
            ],
        },
        default_schema="public",
    )
    return MockProfile(
        name="multi-db",
        databases=[
            MockDatabase("shop", schemas={"main": _shop_tables()}, default_schema="main"),
            analytics,
            MockDatabase("archive", schemas={"main": []}, default_schema="main"),
        ],
    )


def _create_empty_profile() -> MockProfile:
    """Create an empty profile with no databases."""
    return MockProfile(name="empty")


def create_perf_test_profile(table_count: int = DEFAULT_PERF_TABLES, column_count: int = 40) -> MockProfile:
    """Create a large schema for scrolling and expansion performance testing.

    Usage:
        sqlnav --mock=perf-test --demo-tables=5000
    """
    tables = [
        MockTable(
            f"table_{i:05d}",
            columns=[_pk()] + [ColumnNode(f"col_{c:03d}", "TEXT") for c in range(1, column_count)],
            indexes=[IndexNode(f"table_{i:05d}_col_001_idx", ("col_001",))],
        )
        for i in range(table_count)
    ]
    return MockProfile(
        name="perf-test",
        databases=[MockDatabase("perf", schemas={"main": tables}, default_schema="main")],
    )


# Registry of available mock profiles
MOCK_PROFILES: dict[str, Callable[[], MockProfile]] = {
    "demo": _create_demo_profile,
    "multi-db": _create_multi_db_profile,
    "empty": _create_empty_profile,
    "perf-test": create_perf_test_profile,
}


def get_mock_profile(name: str) -> MockProfile | None:
    """Get a mock profile by name."""
    factory = MOCK_PROFILES.get(name)
    if factory:
        return factory()
    return None


def list_mock_profiles() -> list[str]:
    """List available mock profile names."""
    return list(MOCK_PROFILES.keys())
