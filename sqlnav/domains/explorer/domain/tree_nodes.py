"""Node data types for the schema explorer tree."""

from __future__ import annotations

from dataclasses import dataclass

LEAF_KINDS = frozenset({"column", "constraint", "foreign_key", "index"})
SORTED_KINDS = frozenset({"database", "schema", "table"})

FOLDER_LABELS = {
    "constraints": "Constraints",
    "foreign_keys": "Foreign keys",
    "indexes": "Indexes",
}


@dataclass(frozen=True)
class DatabaseNode:
    """Node representing a database."""

    name: str

    def get_label_text(self) -> str:
        return self.name

    def get_node_kind(self) -> str:
        return "database"

    def get_node_path_part(self) -> str:
        return f"db:{self.name}"


@dataclass(frozen=True)
class SchemaNode:
    """Node representing a schema grouping inside a database."""

    name: str

    def get_label_text(self) -> str:
        return self.name

    def get_node_kind(self) -> str:
        return "schema"

    def get_node_path_part(self) -> str:
        return f"schema:{self.name}"


@dataclass(frozen=True)
class TableNode:
    """Node representing a database table."""

    name: str

    def get_label_text(self) -> str:
        return self.name

    def get_node_kind(self) -> str:
        return "table"

    def get_node_path_part(self) -> str:
        return f"table:{self.name}"


@dataclass(frozen=True)
class ColumnNode:
    """Node representing a table column."""

    name: str
    data_type: str = ""
    nullable: bool = True
    primary_key: bool = False
    foreign_key: bool = False
    unique: bool = False
    default: str | None = None

    def get_label_text(self) -> str:
        return self.name

    def get_node_kind(self) -> str:
        return "column"

    def get_node_path_part(self) -> str:
        return f"column:{self.name}"

    @property
    def key_flags(self) -> tuple[str, ...]:
        flags: list[str] = []
        if self.primary_key:
            flags.append("PK")
        if self.foreign_key:
            flags.append("FK")
        if self.unique:
            flags.append("UQ")
        return tuple(flags)


@dataclass(frozen=True)
class FolderNode:
    """Node grouping the constraints, foreign keys or indexes of a table."""

    folder_type: str  # "constraints", "foreign_keys", "indexes"

    def get_label_text(self) -> str:
        return FOLDER_LABELS.get(self.folder_type, self.folder_type)

    def get_node_kind(self) -> str:
        return "folder"

    def get_node_path_part(self) -> str:
        return f"folder:{self.folder_type}"


@dataclass(frozen=True)
class ConstraintNode:
    """Node representing a table constraint."""

    name: str
    constraint_type: str = ""  # "PRIMARY KEY", "UNIQUE", "CHECK", ...
    columns: tuple[str, ...] = ()

    def get_label_text(self) -> str:
        return self.name

    def get_node_kind(self) -> str:
        return "constraint"

    def get_node_path_part(self) -> str:
        return f"constraint:{self.name}"


@dataclass(frozen=True)
class ForeignKeyNode:
    """Node representing a foreign key."""

    name: str
    columns: tuple[str, ...] = ()
    ref_table: str = ""
    ref_columns: tuple[str, ...] = ()

    def get_label_text(self) -> str:
        return self.name

    def get_node_kind(self) -> str:
        return "foreign_key"

    def get_node_path_part(self) -> str:
        return f"fk:{self.name}"


@dataclass(frozen=True)
class IndexNode:
    """Node representing a table index."""

    name: str
    columns: tuple[str, ...] = ()
    unique: bool = False

    def get_label_text(self) -> str:
        return self.name

    def get_node_kind(self) -> str:
        return "index"

    def get_node_path_part(self) -> str:
        return f"index:{self.name}"


# Type alias for all node data types
NodeData = (
    DatabaseNode
    | SchemaNode
    | TableNode
    | ColumnNode
    | FolderNode
    | ConstraintNode
    | ForeignKeyNode
    | IndexNode
)


def is_leaf_kind(kind: str) -> bool:
    """Whether nodes of this kind can never have children."""
    return kind in LEAF_KINDS
