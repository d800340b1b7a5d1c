"""Schema tree data model."""

from .errors import ExplorerError, LoadFailed
from .flatten import VisibleRow, flatten, iter_visible
from .tree import ROOT_ID, LoadState, NodeSpec, SchemaTree, TreeNode, order_specs
from .views import NodeDescriptor, RowView

__all__ = [
    "ROOT_ID",
    "ExplorerError",
    "LoadFailed",
    "LoadState",
    "NodeDescriptor",
    "NodeSpec",
    "RowView",
    "SchemaTree",
    "TreeNode",
    "VisibleRow",
    "flatten",
    "iter_visible",
    "order_specs",
]
