"""Explorer exceptions."""

from __future__ import annotations


class ExplorerError(Exception):
    """Base class for schema explorer errors."""


class LoadFailed(ExplorerError):
    """Listing the children of a node failed.

    The node stays collapsed with an error marker; expanding it again retries.
    """

    def __init__(self, node_id: int, cause: BaseException, label: str = ""):
        self.node_id = node_id
        self.cause = cause
        self.label = label
        target = f"'{label}'" if label else f"node {node_id}"
        super().__init__(f"Failed to load children of {target}: {cause}")
