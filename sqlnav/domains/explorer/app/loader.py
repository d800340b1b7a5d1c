"""Schema loader interface and a static, in-memory implementation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol, runtime_checkable

from sqlnav.domains.explorer.domain.tree import NodePath, NodeSpec, SchemaTree, order_specs
from sqlnav.domains.explorer.domain.views import NodeDescriptor


@runtime_checkable
class SchemaLoader(Protocol):
    """Source of schema entries for the explorer.

    ``list_children`` may block; the app calls it from a worker thread. It
    raises on failure and returns children in display order otherwise.
    """

    def load_schema(self) -> Sequence[NodeSpec]:
        """Return the top-level entries of the schema."""
        ...

    def list_children(self, node: NodeDescriptor) -> Sequence[NodeSpec]:
        """Return the children of a lazily loaded node."""
        ...


class StaticSchemaLoader:
    """Loader serving a known set of specs.

    Lazy branches (``NodeSpec.lazy``) in ``specs`` are answered from
    ``children``, a mapping from stable path to child specs. A path missing
    from the mapping raises ``LookupError``. Both methods return specs in
    display order.
    """

    def __init__(
        self,
        specs: Sequence[NodeSpec],
        children: Mapping[NodePath, Sequence[NodeSpec]] | None = None,
    ):
        self._specs = list(specs)
        self._children = dict(children or {})
        self.calls: list[NodePath] = []

    def load_schema(self) -> Sequence[NodeSpec]:
        return order_specs(self._specs)

    def list_children(self, node: NodeDescriptor) -> Sequence[NodeSpec]:
        self.calls.append(node.path)
        try:
            return order_specs(self._children[node.path])
        except KeyError:
            raise LookupError(f"No children known for {'/'.join(node.path)}") from None

    def build_tree(self) -> SchemaTree:
        return SchemaTree.from_specs(self.load_schema())
