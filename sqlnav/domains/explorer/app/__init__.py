"""Schema loaders for the explorer."""

from .loader import SchemaLoader, StaticSchemaLoader

__all__ = ["SchemaLoader", "StaticSchemaLoader"]
