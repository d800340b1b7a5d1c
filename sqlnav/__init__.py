"""sqlnav - A terminal schema browser for SQL databases."""

from typing import TYPE_CHECKING, Any

__all__ = [
    "__version__",
    "main",
    "SqlnavApp",
    "SchemaTree",
    "TreeNavigator",
]

__version__ = "0.1.0"

if TYPE_CHECKING:
    from sqlnav.domains.explorer.domain.tree import SchemaTree
    from sqlnav.domains.explorer.state.navigator import TreeNavigator
    from sqlnav.domains.shell.app.main import SqlnavApp

    from .cli import main


def __getattr__(name: str) -> Any:
    """Lazy import for heavy modules to keep package import side-effect free."""
    if name == "main":
        from .cli import main

        return main
    if name == "SqlnavApp":
        from sqlnav.domains.shell.app.main import SqlnavApp

        return SqlnavApp
    if name == "SchemaTree":
        from sqlnav.domains.explorer.domain.tree import SchemaTree

        return SchemaTree
    if name == "TreeNavigator":
        from sqlnav.domains.explorer.state.navigator import TreeNavigator

        return TreeNavigator
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
