"""Navigation state for the explorer tree."""

from sqlnav.domains.explorer.state.navigator import LoadRequest, SelectionRepaired, TreeNavigator

__all__ = ["LoadRequest", "SelectionRepaired", "TreeNavigator"]
