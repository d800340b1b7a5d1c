"""Keymap provider for keybinding configuration.

Maps Textual key names to explorer action names. The default bindings follow
vim-style movement; any action's keys can be replaced from the ``keymap``
section of settings.json.

Usage:
    from sqlnav.domains.shell.app.keymap import get_keymap

    keymap = get_keymap()
    keymap.action("tree_cursor_down")        # "j"
    keymap.actions_for_key("down")           # ["tree_cursor_down"]
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

KEY_DISPLAY_OVERRIDES: dict[str, str] = {
    "question_mark": "?",
    "slash": "/",
    "space": "<space>",
    "escape": "esc",
    "enter": "<enter>",
}


def format_key(key: str) -> str:
    """Format a key name for display in UI hints."""
    if key in KEY_DISPLAY_OVERRIDES:
        return KEY_DISPLAY_OVERRIDES[key]
    if key.startswith("ctrl+"):
        return f"^{key.split('+', 1)[1]}"
    return key


@dataclass(frozen=True)
class ActionKeyDef:
    """Definition of a regular action keybinding."""

    key: str  # Textual key name ("j", "down", "ctrl+d", "G")
    action: str  # Action name without the "action_" prefix
    label: str = ""  # Help text
    context: str = "tree"
    primary: bool = True  # Primary key for display vs secondary aliases


class KeymapProvider(ABC):
    """Abstract base class for keymap providers."""

    @abstractmethod
    def get_action_keys(self) -> list[ActionKeyDef]:
        """Get all action key definitions."""
        raise NotImplementedError

    def action(self, action_name: str) -> str | None:
        """Get the display key for an action, preferring primary keys."""
        keys = self.keys_for_action(action_name)
        return keys[0] if keys else None

    def keys_for_action(self, action_name: str) -> list[str]:
        """Get all keys for an action, primary first."""
        primary: list[str] = []
        secondary: list[str] = []
        for ak in self.get_action_keys():
            if ak.action != action_name or ak.key in primary or ak.key in secondary:
                continue
            (primary if ak.primary else secondary).append(ak.key)
        return primary + secondary

    def actions_for_key(self, key: str, context: str | None = None) -> list[str]:
        """Get all actions bound to a key."""
        return [
            ak.action
            for ak in self.get_action_keys()
            if ak.key == key and (context is None or ak.context == context)
        ]


class DefaultKeymapProvider(KeymapProvider):
    """Default keymap with hardcoded bindings."""

    def get_action_keys(self) -> list[ActionKeyDef]:
        return [
            # Movement
            ActionKeyDef("j", "tree_cursor_down", "Move down"),
            ActionKeyDef("down", "tree_cursor_down", "Move down", primary=False),
            ActionKeyDef("k", "tree_cursor_up", "Move up"),
            ActionKeyDef("up", "tree_cursor_up", "Move up", primary=False),
            ActionKeyDef("g", "tree_cursor_first", "Go to top"),
            ActionKeyDef("home", "tree_cursor_first", "Go to top", primary=False),
            ActionKeyDef("G", "tree_cursor_last", "Go to bottom"),
            ActionKeyDef("end", "tree_cursor_last", "Go to bottom", primary=False),
            ActionKeyDef("ctrl+d", "tree_page_down", "Scroll down"),
            ActionKeyDef("pagedown", "tree_page_down", "Scroll down", primary=False),
            ActionKeyDef("ctrl+u", "tree_page_up", "Scroll up"),
            ActionKeyDef("pageup", "tree_page_up", "Scroll up", primary=False),
            # Expand / collapse
            ActionKeyDef("enter", "toggle_node", "Expand/collapse"),
            ActionKeyDef("space", "toggle_node", "Expand/collapse", primary=False),
            ActionKeyDef("l", "expand_node", "Expand"),
            ActionKeyDef("right", "expand_node", "Expand", primary=False),
            ActionKeyDef("h", "collapse_node", "Collapse"),
            ActionKeyDef("left", "collapse_node", "Collapse", primary=False),
            ActionKeyDef("z", "collapse_tree", "Collapse all"),
            ActionKeyDef("r", "reload_node", "Reload node"),
            ActionKeyDef("R", "refresh_tree", "Refresh"),
            ActionKeyDef("f", "refresh_tree", "Refresh", primary=False),
            # Global
            ActionKeyDef("question_mark", "show_help", "Help", context="global"),
            ActionKeyDef("q", "quit", "Quit", context="global"),
            ActionKeyDef("ctrl+c", "quit", "Quit", context="global", primary=False),
        ]


class SettingsKeymapProvider(KeymapProvider):
    """Keymap where some actions' keys are replaced by user overrides."""

    def __init__(self, overrides: Mapping[str, Sequence[str]], base: KeymapProvider | None = None):
        self._base = base or DefaultKeymapProvider()
        self._overrides = {action: list(keys) for action, keys in overrides.items()}

    def get_action_keys(self) -> list[ActionKeyDef]:
        base = self._base.get_action_keys()
        labels = {ak.action: (ak.label, ak.context) for ak in base}
        keys = [ak for ak in base if ak.action not in self._overrides]
        for action, action_keys in self._overrides.items():
            if action not in labels:
                continue
            label, context = labels[action]
            for position, key in enumerate(action_keys):
                keys.append(ActionKeyDef(key, action, label, context, primary=position == 0))
        return keys


def find_conflicts(provider: KeymapProvider) -> dict[str, list[str]]:
    """Keys bound to more than one action within the same context."""
    seen: dict[tuple[str, str], set[str]] = {}
    for ak in provider.get_action_keys():
        seen.setdefault((ak.context, ak.key), set()).add(ak.action)
    global_keys = {key: actions for (context, key), actions in seen.items() if context == "global"}
    conflicts: dict[str, list[str]] = {}
    for (context, key), actions in seen.items():
        combined = set(actions)
        if context != "global":
            combined |= global_keys.get(key, set())
        if len(combined) > 1:
            conflicts[key] = sorted(combined)
    return conflicts


# Global keymap instance
_keymap_provider: KeymapProvider | None = None


def get_keymap() -> KeymapProvider:
    """Get the current keymap provider."""
    global _keymap_provider
    if _keymap_provider is None:
        _keymap_provider = DefaultKeymapProvider()
    return _keymap_provider


def set_keymap(provider: KeymapProvider) -> None:
    """Set the keymap provider (for testing or custom keymaps)."""
    global _keymap_provider
    _keymap_provider = provider


def reset_keymap() -> None:
    """Reset to default keymap provider."""
    global _keymap_provider
    _keymap_provider = None
