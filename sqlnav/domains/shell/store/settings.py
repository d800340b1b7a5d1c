"""Settings store and typed application settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sqlnav.shared.core.store import JSONFileStore, get_config_dir

logger = logging.getLogger(__name__)

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")
DEFAULT_LOG_LEVEL = "warning"
DEFAULT_PAGE_SIZE = 10


@dataclass
class AppSettings:
    """Settings read from ``settings.json``.

    ``keymap`` maps an action name to the keys that trigger it and replaces
    the default keys of that action.
    """

    log_level: str = DEFAULT_LOG_LEVEL
    log_file: str | None = None
    page_size: int = DEFAULT_PAGE_SIZE
    start_collapsed: bool = True
    keymap: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppSettings:
        """Build settings, dropping values of the wrong type."""
        settings = cls()
        level = data.get("log_level")
        if isinstance(level, str) and level.lower() in LOG_LEVELS:
            settings.log_level = level.lower()
        elif level is not None:
            logger.warning(f"Unknown log_level {level!r}, using {DEFAULT_LOG_LEVEL}")
        log_file = data.get("log_file")
        if isinstance(log_file, str) and log_file.strip():
            settings.log_file = log_file.strip()
        page_size = data.get("page_size")
        if isinstance(page_size, int) and not isinstance(page_size, bool) and page_size > 0:
            settings.page_size = page_size
        start_collapsed = data.get("start_collapsed")
        if isinstance(start_collapsed, bool):
            settings.start_collapsed = start_collapsed
        keymap = data.get("keymap")
        if isinstance(keymap, dict):
            for action, keys in keymap.items():
                if isinstance(keys, str):
                    keys = [keys]
                if isinstance(keys, list) and all(isinstance(k, str) for k in keys):
                    settings.keymap[str(action)] = list(keys)
        return settings

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "log_level": self.log_level,
            "page_size": self.page_size,
            "start_collapsed": self.start_collapsed,
        }
        if self.log_file:
            data["log_file"] = self.log_file
        if self.keymap:
            data["keymap"] = {action: list(keys) for action, keys in self.keymap.items()}
        return data


class SettingsStore(JSONFileStore):
    """Store for application settings.

    Settings are stored as a JSON object in ~/.sqlnav/settings.json
    """

    def __init__(self, file_path: Path | None = None) -> None:
        super().__init__(file_path or get_config_dir() / "settings.json")

    def load_all(self) -> dict[str, Any]:
        data = self._read_json()
        return data if isinstance(data, dict) else {}

    def save_all(self, settings: dict[str, Any]) -> None:
        self._write_json(settings)

    def get(self, key: str, default: Any = None) -> Any:
        return self.load_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        settings = self.load_all()
        settings[key] = value
        self.save_all(settings)

    def load(self) -> AppSettings:
        """Load typed settings, falling back to defaults for bad values."""
        return AppSettings.from_dict(self.load_all())

    def save(self, settings: AppSettings) -> None:
        data = self.load_all()
        data.update(settings.to_dict())
        self.save_all(data)
