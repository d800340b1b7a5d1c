"""Settings persistence."""

from .settings import AppSettings, SettingsStore

__all__ = ["AppSettings", "SettingsStore"]
