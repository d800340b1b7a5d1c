"""Logging setup.

The terminal belongs to the TUI, so records only ever go to a file.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .store import get_config_dir

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def default_log_file() -> Path:
    return get_config_dir() / "sqlnav.log"


def configure_logging(level: str = "warning", log_file: str | Path | None = None) -> Path:
    """Send ``sqlnav`` records at ``level`` and above to ``log_file``.

    Returns the path being written.
    """
    path = Path(log_file).expanduser() if log_file else default_log_file()
    path.parent.mkdir(parents=True, exist_ok=True)

    package_logger = logging.getLogger("sqlnav")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    package_logger.propagate = False
    return path
