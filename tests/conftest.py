"""Pytest fixtures shared by the sqlnav test suite."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

_TEST_CONFIG_DIR = Path(tempfile.mkdtemp(prefix="sqlnav-test-config-"))
os.environ.setdefault("SQLNAV_CONFIG_DIR", str(_TEST_CONFIG_DIR))


@pytest.fixture(autouse=True)
def _reset_keymap():
    """Ensure a keymap installed by one test does not leak into the next."""
    from sqlnav.domains.shell.app.keymap import reset_keymap

    reset_keymap()
    yield
    reset_keymap()


@pytest.fixture
def app_tree():
    from sqlnav.domains.explorer.domain.tree import SchemaTree

    from .trees import app_specs

    return SchemaTree.from_specs(app_specs())
