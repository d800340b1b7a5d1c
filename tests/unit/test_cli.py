"""Tests for command-line parsing and startup."""

from __future__ import annotations

import json
import logging
from unittest.mock import patch

import pytest

from sqlnav.cli import build_parser, load_settings, main
from sqlnav.domains.shell.app.keymap import get_keymap
from sqlnav.shared.core.logs import configure_logging


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.mock == "demo"
        assert args.mock_load_delay == 0.0
        assert args.mock_fail == []
        assert args.demo_tables is None

    def test_repeatable_fail(self):
        args = build_parser().parse_args(["--mock-fail", "orders", "--mock-fail", "db:shop/table:users"])
        assert args.mock_fail == ["orders", "db:shop/table:users"]

    def test_rejects_unknown_log_level(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-level", "loud"])


class TestLoadSettings:
    def test_command_line_overrides_file(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"log_level": "info", "page_size": 7}))
        args = build_parser().parse_args(["--settings", str(path), "--log-level", "debug"])

        settings = load_settings(args)

        assert settings.log_level == "debug"
        assert settings.page_size == 7


class TestMain:
    """Startup wiring, with the Textual app replaced."""

    def test_unknown_profile_fails(self, capsys):
        assert main(["--mock", "nope"]) == 1
        assert "Available profiles" in capsys.readouterr().out

    def test_negative_table_count_fails(self):
        assert main(["--mock", "perf-test", "--demo-tables", "-1"]) == 1

    def test_runs_app_with_mock_loader(self, tmp_path):
        settings_path = tmp_path / "settings.json"
        settings_path.write_text(json.dumps({"keymap": {"quit": ["x"]}}))
        log_file = tmp_path / "sqlnav.log"

        with patch("sqlnav.domains.shell.app.main.SqlnavApp") as app_cls:
            code = main(
                [
                    "--mock",
                    "perf-test",
                    "--demo-tables",
                    "3",
                    "--mock-fail",
                    "table_00001",
                    "--settings",
                    str(settings_path),
                    "--log-file",
                    str(log_file),
                ]
            )

        assert code == 0
        app_cls.return_value.run.assert_called_once()
        loader = app_cls.call_args.args[0]
        assert len(loader.profile.databases[0].schemas["main"]) == 3
        assert loader.fail == {"table_00001"}
        assert get_keymap().actions_for_key("x") == ["quit"]
        assert log_file.exists()


class TestLogging:
    def test_records_go_to_file_only(self, tmp_path):
        path = configure_logging("info", tmp_path / "out.log")
        logging.getLogger("sqlnav.test").info("hello from the test")
        for handler in logging.getLogger("sqlnav").handlers:
            handler.flush()

        assert "hello from the test" in path.read_text()
        assert logging.getLogger("sqlnav").propagate is False

    def test_unknown_level_falls_back_to_warning(self, tmp_path):
        configure_logging("verbose", tmp_path / "out.log")
        assert logging.getLogger("sqlnav").level == logging.WARNING
