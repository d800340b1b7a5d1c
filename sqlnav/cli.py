#!/usr/bin/env python3
"""sqlnav - A terminal schema browser for SQL databases."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .domains.shell.store.settings import LOG_LEVELS, AppSettings, SettingsStore

logger = logging.getLogger(__name__)

DEFAULT_MOCK_PROFILE = "demo"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlnav",
        description="A terminal schema browser for SQL databases",
        epilog="Try a large schema: sqlnav --mock=perf-test --demo-tables=2000",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--mock",
        metavar="PROFILE",
        default=DEFAULT_MOCK_PROFILE,
        help="Schema source to browse (profiles: demo, multi-db, empty, perf-test; default: demo)",
    )
    parser.add_argument(
        "--mock-load-delay",
        metavar="SECONDS",
        type=float,
        default=0.0,
        help="Add artificial delay to lazy loads (e.g. 1.5 to watch the spinner).",
    )
    parser.add_argument(
        "--mock-fail",
        metavar="NAME",
        action="append",
        default=[],
        help="Make loading the named node fail (repeatable; name or slash-joined path).",
    )
    parser.add_argument(
        "--demo-tables",
        metavar="COUNT",
        type=int,
        default=None,
        help="Number of tables generated by the perf-test profile.",
    )
    parser.add_argument(
        "--settings",
        metavar="PATH",
        help="Path to settings JSON file (overrides ~/.sqlnav/settings.json)",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Log level for the log file (default: from settings, else warning)",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write logs to PATH (default: ~/.sqlnav/sqlnav.log)",
    )
    return parser


def load_settings(args: argparse.Namespace) -> AppSettings:
    """Settings from the store, with command-line overrides applied."""
    store = SettingsStore(Path(args.settings).expanduser() if args.settings else None)
    settings = store.load()
    if args.log_level:
        settings.log_level = args.log_level
    if args.log_file:
        settings.log_file = args.log_file
    return settings


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    from .mocks import MockSchemaLoader, create_perf_test_profile, get_mock_profile, list_mock_profiles

    if args.demo_tables is not None and args.demo_tables < 0:
        print("--demo-tables must not be negative")
        return 1
    if args.mock_load_delay < 0:
        print("--mock-load-delay must not be negative")
        return 1

    if args.mock == "perf-test" and args.demo_tables is not None:
        profile = create_perf_test_profile(args.demo_tables)
    else:
        profile = get_mock_profile(args.mock)
    if profile is None:
        print(f"Unknown mock profile: {args.mock}")
        print(f"Available profiles: {', '.join(list_mock_profiles())}")
        return 1

    settings = load_settings(args)

    from .shared.core.logs import configure_logging

    log_path = configure_logging(settings.log_level, settings.log_file)

    from .domains.shell.app.keymap import SettingsKeymapProvider, find_conflicts, get_keymap, set_keymap

    if settings.keymap:
        set_keymap(SettingsKeymapProvider(settings.keymap))
    for key, actions in find_conflicts(get_keymap()).items():
        logger.warning(f"Key {key!r} is bound to several actions: {', '.join(actions)}")

    logger.info(f"Starting sqlnav with profile {profile.name!r}, logging to {log_path}")
    loader = MockSchemaLoader(profile, delay=args.mock_load_delay, fail=args.mock_fail)

    from .domains.shell.app.main import SqlnavApp

    app = SqlnavApp(loader, settings=settings, keymap=get_keymap())
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
