"""UI tests for the schema explorer app."""

from __future__ import annotations

import pytest

from sqlnav.domains.shell.app.keymap import SettingsKeymapProvider
from sqlnav.domains.shell.app.main import SqlnavApp
from sqlnav.domains.shell.store.settings import AppSettings
from sqlnav.mocks import MockSchemaLoader, get_mock_profile

from ..trees import labels


def _demo_app(**loader_options) -> tuple[SqlnavApp, MockSchemaLoader]:
    loader = MockSchemaLoader(get_mock_profile("demo"), **loader_options)
    return SqlnavApp(loader, settings=AppSettings()), loader


async def _settle(app, pilot) -> None:
    await app.workers.wait_for_complete()
    await pilot.pause()


class TestStartup:
    """Loading the schema when the app starts."""

    @pytest.mark.asyncio
    async def test_schema_loads_collapsed(self):
        app, _ = _demo_app()

        async with app.run_test(size=(100, 35)) as pilot:
            await _settle(app, pilot)

            assert labels(app.navigator.visible_rows()) == ["shop"]
            assert app.navigator.selected_node().label == "shop"
            assert app.explorer.has_focus

    @pytest.mark.asyncio
    async def test_without_loader_shows_empty_tree(self):
        app = SqlnavApp()

        async with app.run_test(size=(100, 35)) as pilot:
            await pilot.pause()

            assert app.navigator.is_empty
            assert app.navigator.selected_node() is None


class TestNavigationKeys:
    """Keys drive the navigator."""

    @pytest.mark.asyncio
    async def test_expand_and_move(self):
        app, _ = _demo_app()

        async with app.run_test(size=(100, 35)) as pilot:
            await _settle(app, pilot)

            await pilot.press("l")
            assert labels(app.navigator.visible_rows()) == ["shop", "orders", "products", "users"]

            await pilot.press("j", "j")
            assert app.navigator.selected_node().label == "products"

            await pilot.press("k")
            assert app.navigator.selected_node().label == "orders"

    @pytest.mark.asyncio
    async def test_enter_loads_table_columns(self):
        app, loader = _demo_app()

        async with app.run_test(size=(100, 35)) as pilot:
            await _settle(app, pilot)

            await pilot.press("l", "j", "enter")
            await _settle(app, pilot)

            rows = labels(app.navigator.visible_rows())
            assert rows[:4] == ["shop", "orders", "id", "user_id"]
            assert loader.calls == [("db:shop", "table:orders")]

    @pytest.mark.asyncio
    async def test_left_steps_out_then_collapses(self):
        app, _ = _demo_app()

        async with app.run_test(size=(100, 35)) as pilot:
            await _settle(app, pilot)
            await pilot.press("l", "j")

            await pilot.press("h")
            assert app.navigator.selected_node().label == "shop"

            await pilot.press("h")
            assert labels(app.navigator.visible_rows()) == ["shop"]

    @pytest.mark.asyncio
    async def test_collapse_all(self):
        app, _ = _demo_app()

        async with app.run_test(size=(100, 35)) as pilot:
            await _settle(app, pilot)
            await pilot.press("l", "j", "l")
            await _settle(app, pilot)

            await pilot.press("z")

            assert labels(app.navigator.visible_rows()) == ["shop"]
            assert app.navigator.selected_node().label == "shop"

    @pytest.mark.asyncio
    async def test_custom_key_binding(self):
        loader = MockSchemaLoader(get_mock_profile("demo"))
        keymap = SettingsKeymapProvider({"tree_cursor_down": ["n"]})
        app = SqlnavApp(loader, settings=AppSettings(), keymap=keymap)

        async with app.run_test(size=(100, 35)) as pilot:
            await _settle(app, pilot)
            await pilot.press("l", "j")
            assert app.navigator.selected_node().label == "shop"

            await pilot.press("n")
            assert app.navigator.selected_node().label == "orders"

    @pytest.mark.asyncio
    async def test_page_size_from_settings(self):
        loader = MockSchemaLoader(get_mock_profile("demo"))
        app = SqlnavApp(loader, settings=AppSettings(page_size=2))

        async with app.run_test(size=(100, 35)) as pilot:
            await _settle(app, pilot)
            await pilot.press("l", "pagedown")

            assert app.navigator.selected_node().label == "products"


class TestLoadErrors:
    """Failed lazy loads."""

    @pytest.mark.asyncio
    async def test_failed_load_marks_node(self):
        app, _ = _demo_app(fail=["orders"])

        async with app.run_test(size=(100, 35)) as pilot:
            await _settle(app, pilot)

            await pilot.press("l", "j", "enter")
            await _settle(app, pilot)

            row = app.navigator.visible_rows()[1]
            assert row.label == "orders"
            assert row.error is not None
            assert not row.is_expanded
            assert labels(app.navigator.visible_rows()) == ["shop", "orders", "products", "users"]


class TestRefresh:
    """Reloading the whole schema."""

    @pytest.mark.asyncio
    async def test_refresh_keeps_selection_and_expansion(self):
        app, _ = _demo_app()

        async with app.run_test(size=(100, 35)) as pilot:
            await _settle(app, pilot)
            await pilot.press("l", "j", "j")
            assert app.navigator.selected_node().label == "products"

            await pilot.press("f")
            await _settle(app, pilot)

            assert app.navigator.selected_node().label == "products"
            assert labels(app.navigator.visible_rows()) == ["shop", "orders", "products", "users"]

    @pytest.mark.asyncio
    async def test_refresh_restores_loaded_table_and_column_selection(self):
        app, loader = _demo_app()

        async with app.run_test(size=(100, 35)) as pilot:
            await _settle(app, pilot)
            await pilot.press("l", "j", "enter")
            await _settle(app, pilot)
            await pilot.press("j", "j")
            assert app.navigator.selected_node().path == ("db:shop", "table:orders", "column:user_id")

            await pilot.press("f")
            await _settle(app, pilot)
            await _settle(app, pilot)

            assert app.navigator.selected_node().path == ("db:shop", "table:orders", "column:user_id")
            assert labels(app.navigator.visible_rows())[:4] == ["shop", "orders", "id", "user_id"]
            assert loader.calls == [("db:shop", "table:orders"), ("db:shop", "table:orders")]


class TestReloadKey:
    """Reloading the selected branch."""

    @pytest.mark.asyncio
    async def test_reload_on_database_keeps_tables(self):
        app, loader = _demo_app()

        async with app.run_test(size=(100, 35)) as pilot:
            await _settle(app, pilot)
            await pilot.press("l", "r")
            await _settle(app, pilot)

            rows = app.navigator.visible_rows()
            assert labels(rows) == ["shop", "orders", "products", "users"]
            assert rows[0].error is None
            assert loader.calls == []

    @pytest.mark.asyncio
    async def test_reload_on_column_refetches_its_table(self):
        app, loader = _demo_app()

        async with app.run_test(size=(100, 35)) as pilot:
            await _settle(app, pilot)
            await pilot.press("l", "j", "enter")
            await _settle(app, pilot)
            await pilot.press("j", "r")
            await _settle(app, pilot)

            assert app.navigator.selected_node().label == "orders"
            assert labels(app.navigator.visible_rows())[:4] == ["shop", "orders", "id", "user_id"]
            assert loader.calls == [("db:shop", "table:orders"), ("db:shop", "table:orders")]


class TestMouse:
    @pytest.mark.asyncio
    async def test_click_selects_row(self):
        app, _ = _demo_app()

        async with app.run_test(size=(100, 35)) as pilot:
            await _settle(app, pilot)
            await pilot.press("l")

            await pilot.click("#explorer", offset=(3, 3))
            await pilot.pause()

            assert app.navigator.selected_node().label == "products"
