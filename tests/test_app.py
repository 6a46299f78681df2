"""Tests for app.py functionality.

ClipKeepApp inherits from rumps.App, which needs the macOS GUI stack, so these
tests load the module against a stand-in rumps and exercise the callbacks.
"""
import importlib
import sys
import types
from unittest.mock import MagicMock, patch

import pytest

from clipkeep.pasteboard import TYPE_STRING


class _FakeApp:
    def __init__(self, name, title=None, quit_button=None):
        self.name = name
        self.title = title
        self.menu = MagicMock()


class _FakeMenuItem:
    def __init__(self, title, callback=None):
        self.title = title
        self.callback = callback
        self.children = []

    def add(self, item):
        self.children.append(item)


@pytest.fixture
def fake_rumps():
    module = types.ModuleType("rumps")
    module.App = _FakeApp
    module.MenuItem = _FakeMenuItem
    module.Timer = MagicMock()
    module.Window = MagicMock()
    module.alert = MagicMock(return_value=1)
    module.notification = MagicMock()
    module.quit_application = MagicMock()
    with patch.dict(sys.modules, {"rumps": module}):
        sys.modules.pop("clipkeep.app", None)
        yield module
    sys.modules.pop("clipkeep.app", None)


@pytest.fixture
def app(fake_rumps, pasteboard, storage):
    app_module = importlib.import_module("clipkeep.app")
    with (
        patch.object(app_module, "MacPasteboard", return_value=pasteboard),
        patch.object(app_module, "StorageManager", return_value=storage),
        patch.object(app_module, "ensure_dirs"),
    ):
        yield app_module.ClipKeepApp()


def _entry_items(app):
    return [item for item in app.menu if item is not None and getattr(item, "children", None) and item.title not in ("📌 Pinned",)]


def _child(menu_item, title):
    return next(c for c in menu_item.children if c is not None and c.title == title)


class TestStartup:
    def test_poller_started(self, app, fake_rumps):
        fake_rumps.Timer.return_value.start.assert_called_once()

    def test_empty_menu(self, app):
        titles = [item.title for item in app.menu if item is not None]
        assert "(No clipboard history)" in titles


class TestCallbacks:
    def test_new_entry_refreshes_menu(self, app, pasteboard):
        pasteboard.set_text("from clipboard")
        app._poller.poll()
        assert [item.title for item in _entry_items(app)] == ["from clipboard"]

    def test_copy_writes_clipboard_and_notifies(self, app, pasteboard, fake_rumps):
        pasteboard.set_text("copy me")
        app._poller.poll()
        pasteboard.set_text("something else")

        copy_item = _child(_entry_items(app)[0], "Copy")
        copy_item.callback(copy_item)

        assert pasteboard.formats == {TYPE_STRING: b"copy me"}
        fake_rumps.notification.assert_called_once()

    def test_toggle_pin(self, app, pasteboard):
        pasteboard.set_text("pin me")
        app._poller.poll()
        pin_item = _child(_entry_items(app)[0], "Pin")
        pin_item.callback(pin_item)
        assert app._store.get_ordered()[0].pinned is True

    def test_edit(self, app, pasteboard, fake_rumps):
        pasteboard.set_text("draft")
        app._poller.poll()
        fake_rumps.Window.return_value.run.return_value = MagicMock(clicked=1, text="final")

        edit_item = _child(_entry_items(app)[0], "Edit...")
        edit_item.callback(edit_item)

        assert app._store.get_ordered()[0].primary_text == "final"

    def test_delete(self, app, pasteboard):
        pasteboard.set_text("delete me")
        app._poller.poll()
        delete_item = _child(_entry_items(app)[0], "Delete")
        delete_item.callback(delete_item)
        assert len(app._store) == 0

    def test_clear_confirmed(self, app, pasteboard, fake_rumps):
        pasteboard.set_text("x")
        app._poller.poll()
        app._on_clear(None)
        fake_rumps.alert.assert_called_once()
        assert len(app._store) == 0

    def test_clear_cancelled(self, app, pasteboard, fake_rumps):
        pasteboard.set_text("x")
        app._poller.poll()
        fake_rumps.alert.return_value = 0
        app._on_clear(None)
        assert len(app._store) == 1

    def test_quit_stops_polling(self, app, fake_rumps):
        app._on_quit(None)
        assert app._poller.running is False
        fake_rumps.quit_application.assert_called_once()


class TestSearch:
    def test_results_replace_menu(self, app, pasteboard, fake_rumps):
        for text in ("apple pie", "banana", "Apple juice"):
            pasteboard.set_text(text)
            app._poller.poll()
        fake_rumps.Window.return_value.run.return_value = MagicMock(clicked=1, text=" apple ")

        app._on_search(None)

        titles = [item.title for item in app.menu if item is not None]
        assert titles[0] == 'Search: "apple" (2 results)'
        assert [item.title for item in _entry_items(app)] == ["Apple juice", "apple pie"]

    def test_show_all_restores_history(self, app, pasteboard, fake_rumps):
        for text in ("apple", "banana"):
            pasteboard.set_text(text)
            app._poller.poll()
        fake_rumps.Window.return_value.run.return_value = MagicMock(clicked=1, text="apple")
        app._on_search(None)

        show_all = next(item for item in app.menu if item is not None and item.title == "Show All")
        show_all.callback(show_all)

        assert [item.title for item in _entry_items(app)] == ["banana", "apple"]

    def test_no_results_alerts(self, app, pasteboard, fake_rumps):
        pasteboard.set_text("apple")
        app._poller.poll()
        fake_rumps.Window.return_value.run.return_value = MagicMock(clicked=1, text="kiwi")

        app._on_search(None)

        fake_rumps.alert.assert_called_once_with("ClipKeep Search", 'No results for "kiwi"')

    def test_cancelled(self, app, fake_rumps):
        fake_rumps.Window.return_value.run.return_value = MagicMock(clicked=0, text="apple")
        app._on_search(None)
        fake_rumps.alert.assert_not_called()
