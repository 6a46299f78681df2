import logging

import rumps

from clipkeep.config import MAX_HISTORY_ITEMS, SHOW_NOTIFICATIONS
from clipkeep.history import HistoryStore
from clipkeep.menu import MenuActions, MenuItemSpec, compute_menu_specs, compute_search_results_specs
from clipkeep.monitor import ClipboardPoller
from clipkeep.pasteboard import MacPasteboard
from clipkeep.storage import StorageManager
from clipkeep.suppressor import ChangeSuppressor
from clipkeep.utils import ensure_dirs, truncate_text

logger = logging.getLogger(__name__)


class ClipKeepApp(rumps.App):
    def __init__(self):
        super().__init__("ClipKeep", title="📋", quit_button=None)
        self._init_app()

    def _init_app(self) -> None:
        """Initialize app components. Separated for testability."""
        ensure_dirs()
        self._pasteboard = MacPasteboard()
        self._suppressor = ChangeSuppressor()
        self._store = HistoryStore(
            StorageManager(),
            self._pasteboard,
            self._suppressor,
            max_items=MAX_HISTORY_ITEMS,
            on_change=self._refresh_menu,
        )
        self._poller = ClipboardPoller(self._store, self._pasteboard, self._suppressor)
        self._actions = MenuActions(
            on_copy=self._on_copy,
            on_toggle_pin=self._on_toggle_pin,
            on_edit=self._on_edit,
            on_delete=self._on_delete,
            on_clear=self._on_clear,
            on_quit=self._on_quit,
            on_search=self._on_search,
            on_show_all=lambda _: self._refresh_menu(),
        )
        self._build_menu()
        self._poller.start()

    def _build_menu(self) -> None:
        self._render_menu_specs(compute_menu_specs(self._store.get_ordered(), self._actions))

    def _render_menu_specs(self, specs: list[MenuItemSpec | None]) -> None:
        self.menu.clear()
        self.menu = [self._render_single_spec(spec) for spec in specs]

    def _render_single_spec(self, spec: MenuItemSpec | None) -> rumps.MenuItem | None:
        if spec is None:
            return None

        if spec.is_submenu and spec.children:
            submenu = rumps.MenuItem(spec.title)
            for child in spec.children:
                submenu.add(self._render_single_spec(child))
            return submenu

        item = rumps.MenuItem(spec.title, callback=spec.callback)
        item._entry_id = spec.entry_id
        return item

    def _refresh_menu(self) -> None:
        self._build_menu()

    def _on_copy(self, sender) -> None:
        entry = self._store.get_entry(getattr(sender, "_entry_id", None))
        if entry is None:
            return
        if self._store.copy_to_system_clipboard(entry.id) and SHOW_NOTIFICATIONS:
            rumps.notification("ClipKeep", "", "Copied to clipboard", sound=False)

    def _on_toggle_pin(self, sender) -> None:
        pinned = self._store.toggle_pin(getattr(sender, "_entry_id", None))
        if pinned is not None and SHOW_NOTIFICATIONS:
            rumps.notification("ClipKeep", "", "Pinned" if pinned else "Unpinned", sound=False)

    def _on_edit(self, sender) -> None:
        entry = self._store.get_entry(getattr(sender, "_entry_id", None))
        if entry is None:
            return

        response = rumps.Window(
            message=f"Edit: {truncate_text(entry.primary_text, 40)}",
            title="ClipKeep",
            default_text=entry.primary_text,
            ok="Save",
            cancel="Cancel",
            dimensions=(320, 120),
        ).run()

        if response.clicked and response.text != entry.primary_text:
            self._store.update_content(entry.id, response.text)

    def _on_search(self, _sender) -> None:
        response = rumps.Window(
            message="Search clipboard history:",
            title="ClipKeep Search",
            default_text="",
            ok="Search",
            cancel="Cancel",
            dimensions=(300, 24),
        ).run()

        if response.clicked and response.text.strip():
            query = response.text.strip()
            results = self._store.search(query)

            if not results:
                rumps.alert("ClipKeep Search", f'No results for "{query}"')
                return

            self._render_menu_specs(compute_search_results_specs(query, results, self._actions))

    def _on_delete(self, sender) -> None:
        self._store.delete(getattr(sender, "_entry_id", None))

    def _on_clear(self, _sender) -> None:
        if rumps.alert("ClipKeep", "Clear all clipboard history?", ok="Clear", cancel="Cancel"):
            self._store.clear()

    def _on_quit(self, _sender) -> None:
        self._poller.stop()
        rumps.quit_application()
