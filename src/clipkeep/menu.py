"""Menu layout for the menu bar app, kept free of rumps so it can be tested."""

from collections.abc import Callable
from dataclasses import dataclass

from clipkeep import __version__
from clipkeep.config import MENU_DISPLAY_COUNT, PREVIEW_LENGTH
from clipkeep.models import ClipboardEntry, ContentType
from clipkeep.utils import truncate_text

Callback = Callable[[object], None]


@dataclass
class MenuItemSpec:
    """Specification for a menu item, separating logic from rumps rendering."""

    title: str
    callback: Callback | None = None
    entry_id: str | None = None
    is_submenu: bool = False
    children: list["MenuItemSpec | None"] | None = None


@dataclass
class MenuActions:
    on_copy: Callback
    on_toggle_pin: Callback
    on_edit: Callback
    on_delete: Callback
    on_clear: Callback
    on_quit: Callback
    on_search: Callback | None = None
    on_show_all: Callback | None = None


def display_title(entry: ClipboardEntry) -> str:
    title = truncate_text(entry.primary_text, PREVIEW_LENGTH)
    if entry.content_type == ContentType.IMAGE:
        return f"🖼 {title}"
    if entry.content_type == ContentType.RICH_TEXT:
        return f"¶ {title}"
    return title


def entry_spec(entry: ClipboardEntry, actions: MenuActions) -> MenuItemSpec:
    children: list[MenuItemSpec | None] = [
        MenuItemSpec("Copy", callback=actions.on_copy, entry_id=entry.id),
        MenuItemSpec("Unpin" if entry.pinned else "Pin", callback=actions.on_toggle_pin, entry_id=entry.id),
    ]
    if entry.content_type == ContentType.TEXT:
        children.append(MenuItemSpec("Edit...", callback=actions.on_edit, entry_id=entry.id))
    children.extend([
        None,  # separator
        MenuItemSpec("Delete", callback=actions.on_delete, entry_id=entry.id),
    ])
    return MenuItemSpec(display_title(entry), entry_id=entry.id, is_submenu=True, children=children)


def compute_menu_specs(
    entries: list[ClipboardEntry],
    actions: MenuActions,
    display_count: int = MENU_DISPLAY_COUNT,
) -> list[MenuItemSpec | None]:
    """Compute the top-level menu from history in display order."""
    specs: list[MenuItemSpec | None] = [
        MenuItemSpec(f"ClipKeep v{__version__} - Clipboard History"),
        None,  # separator
    ]
    if actions.on_search is not None:
        specs.extend([MenuItemSpec("Search...", callback=actions.on_search), None])

    pinned = [e for e in entries if e.pinned]
    recent = [e for e in entries if not e.pinned][:display_count]

    if pinned:
        pinned_children = _dedupe_titles([entry_spec(e, actions) for e in pinned])
        specs.append(MenuItemSpec("📌 Pinned", is_submenu=True, children=pinned_children))
        specs.append(None)

    if not entries:
        specs.append(MenuItemSpec("(No clipboard history)"))
    else:
        specs.extend(entry_spec(e, actions) for e in recent)

    specs.extend([
        None,  # separator
        MenuItemSpec("Clear History", callback=actions.on_clear),
        None,  # separator
        MenuItemSpec("Quit ClipKeep", callback=actions.on_quit),
    ])
    return _dedupe_titles(specs)


def compute_search_results_specs(
    query: str,
    results: list[ClipboardEntry],
    actions: MenuActions,
    display_count: int = MENU_DISPLAY_COUNT,
) -> list[MenuItemSpec | None]:
    """Compute the menu shown in place of the history while a search is active."""
    shown = results[:display_count]
    specs: list[MenuItemSpec | None] = [
        MenuItemSpec(f'Search: "{query}" ({len(results)} results)'),
        None,
        MenuItemSpec("Show All", callback=actions.on_show_all),
        None,
    ]
    specs.extend(entry_spec(e, actions) for e in shown)
    specs.extend([
        None,
        MenuItemSpec("Quit ClipKeep", callback=actions.on_quit),
    ])
    return _dedupe_titles(specs)


def _dedupe_titles(specs: list[MenuItemSpec | None]) -> list[MenuItemSpec | None]:
    """Suffix repeated titles with a short entry id; rumps keys menu items by title."""
    seen = {spec.title for spec in specs if spec is not None and not spec.entry_id}
    for spec in specs:
        if spec is None or not spec.entry_id:
            continue
        title = spec.title
        if title in seen:
            title = f"{spec.title} ({spec.entry_id[:8]})"
        counter = 2
        while title in seen:
            title = f"{spec.title} ({counter})"
            counter += 1
        spec.title = title
        seen.add(title)
    return specs
