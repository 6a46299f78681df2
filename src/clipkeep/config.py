import os
from pathlib import Path

DATA_DIR = Path(os.environ.get("CLIPKEEP_DATA_DIR", Path.home() / ".local" / "share" / "clipkeep"))
HISTORY_PATH = DATA_DIR / "history.json"
LOG_PATH = DATA_DIR / "clipkeep.log"

POLL_INTERVAL = 0.5  # seconds between clipboard checks
SUPPRESS_TIMEOUT = 1.0  # must outlast one poll interval
MAX_TEXT_SIZE = 1_000_000  # 1MB text limit
MAX_IMAGE_SIZE = 10_000_000  # 10MB image limit
PREVIEW_LENGTH = 60  # characters shown in menu item


def _parse_int_env(name: str, default: int, minimum: int, maximum: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, min(maximum, value))


def _parse_max_history_items() -> int:
    return _parse_int_env("CLIPKEEP_MAX_HISTORY_ITEMS", 50, 1, 1000)


def _parse_menu_display_count() -> int:
    return _parse_int_env("CLIPKEEP_MENU_DISPLAY_COUNT", 10, 5, 50)


def _parse_notifications() -> bool:
    raw = os.environ.get("CLIPKEEP_NOTIFICATIONS")
    if raw is None:
        return True
    return raw.strip().lower() not in ("0", "false", "no", "off")


MAX_HISTORY_ITEMS = _parse_max_history_items()  # pinned entries count against this
MENU_DISPLAY_COUNT = _parse_menu_display_count()
SHOW_NOTIFICATIONS = _parse_notifications()
