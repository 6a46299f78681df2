import logging
from collections.abc import Callable
from typing import Any

from clipkeep.capture import peek
from clipkeep.config import POLL_INTERVAL
from clipkeep.history import HistoryStore
from clipkeep.models import ContentType
from clipkeep.pasteboard import Pasteboard
from clipkeep.suppressor import ChangeSuppressor

logger = logging.getLogger(__name__)

TimerFactory = Callable[[Callable[[Any], None], float], Any]


def _rumps_timer(callback: Callable[[Any], None], interval: float):
    import rumps

    return rumps.Timer(callback, interval)


class ClipboardPoller:
    def __init__(
        self,
        store: HistoryStore,
        pasteboard: Pasteboard,
        suppressor: ChangeSuppressor,
        interval: float = POLL_INTERVAL,
        timer_factory: TimerFactory | None = None,
    ):
        self._store = store
        self._pasteboard = pasteboard
        self._suppressor = suppressor
        self._interval = interval
        self._timer_factory = timer_factory or _rumps_timer
        self._timer = None
        self._polling = False
        # Last payload seen per kind. An unchanged payload of any kind is not a new copy.
        self._last_seen: dict[ContentType, bytes] = {}

    @property
    def running(self) -> bool:
        return self._timer is not None

    def start(self) -> None:
        if self._timer is not None:
            return
        logger.info("Starting clipboard monitoring every %.2fs", self._interval)
        self._timer = self._timer_factory(self._on_tick, self._interval)
        self._timer.start()

    def stop(self) -> None:
        if self._timer is None:
            return
        logger.info("Stopping clipboard monitoring")
        self._timer.stop()
        self._timer = None

    def _on_tick(self, _sender) -> None:
        self.poll()

    def poll(self) -> bool:
        """Run one observation cycle. Returns True if an entry was recorded."""
        if self._polling:
            return False
        self._polling = True
        try:
            return self._check_clipboard()
        except Exception:
            logger.exception("Error reading clipboard")
            return False
        finally:
            self._polling = False

    def _check_clipboard(self) -> bool:
        if self._suppressor.consume():
            current = peek(self._pasteboard)
            if current is not None:
                kind, data = current
                self._last_seen[kind] = data
            logger.debug("Ignoring clipboard change written by the app")
            return False

        current = peek(self._pasteboard)
        if current is None:
            return False
        kind, data = current
        if self._last_seen.get(kind) == data:
            return False

        self._last_seen[kind] = data
        return self._store.add_from_observation(self._pasteboard) is not None
