import logging
import time
from collections.abc import Callable

from clipkeep.config import SUPPRESS_TIMEOUT

logger = logging.getLogger(__name__)


class ChangeSuppressor:
    """Swallows the next clipboard observation after the app writes the clipboard.

    ``arm()`` moves to the armed state with a deadline. The next poll consumes
    it; if nothing does before the deadline, it drops back to idle on its own
    so a write that never lands cannot hide a later user copy.
    """

    def __init__(self, timeout: float = SUPPRESS_TIMEOUT, clock: Callable[[], float] = time.monotonic):
        self._timeout = timeout
        self._clock = clock
        self._deadline: float | None = None

    def arm(self) -> None:
        self._deadline = self._clock() + self._timeout
        logger.debug("Suppressing next clipboard change for %.2fs", self._timeout)

    @property
    def armed(self) -> bool:
        if self._deadline is None:
            return False
        if self._clock() >= self._deadline:
            logger.debug("Clipboard suppression expired unused")
            self._deadline = None
            return False
        return True

    def consume(self) -> bool:
        if not self.armed:
            return False
        self._deadline = None
        return True

    def reset(self) -> None:
        self._deadline = None
