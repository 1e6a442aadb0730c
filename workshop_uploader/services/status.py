"""Status Reporter - the single human-readable status line."""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..utils.events import EventEmitter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusMessage:
    """A status line as shown to the user."""
    text: str
    url: Optional[str] = None
    timestamp: float = 0.0

    @property
    def has_action(self) -> bool:
        return bool(self.url)


class StatusReporter:
    """
    Deduplicates, timestamps and logs status messages.

    A message identical to the one currently shown is suppressed until
    more than `interval` seconds have passed since it was shown. Each
    shown message replaces the follow-up URL (cleared if none given).

    Subscribe with `reporter.events.on("status", callback)`; the callback
    receives the StatusMessage.
    """

    def __init__(self, interval: float = 0.5, clock: Callable[[], float] = time.monotonic):
        self._interval = interval
        self._clock = clock
        self._current: Optional[StatusMessage] = None
        self.events = EventEmitter()

    @property
    def current(self) -> Optional[StatusMessage]:
        return self._current

    @property
    def action_url(self) -> Optional[str]:
        return self._current.url if self._current else None

    def report(self, message: str, url: Optional[str] = None, level: int = logging.INFO) -> bool:
        """Show a message. Returns False when it was suppressed as a repeat."""
        now = self._clock()
        last = self._current
        if last is not None and last.text == message and now - last.timestamp <= self._interval:
            return False

        self._current = StatusMessage(text=message, url=url or None, timestamp=now)
        if url:
            logger.log(level, "%s (%s)", message, url)
        else:
            logger.log(level, message)
        self.events.emit("status", self._current)
        return True

    def error(self, message: str, url: Optional[str] = None) -> bool:
        return self.report(message, url=url, level=logging.WARNING)
