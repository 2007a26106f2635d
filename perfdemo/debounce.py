# perfdemo/debounce.py
import asyncio
import logging
import time

from .constants import DEBOUNCE_SECONDS
from .errors import DebouncerDisposedError

logger = logging.getLogger(__name__)


class Debouncer:
    """Coalesce rapid triggers and run only the last callback after a quiet period.

    ``loop`` is anything exposing ``call_later(delay, callback, *args)`` that
    returns a cancellable handle; an asyncio event loop in practice. When it
    is omitted the running loop is looked up on each trigger.
    """

    def __init__(self, delay: float = DEBOUNCE_SECONDS, loop=None):
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self._delay = delay
        self._loop = loop
        self._handle = None
        self._callback = None
        self._disposed = False

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def trigger(self, callback) -> None:
        if self._disposed:
            logger.error("Debouncer triggered after dispose")
            raise DebouncerDisposedError("cannot trigger a disposed Debouncer")
        # Look the loop up first so a failure leaves the current schedule intact
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
            logger.debug("Debounce reset, previous callback dropped")
        self._callback = callback
        self._handle = loop.call_later(self._delay, self._fire)

    __call__ = trigger

    def _fire(self) -> None:
        callback = self._callback
        self._handle = None
        self._callback = None
        logger.debug("Debounce fired after %.3fs of quiet", self._delay)
        # Exceptions go to the loop's exception handler
        callback()

    def dispose(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            logger.debug("Debouncer disposed, pending callback cancelled")
        self._handle = None
        self._callback = None
        self._disposed = True


def debounce(delay: float, callback, loop=None):
    """Return a zero-argument function that debounces ``callback``."""
    debouncer = Debouncer(delay, loop=loop)

    def trigger():
        debouncer.trigger(callback)

    trigger.debouncer = debouncer
    return trigger


class Throttler:
    """Run a callback at most once per ``interval``; extra calls are dropped."""

    def __init__(self, interval: float, clock=time.monotonic):
        if interval < 0:
            raise ValueError(f"interval must be >= 0, got {interval}")
        self.interval = interval
        self._clock = clock
        self._last_run = None

    def __call__(self, callback) -> bool:
        now = self._clock()
        if self._last_run is not None and now - self._last_run < self.interval:
            logger.debug("Throttled call dropped")
            return False
        self._last_run = now
        callback()
        return True
