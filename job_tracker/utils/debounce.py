"""Debounced scheduling for high-frequency input such as search keystrokes."""
import threading
from typing import Any, Callable, Optional

from .logging import get_logger

logger = get_logger("debounce")


class Debouncer:
    """Collapse bursts of calls into one call fired after a quiet window.

    Only one task is pending at a time; a newer trigger cancels the older one.
    The task runs on a timer thread, so the callback must not block.
    """

    def __init__(
        self,
        callback: Callable[..., Any],
        delay: float = 0.2,
        timer_factory: Callable[..., Any] = threading.Timer
    ):
        """
        Initialize debouncer.

        Args:
            callback: Function to call once input settles
            delay: Quiet window in seconds
            timer_factory: Builds the scheduled task (threading.Timer signature)
        """
        self.callback = callback
        self.delay = delay
        self._timer_factory = timer_factory
        self._timer: Optional[Any] = None
        self._pending_args: tuple = ()
        self._pending_kwargs: dict = {}
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def trigger(self, *args, **kwargs):
        """Schedule the callback, superseding any pending call."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()

            self._pending_args = args
            self._pending_kwargs = kwargs
            self._generation += 1
            timer = self._timer_factory(self.delay, self._fire, args=(self._generation,))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self):
        """Drop the pending call, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
                logger.debug("Pending call cancelled")

    def flush(self) -> bool:
        """Run the pending call now instead of waiting for the window.

        Returns:
            bool: True if a pending call was executed
        """
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
            args, kwargs = self._pending_args, self._pending_kwargs

        self.callback(*args, **kwargs)
        return True

    def _fire(self, generation: int):
        with self._lock:
            # A superseded timer may still wake up after cancel()
            if self._timer is None or generation != self._generation:
                return
            self._timer = None
            args, kwargs = self._pending_args, self._pending_kwargs

        self.callback(*args, **kwargs)
