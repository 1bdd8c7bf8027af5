"""Wall-clock implementation of the Clock port."""

import threading
import time
from collections.abc import Callable


class SystemClock:
    """Clock backed by time.monotonic() and threading.Timer."""

    def monotonic(self) -> float:
        """Return the current monotonic time in seconds."""
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        """Run callback on a daemon timer thread after delay seconds."""
        timer = threading.Timer(max(delay, 0.0), callback)
        timer.daemon = True
        timer.start()
        return timer
