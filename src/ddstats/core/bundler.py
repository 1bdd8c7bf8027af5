"""Count and time bounded batching of arbitrary items.

A Bundler accepts weighted items from any number of producer threads and
hands them to a handler in bundles. A bundle is released when its
accumulated weight reaches the count threshold or when the delay threshold
has elapsed since its first item was added, whichever comes first.

Producers only take a short lock to admit an item. Everything else (the
open bundle, the delay timer, handler calls) is owned by one dispatcher
thread that reads messages from a queue. Timer expiry arrives as a message
too, so the order of releases, flushes and deadlines is the order of the
queue.
"""

import logging
import queue
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import partial
from typing import Generic, TypeVar

from ddstats.core.clock import SystemClock
from ddstats.core.errors import (
    BundlerClosedError,
    BundlerOverflowError,
    OversizedItemError,
)
from ddstats.core.ports import Clock, TimerHandle

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DELAY_THRESHOLD = 1.0
DEFAULT_COUNT_THRESHOLD = 10
DEFAULT_BUFFERED_WEIGHT_LIMIT = 1e9


@dataclass(frozen=True)
class _Item(Generic[T]):
    item: T
    weight: float


@dataclass(frozen=True)
class _Deadline:
    generation: int


@dataclass(frozen=True)
class _Flush:
    done: threading.Event = field(default_factory=threading.Event)


@dataclass(frozen=True)
class _Stop:
    pass


class Bundler(Generic[T]):
    """Groups items into bundles and passes each bundle to a handler.

    Args:
        handler: Called with each released bundle, in release order, one
            call at a time on the dispatcher thread.
        delay_threshold: Seconds a bundle may stay open after its first
            item. Non-positive values select the default (1s).
        count_threshold: Weight at which a bundle is released immediately.
            Non-positive values select the default (10).
        bundle_weight_limit: Maximum weight of a single bundle, 0 for no
            limit. Items heavier than this are rejected as oversized.
        buffered_weight_limit: Maximum weight held by the bundler at once,
            counting the open bundle and bundles waiting for or inside the
            handler. Non-positive values select the default (1e9).
        clock: Time source for delay timers. Defaults to SystemClock.

    Example:
        ```python
        bundler = Bundler(upload, delay_threshold=5.0, count_threshold=100)
        bundler.add(snapshot, 1)
        bundler.flush()
        ```
    """

    def __init__(
        self,
        handler: Callable[[list[T]], None],
        *,
        delay_threshold: float = DEFAULT_DELAY_THRESHOLD,
        count_threshold: float = DEFAULT_COUNT_THRESHOLD,
        bundle_weight_limit: float = 0,
        buffered_weight_limit: float = DEFAULT_BUFFERED_WEIGHT_LIMIT,
        clock: Clock | None = None,
    ) -> None:
        self._handler = handler
        self.delay_threshold = (
            delay_threshold if delay_threshold > 0 else DEFAULT_DELAY_THRESHOLD
        )
        self.count_threshold = (
            count_threshold if count_threshold > 0 else DEFAULT_COUNT_THRESHOLD
        )
        self.bundle_weight_limit = max(bundle_weight_limit, 0)
        self.buffered_weight_limit = (
            buffered_weight_limit
            if buffered_weight_limit > 0
            else DEFAULT_BUFFERED_WEIGHT_LIMIT
        )
        self._clock: Clock = clock or SystemClock()

        # Shared with producers, guarded by _lock
        self._lock = threading.Lock()
        self._buffered_weight = 0.0
        self._closed = False
        self._inbox: queue.SimpleQueue[_Item[T] | _Deadline | _Flush | _Stop] = (
            queue.SimpleQueue()
        )

        # Owned by the dispatcher thread
        self._open: list[T] = []
        self._open_weight = 0.0
        self._generation = 0
        self._timer: TimerHandle | None = None
        self._opened_at = 0.0

        self._thread = threading.Thread(
            target=self._run, name="ddstats-bundler", daemon=True
        )
        self._thread.start()

    @property
    def buffered_weight(self) -> float:
        """Total weight of items added but not yet through the handler."""
        with self._lock:
            return self._buffered_weight

    def add(self, item: T, weight: float = 1) -> None:
        """Add an item to the open bundle.

        Never waits for the handler.

        Raises:
            BundlerClosedError: close() has been called.
            OversizedItemError: The item alone exceeds bundle_weight_limit
                or buffered_weight_limit. The item is not queued.
            BundlerOverflowError: The bundler already holds too much weight
                to accept the item. The item is dropped.
        """
        with self._lock:
            if self._closed:
                raise BundlerClosedError("bundler is closed")
            if weight > self.buffered_weight_limit or (
                self.bundle_weight_limit and weight > self.bundle_weight_limit
            ):
                raise OversizedItemError(f"item weight {weight} exceeds bundle limit")
            if self._buffered_weight + weight > self.buffered_weight_limit:
                raise BundlerOverflowError(
                    f"buffered weight {self._buffered_weight} + {weight} "
                    f"exceeds limit {self.buffered_weight_limit}"
                )
            self._buffered_weight += weight
            self._inbox.put(_Item(item, weight))

    def flush(self) -> None:
        """Block until every item added so far has been handled.

        Releases the open bundle even if neither threshold has been
        reached. Does nothing if no items are pending. When called from
        inside the handler, releases the open bundle inline and returns
        without waiting for queued items.
        """
        if self._on_dispatcher():
            self._release()
            return

        message = _Flush()
        with self._lock:
            closed = self._closed
            if not closed:
                self._inbox.put(message)
        if closed:
            self._thread.join()
            return
        message.done.wait()

    def close(self) -> None:
        """Flush pending items and stop the dispatcher thread.

        Safe to call more than once. add() raises BundlerClosedError
        afterwards.
        """
        with self._lock:
            if not self._closed:
                self._closed = True
                self._inbox.put(_Stop())
        # From inside the handler the dispatcher stops once the handler returns
        if not self._on_dispatcher():
            self._thread.join()

    def _on_dispatcher(self) -> bool:
        return threading.current_thread() is self._thread

    def _run(self) -> None:
        while True:
            message = self._inbox.get()
            if isinstance(message, _Item):
                self._accept(message.item, message.weight)
            elif isinstance(message, _Deadline):
                # Deadlines armed for an already released bundle are stale
                if message.generation == self._generation:
                    logger.debug("Delay threshold reached for bundle")
                    self._release()
            elif isinstance(message, _Flush):
                self._release()
                message.done.set()
            elif isinstance(message, _Stop):
                self._release()
                return

    def _accept(self, item: T, weight: float) -> None:
        if (
            self.bundle_weight_limit
            and self._open
            and self._open_weight + weight > self.bundle_weight_limit
        ):
            self._release()

        if not self._open:
            self._opened_at = self._clock.monotonic()
            self._timer = self._clock.call_later(
                self.delay_threshold,
                partial(self._inbox.put, _Deadline(self._generation)),
            )

        self._open.append(item)
        self._open_weight += weight

        if self._open_weight >= self.count_threshold:
            logger.debug("Count threshold reached for bundle")
            self._release()

    def _release(self) -> None:
        if not self._open:
            return

        bundle, weight = self._open, self._open_weight
        self._open = []
        self._open_weight = 0.0
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        logger.debug(
            "Releasing bundle of %d items (weight %s) after %.3fs",
            len(bundle),
            weight,
            self._clock.monotonic() - self._opened_at,
        )
        try:
            self._handler(bundle)
        except Exception:
            logger.exception("Bundle handler raised")
        finally:
            with self._lock:
                self._buffered_weight -= weight
