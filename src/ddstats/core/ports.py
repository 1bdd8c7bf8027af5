"""Port interfaces for the export pipeline.

These protocols define the contracts the exporter depends on. Snapshots
coming from any instrumentation library, uploaders and clocks only have to
match these shapes, not subclass anything from this package.
"""

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Protocol, runtime_checkable

from ddstats.core.models import TimeSeriesRecord


@runtime_checkable
class RowLike(Protocol):
    """Shape of one aggregated row as produced by a stats library."""

    @property
    def tags(self) -> Sequence[object]:
        """Tag pairs; each item exposes ``key`` and ``value``."""
        ...

    @property
    def data(self) -> object:
        """The aggregated value (count, sum or last value)."""
        ...


@runtime_checkable
class SnapshotLike(Protocol):
    """Shape of a view snapshot as produced by a stats library."""

    @property
    def name(self) -> str:
        """View name."""
        ...

    @property
    def rows(self) -> Sequence[RowLike]:
        """Aggregated rows."""
        ...

    @property
    def end(self) -> datetime:
        """End of the aggregation window."""
        ...


@runtime_checkable
class SeriesUploaderPort(Protocol):
    """Port for uploading series records to the backend.

    Adapters implementing this protocol perform exactly one network round
    trip per call. Examples: SeriesUploader.
    """

    def upload(self, records: Sequence[TimeSeriesRecord]) -> None:
        """Upload records, raising UploadError on failure."""
        ...


@runtime_checkable
class TimerHandle(Protocol):
    """A pending callback scheduled by a Clock."""

    def cancel(self) -> None:
        """Prevent the callback from running if it has not run yet."""
        ...


@runtime_checkable
class Clock(Protocol):
    """Time source used by the bundler.

    Injected so tests can drive bundle delays without sleeping.
    """

    def monotonic(self) -> float:
        """Return the current time in seconds."""
        ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once after delay seconds."""
        ...


ErrorHandler = Callable[[Exception], None]
