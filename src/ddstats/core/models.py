"""Core domain models for view snapshots and Datadog series."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Tag:
    """A single tag key/value pair attached to a row."""

    key: str
    value: str


@dataclass(frozen=True)
class CountData:
    """Number of measurements recorded in the aggregation window."""

    value: int


@dataclass(frozen=True)
class SumData:
    """Sum of the measurements recorded in the aggregation window."""

    value: float


@dataclass(frozen=True)
class LastValueData:
    """Most recent measurement recorded in the aggregation window."""

    value: float


AggregationData = CountData | SumData | LastValueData


@dataclass(frozen=True)
class Row:
    """Aggregated value for one unique combination of tags.

    Attributes:
        tags: Tag pairs in the order the view declares its keys.
        data: The aggregated value. Kinds other than count, sum and
            last value are carried but never converted.
    """

    tags: tuple[Tag, ...]
    data: object


@dataclass(frozen=True)
class ViewSnapshot:
    """One observation batch for a single named view.

    Attributes:
        name: View name, usually slash separated (e.g. "http/client/latency").
        rows: Aggregated rows, one per tag combination.
        end: End of the aggregation window.
    """

    name: str
    rows: tuple[Row, ...]
    end: datetime


@dataclass(frozen=True)
class TimeSeriesRecord:
    """A Datadog series entry.

    Attributes:
        metric: Normalized metric name (e.g. "http.client.latency").
        points: (unix seconds, value) pairs.
        tags: "key:value" strings.
        host: Host the series is reported from.
    """

    metric: str
    points: tuple[tuple[int, float], ...] = ()
    tags: tuple[str, ...] = field(default_factory=tuple)
    host: str = ""
