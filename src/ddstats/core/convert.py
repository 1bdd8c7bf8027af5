"""Conversion of view snapshots into Datadog series records.

All functions here are pure apart from hostname resolution, which is
isolated in resolve_hostname() so callers can pass a host explicitly.
"""

import logging
import socket
from collections.abc import Iterable, Sequence
from datetime import datetime

from ddstats.core.models import AggregationData, TimeSeriesRecord
from ddstats.core.ports import SnapshotLike

logger = logging.getLogger(__name__)

# Datadog metric names use dots where view names use slashes
_PATH_SEPARATOR = "/"
_METRIC_SEPARATOR = "."


def normalize_metric_name(view_name: str) -> str:
    """Replace path separators in a view name with Datadog's separator.

    Args:
        view_name: View name such as "grpc.io/client/latency".

    Returns:
        Name with every "/" replaced by "." (e.g. "grpc.io.client.latency").
    """
    return view_name.replace(_PATH_SEPARATOR, _METRIC_SEPARATOR)


def format_tags(tags: Iterable[object]) -> list[str]:
    """Render tag pairs as "key:value" strings, preserving order."""
    return [f"{tag.key}:{tag.value}" for tag in tags]  # type: ignore[attr-defined]


def data_point(data: object, end: datetime) -> tuple[int, float] | None:
    """Build the (timestamp, value) point for an aggregated value.

    Args:
        data: Count, sum or last-value data.
        end: End of the aggregation window; truncated to whole seconds.

    Returns:
        The point, or None if the data kind is not recognized.
    """
    timestamp = int(end.timestamp())
    if isinstance(data, AggregationData):
        return (timestamp, float(data.value))
    return None


def resolve_hostname() -> str:
    """Return this machine's hostname, or "" if it cannot be determined."""
    try:
        return socket.gethostname()
    except OSError:
        return ""


def convert_snapshot(snapshot: SnapshotLike, host: str) -> list[TimeSeriesRecord]:
    """Convert one snapshot into one record per convertible row.

    Rows whose data kind is not recognized are omitted rather than sent
    as series without points.
    """
    metric = normalize_metric_name(snapshot.name)
    logger.debug("Converting view %s to metric %s", snapshot.name, metric)

    records: list[TimeSeriesRecord] = []
    for row in snapshot.rows:
        point = data_point(row.data, snapshot.end)
        if point is None:
            logger.debug(
                "Dropping row of %s with unsupported data %s",
                metric,
                type(row.data).__name__,
            )
            continue
        records.append(
            TimeSeriesRecord(
                metric=metric,
                points=(point,),
                tags=tuple(format_tags(row.tags)),
                host=host,
            )
        )
    return records


def convert_snapshots(
    snapshots: Sequence[SnapshotLike],
    host: str | None = None,
) -> list[TimeSeriesRecord]:
    """Convert snapshots into a single combined list of records.

    Args:
        snapshots: Snapshots in bundle order.
        host: Host to report; resolved from the OS when None.

    Returns:
        Records for all snapshots, in input order.
    """
    if host is None:
        host = resolve_hostname()

    records: list[TimeSeriesRecord] = []
    for snapshot in snapshots:
        records.extend(convert_snapshot(snapshot, host))
    return records
