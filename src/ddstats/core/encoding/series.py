"""JSON encoder for Datadog series payloads."""

import json
from collections.abc import Iterable

from ddstats.core.models import TimeSeriesRecord


def encode_series(records: Iterable[TimeSeriesRecord]) -> str:
    """Encode series records as a Datadog series request body.

    Args:
        records: An iterable of TimeSeriesRecord objects.

    Returns:
        JSON string of the form {"series": [...]}. Each entry carries
        metric, points ([timestamp, value] pairs), tags and host.
    """
    series = []
    for record in records:
        series.append(
            {
                "metric": record.metric,
                "points": [[timestamp, value] for timestamp, value in record.points],
                "tags": list(record.tags),
                "host": record.host,
            }
        )

    return json.dumps({"series": series})
