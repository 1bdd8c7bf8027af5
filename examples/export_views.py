"""Example: periodically export view snapshots to Datadog.

Simulates a stats library that reports three views every second: the last
processed video size, the number of videos processed in the period and the
cumulative count. Run with a real key:

    DD_API_KEY=... python examples/export_views.py
"""

import logging
import os
import time
from datetime import datetime, timezone

from ddstats import (
    CountData,
    Exporter,
    ExporterOptions,
    LastValueData,
    Row,
    SumData,
    Tag,
    ViewSnapshot,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("export_views")


def report(exporter: Exporter, i: int) -> None:
    """Export one reporting period worth of snapshots."""
    now = datetime.now(timezone.utc)
    tags = (Tag("local_testing", "laptop"), Tag("exporter", "datadog"))

    exporter.export_view(
        ViewSnapshot(
            name="view/video_size",
            rows=(Row(tags=tags, data=LastValueData(float(i * 10))),),
            end=now,
        )
    )
    exporter.export_view(
        ViewSnapshot(
            name="view/video_count",
            rows=(Row(tags=tags[:1], data=CountData(1)),),
            end=now,
        )
    )
    exporter.export_view(
        ViewSnapshot(
            name="view/video_count_cum",
            rows=(Row(tags=tags, data=SumData(float(i + 1))),),
            end=now,
        )
    )


def main() -> None:
    with Exporter(
        ExporterOptions(
            api_key=os.environ.get("DD_API_KEY", "some-api-key"),
            bundle_delay_threshold=5.0,
            bundle_count_threshold=30,
        )
    ) as exporter:
        for i in range(20):
            report(exporter, i)
            time.sleep(1)
        logger.info("Flushing remaining metrics")
    logger.info("All metrics flushed")


if __name__ == "__main__":
    main()
