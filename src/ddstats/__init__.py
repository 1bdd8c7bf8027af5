"""ddstats - Datadog exporter for aggregated view statistics."""

from ddstats.adapters.http import SeriesUploader
from ddstats.core.bundler import Bundler
from ddstats.core.convert import convert_snapshots, normalize_metric_name
from ddstats.core.errors import (
    BundlerClosedError,
    BundlerError,
    BundlerOverflowError,
    ConfigurationError,
    DDStatsError,
    ExportError,
    OversizedItemError,
    UploadError,
)
from ddstats.core.models import (
    CountData,
    LastValueData,
    Row,
    SumData,
    Tag,
    TimeSeriesRecord,
    ViewSnapshot,
)
from ddstats.exporter import Exporter, ExporterOptions

__all__ = [
    # Exporter
    "Exporter",
    "ExporterOptions",
    # Pipeline pieces
    "Bundler",
    "SeriesUploader",
    "convert_snapshots",
    "normalize_metric_name",
    # Models
    "CountData",
    "LastValueData",
    "Row",
    "SumData",
    "Tag",
    "TimeSeriesRecord",
    "ViewSnapshot",
    # Errors
    "BundlerClosedError",
    "BundlerError",
    "BundlerOverflowError",
    "ConfigurationError",
    "DDStatsError",
    "ExportError",
    "OversizedItemError",
    "UploadError",
]
