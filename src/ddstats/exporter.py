"""Datadog exporter for view snapshots.

The exporter is the entry point registered with an instrumentation library.
Snapshots are batched by a Bundler, converted to series records and uploaded
in one request per bundle. Errors after construction go to the error
handler and never reach the caller.
"""

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from types import TracebackType

import httpx

from ddstats.adapters.http import DEFAULT_SERIES_URL, SeriesUploader
from ddstats.adapters.logging import log_export_error
from ddstats.core.bundler import Bundler
from ddstats.core.convert import convert_snapshots
from ddstats.core.errors import (
    BundlerError,
    BundlerOverflowError,
    ConfigurationError,
    ExportError,
    OversizedItemError,
)
from ddstats.core.ports import Clock, ErrorHandler, SeriesUploaderPort, SnapshotLike

logger = logging.getLogger(__name__)


@dataclass
class ExporterOptions:
    """Options for configuring the exporter.

    Attributes:
        api_key: Datadog API key. Required.
        http_client: httpx client used for uploads. A client owned by the
            exporter is created when omitted.
        on_error: Called with every error raised while exporting. When
            set, errors are no longer logged.
        bundle_delay_threshold: Max seconds snapshots wait before upload.
        bundle_count_threshold: Max snapshots buffered before upload.
        api_url: Datadog series endpoint.
        hostname: Host reported on every series. Resolved from the OS
            when None.
    """

    api_key: str
    http_client: httpx.Client | None = None
    on_error: ErrorHandler | None = None
    bundle_delay_threshold: float = 0
    bundle_count_threshold: int = 0
    api_url: str = DEFAULT_SERIES_URL
    hostname: str | None = None

    def handle_error(self, error: Exception) -> None:
        """Send error to on_error, or log it if no hook is configured.

        Exceptions raised by on_error are logged and not propagated.
        """
        if self.on_error is not None:
            try:
                self.on_error(error)
            except Exception:
                logger.exception("Error handler raised")
            return
        log_export_error(error)


class Exporter:
    """Uploads view snapshots to Datadog.

    Example:
        ```python
        from ddstats import Exporter, ExporterOptions

        exporter = Exporter(ExporterOptions(api_key="..."))
        exporter.export_view(snapshot)
        exporter.flush()
        ```

    Raises:
        ConfigurationError: api_key is empty.
    """

    def __init__(
        self,
        options: ExporterOptions,
        *,
        uploader: SeriesUploaderPort | None = None,
        clock: Clock | None = None,
    ) -> None:
        if not options.api_key:
            raise ConfigurationError("missing Datadog API key")

        self.options = options
        self._owned_uploader: SeriesUploader | None = None
        if uploader is None:
            self._owned_uploader = SeriesUploader(
                options.api_key,
                client=options.http_client,
                api_url=options.api_url,
            )
            uploader = self._owned_uploader
        self._uploader = uploader

        self._bundler: Bundler[SnapshotLike] = Bundler(
            self._handle_upload,
            delay_threshold=options.bundle_delay_threshold,
            count_threshold=options.bundle_count_threshold,
            clock=clock,
        )

    def export_view(self, snapshot: SnapshotLike) -> None:
        """Queue a snapshot for upload if it has one or more rows."""
        if not snapshot.rows:
            return

        try:
            self._bundler.add(snapshot, 1)
        except OversizedItemError:
            # Bypasses the bundler, so flush() does not wait for it
            logger.debug("Uploading oversized snapshot %s on its own", snapshot.name)
            threading.Thread(
                target=self._handle_upload,
                args=([snapshot],),
                name="ddstats-oversized-upload",
                daemon=True,
            ).start()
        except BundlerOverflowError:
            self.options.handle_error(ExportError("failed to upload: buffer full"))
        except BundlerError as e:
            self.options.handle_error(e)

    def flush(self) -> None:
        """Block until every queued snapshot has been uploaded.

        Useful before the program exits so recent stats are not lost.
        Failures are reported to the error handler.
        """
        self._bundler.flush()

    def close(self) -> None:
        """Flush, stop the bundler and close the HTTP client if owned."""
        self._bundler.close()
        if self._owned_uploader is not None:
            self._owned_uploader.close()

    def __enter__(self) -> "Exporter":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _handle_upload(self, snapshots: Sequence[SnapshotLike]) -> None:
        """Convert and upload snapshots, reporting any failure."""
        try:
            records = convert_snapshots(snapshots, host=self.options.hostname)
            self._uploader.upload(records)
        except Exception as e:
            self.options.handle_error(e)
