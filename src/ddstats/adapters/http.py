"""httpx adapter for the Datadog series API.

Implements SeriesUploaderPort: every upload() call is a single POST of the
encoded series to the configured endpoint. Batching and retries are not
done here.
"""

import logging
from collections.abc import Sequence

import httpx

from ddstats.core.encoding.series import encode_series
from ddstats.core.errors import UploadError
from ddstats.core.models import TimeSeriesRecord

logger = logging.getLogger(__name__)

DEFAULT_SERIES_URL = "https://app.datadoghq.com/api/v1/series"


class SeriesUploader:
    """Uploads series records to Datadog over HTTP.

    Args:
        api_key: Datadog API key, sent as the api_key query parameter.
        client: httpx client to send requests with. When omitted, the
            uploader creates one and closes it in close().
        api_url: Series endpoint URL.
    """

    def __init__(
        self,
        api_key: str,
        client: httpx.Client | None = None,
        api_url: str = DEFAULT_SERIES_URL,
    ) -> None:
        self._api_key = api_key
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client()
        self._api_url = api_url

    def upload(self, records: Sequence[TimeSeriesRecord]) -> None:
        """POST records to the series endpoint.

        Args:
            records: Records to send in one request. Nothing is sent if empty.

        Raises:
            UploadError: The request failed or returned a non-2xx status.
        """
        if not records:
            return

        try:
            response = self._client.post(
                self._api_url,
                params={"api_key": self._api_key},
                content=encode_series(records),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            raise UploadError(f"failed to upload {len(records)} series: {e}") from e

        if response.is_error:
            raise UploadError(
                f"failed to upload {len(records)} series: "
                f"HTTP {response.status_code} {response.text}",
                status_code=response.status_code,
            )
        logger.debug("Uploaded %d series to %s", len(records), self._api_url)

    def close(self) -> None:
        """Close the HTTP client if this uploader created it."""
        if self._owns_client:
            self._client.close()
