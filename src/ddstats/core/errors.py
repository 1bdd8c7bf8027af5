"""Exception types raised by ddstats."""


class DDStatsError(Exception):
    """Base class for all ddstats errors."""


class ConfigurationError(DDStatsError):
    """Raised when an exporter is constructed with invalid options."""


class ExportError(DDStatsError):
    """An export could not be completed."""


class UploadError(ExportError):
    """The Datadog API rejected or never received an upload.

    Attributes:
        status_code: HTTP status of the response, or None if no response
            was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BundlerError(DDStatsError):
    """Base class for errors raised by Bundler.add()."""


class OversizedItemError(BundlerError):
    """The item alone is heavier than a bundle may ever be."""


class BundlerOverflowError(BundlerError):
    """Adding the item would exceed the buffered weight limit."""


class BundlerClosedError(BundlerError):
    """The bundler has been closed and accepts no more items."""
