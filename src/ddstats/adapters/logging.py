"""Standard library logging adapter for export errors.

Export paths never raise into the producer; errors are handed to a single
error handler instead. When the user configures none, this module's
log_export_error is used.
"""

import logging

logger = logging.getLogger("ddstats")


def log_export_error(error: Exception) -> None:
    """Log an export error at ERROR level on the "ddstats" logger.

    Args:
        error: The error raised while exporting.
    """
    logger.error("Error exporting to Datadog: %s", error)
