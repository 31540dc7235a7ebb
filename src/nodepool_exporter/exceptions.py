"""Exception types raised inside the Nodepool exporter."""

from __future__ import annotations


class ScrapeError(Exception):
    """Raised when a single scrape of the nodepool status endpoint fails.

    This exception covers both failure outcomes of a scrape:
    - The target could not be reached (DNS, refused connection, transport error)
    - The target answered with a status other than 200

    It never escapes ``NodepoolCollector.collect()``; the collector logs it and
    counts it in ``nodepool_exporter_scrape_failures_total``.

    Attributes:
        status_code: HTTP status of the response, or None if the target could
            not be reached.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(Exception):
    """Raised when a configuration value cannot be used at startup.

    Example:
        >>> raise ConfigurationError("Invalid listen address 'localhost': missing port")
    """

    pass


__all__ = ["ConfigurationError", "ScrapeError"]
