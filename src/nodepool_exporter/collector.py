"""Prometheus collector that probes the nodepool status endpoint.

Each call to :meth:`NodepoolCollector.collect` performs exactly one HTTP GET
against ``http://<host>:<port>/image-list`` and reports:

- ``nodepool_up{host="..."}``: 1 if the target answered at all, 0 if it could
  not be reached. The status code does not affect this gauge.
- ``nodepool_exporter_scrape_failures_total``: cumulative number of failed
  scrapes. Only emitted by a collect call that failed.

Usage:
    from prometheus_client import CollectorRegistry
    from nodepool_exporter.collector import NodepoolCollector, Target

    registry = CollectorRegistry()
    registry.register(NodepoolCollector(Target(host="localhost", port="8005")))
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

import httpx
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric
from prometheus_client.registry import Collector

from nodepool_exporter.exceptions import ScrapeError
from nodepool_exporter.logging import get_logger

logger = get_logger(__name__)

NAMESPACE = "nodepool"

# Status endpoint of the nodepool launcher web server
STATUS_PATH = "/image-list"

UP_METRIC = f"{NAMESPACE}_up"
UP_HELP = "Could the nodepool server be reached"

SCRAPE_FAILURES_METRIC = f"{NAMESPACE}_exporter_scrape_failures_total"
SCRAPE_FAILURES_HELP = "Number of errors while scraping nodepool."


@dataclass(frozen=True)
class Target:
    """The nodepool instance being scraped.

    Attributes:
        host: Hostname or IP address of the nodepool server.
        port: Port of the nodepool web server, kept as given on the command line.
    """

    host: str
    port: str

    @property
    def scrape_uri(self) -> str:
        """Full URI of the status endpoint."""
        return f"http://{self.host}:{self.port}{STATUS_PATH}"

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class NodepoolCollector(Collector):
    """Collector reporting nodepool reachability and scrape failures.

    Collect calls are serialized by an internal lock that is held for the
    whole network round trip, so concurrent scrapes of the exporter queue up
    instead of probing the target in parallel.

    Attributes:
        target: The nodepool instance being scraped.
    """

    def __init__(self, target: Target, client: httpx.Client | None = None) -> None:
        """Initialize the collector.

        No I/O happens here; the first request is made by :meth:`collect`.

        Args:
            target: The nodepool instance to scrape.
            client: Optional HTTP client. Defaults to a plain ``httpx.Client``
                with the library's default timeouts that ignores proxy
                environment variables, so the target is always probed directly.
        """
        self.target = target
        self._client = client if client is not None else httpx.Client(trust_env=False)
        self._log = logger.with_context(target=str(target))
        self._lock = threading.Lock()
        self._scrape_failures = 0

    @property
    def scrape_failures(self) -> int:
        """Cumulative number of failed scrapes since process start."""
        with self._lock:
            return self._scrape_failures

    def _up_metric(self, value: float) -> GaugeMetricFamily:
        gauge = GaugeMetricFamily(UP_METRIC, UP_HELP, labels=["host"])
        gauge.add_metric([self.target.host], value)
        return gauge

    def _scrape_failures_metric(self) -> CounterMetricFamily:
        return CounterMetricFamily(
            SCRAPE_FAILURES_METRIC, SCRAPE_FAILURES_HELP, value=self._scrape_failures
        )

    def describe(self) -> list[Metric]:
        """Declare the metric families this collector produces.

        Called by the registry at registration time. Returning descriptors
        here keeps registration from triggering a scrape.
        """
        return [
            GaugeMetricFamily(UP_METRIC, UP_HELP, labels=["host"]),
            CounterMetricFamily(SCRAPE_FAILURES_METRIC, SCRAPE_FAILURES_HELP),
        ]

    def collect(self) -> list[Metric]:
        """Scrape the target once and return the resulting metric families.

        Scrape failures are logged and counted, never raised.

        Returns:
            The ``nodepool_up`` gauge, followed by the failure counter when
            this scrape failed.
        """
        with self._lock:
            metrics: list[Metric] = []
            try:
                self._scrape(metrics)
            except ScrapeError as e:
                extra = {"status_code": e.status_code} if e.status_code is not None else {}
                self._log.error("Error scraping nodepool: %s", e, extra=extra)
                self._scrape_failures += 1
                metrics.append(self._scrape_failures_metric())
            return metrics

    def _scrape(self, metrics: list[Metric]) -> None:
        """Perform one GET against the status endpoint.

        Args:
            metrics: Sink for the metric families produced by this scrape.

        Raises:
            ScrapeError: If the target is unreachable or did not answer 200.
        """
        uri = self.target.scrape_uri
        self._log.debug("Scraping %s", uri)

        try:
            request = self._client.build_request("GET", uri)
            response = self._client.send(request, stream=True)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            metrics.append(self._up_metric(0))
            raise ScrapeError(f"Cannot reach {uri}: {e}") from e

        metrics.append(self._up_metric(1))

        read_error: httpx.HTTPError | None = None
        body = b""
        try:
            body = response.read()
        except httpx.HTTPError as e:
            read_error = e
        finally:
            response.close()

        if response.status_code != httpx.codes.OK:
            detail = (
                str(read_error)
                if read_error is not None
                else body.decode("utf-8", errors="replace")
            )
            raise ScrapeError(
                f"Status {response.status_code} {response.reason_phrase} "
                f"({response.status_code}): {detail}",
                status_code=response.status_code,
            )

        self._log.debug("Scraped %s: %d bytes", uri, len(body))

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()


__all__ = [
    "NAMESPACE",
    "SCRAPE_FAILURES_METRIC",
    "STATUS_PATH",
    "UP_METRIC",
    "NodepoolCollector",
    "Target",
]
