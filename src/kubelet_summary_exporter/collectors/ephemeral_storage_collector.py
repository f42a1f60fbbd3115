# src/kubelet_summary_exporter/collectors/ephemeral_storage_collector.py
"""
Prometheus collector exposing per-pod ephemeral storage usage read from the
kubelet ``/stats/summary`` endpoint. Each scrape triggers one fetch; failures
are reported through a cumulative error counter instead of being raised.
"""

import logging
import threading
from typing import Iterator

from prometheus_client.core import GaugeMetricFamily, Metric
from prometheus_client.registry import Collector
from pydantic import ValidationError

from ..core.exceptions import ScrapeError, ScrapeErrorType
from ..models.summary import Summary, parse_summary
from .summary_fetcher import SummaryFetcher

logger = logging.getLogger(__name__)

STORAGE_METRIC = "kube_pod_ephemeral_storage_used_bytes"
STORAGE_HELP = "Ephemeral storage used in bytes"
STORAGE_LABELS = ["node", "namespace", "pod"]

ERRORS_METRIC = "kubelet_summary_exporter_errors"
ERRORS_HELP = "Errors scraping kubelet stats summary"

# Failures that usually come from the kubelet side and are logged as warnings.
_WARN_TYPES = (ScrapeErrorType.TRANSPORT, ScrapeErrorType.STATUS)


def _errors_family() -> Metric:
    # Plain counter Metric: samples are exposed without a "_total" suffix.
    return Metric(ERRORS_METRIC, ERRORS_HELP, "counter")


class ErrorTally:
    """Process-lifetime count of failed collections. Only ever incremented."""

    def __init__(self):
        self._count = 0
        self._lock = threading.Lock()

    def increment(self) -> int:
        """Adds one failure and returns the new cumulative count."""
        with self._lock:
            self._count += 1
            return self._count

    @property
    def value(self) -> int:
        with self._lock:
            return self._count


class EphemeralStorageCollector(Collector):
    """
    Fetches the kubelet summary on every scrape and yields one gauge sample per
    pod that reports ephemeral storage, labeled by node, namespace and pod.
    """

    def __init__(self, fetcher: SummaryFetcher):
        self._fetcher = fetcher
        self.errors = ErrorTally()

    def describe(self) -> Iterator:
        """Yields the static metric descriptors without any I/O."""
        yield GaugeMetricFamily(STORAGE_METRIC, STORAGE_HELP, labels=STORAGE_LABELS)
        yield _errors_family()

    def collect(self) -> Iterator:
        try:
            body = self._fetcher.fetch()
            summary = self._parse(body)
        except ScrapeError as e:
            yield self._error_metric(e)
            return

        yield self._storage_metric(summary)

    @staticmethod
    def _parse(body: bytes) -> Summary:
        try:
            return parse_summary(body)
        except ValidationError as e:
            raise ScrapeError(ScrapeErrorType.PARSE, f"failed to parse body: {e}") from e

    def _storage_metric(self, summary: Summary) -> GaugeMetricFamily:
        gauge = GaugeMetricFamily(STORAGE_METRIC, STORAGE_HELP, labels=STORAGE_LABELS)
        node_name = summary.node.node_name
        for pod in summary.pods:
            if pod is None or pod.ephemeral_storage is None:
                continue
            gauge.add_metric(
                [node_name, pod.pod_ref.namespace, pod.pod_ref.name],
                float(pod.ephemeral_storage.used_bytes),
            )
        logger.debug("Collected ephemeral storage for %d pods on node '%s'.", len(gauge.samples), node_name)
        return gauge

    def _error_metric(self, error: ScrapeError) -> Metric:
        total = self.errors.increment()
        log = logger.warning if error.error_type in _WARN_TYPES else logger.error
        log("Scrape of %s failed (%s): %s", self._fetcher.url, error.error_type.value, error)

        counter = _errors_family()
        counter.add_sample(ERRORS_METRIC, {"type": error.error_type.value}, float(total))
        return counter
