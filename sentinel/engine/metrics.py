"""Prometheus instruments for the engine service.

Each ``EngineMetrics`` owns its own ``CollectorRegistry`` so several runners
can live in one process. ``/stats`` reads the same samples that ``/metrics``
exports.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

NAMESPACE = "sentinel_engine"
DURATION_BUCKETS_MS = (10, 50, 100, 200, 500, 1000, 2000)

COUNTERS = {
    "total_requests": "Total number of engine requests",
    "failed_requests": "Engine requests that ended with an engine error",
    "processed_images": "Images processed successfully",
    "watermark_calls": "Watermark embed calls",
    "forensics_calls": "Forensic analysis calls",
    "verify_calls": "Watermark verification calls",
}


class EngineMetrics:
    def __init__(self) -> None:
        self.registry = CollectorRegistry()
        self._counters = {
            name: Counter(name, doc, namespace=NAMESPACE, registry=self.registry)
            for name, doc in COUNTERS.items()
        }
        self.active_requests = Gauge(
            "active_requests",
            "Number of engine requests in flight",
            namespace=NAMESPACE,
            registry=self.registry,
        )
        self.request_duration = Histogram(
            "request_duration_milliseconds",
            "Engine request duration in milliseconds",
            namespace=NAMESPACE,
            buckets=DURATION_BUCKETS_MS,
            registry=self.registry,
        )

    def count(self, name: str) -> None:
        self._counters[name].inc()

    @contextmanager
    def track(self) -> Iterator[None]:
        """Hold the in-flight gauge and record the duration, also on failure."""
        started = time.perf_counter()
        self.active_requests.inc()
        try:
            yield
        finally:
            self.active_requests.dec()
            self.request_duration.observe((time.perf_counter() - started) * 1000)

    def value(self, name: str) -> int:
        sample = f"{NAMESPACE}_{name}"
        if name in self._counters:
            sample += "_total"
        return int(self.registry.get_sample_value(sample) or 0)

    def export(self) -> bytes:
        return generate_latest(self.registry)
