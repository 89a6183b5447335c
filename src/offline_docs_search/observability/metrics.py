"""Search metrics, exposed through prometheus_client and OpenTelemetry at once.

Every ``SearchMetric`` owns a Prometheus collector in the default registry
and, once a value is first recorded, the OpenTelemetry instrument of the same
name on the process meter.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
import time
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics as otel_metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader
from opentelemetry.sdk.resources import Resource
from prometheus_client import Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator, Iterable

    from opentelemetry.metrics import Meter


SERVICE_NAME = "offline-docs-search"

LATENCY_BUCKETS = (0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25)


class _MeterState:
    provider: MeterProvider | None = None
    meter: Meter | None = None


def init_metrics(
    service_name: str = SERVICE_NAME,
    metric_readers: Iterable[MetricReader] | None = None,
) -> MeterProvider:
    """Install the process meter provider; later calls return the first one."""
    if _MeterState.provider is not None:
        return _MeterState.provider

    provider = MeterProvider(
        resource=Resource.create({"service.name": service_name}),
        metric_readers=list(metric_readers or ()),
    )
    otel_metrics.set_meter_provider(provider)
    _MeterState.provider = provider
    _MeterState.meter = provider.get_meter(__name__)
    return provider


def _meter() -> Meter:
    if _MeterState.meter is None:
        init_metrics()
    return _MeterState.meter  # type: ignore[return-value]


@dataclass(frozen=True)
class _LabelledMetric:
    metric: SearchMetric
    labels: dict[str, str]

    def inc(self, amount: float = 1.0) -> None:
        self.metric.add(self.labels, amount)

    def observe(self, value: float) -> None:
        self.metric.record(self.labels, value)

    def set(self, value: float) -> None:
        self.metric.set(self.labels, value)


class SearchMetric:
    """One named measurement kept in step across both metric backends."""

    _COLLECTORS: dict[str, Any] = {"counter": Counter, "histogram": Histogram, "gauge": Gauge}

    def __init__(
        self,
        kind: str,
        name: str,
        documentation: str,
        labelnames: tuple[str, ...],
        **collector_options: Any,
    ) -> None:
        if kind not in self._COLLECTORS:
            raise ValueError(f"Unknown metric kind: {kind}")
        self.kind = kind
        self.name = name
        self.documentation = documentation
        self._collector = self._COLLECTORS[kind](name, documentation, labelnames, **collector_options)
        self._instrument: Any = None
        # Up/down counters take deltas, so the last gauge level per label set is kept
        self._levels: dict[tuple[tuple[str, str], ...], float] = {}

    def labels(self, **labels: str) -> _LabelledMetric:
        return _LabelledMetric(self, labels)

    @property
    def instrument(self) -> Any:
        if self._instrument is None:
            meter = _meter()
            create = {
                "counter": meter.create_counter,
                "histogram": meter.create_histogram,
                "gauge": meter.create_up_down_counter,
            }[self.kind]
            self._instrument = create(self.name, description=self.documentation)
        return self._instrument

    def add(self, labels: dict[str, str], amount: float) -> None:
        self._collector.labels(**labels).inc(amount)
        self.instrument.add(amount, labels)

    def record(self, labels: dict[str, str], value: float) -> None:
        self._collector.labels(**labels).observe(value)
        self.instrument.record(value, labels)

    def set(self, labels: dict[str, str], value: float) -> None:
        self._collector.labels(**labels).set(value)
        key = tuple(sorted(labels.items()))
        previous = self._levels.get(key, 0.0)
        self._levels[key] = value
        if value != previous:
            self.instrument.add(value - previous, labels)


SEARCH_LATENCY = SearchMetric(
    "histogram",
    "search_latency_seconds",
    "Time spent ranking one query",
    ("engine",),
    buckets=LATENCY_BUCKETS,
)
SEARCH_QUERIES = SearchMetric(
    "counter",
    "search_queries_total",
    "Queries served, by engine and outcome",
    ("engine", "status"),
)
INDEX_DOC_COUNT = SearchMetric(
    "gauge",
    "index_document_count",
    "Documents held by an engine's loaded index",
    ("engine",),
)


@contextmanager
def track_latency(histogram: SearchMetric, **labels: str) -> Generator[None, None, None]:
    """Observe the wall time of the enclosed block, including failed runs."""
    started = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - started)


def get_metrics() -> bytes:
    """Prometheus text exposition of the default registry."""
    return generate_latest()
