"""Self-monitoring metrics for the reporter using prometheus_client."""
from prometheus_client import Counter, Gauge, Histogram, CollectorRegistry, start_http_server
import logging

from metricsreporter.config import PrometheusExporterConfig

logger = logging.getLogger(__name__)


class ReporterSelfMetrics:
    """Counters and timings describing what the reporter converted and dropped."""

    def __init__(self, registry=None, prefix=""):
        if registry is None:
            registry = CollectorRegistry()
        self.registry = registry

        self.raw_metrics_total = Counter(
            f"{prefix}raw_metrics_total",
            "Total number of raw metrics read from the source",
            registry=registry
        )

        self.converted_total = Counter(
            f"{prefix}converted_total",
            "Total number of raw metrics converted into records",
            ["metric_name"],
            registry=registry
        )

        self.dropped_total = Counter(
            f"{prefix}dropped_total",
            "Total number of raw metrics dropped",
            ["reason"],
            registry=registry
        )

        self.records_reported_total = Counter(
            f"{prefix}records_reported_total",
            "Total number of complete records handed to the sink",
            ["level"],
            registry=registry
        )

        self.incomplete_records_total = Counter(
            f"{prefix}incomplete_records_total",
            "Total number of records held back as incomplete",
            ["level"],
            registry=registry
        )

        self.round_duration_seconds = Histogram(
            f"{prefix}round_duration_seconds",
            "Duration of each report round in seconds",
            buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
            registry=registry
        )

        self.tracked_entities = Gauge(
            f"{prefix}tracked_entities",
            "Number of entities accumulated in the last round",
            registry=registry
        )

    def record_raw(self, count: int):
        self.raw_metrics_total.inc(count)

    def record_converted(self, metric_name: str):
        self.converted_total.labels(metric_name=metric_name).inc()

    def record_dropped(self, reason: str):
        self.dropped_total.labels(reason=reason).inc()

    def record_reported(self, level: str):
        self.records_reported_total.labels(level=level).inc()

    def record_incomplete(self, level: str):
        self.incomplete_records_total.labels(level=level).inc()

    def record_round_duration(self, duration: float):
        self.round_duration_seconds.observe(duration)

    def set_tracked_entities(self, count: int):
        self.tracked_entities.set(count)


def start_exporter(config: PrometheusExporterConfig, self_metrics: ReporterSelfMetrics):
    """Start the Prometheus HTTP server for the self-metrics registry."""
    try:
        start_http_server(
            config.port,
            addr=config.bind_address,
            registry=self_metrics.registry
        )
        logger.info(
            f"Prometheus exporter listening on "
            f"{config.bind_address}:{config.port}/metrics"
        )
    except Exception as e:
        logger.error(f"Failed to start Prometheus HTTP server: {e}")
        raise
