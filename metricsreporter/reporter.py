"""Reporter loop: filter, convert, accumulate and validate raw broker metrics."""
import time
import logging
import threading
from typing import Callable, Dict, List, Optional, Tuple

from metricsreporter.completeness import check_completeness
from metricsreporter.config import Config
from metricsreporter.converter import convert_raw
from metricsreporter.errors import UnresolvableMetric
from metricsreporter.interest import is_interested_metric
from metricsreporter.records import BrokerMetrics, MetricRecord, TopicPartitionMetrics
from metricsreporter.rules import empty_value_for, names_maybe_missing, rule_for
from metricsreporter.self_metrics import ReporterSelfMetrics
from metricsreporter.sources import MetricSource
from metricsreporter.types import RawMetricType, resolve_version

logger = logging.getLogger(__name__)

RecordSink = Callable[[List[MetricRecord]], None]

NOT_INTERESTED = "not_interested"


def _log_sink(records: List[MetricRecord]):
    logger.debug(f"Reported {len(records)} records")


class MetricsReporter:
    """Periodically turns a broker's raw metrics into complete balancer records."""

    def __init__(
        self,
        config: Config,
        source: MetricSource,
        sink: Optional[RecordSink] = None,
        self_metrics: Optional[ReporterSelfMetrics] = None
    ):
        self.config = config
        self.source = source
        self.sink = sink or _log_sink
        self.self_metrics = self_metrics
        self.version = resolve_version(config.reporter.metric_version)
        self.running = False
        self.round_count = 0
        self._stopped = threading.Event()

        logger.info(
            f"Metrics reporter initialized for broker {config.reporter.broker_id} "
            f"(metric version {self.version.version})"
        )

    def _drop(self, reason: str):
        if self.self_metrics:
            self.self_metrics.record_dropped(reason)

    def _broker_record(self, now_ms: int) -> BrokerMetrics:
        reporter_config = self.config.reporter
        values = {
            RawMetricType[name]: value
            for name, value in reporter_config.broker_metrics.items()
        }
        values[RawMetricType.BROKER_METRIC_VERSION] = float(self.version.version)
        return BrokerMetrics(
            timestamp_ms=now_ms,
            broker_id=reporter_config.broker_id,
            broker_rack=reporter_config.broker_rack,
            values=values,
        )

    def accumulate(self, now_ms: int) -> Dict[Tuple, MetricRecord]:
        """Convert one round of raw metrics and merge them per entity."""
        raw_metrics = list(self.source(now_ms))
        if self.self_metrics:
            self.self_metrics.record_raw(len(raw_metrics))

        accumulated: Dict[Tuple, MetricRecord] = {}
        for raw in raw_metrics:
            if not is_interested_metric(raw.metric_name):
                self._drop(NOT_INTERESTED)
                continue

            try:
                record = convert_raw(raw)
            except UnresolvableMetric as e:
                cause = f": {e.__cause__}" if e.__cause__ else ""
                logger.warning(f"{e}{cause}")
                self._drop(e.reason)
                continue

            if self.self_metrics:
                self.self_metrics.record_converted(raw.metric_name.name)

            existing = accumulated.get(record.key)
            accumulated[record.key] = existing.merge(record) if existing else record

        # Partitions without traffic do not emit rate metrics at all
        for key, record in accumulated.items():
            if not isinstance(record, TopicPartitionMetrics):
                continue
            for name in names_maybe_missing():
                metric_type = rule_for(name).metric_type
                if metric_type not in record.values:
                    record = record.with_value(metric_type, empty_value_for(name))
            accumulated[key] = record

        broker_record = self._broker_record(now_ms)
        accumulated[broker_record.key] = broker_record
        return accumulated

    def report_once(self, now_ms: Optional[int] = None) -> List[MetricRecord]:
        """Run one report round and return the records handed to the sink."""
        round_start = time.time()
        if now_ms is None:
            now_ms = int(round_start * 1000)

        accumulated = self.accumulate(now_ms)

        complete: List[MetricRecord] = []
        for record in accumulated.values():
            incomplete = check_completeness(record, self.version)
            level = record.entity_level.value
            if incomplete is None:
                complete.append(record)
                if self.self_metrics:
                    self.self_metrics.record_reported(level)
                continue

            missing = sorted(t.name for t in incomplete.missing)
            logger.warning(f"Skipping incomplete {level} metrics {incomplete.key}: missing {missing}")
            if self.self_metrics:
                self.self_metrics.record_incomplete(level)

        self.sink(complete)

        self.round_count += 1
        if self.self_metrics:
            self.self_metrics.set_tracked_entities(len(accumulated))
            self.self_metrics.record_round_duration(time.time() - round_start)

        logger.info(
            f"Round {self.round_count}: reported {len(complete)} of "
            f"{len(accumulated)} records"
        )
        return complete

    def run(self):
        """Run report rounds until stopped."""
        self.running = True
        self._stopped.clear()

        logger.info("Starting metrics reporter")

        interval = self.config.reporter.interval_s

        while self.running:
            round_start = time.time()

            try:
                self.report_once()
            except Exception as e:
                logger.error(f"Error in report round: {e}", exc_info=True)

            # Sleep for remaining time in the interval
            round_duration = time.time() - round_start
            sleep_time = max(0, interval - round_duration)

            if sleep_time > 0:
                self._stopped.wait(sleep_time)
            else:
                logger.warning(
                    f"Round took {round_duration:.3f}s, longer than interval {interval}s"
                )

    def stop(self):
        """Stop the reporter loop."""
        logger.info("Stopping metrics reporter")
        self.running = False
        self._stopped.set()


def run_reporter_thread(reporter: MetricsReporter):
    """Run reporter in a separate thread."""
    try:
        reporter.run()
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
        reporter.stop()
    except Exception as e:
        logger.error(f"Reporter thread error: {e}", exc_info=True)
        reporter.stop()
