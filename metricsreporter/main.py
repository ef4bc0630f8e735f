"""Main entry point for the broker metrics reporter."""
import argparse
import logging
import sys
import threading
import signal
from typing import List, Optional

from pythonjsonlogger.json import JsonFormatter

from metricsreporter.config import load_config
from metricsreporter.records import MetricRecord
from metricsreporter.reporter import MetricsReporter, run_reporter_thread
from metricsreporter.self_metrics import ReporterSelfMetrics, start_exporter
from metricsreporter.sources import file_source

USAGE = "USAGE: metricsreporter [-daemon] config.yaml [--override property=value]*"


LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def build_formatter(log_format: str) -> logging.Formatter:
    """Formatter for the configured log format."""
    if log_format == "json":
        return JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt=LOG_DATEFMT
        )
    return logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt=LOG_DATEFMT
    )


def setup_logging(log_level: str, log_format: str):
    """Setup logging configuration."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter(log_format))

    logging.basicConfig(level=level, handlers=[handler])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="metricsreporter",
        description="Broker metrics reporter - normalize raw broker metrics for the load balancer"
    )
    parser.add_argument(
        "-daemon",
        action="store_true",
        help="Keep reporting on the configured interval until interrupted"
    )
    parser.add_argument(
        "config",
        help="Path to configuration YAML file"
    )
    parser.add_argument(
        "--override",
        action="append",
        default=[],
        metavar="property=value",
        help="Override a configuration property, dotted keys address nested sections"
    )
    return parser


def log_records(records: List[MetricRecord]):
    """Default sink: log each reported record."""
    logger = logging.getLogger(__name__)
    for record in records:
        values = {t.name: v for t, v in record.values.items()}
        logger.info(f"{record.entity_level.value} {record.key}: {values}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(USAGE, file=sys.stderr)
        return 1

    args = build_parser().parse_args(argv)

    # Load configuration
    try:
        config = load_config(args.config, args.override)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    if not config.reporter.source_path:
        print("Error loading configuration: reporter.source_path is required", file=sys.stderr)
        return 1

    # Setup logging
    setup_logging(config.global_.log_level, config.global_.log_format)
    logger = logging.getLogger(__name__)

    logger.info(f"Configuration loaded from: {args.config}")
    logger.info(f"Broker: {config.reporter.broker_id} (rack {config.reporter.broker_rack})")
    logger.info(f"Report interval: {config.reporter.interval_s}s")

    self_metrics = ReporterSelfMetrics(prefix=config.prometheus.prefix)
    if config.prometheus.enabled:
        start_exporter(config.prometheus, self_metrics)

    reporter = MetricsReporter(
        config,
        file_source(config.reporter.source_path, config.reporter.broker_id, config.reporter.broker_rack),
        sink=log_records,
        self_metrics=self_metrics,
    )

    if not args.daemon:
        try:
            reporter.report_once()
        except Exception as e:
            logger.error(f"Report failed: {e}", exc_info=True)
            return 1
        return 0

    reporter_thread = threading.Thread(
        target=run_reporter_thread,
        args=(reporter,),
        daemon=True
    )

    # Setup signal handlers
    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down...")
        reporter.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    reporter_thread.start()
    logger.info("Metrics reporter started")
    while reporter_thread.is_alive():
        reporter_thread.join(timeout=1.0)
    return 0


if __name__ == "__main__":
    sys.exit(main())
