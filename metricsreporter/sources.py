"""Raw metric sources read from YAML snapshots of the broker registry."""
from typing import Callable, Iterable, List, Optional
from pydantic import BaseModel, Field
import logging
import os
import time

from metricsreporter.names import MetricName, RawMetric

logger = logging.getLogger(__name__)

MetricSource = Callable[[int], Iterable[RawMetric]]


class RawMetricEntry(BaseModel):
    """One raw metric as written in a snapshot file."""
    group: str
    type: str
    name: str
    scope: Optional[str] = None
    mbean: Optional[str] = None
    value: float
    attribute: Optional[str] = None

    def to_metric_name(self) -> MetricName:
        return MetricName(
            group=self.group,
            type=self.type,
            name=self.name,
            scope=self.scope,
            mbean_name=self.mbean,
        )


class RawMetricSnapshot(BaseModel):
    """A snapshot file: a list of raw metric entries."""
    metrics: List[RawMetricEntry] = Field(default_factory=list)


def load_raw_metrics(
    path: str,
    broker_id: int,
    broker_rack: Optional[str] = None,
    now_ms: Optional[int] = None
) -> List[RawMetric]:
    """Load a YAML snapshot of raw metrics for one broker."""
    import yaml

    if not os.path.exists(path):
        raise FileNotFoundError(f"Metric snapshot not found: {path}")

    with open(path, 'r') as f:
        raw = yaml.safe_load(f) or {}

    snapshot = RawMetricSnapshot.model_validate(raw)
    timestamp_ms = now_ms if now_ms is not None else int(time.time() * 1000)

    metrics = [
        RawMetric(
            metric_name=entry.to_metric_name(),
            value=entry.value,
            timestamp_ms=timestamp_ms,
            broker_id=broker_id,
            broker_rack=broker_rack,
            attribute=entry.attribute,
        )
        for entry in snapshot.metrics
    ]
    logger.debug(f"Loaded {len(metrics)} raw metrics from {path}")
    return metrics


def file_source(path: str, broker_id: int, broker_rack: Optional[str] = None) -> MetricSource:
    """Source callable re-reading the snapshot file on every round."""

    def read(now_ms: int) -> Iterable[RawMetric]:
        return load_raw_metrics(path, broker_id, broker_rack, now_ms)

    return read
