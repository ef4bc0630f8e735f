"""Completeness checks gating records for downstream consumption."""
from dataclasses import dataclass
from typing import AbstractSet, FrozenSet, Optional, Tuple

from metricsreporter.records import MetricRecord
from metricsreporter.types import LATEST_VERSION, MetricEntityLevel, MetricVersion, RawMetricType


@dataclass(frozen=True)
class IncompleteEntityMetrics:
    """Signal that an entity's record lacks kinds its version requires."""
    key: Tuple
    level: MetricEntityLevel
    missing: FrozenSet[RawMetricType]


def is_complete(present: AbstractSet[RawMetricType], required: AbstractSet[RawMetricType]) -> bool:
    return set(present) >= set(required)


def is_broker_metrics_complete(record: MetricRecord, version: Optional[MetricVersion] = None) -> bool:
    version = version or LATEST_VERSION
    return is_complete(record.metric_types(), version.required_broker_metrics())


def is_partition_metrics_complete(record: MetricRecord, version: Optional[MetricVersion] = None) -> bool:
    version = version or LATEST_VERSION
    return is_complete(record.metric_types(), version.required_partition_metrics())


def missing_metrics(record: MetricRecord, version: Optional[MetricVersion] = None) -> FrozenSet[RawMetricType]:
    """Kinds required at the record's entity level that it does not carry."""
    version = version or LATEST_VERSION
    return version.required_metrics(record.entity_level) - record.metric_types()


def check_completeness(
    record: MetricRecord,
    version: Optional[MetricVersion] = None
) -> Optional[IncompleteEntityMetrics]:
    """Return an ``IncompleteEntityMetrics`` signal, or None when complete."""
    missing = missing_metrics(record, version)
    if not missing:
        return None
    return IncompleteEntityMetrics(record.key, record.entity_level, missing)
