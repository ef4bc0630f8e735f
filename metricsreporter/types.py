"""Metric kinds and the versioned completeness contract."""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional

from metricsreporter.errors import UnknownMetricVersion


class MetricEntityLevel(str, Enum):
    """Entity a metric record describes."""
    BROKER = "broker"
    PARTITION = "partition"


class RawMetricType(Enum):
    """Closed set of raw metric kinds carried by a record."""
    PARTITION_BYTES_IN = (MetricEntityLevel.PARTITION, 0)
    PARTITION_BYTES_OUT = (MetricEntityLevel.PARTITION, 1)
    PARTITION_SIZE = (MetricEntityLevel.PARTITION, 2)
    BROKER_APPEND_LATENCY_AVG_MS = (MetricEntityLevel.BROKER, 3)
    BROKER_MAX_PENDING_APPEND_LATENCY_MS = (MetricEntityLevel.BROKER, 4)
    BROKER_MAX_PENDING_FETCH_LATENCY_MS = (MetricEntityLevel.BROKER, 5)
    BROKER_METRIC_VERSION = (MetricEntityLevel.BROKER, 6)

    def __init__(self, level: MetricEntityLevel, metric_id: int):
        self.level = level
        self.id = metric_id

    @classmethod
    def for_level(cls, level: MetricEntityLevel) -> FrozenSet["RawMetricType"]:
        """All kinds belonging to one entity level."""
        return frozenset(t for t in cls if t.level == level)


@dataclass(frozen=True)
class MetricVersion:
    """
    A numbered contract naming the metric kinds a complete sample must carry.

    Versions are immutable and compared by number. Resolve them through
    ``MetricVersion.of`` or ``resolve_version`` rather than constructing new
    ones at runtime.
    """
    version: int
    broker_metrics: FrozenSet[RawMetricType]
    partition_metrics: FrozenSet[RawMetricType]

    def required_broker_metrics(self) -> FrozenSet[RawMetricType]:
        return self.broker_metrics

    def required_partition_metrics(self) -> FrozenSet[RawMetricType]:
        return self.partition_metrics

    def required_metrics(self, level: MetricEntityLevel) -> FrozenSet[RawMetricType]:
        if level == MetricEntityLevel.BROKER:
            return self.broker_metrics
        return self.partition_metrics

    def __lt__(self, other: "MetricVersion") -> bool:
        return self.version < other.version

    @classmethod
    def of(cls, version: int) -> "MetricVersion":
        try:
            return _VERSIONS[version]
        except KeyError:
            raise UnknownMetricVersion(version) from None


_PARTITION_METRICS_V0 = frozenset({
    RawMetricType.PARTITION_BYTES_IN,
    RawMetricType.PARTITION_BYTES_OUT,
    RawMetricType.PARTITION_SIZE,
})

_BROKER_METRICS_V0 = frozenset({
    RawMetricType.BROKER_APPEND_LATENCY_AVG_MS,
    RawMetricType.BROKER_MAX_PENDING_APPEND_LATENCY_MS,
    RawMetricType.BROKER_MAX_PENDING_FETCH_LATENCY_MS,
})

V0 = MetricVersion(0, _BROKER_METRICS_V0, _PARTITION_METRICS_V0)
V1 = MetricVersion(
    1,
    _BROKER_METRICS_V0 | {RawMetricType.BROKER_METRIC_VERSION},
    _PARTITION_METRICS_V0,
)

_VERSIONS: Dict[int, MetricVersion] = {v.version: v for v in (V0, V1)}

LATEST_VERSION: MetricVersion = _VERSIONS[max(_VERSIONS)]


def resolve_version(version: Optional[int] = None) -> MetricVersion:
    """Resolve a pinned version number, or the latest when none is pinned."""
    if version is None:
        return LATEST_VERSION
    return MetricVersion.of(version)


def known_versions() -> FrozenSet[int]:
    return frozenset(_VERSIONS)
