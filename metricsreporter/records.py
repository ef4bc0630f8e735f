"""Typed, entity-keyed metric records produced by conversion."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import ClassVar, FrozenSet, Mapping, Optional, Tuple

from metricsreporter.types import MetricEntityLevel, RawMetricType


def topic_partition_key(topic: Optional[str], partition: int) -> str:
    return f"{topic}-{partition}"


@dataclass(frozen=True)
class MetricRecord(ABC):
    """Base record: values of one entity at one point in time."""
    timestamp_ms: int
    broker_id: int
    broker_rack: Optional[str] = None
    values: Mapping[RawMetricType, float] = field(default_factory=dict, hash=False)

    entity_level: ClassVar[MetricEntityLevel]

    def __post_init__(self):
        for metric_type in self.values:
            self._check_type(metric_type)
        # Freeze a private copy so callers cannot mutate the record
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def _check_type(self, metric_type: RawMetricType):
        if metric_type.level != self.entity_level:
            raise ValueError(
                f"{metric_type.name} is not a {self.entity_level.value} metric"
            )

    @property
    @abstractmethod
    def key(self) -> Tuple:
        """Identity of the entity and sample time."""
        pass

    def metric_types(self) -> FrozenSet[RawMetricType]:
        return frozenset(self.values)

    def with_value(self, metric_type: RawMetricType, value: float) -> "MetricRecord":
        """Return a copy of this record with one more value set."""
        self._check_type(metric_type)
        return replace(self, values={**self.values, metric_type: value})

    def merge(self, other: "MetricRecord") -> "MetricRecord":
        """Combine values of two records for the same entity; ``other`` wins on conflicts."""
        if type(other) is not type(self) or other.key != self.key:
            raise ValueError(f"Cannot merge record {other.key} into {self.key}")
        return replace(self, values={**self.values, **other.values})


@dataclass(frozen=True)
class BrokerMetrics(MetricRecord):
    """Broker level record keyed by ``(broker_id, timestamp_ms)``."""

    entity_level = MetricEntityLevel.BROKER

    @property
    def key(self) -> Tuple[int, int]:
        return self.broker_id, self.timestamp_ms


@dataclass(frozen=True, kw_only=True)
class TopicPartitionMetrics(MetricRecord):
    """Partition level record keyed by ``(broker_id, topic, partition, timestamp_ms)``."""
    topic: Optional[str]
    partition: int

    entity_level = MetricEntityLevel.PARTITION

    def __post_init__(self):
        if self.partition < 0:
            raise ValueError(f"Partition must be non-negative, got {self.partition}")
        super().__post_init__()

    @property
    def key(self) -> Tuple[int, Optional[str], int, int]:
        return self.broker_id, self.topic, self.partition, self.timestamp_ms

    @property
    def topic_partition(self) -> str:
        return topic_partition_key(self.topic, self.partition)
