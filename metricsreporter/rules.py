"""Lookup table of recognized raw metric names.

The interest filter, the converter and the identity builder all dispatch on
this table, so recognizing a new raw metric name is a single entry here.
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

from metricsreporter.tags import PARTITION_KEY, TOPIC_KEY
from metricsreporter.types import RawMetricType

# Names
BYTES_IN_PER_SEC = "BytesInPerSec"
BYTES_OUT_PER_SEC = "BytesOutPerSec"
# Used to identify idle partitions
SIZE = "Size"

# Groups
KAFKA_SERVER = "kafka.server"
KAFKA_LOG_PREFIX = "kafka.log"

# Types
LOG_TYPE = "Log"
BROKER_TOPIC_PARTITION_METRICS_TYPE = "BrokerTopicPartitionMetrics"


@dataclass(frozen=True)
class MetricRule:
    """How one raw metric name is recognized, converted and published."""
    name: str
    metric_type: RawMetricType
    group: str
    type: str
    group_is_prefix: bool = False
    interest_tags: Tuple[str, ...] = ()
    requires_topic: bool = False
    publishable: bool = False
    maybe_missing: bool = False

    def matches_group(self, group: str) -> bool:
        if self.group_is_prefix:
            return group.startswith(self.group)
        return group == self.group


METRIC_RULES: Dict[str, MetricRule] = {
    rule.name: rule for rule in (
        MetricRule(
            name=BYTES_IN_PER_SEC,
            metric_type=RawMetricType.PARTITION_BYTES_IN,
            group=KAFKA_SERVER,
            type=BROKER_TOPIC_PARTITION_METRICS_TYPE,
            interest_tags=(TOPIC_KEY, PARTITION_KEY),
            requires_topic=True,
            publishable=True,
            maybe_missing=True,
        ),
        MetricRule(
            name=BYTES_OUT_PER_SEC,
            metric_type=RawMetricType.PARTITION_BYTES_OUT,
            group=KAFKA_SERVER,
            type=BROKER_TOPIC_PARTITION_METRICS_TYPE,
            interest_tags=(TOPIC_KEY, PARTITION_KEY),
            requires_topic=True,
            publishable=True,
            maybe_missing=True,
        ),
        MetricRule(
            name=SIZE,
            metric_type=RawMetricType.PARTITION_SIZE,
            group=KAFKA_LOG_PREFIX,
            type=LOG_TYPE,
            group_is_prefix=True,
        ),
    )
}


def rule_for(name: str) -> Optional[MetricRule]:
    return METRIC_RULES.get(name)


def names_maybe_missing() -> FrozenSet[str]:
    """Names a partition may not have emitted yet, e.g. no traffic since startup."""
    return frozenset(r.name for r in METRIC_RULES.values() if r.maybe_missing)


def empty_value_for(name: str) -> Optional[float]:
    """Value to report for a metric that may be missing, ``None`` if it may not."""
    rule = rule_for(name)
    if rule is None or not rule.maybe_missing:
        return None
    return 0.0
