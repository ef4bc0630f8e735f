"""Identities under which derived metrics are published."""
from typing import Optional

from metricsreporter.names import MetricName, explicit_metric_name
from metricsreporter.rules import rule_for
from metricsreporter.tags import PARTITION_KEY, TOPIC_KEY


def build_topic_partition_identity(name: str, topic: str, partition) -> Optional[MetricName]:
    """
    Build the identity of a topic partition metric the broker recognizes.

    Args:
        name: Raw metric name, e.g. ``BytesInPerSec``
        topic: Topic name
        partition: Partition number (rendered as a decimal string)

    Returns:
        A ``MetricName`` carrying both tag encodings, or None for names that
        are not published per topic partition
    """
    rule = rule_for(name)
    if rule is None or not rule.publishable:
        return None
    tags = {TOPIC_KEY: topic, PARTITION_KEY: str(partition)}
    return explicit_metric_name(rule.group, rule.type, name, tags)
