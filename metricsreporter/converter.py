"""Conversion of raw metrics into typed, entity-keyed records."""
import logging
import re
from typing import Mapping, Optional

from metricsreporter.errors import InvalidNumericTag, MalformedTagFormat, UnresolvableMetric
from metricsreporter.names import MetricName, RawMetric
from metricsreporter.records import MetricRecord, TopicPartitionMetrics
from metricsreporter.rules import rule_for
from metricsreporter.tags import PARTITION_KEY, TOPIC_KEY, is_malformed, parse_mbean_name

logger = logging.getLogger(__name__)

_PARTITION_PATTERN = re.compile(r"[+-]?[0-9]+")

MAX_PARTITION = 2 ** 31 - 1

NO_PARTITION = -1


def _parse_partition(text: Optional[str]) -> Optional[int]:
    """Parse a partition tag; ``NO_PARTITION`` when absent, ``None`` when invalid."""
    if text is None:
        return NO_PARTITION
    if not _PARTITION_PATTERN.fullmatch(text):
        return None
    partition = int(text)
    if partition < 0 or partition > MAX_PARTITION:
        return None
    return partition


def convert(
    timestamp_ms: int,
    broker_id: int,
    broker_rack: Optional[str],
    name: str,
    tags: Mapping[str, str],
    value: float,
    attribute: Optional[str] = None
) -> Optional[MetricRecord]:
    """
    Build a metric record from a raw metric name and its tags.

    Raw streams carry metrics this pipeline does not recognize, so every
    failure here yields ``None`` instead of raising.

    Args:
        timestamp_ms: The sample time in milliseconds
        broker_id: Broker id
        broker_rack: Broker rack, may be None
        name: Name of the raw metric
        tags: Tags of the raw metric
        value: Metric value
        attribute: Statistic attribute the value was read from, may be None

    Returns:
        A ``MetricRecord``, or None if the metric cannot be converted
    """
    rule = rule_for(name)
    if rule is None:
        logger.debug(f"Dropping metric '{name}': no conversion rule")
        return None

    topic = tags.get(TOPIC_KEY)
    partition = _parse_partition(tags.get(PARTITION_KEY))
    if partition is None:
        logger.debug(
            f"Dropping metric '{name}' ({InvalidNumericTag.reason}): "
            f"partition tag '{tags.get(PARTITION_KEY)}'"
        )
        return None

    if partition == NO_PARTITION or (rule.requires_topic and topic is None):
        logger.debug(f"Dropping metric '{name}': incomplete tags {dict(tags)}")
        return None

    return TopicPartitionMetrics(
        timestamp_ms=timestamp_ms,
        broker_id=broker_id,
        broker_rack=broker_rack,
        topic=topic,
        partition=partition,
        values={rule.metric_type: value},
    )


def convert_from_identity(
    timestamp_ms: int,
    broker_id: int,
    broker_rack: Optional[str],
    metric_name: MetricName,
    value: float,
    attribute: Optional[str] = None
) -> MetricRecord:
    """
    Convert a metric already known to be of interest.

    Tags are read from the identity's mbean descriptor.

    Raises:
        UnresolvableMetric: if the descriptor is malformed or no record can
            be built
    """
    tags = parse_mbean_name(metric_name.mbean)
    if is_malformed(tags):
        raise UnresolvableMetric(
            metric_name, broker_id, timestamp_ms, attribute
        ) from MalformedTagFormat(tags.detail)

    record = convert(
        timestamp_ms, broker_id, broker_rack, metric_name.name, tags, value, attribute
    )
    if record is not None:
        return record

    error = UnresolvableMetric(metric_name, broker_id, timestamp_ms, attribute)
    partition = tags.get(PARTITION_KEY)
    if _parse_partition(partition) is None:
        raise error from InvalidNumericTag(f"partition tag '{partition}' is not a valid partition")
    raise error


def convert_raw(raw: RawMetric) -> MetricRecord:
    """Convert a raw metric sample, see ``convert_from_identity``."""
    return convert_from_identity(
        raw.timestamp_ms,
        raw.broker_id,
        raw.broker_rack,
        raw.metric_name,
        raw.value,
        raw.attribute,
    )
