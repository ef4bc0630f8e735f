"""Tests for metric records, kinds, versions and the rule table."""
import pytest

from metricsreporter.errors import UnknownMetricVersion
from metricsreporter.records import BrokerMetrics, MetricRecord, TopicPartitionMetrics, topic_partition_key
from metricsreporter.rules import METRIC_RULES, empty_value_for, names_maybe_missing, rule_for
from metricsreporter.types import (
    LATEST_VERSION,
    V0,
    V1,
    MetricEntityLevel,
    MetricVersion,
    RawMetricType,
    resolve_version,
)


def _tp(partition=0, **kwargs):
    return TopicPartitionMetrics(timestamp_ms=10, broker_id=1, topic="orders", partition=partition, **kwargs)


def test_partition_must_be_non_negative():
    with pytest.raises(ValueError):
        _tp(partition=-1)


def test_record_rejects_other_level_metric():
    with pytest.raises(ValueError):
        _tp(values={RawMetricType.BROKER_METRIC_VERSION: 1.0})
    with pytest.raises(ValueError):
        BrokerMetrics(timestamp_ms=10, broker_id=1).with_value(RawMetricType.PARTITION_SIZE, 1.0)


def test_record_is_immutable():
    values = {RawMetricType.PARTITION_SIZE: 1.0}
    record = _tp(values=values)
    values[RawMetricType.PARTITION_BYTES_IN] = 2.0
    assert record.metric_types() == {RawMetricType.PARTITION_SIZE}
    with pytest.raises(TypeError):
        record.values[RawMetricType.PARTITION_BYTES_IN] = 2.0


def test_with_value_returns_new_record():
    record = _tp()
    updated = record.with_value(RawMetricType.PARTITION_BYTES_IN, 5.0)
    assert record.metric_types() == frozenset()
    assert updated.values[RawMetricType.PARTITION_BYTES_IN] == 5.0
    assert updated.key == record.key


def test_merge_same_key():
    left = _tp(values={RawMetricType.PARTITION_BYTES_IN: 1.0, RawMetricType.PARTITION_SIZE: 7.0})
    right = _tp(values={RawMetricType.PARTITION_BYTES_IN: 2.0, RawMetricType.PARTITION_BYTES_OUT: 3.0})
    merged = left.merge(right)
    assert dict(merged.values) == {
        RawMetricType.PARTITION_BYTES_IN: 2.0,
        RawMetricType.PARTITION_BYTES_OUT: 3.0,
        RawMetricType.PARTITION_SIZE: 7.0,
    }


def test_merge_different_key_fails():
    with pytest.raises(ValueError):
        _tp(partition=0).merge(_tp(partition=1))
    with pytest.raises(ValueError):
        BrokerMetrics(timestamp_ms=10, broker_id=1).merge(_tp())


def test_base_record_is_abstract():
    """Only concrete entity kinds can be built."""
    with pytest.raises(TypeError):
        MetricRecord(timestamp_ms=10, broker_id=1)
    assert BrokerMetrics.entity_level == MetricEntityLevel.BROKER
    assert TopicPartitionMetrics.entity_level == MetricEntityLevel.PARTITION


def test_keys():
    assert BrokerMetrics(timestamp_ms=10, broker_id=1).key == (1, 10)
    assert _tp(partition=4).key == (1, "orders", 4, 10)
    assert _tp(partition=4).topic_partition == "orders-4"
    assert topic_partition_key("orders", 2) == "orders-2"


def test_metric_types_by_level():
    partition_types = RawMetricType.for_level(MetricEntityLevel.PARTITION)
    assert partition_types == {
        RawMetricType.PARTITION_BYTES_IN,
        RawMetricType.PARTITION_BYTES_OUT,
        RawMetricType.PARTITION_SIZE,
    }
    assert len({t.id for t in RawMetricType}) == len(RawMetricType)


def test_versions():
    assert LATEST_VERSION is V1
    assert resolve_version() is V1
    assert resolve_version(0) is V0
    assert V0 < V1
    assert V1.required_broker_metrics() - V0.required_broker_metrics() == {RawMetricType.BROKER_METRIC_VERSION}
    assert V1.required_partition_metrics() == V0.required_partition_metrics()


def test_unknown_version():
    with pytest.raises(UnknownMetricVersion):
        MetricVersion.of(42)


def test_rule_table():
    assert set(METRIC_RULES) == {"BytesInPerSec", "BytesOutPerSec", "Size"}
    assert rule_for("Size").metric_type == RawMetricType.PARTITION_SIZE
    assert rule_for("Unknown") is None


def test_names_maybe_missing():
    assert names_maybe_missing() == {"BytesInPerSec", "BytesOutPerSec"}
    assert empty_value_for("BytesInPerSec") == 0.0
    assert empty_value_for("Size") is None
    assert empty_value_for("Unknown") is None
