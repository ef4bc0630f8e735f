"""Tests for scope and mbean tag parsing."""
import pytest

from metricsreporter.errors import MalformedTagFormat
from metricsreporter.tags import (
    Malformed,
    has_topic_partition_tags,
    is_malformed,
    parse_mbean_name,
    parse_scope,
)


def test_scope_none_is_empty():
    tags = parse_scope(None)
    assert not is_malformed(tags)
    assert dict(tags) == {}


def test_scope_topic_partition():
    assert dict(parse_scope("topic.orders.partition.3")) == {"topic": "orders", "partition": "3"}


@pytest.mark.parametrize("scope,size", [
    ("a.b", 1),
    ("a.b.c.d", 2),
    ("a.b.c.d.e.f", 3),
])
def test_scope_even_token_count(scope, size):
    """Even token counts succeed with half as many tags."""
    tags = parse_scope(scope)
    assert not is_malformed(tags)
    assert len(tags) == size


@pytest.mark.parametrize("scope", ["topic", "topic.orders.partition", "a.b.c", ""])
def test_scope_odd_token_count_is_malformed(scope):
    """A key without a value makes the whole scope malformed."""
    result = parse_scope(scope)
    assert isinstance(result, Malformed)
    assert result.reason == MalformedTagFormat.reason
    assert result.raw == scope


def test_scope_duplicate_key_keeps_last_value():
    """Repeated scope keys overwrite earlier ones."""
    tags = parse_scope("topic.orders.topic.payments")
    assert dict(tags) == {"topic": "payments"}


def test_scope_tags_are_read_only():
    tags = parse_scope("topic.orders.partition.3")
    with pytest.raises(TypeError):
        tags["topic"] = "other"


@pytest.mark.parametrize("mbean", [None, "", "   "])
def test_mbean_blank_is_empty(mbean):
    tags = parse_mbean_name(mbean)
    assert not is_malformed(tags)
    assert dict(tags) == {}


def test_mbean_tags_follow_name():
    mbean = "kafka.server:type=BrokerTopicPartitionMetrics,name=BytesInPerSec,topic=orders,partition=3"
    assert dict(parse_mbean_name(mbean)) == {"topic": "orders", "partition": "3"}


def test_mbean_without_tags():
    assert dict(parse_mbean_name("kafka.log:type=Log,name=Size")) == {}


def test_mbean_without_name_fragment_has_no_tags():
    """Descriptors missing name= are tolerated and yield no tags."""
    tags = parse_mbean_name("kafka.server:type=BrokerTopicPartitionMetrics,topic=orders,partition=3")
    assert not is_malformed(tags)
    assert dict(tags) == {}


@pytest.mark.parametrize("mbean", [
    "kafka.server:type=X,name=BytesInPerSec,topic",
    "kafka.server:type=X,name=BytesInPerSec,topic=a=b",
    "kafka.server,name=BytesInPerSec",
])
def test_mbean_fragment_without_single_equals_is_malformed(mbean):
    assert is_malformed(parse_mbean_name(mbean))


def test_topic_partition_sanity_check():
    assert has_topic_partition_tags({"topic": "orders", "partition": "3"})
    assert not has_topic_partition_tags({"topic": "orders"})
    assert not has_topic_partition_tags({"partition": "3"})


def test_scope_trailing_dot_is_malformed():
    """Trailing empty tokens are dropped, leaving a key without a value."""
    assert is_malformed(parse_scope("topic.orders.partition."))


def test_mbean_empty_tag_value_is_malformed():
    mbean = "kafka.server:type=BrokerTopicPartitionMetrics,name=BytesInPerSec,topic=,partition=3"
    assert is_malformed(parse_mbean_name(mbean))


def test_mbean_trailing_comma_is_ignored():
    mbean = "kafka.server:type=BrokerTopicPartitionMetrics,name=BytesInPerSec,topic=orders,partition=3,"
    assert dict(parse_mbean_name(mbean)) == {"topic": "orders", "partition": "3"}


def test_mbean_trailing_equals_is_ignored():
    mbean = "kafka.log:type=Log,name=Size,topic=orders=,partition=3"
    assert dict(parse_mbean_name(mbean)) == {"topic": "orders", "partition": "3"}
