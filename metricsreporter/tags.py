"""Tag extraction from scope strings and mbean descriptors."""
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Optional, Union

from metricsreporter.errors import MalformedTagFormat

TOPIC_KEY = "topic"
PARTITION_KEY = "partition"

# Descriptor fragments up to and including this key are metadata, not tags
NAME_KEY = "name"

TagMap = Mapping[str, str]

EMPTY_TAGS: TagMap = MappingProxyType({})


@dataclass(frozen=True)
class Malformed:
    """Parse failure: the raw input could not be split into key/value tags."""
    raw: str
    detail: str
    reason: str = MalformedTagFormat.reason


TagResult = Union[TagMap, Malformed]


def _split(text: str, sep: str) -> List[str]:
    """Split on ``sep`` dropping trailing empty pieces; an empty string is one piece."""
    pieces = text.split(sep)
    if text:
        while pieces and not pieces[-1]:
            pieces.pop()
    return pieces


def is_malformed(result: TagResult) -> bool:
    return isinstance(result, Malformed)


def parse_scope(scope: Optional[str]) -> TagResult:
    """
    Convert a dot-delimited scope into tags.

    ``None`` yields an empty map. Tokens are paired in order as
    ``key.value``; an odd token count leaves a key without a value and the
    scope is reported as malformed. A repeated key keeps its last value.

    Args:
        scope: Scope of the raw metric, e.g. ``topic.orders.partition.3``

    Returns:
        Read-only tag mapping, or ``Malformed``
    """
    if scope is None:
        return EMPTY_TAGS

    tokens = _split(scope, ".")
    if len(tokens) % 2 != 0:
        return Malformed(scope, f"odd number of scope tokens ({len(tokens)})")

    tags = {}
    for i in range(0, len(tokens), 2):
        tags[tokens[i]] = tokens[i + 1]
    return MappingProxyType(tags)


def parse_mbean_name(mbean: Optional[str]) -> TagResult:
    """
    Convert an mbean descriptor into tags.

    The descriptor is expected as
    ``group:type=ClassName,name=MetricName,tag1=value1,tag2=value2``.
    Everything after the ``name=`` fragment is a tag. A descriptor with no
    ``name=`` fragment has no recognizable tags and yields an empty map.

    Args:
        mbean: MBean descriptor of the raw metric

    Returns:
        Read-only tag mapping, or ``Malformed`` when a fragment is not a
        single ``key=value`` pair
    """
    if mbean is None or not mbean.strip():
        return EMPTY_TAGS

    tags = {}
    tags_started = False
    for fragment in _split(mbean, ","):
        pair = _split(fragment, "=")
        if len(pair) != 2:
            return Malformed(mbean, f"fragment '{fragment}' is not a key=value pair")
        key, value = pair
        if not tags_started:
            if key == NAME_KEY:
                tags_started = True
            continue
        tags[key] = value
    return MappingProxyType(tags)


def has_topic_partition_tags(tags: TagMap) -> bool:
    """Check the tags identify a topic partition."""
    return TOPIC_KEY in tags and PARTITION_KEY in tags
