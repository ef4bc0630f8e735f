"""Classification of raw metric identities as relevant to balancing."""
from typing import Mapping

from metricsreporter.names import MetricName
from metricsreporter.rules import rule_for
from metricsreporter.tags import is_malformed, parse_scope


def is_interested(group: str, name: str, type_: str, tags: Mapping[str, str]) -> bool:
    """
    Check if a metric is a metric of interest.

    Args:
        group: Group of the metric
        name: Name of the metric
        type_: Type of the metric
        tags: Tags of the metric

    Returns:
        True for a metric of interest, False otherwise
    """
    rule = rule_for(name)
    if rule is None:
        return False
    if not rule.matches_group(group) or rule.type != type_:
        return False
    return all(key in tags for key in rule.interest_tags)


def is_interested_metric(metric_name: MetricName) -> bool:
    """Check a raw metric identity, resolving its tags from the scope first.

    An unparseable scope is not of interest.
    """
    tags = parse_scope(metric_name.scope)
    if is_malformed(tags):
        return False
    return is_interested(metric_name.group, metric_name.name, metric_name.type, tags)
