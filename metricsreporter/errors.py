"""Error taxonomy for metric conversion."""
from typing import Optional


class MetricsReporterError(Exception):
    """Base class for all reporter errors."""


class MalformedTagFormat(MetricsReporterError):
    """Scope or mbean string could not be split into key/value tags."""
    reason = "malformed_tags"


class InvalidNumericTag(MetricsReporterError):
    """A numeric tag (partition) did not parse as an integer."""
    reason = "invalid_numeric_tag"


class UnknownMetricVersion(MetricsReporterError, ValueError):
    """Requested metric version number is not a known contract."""

    def __init__(self, version: int):
        super().__init__(f"Unknown metric version: {version}")
        self.version = version


class UnresolvableMetric(MetricsReporterError, ValueError):
    """A metric of interest could not be converted into a record."""
    reason = "unresolvable"

    def __init__(
        self,
        metric_name,
        broker_id: int,
        timestamp_ms: int,
        attribute: Optional[str] = None
    ):
        super().__init__(
            f"Cannot convert metric {metric_name} to a balancer metric for "
            f"broker {broker_id} at time {timestamp_ms} for attribute {attribute}"
        )
        self.metric_name = metric_name
        self.broker_id = broker_id
        self.timestamp_ms = timestamp_ms
        self.attribute = attribute
