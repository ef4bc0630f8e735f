"""Data structures for raw metric identities and samples."""
from dataclasses import dataclass
from typing import Dict, Optional

from metricsreporter.tags import is_malformed, parse_scope


class MetricAttribute:
    """Statistic qualifiers a raw metric value may be read from."""
    MEAN = "Mean"
    MAX = "Max"
    PERCENTILE_50TH = "50thPercentile"
    PERCENTILE_999TH = "999thPercentile"


@dataclass(frozen=True)
class MetricName:
    """Identity of a raw metric as emitted by the broker instrumentation."""
    group: str
    type: str
    name: str
    scope: Optional[str] = None
    mbean_name: Optional[str] = None

    @property
    def mbean(self) -> str:
        """The mbean descriptor, rendered from the scope when none was given."""
        if self.mbean_name is not None:
            return self.mbean_name
        tags = parse_scope(self.scope)
        return render_mbean_name(
            self.group, self.type, self.name,
            {} if is_malformed(tags) else tags
        )

    def __str__(self) -> str:
        return self.mbean


@dataclass(frozen=True)
class RawMetric:
    """A single raw metric value read from the instrumentation source."""
    metric_name: MetricName
    value: float
    timestamp_ms: int
    broker_id: int
    broker_rack: Optional[str] = None
    attribute: Optional[str] = None


def render_scope(tags: Dict[str, str]) -> Optional[str]:
    """Render tags as a dot-delimited scope, sorted by key."""
    items = [
        (k, v.replace(".", "_"))
        for k, v in sorted(tags.items())
        if v
    ]
    if not items:
        return None
    return ".".join(f"{k}.{v}" for k, v in items)


def render_mbean_name(group: str, type_: str, name: str, tags: Dict[str, str]) -> str:
    """Render ``group:type=Type,name=Name,k1=v1,...`` keeping tag order."""
    parts = [f"{group}:type={type_}"]
    if name:
        parts.append(f"name={name}")
    parts.extend(f"{k}={v}" for k, v in tags.items() if v)
    return ",".join(parts)


def explicit_metric_name(group: str, type_: str, name: str, tags: Dict[str, str]) -> MetricName:
    """Build a metric identity carrying both the scope and mbean encodings of ``tags``."""
    return MetricName(
        group=group,
        type=type_,
        name=name,
        scope=render_scope(tags),
        mbean_name=render_mbean_name(group, type_, name, tags),
    )
