"""Configuration models using Pydantic for validation."""
from typing import Any, Dict, List, Literal, Optional, Tuple
from pydantic import BaseModel, Field, field_validator
import os

from metricsreporter.types import MetricEntityLevel, RawMetricType, known_versions


class PrometheusExporterConfig(BaseModel):
    """Prometheus endpoint for the reporter's own metrics."""
    enabled: bool = False
    port: int = 8000
    prefix: str = "metricsreporter_"
    bind_address: str = "0.0.0.0"


class ReporterConfig(BaseModel):
    """Broker identity and reporting behavior."""
    broker_id: int = Field(ge=0)
    broker_rack: Optional[str] = None
    metric_version: Optional[int] = None  # None pins the latest version
    interval_s: int = Field(default=10, gt=0)
    source_path: Optional[str] = None

    # Broker level values reported alongside partition records
    broker_metrics: Dict[str, float] = Field(default_factory=dict)

    @field_validator('metric_version')
    @classmethod
    def validate_metric_version(cls, v):
        """Only known contract versions may be pinned."""
        if v is not None and v not in known_versions():
            raise ValueError(f"Unknown metric version {v}, known: {sorted(known_versions())}")
        return v

    @field_validator('broker_metrics')
    @classmethod
    def validate_broker_metrics(cls, v):
        """Keys must name broker level metric types."""
        broker_types = {t.name for t in RawMetricType.for_level(MetricEntityLevel.BROKER)}
        unknown = set(v) - broker_types
        if unknown:
            raise ValueError(f"Unknown broker metrics: {sorted(unknown)}")
        return v


class GlobalConfig(BaseModel):
    """Global configuration settings."""
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "text"


class Config(BaseModel):
    """Root configuration model."""
    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    reporter: ReporterConfig
    prometheus: PrometheusExporterConfig = Field(default_factory=PrometheusExporterConfig)

    class Config:
        populate_by_name = True


def parse_override(text: str) -> Tuple[str, str]:
    """Split a ``key=value`` override; the key may be a dotted path."""
    key, sep, value = text.partition("=")
    if not sep or not key:
        raise ValueError(f"Invalid override '{text}', expected key=value")
    return key.strip(), value


def apply_overrides(raw_config: Dict[str, Any], overrides: List[str]) -> Dict[str, Any]:
    """Apply ``a.b=c`` overrides to a raw config dictionary in place."""
    for override in overrides:
        key, value = parse_override(override)
        *parents, leaf = key.split(".")
        node = raw_config
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[leaf] = value
    return raw_config


def load_config(config_path: str, overrides: Optional[List[str]] = None) -> Config:
    """Load and validate configuration from YAML file."""
    import yaml

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        raw_config = yaml.safe_load(f) or {}

    if not isinstance(raw_config, dict):
        raise ValueError(
            f"Configuration validation failed: expected a mapping at the top of {config_path}, "
            f"got {type(raw_config).__name__}"
        )

    # Apply environment variable overrides
    if env_log_level := os.getenv('LOG_LEVEL'):
        raw_config.setdefault('global', {})['log_level'] = env_log_level

    if env_broker_id := os.getenv('BROKER_ID'):
        raw_config.setdefault('reporter', {})['broker_id'] = env_broker_id

    # Command line overrides win over the file and the environment
    apply_overrides(raw_config, overrides or [])

    try:
        return Config(**raw_config)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")
