"""Telemetry configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field

from .logger import init_logging
from .metrics import init_metrics
from .tracer import init_tracing

_TRUTHY = {"1", "true", "yes", "on"}

# signal -> (endpoint field, flag switched on when the endpoint is set)
_SIGNALS = {
    "traces": ("otlp_traces_endpoint", "enable_tracing"),
    "metrics": ("otlp_metrics_endpoint", "enable_metrics"),
    "logs": ("otlp_logs_endpoint", "enable_logging"),
}


class TelemetryConfig(BaseModel):
    """Runtime configuration for the OpenTelemetry exporters."""

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False
    console_traces: bool = False
    otlp_traces_endpoint: str | None = None
    otlp_metrics_endpoint: str | None = None
    otlp_logs_endpoint: str | None = None
    service_name: str = "seabattle"
    service_namespace: str = "game"
    resource_attributes: dict[str, str] = Field(default_factory=dict)

    def resource_dict(self) -> dict[str, str]:
        """Resource attributes shared by every provider."""
        attributes = {
            "service.name": self.service_name,
            "service.namespace": self.service_namespace,
        }
        attributes.update(self.resource_attributes)
        return attributes

    @classmethod
    def from_env(cls, **overrides: Any) -> "TelemetryConfig":
        """Build a config from ``SEABATTLE_*`` and standard ``OTEL_*`` variables."""

        data: Dict[str, Any] = cls().model_dump()
        data.update(overrides)

        flags = {
            "enable_tracing": ("SEABATTLE_ENABLE_TRACING", "OTEL_TRACES_ENABLED"),
            "enable_metrics": ("SEABATTLE_ENABLE_METRICS", "OTEL_METRICS_ENABLED"),
            "enable_logging": ("SEABATTLE_ENABLE_LOGGING", "OTEL_LOGS_ENABLED"),
            "console_traces": ("SEABATTLE_CONSOLE_TRACES",),
        }
        for field, names in flags.items():
            for name in names:
                value = os.getenv(name)
                if value is not None:
                    data[field] = value.strip().lower() in _TRUTHY
                    break

        base = (os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or "").rstrip("/")
        for signal, (endpoint_field, flag_field) in _SIGNALS.items():
            if not data.get(endpoint_field):
                explicit = os.getenv(f"OTEL_EXPORTER_OTLP_{signal.upper()}_ENDPOINT")
                data[endpoint_field] = explicit or (f"{base}/v1/{signal}" if base else None)
            if data[endpoint_field]:
                data[flag_field] = True

        service_name = os.getenv("OTEL_SERVICE_NAME")
        service_namespace = os.getenv("OTEL_SERVICE_NAMESPACE")
        if service_name:
            data["service_name"] = service_name
        if service_namespace:
            data["service_namespace"] = service_namespace

        resource_env = os.getenv("OTEL_RESOURCE_ATTRIBUTES")
        if resource_env:
            attrs = dict(data.get("resource_attributes") or {})
            for part in resource_env.split(","):
                key, sep, value = part.partition("=")
                if sep:
                    attrs[key.strip()] = value.strip()
            data["resource_attributes"] = attrs

        return cls(**data)


@lru_cache(maxsize=1)
def load_telemetry_config() -> TelemetryConfig:
    """Load and cache the telemetry config from the environment."""

    return TelemetryConfig.from_env()


def init_telemetry(config: TelemetryConfig | None = None) -> TelemetryConfig:
    """Initialise the enabled telemetry subsystems."""

    resolved = config or load_telemetry_config()

    if resolved.enable_tracing:
        init_tracing(resolved)
    if resolved.enable_metrics:
        init_metrics(resolved)
    if resolved.enable_logging:
        init_logging(resolved)
    return resolved
