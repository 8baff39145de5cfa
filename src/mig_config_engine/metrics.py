from __future__ import annotations

from dataclasses import dataclass, field

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

__all__ = ["CONTENT_TYPE_LATEST", "MetricsRegistry", "create_metrics_registry"]


@dataclass
class MetricsRegistry:
    enabled: bool = True
    registry: CollectorRegistry = field(default_factory=CollectorRegistry)

    def __post_init__(self) -> None:
        self.gateway_requests_total = (
            Counter(
                "gateway_requests_total",
                "Upstream chat-completion requests by mode and outcome",
                labelnames=["mode", "outcome"],
                registry=self.registry,
            )
            if self.enabled
            else None
        )
        self.parse_fallbacks_total = (
            Counter(
                "parse_fallbacks_total",
                "Model replies that could not be parsed and were recovered locally",
                labelnames=["mode"],
                registry=self.registry,
            )
            if self.enabled
            else None
        )
        self.validator_overrides_total = (
            Counter(
                "validator_overrides_total",
                "Workload fields corrected by the validator",
                labelnames=["field"],
                registry=self.registry,
            )
            if self.enabled
            else None
        )
        self.configurations_total = (
            Counter(
                "configurations_total",
                "Configurations rendered by pipeline entry point and source",
                labelnames=["entry_point", "source"],
                registry=self.registry,
            )
            if self.enabled
            else None
        )
        self.gateway_latency_seconds = (
            Histogram(
                "gateway_latency_seconds",
                "Upstream chat-completion latency",
                labelnames=["mode"],
                buckets=[0.25, 0.5, 1.0, 2.0, 4.0, 8.0, 15.0, 30.0, 60.0, 120.0],
                registry=self.registry,
            )
            if self.enabled
            else None
        )

    def inc_gateway_request(self, *, mode: str, outcome: str) -> None:
        if not self.enabled or self.gateway_requests_total is None:
            return
        self.gateway_requests_total.labels(mode=mode, outcome=outcome).inc()

    def inc_parse_fallback(self, *, mode: str) -> None:
        if not self.enabled or self.parse_fallbacks_total is None:
            return
        self.parse_fallbacks_total.labels(mode=mode).inc()

    def inc_validator_overrides(self, fields: list[str]) -> None:
        if not self.enabled or self.validator_overrides_total is None:
            return
        for name in fields:
            self.validator_overrides_total.labels(field=name).inc()

    def inc_configuration(self, *, entry_point: str, source: str) -> None:
        if not self.enabled or self.configurations_total is None:
            return
        self.configurations_total.labels(entry_point=entry_point, source=source).inc()

    def observe_gateway_latency(self, *, mode: str, seconds: float) -> None:
        if not self.enabled or self.gateway_latency_seconds is None:
            return
        self.gateway_latency_seconds.labels(mode=mode).observe(max(0.0, seconds))

    def export_payload(self) -> bytes:
        if not self.enabled:
            return b""
        return generate_latest(self.registry)


def create_metrics_registry(enabled: bool = True) -> MetricsRegistry:
    return MetricsRegistry(enabled=enabled)
