from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .constants import (
    HOURLY_LOSS_BASE_USD,
    HOURLY_LOSS_CAP_USD,
    HOURLY_LOSS_ENV_MULTIPLIER,
    HOURLY_LOSS_PER_INFERENCE_USD,
    HOURLY_LOSS_PER_TRAINING_USD,
)
from .models import RiskAnalysis, RiskMetric, WorkloadConfig

MAX_SCENARIOS = 2

DEFAULT_RISK_NARRATIVE = (
    "Without proper MIG configuration, you risk resource conflicts, degraded performance, and "
    "operational inefficiencies that could cost thousands in downtime and wasted compute resources."
)

DEFAULT_RISK_METRICS: tuple[tuple[str, str], ...] = (
    ("Potential Downtime", "4-8 hours during resource conflicts"),
    ("Performance Impact", "40-70% throughput reduction"),
    ("Cost per Hour", "$2,000-5,000 in lost productivity"),
)


def estimate_hourly_loss(config: WorkloadConfig) -> int:
    cost = float(HOURLY_LOSS_BASE_USD)
    cost += config.inference_jobs * HOURLY_LOSS_PER_INFERENCE_USD
    cost += config.training_jobs * HOURLY_LOSS_PER_TRAINING_USD
    cost *= HOURLY_LOSS_ENV_MULTIPLIER.get(config.environment, 2.0)
    return int(min(cost, HOURLY_LOSS_CAP_USD))


def generate_risk_analysis(config: WorkloadConfig) -> RiskAnalysis:
    scenarios: list[str] = []
    metrics: list[RiskMetric] = []

    if config.inference_jobs > 3:
        scenarios.append(
            f"Multi-Service Cascade Failure: with {config.inference_jobs} inference services sharing "
            "unpartitioned GPU memory, one service spiking during peak traffic starves the others. "
            "A recommendation engine growing to 35GB can take a chatbot and fraud detection offline "
            "at the busiest and riskiest moment."
        )
        metrics.append(RiskMetric("Service Downtime Risk", f"{config.inference_jobs}x cascading failures possible"))
        metrics.append(RiskMetric("Peak Traffic Impact", "$50,000-200,000 lost revenue/hour"))
    elif config.inference_jobs > 1:
        scenarios.append(
            f"Resource Competition Crisis: your {config.inference_jobs} AI services draw from the same "
            "80GB pool. A memory leak or an unusually large request in one service steals capacity from "
            "the others, so an unrelated chatbot can take down a critical service."
        )
        metrics.append(RiskMetric("Memory Conflict Probability", "60-80% during peak loads"))

    if config.training_jobs > 0 and config.inference_jobs > 0:
        scenarios.append(
            f"Training vs Production Contention: {config.training_jobs} training pipeline(s) compete "
            f"directly with {config.inference_jobs} customer-facing service(s). A training run that "
            "grows to 70GB during business hours leaves real-time inference without memory."
        )
        metrics.append(RiskMetric("Production Interference", "Training blocks inference 40-70% of time"))
        metrics.append(RiskMetric("Training Efficiency Loss", "2-3x longer completion times"))
    elif config.training_jobs > 1:
        scenarios.append(
            f"Research Bottleneck: {config.training_jobs} teams competing for training resources means "
            "experiments queue up and data scientists spend more time waiting than researching."
        )
        metrics.append(RiskMetric("Research Productivity", f"{config.training_jobs} teams blocking each other"))

    if config.environment == "production":
        scenarios.append(
            "Enterprise SLA Breach: in production, resource conflicts trigger SLA violations against a "
            "99.9% uptime expectation. Each incident carries penalties and erodes customer trust."
        )
        metrics.append(RiskMetric("SLA Penalty Risk", "$10,000-50,000 per incident"))
        metrics.append(RiskMetric("Customer Churn Risk", "15-30% after repeated failures"))

    if config.memory_req == "auto":
        scenarios.append(
            "Configuration Gambling: without a deliberate memory strategy, suboptimal allocation leaves "
            "expensive capacity idle. Proper partitioning typically improves utilization by 60-150%."
        )
        metrics.append(RiskMetric("Resource Waste", "40-70% of GPU capacity unused"))

    metrics.append(
        RiskMetric("Estimated Hourly Loss", f"${estimate_hourly_loss(config):,}/hour during conflicts")
    )
    return RiskAnalysis(scenarios=scenarios[:MAX_SCENARIOS], metrics=metrics)


def default_risk_analysis(narrative: str | None = None) -> RiskAnalysis:
    return RiskAnalysis(
        scenarios=[],
        metrics=[RiskMetric(label, value) for label, value in DEFAULT_RISK_METRICS],
        narrative=narrative or DEFAULT_RISK_NARRATIVE,
    )


def coerce_risk_analysis(raw_value: Any, config: WorkloadConfig) -> RiskAnalysis:
    if isinstance(raw_value, Mapping):
        raw_scenarios = raw_value.get("scenarios")
        raw_metrics = raw_value.get("metrics")
        scenarios = (
            [str(item) for item in raw_scenarios if str(item).strip()] if isinstance(raw_scenarios, list) else []
        )
        metrics = []
        if isinstance(raw_metrics, list):
            for item in raw_metrics:
                if isinstance(item, Mapping) and "label" in item and "value" in item:
                    metrics.append(RiskMetric(str(item["label"]), str(item["value"])))
        if scenarios:
            return RiskAnalysis(scenarios=scenarios, metrics=metrics)
        return generate_risk_analysis(config)
    if isinstance(raw_value, str) and raw_value.strip():
        return default_risk_analysis(raw_value.strip())
    return generate_risk_analysis(config)
