from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .allocation import allocate, reconcile_resources
from .commands import build_commands, cgi_profiles, profile_list
from .constants import H100
from .errors import ParseError, UpstreamUnavailable
from .extraction import extract_issue_signals
from .fallback import synthesize_fallback
from .gateway import InferenceGateway
from .interpreter import interpret_analysis, interpret_configuration
from .metrics import MetricsRegistry
from .models import ConfigurationResult, RiskAnalysis, WorkloadConfig
from .prompts import PromptTemplateEngine, build_analysis_prompt, build_configuration_prompt
from .risk import coerce_risk_analysis, generate_risk_analysis
from .validation import validate_config, validation_overrides

logger = logging.getLogger(__name__)

DEMO_WARNINGS = [
    "This is a demo configuration - actual production deployments may require additional tuning",
    "Monitor memory usage during peak inference loads",
    "Consider implementing proper monitoring and alerting for GPU utilization metrics",
]


def capacity_warnings(config: WorkloadConfig, commands: str | None = None) -> list[str]:
    warnings: list[str] = []
    resources = reconcile_resources(config)
    if resources.over_capacity:
        warnings.append(
            f"Requested allocation of {resources.memory_total} exceeds the {H100.memory_gb}GB available on the "
            "H100; reduce instance sizes or counts before applying these commands."
        )
    if sum(instance.compute_units for instance in resources.instances) > H100.compute_units:
        warnings.append(
            f"Requested profiles need more than {H100.compute_units} compute units; "
            "compute figures are capped at the hardware limit."
        )
    if commands is not None:
        suggested = cgi_profiles(commands)
        expected = profile_list(config)
        if suggested is not None and suggested != expected:
            warnings.append(
                "Model-suggested profiles ("
                + (",".join(suggested) or "none")
                + ") differ from the standard allocation ("
                + (",".join(expected) or "none")
                + "); resource figures reflect the standard allocation."
            )
    return warnings


class MIGConfigEngine:
    def __init__(
        self,
        gateway: InferenceGateway | None = None,
        metrics: MetricsRegistry | None = None,
        template_engine: PromptTemplateEngine | None = None,
    ) -> None:
        self.gateway = gateway
        self.metrics = metrics
        self.template_engine = template_engine

    def _require_gateway(self) -> InferenceGateway:
        if self.gateway is None:
            raise UpstreamUnavailable()
        return self.gateway

    def _assemble(
        self,
        *,
        config: WorkloadConfig,
        strategy: str,
        commands: str,
        warnings: list[str],
        risk_analysis: RiskAnalysis,
        reasoning: str | None,
        source: str,
        entry_point: str,
        model_reported_resources: dict[str, Any] | None = None,
    ) -> ConfigurationResult:
        if self.metrics is not None:
            self.metrics.inc_configuration(entry_point=entry_point, source=source)
        return ConfigurationResult(
            config=config,
            strategy=strategy,
            commands=commands,
            resources=reconcile_resources(config),
            warnings=warnings + capacity_warnings(config, commands),
            risk_analysis=risk_analysis,
            reasoning=reasoning,
            source=source,
            model_reported_resources=model_reported_resources,
        )

    def analyze_issue(self, issue: str) -> ConfigurationResult:
        signals = extract_issue_signals(issue)
        prompt = build_analysis_prompt(issue, signals, self.template_engine)
        raw = self._require_gateway().generate_config(prompt, "analysis")
        analysis = interpret_analysis(raw, issue, signals)
        if self.metrics is not None:
            if analysis.source == "fallback":
                self.metrics.inc_parse_fallback(mode="analysis")
            self.metrics.inc_validator_overrides(analysis.overrides)

        return self._assemble(
            config=analysis.config,
            strategy=analysis.strategy,
            commands=build_commands(analysis.config),
            warnings=[],
            risk_analysis=generate_risk_analysis(analysis.config),
            reasoning=analysis.reasoning,
            source=analysis.source,
            entry_point="analysis",
        )

    def offline_analysis(self, issue: str) -> ConfigurationResult:
        signals = extract_issue_signals(issue)
        analysis = synthesize_fallback(issue, signals)
        config, reasoning = validate_config(analysis.config, signals=signals, reasoning=analysis.reasoning)
        return self._assemble(
            config=config,
            strategy=analysis.strategy,
            commands=build_commands(config),
            warnings=[],
            risk_analysis=generate_risk_analysis(config),
            reasoning=reasoning,
            source="fallback",
            entry_point="offline_analysis",
        )

    def generate_configuration(self, candidate: Mapping[str, Any] | WorkloadConfig) -> ConfigurationResult:
        config, reasoning = validate_config(candidate)
        overrides = validation_overrides(candidate, config)
        if overrides and self.metrics is not None:
            self.metrics.inc_validator_overrides(overrides)

        prompt = build_configuration_prompt(config, self.template_engine)
        raw = self._require_gateway().generate_config(prompt, "configuration")
        try:
            payload = interpret_configuration(raw)
        except ParseError:
            if self.metrics is not None:
                self.metrics.inc_parse_fallback(mode="configuration")
            raise

        reported = payload["resources"]
        if reported is not None:
            logger.debug("model reported resources %s; replaced by reconciled totals", reported)
        return self._assemble(
            config=config,
            strategy=payload["strategy"],
            commands=payload["commands"],
            warnings=payload["warnings"],
            risk_analysis=coerce_risk_analysis(payload["riskAnalysis"], config),
            reasoning=reasoning,
            source="model",
            entry_point="configuration",
            model_reported_resources=reported,
        )

    def demo_configuration(self, candidate: Mapping[str, Any] | WorkloadConfig) -> ConfigurationResult:
        config, reasoning = validate_config(candidate)
        inference_profile, training_profile = _demo_profiles(config)
        strategy = (
            f"For this {config.environment} workload requiring {config.inference_jobs} inference endpoints and "
            f"{config.training_jobs} training pipeline(s), this balanced MIG configuration optimizes both "
            f"isolation and resource utilization. It creates {config.inference_jobs}x {inference_profile} "
            f"instances for inference tasks, providing isolation while keeping latency low"
        )
        if config.training_jobs:
            strategy += (
                f", and allocates {config.training_jobs}x {training_profile} instance(s) for training pipelines "
                "with sufficient memory and compute for fine-tuning"
            )
        strategy += f". This maintains a sound price-performance ratio for {config.environment} workloads."
        return self._assemble(
            config=config,
            strategy=strategy,
            commands=build_commands(config),
            warnings=list(DEMO_WARNINGS),
            risk_analysis=generate_risk_analysis(config),
            reasoning=reasoning,
            source="demo",
            entry_point="demo",
        )


def _demo_profiles(config: WorkloadConfig) -> tuple[str, str]:
    return allocate("inference", config.memory_req).name, allocate("training", config.memory_req).name
