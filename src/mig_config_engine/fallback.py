from __future__ import annotations

import logging

from .constants import DEFAULT_INFERENCE_JOBS, INFERENCE_JOBS_MAX, TRAINING_JOBS_MAX
from .models import AnalysisResult, IssueSignals, WorkloadConfig
from .validation import clamp, rebalance_total, training_jobs_for_signals

logger = logging.getLogger(__name__)

_SCALING_INFERENCE_CAP = 4
_CRASH_INFERENCE_CAP = 2

_PROBLEM_PHRASES = {
    "performance": "performance degradation",
    "memory": "memory pressure",
    "crashes": "service crashes",
    "scaling": "scaling demands",
    "isolation": "workload isolation gaps",
    "training": "training workloads",
    "finetuning": "fine-tuning workloads",
    "research": "research experimentation",
}


def _problem_summary(signals: IssueSignals) -> str:
    phrases = [_PROBLEM_PHRASES.get(name, name) for name in signals.detected_problems]
    if not phrases:
        return "general GPU utilization concerns"
    if len(phrases) == 1:
        return phrases[0]
    return ", ".join(phrases[:-1]) + f" and {phrases[-1]}"


def synthesize_config(signals: IssueSignals) -> WorkloadConfig:
    inference_jobs = DEFAULT_INFERENCE_JOBS
    if signals.service_matches:
        inference_jobs = clamp(signals.service_matches[0].count, 1, INFERENCE_JOBS_MAX)

    training_jobs = 0
    if signals.training_matches:
        training_jobs = clamp(signals.training_matches[0].count, 1, TRAINING_JOBS_MAX)
    elif signals.has_training_signals:
        training_jobs = training_jobs_for_signals(signals)

    memory_req = "auto"
    if signals.problems.get("memory") and signals.problems.get("crashes"):
        memory_req = "40"
        inference_jobs = min(inference_jobs, _CRASH_INFERENCE_CAP)

    if signals.problems.get("scaling") and signals.business_context.get("ecommerce"):
        inference_jobs = min(inference_jobs + 1, _SCALING_INFERENCE_CAP)

    inference_jobs, training_jobs = rebalance_total(inference_jobs, training_jobs, signals.environment)
    return WorkloadConfig(
        inference_jobs=inference_jobs,
        training_jobs=training_jobs,
        memory_req=memory_req,
        environment=signals.environment,
    )


def synthesize_fallback(issue: str, signals: IssueSignals) -> AnalysisResult:
    config = synthesize_config(signals)
    summary = _problem_summary(signals)
    logger.warning(
        "model response unusable; synthesized %s+%s (%s) from local signals",
        config.inference_jobs,
        config.training_jobs,
        config.environment,
    )

    excerpt = " ".join(issue.split())
    if len(excerpt) > 120:
        excerpt = excerpt[:117].rstrip() + "..."

    reasoning = (
        f"Based on the described issue (\"{excerpt}\"), local analysis identified {summary}. "
        f"Allocating {config.inference_jobs} isolated inference instance(s) and "
        f"{config.training_jobs} training instance(s) addresses these problems without exceeding "
        f"the 7-instance hardware limit."
    )
    if config.training_jobs:
        workload = (
            f"{config.inference_jobs} inference endpoint(s) on dedicated slices and "
            f"{config.training_jobs} training pipeline(s) on larger slices"
        )
    else:
        workload = f"{config.inference_jobs} inference endpoint(s) on dedicated slices"
    strategy = (
        f"For {config.environment} workload: partition the H100 into {workload} so that {summary} "
        f"in one workload cannot starve the others. Memory strategy '{config.memory_req}' keeps "
        f"allocations predictable."
    )
    return AnalysisResult(
        config=config,
        reasoning=reasoning,
        strategy=strategy,
        confidence="low",
        source="fallback",
    )
