from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .constants import (
    DEFAULT_INFERENCE_JOBS,
    DEFAULT_TRAINING_JOBS,
    ENVIRONMENTS,
    INFERENCE_JOBS_MAX,
    MAX_TOTAL_INSTANCES,
    MEMORY_STRATEGIES,
    MIN_REASONING_LENGTH,
    TRAINING_JOBS_MAX,
)
from .models import IssueSignals, WorkloadConfig

logger = logging.getLogger(__name__)

_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "inference_jobs": ("inferenceJobs", "inference_jobs"),
    "training_jobs": ("trainingJobs", "training_jobs"),
    "memory_req": ("memoryReq", "memory_req"),
    "environment": ("environment",),
}


def _field(candidate: Mapping[str, Any] | WorkloadConfig | None, name: str) -> Any:
    if candidate is None:
        return None
    if isinstance(candidate, WorkloadConfig):
        return getattr(candidate, name)
    for alias in _FIELD_ALIASES[name]:
        if alias in candidate:
            return candidate[alias]
    return None


def coerce_int(raw_value: Any, default: int) -> int:
    if isinstance(raw_value, bool) or raw_value is None:
        return default
    if isinstance(raw_value, int):
        return raw_value
    text = str(raw_value).strip()
    try:
        return int(float(text))
    except (OverflowError, ValueError):
        return default


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


def training_jobs_for_signals(signals: IssueSignals) -> int:
    if signals.environment == "research" or signals.problems.get("research"):
        return 2
    return 1


def rebalance_total(inference_jobs: int, training_jobs: int, environment: str) -> tuple[int, int]:
    if inference_jobs + training_jobs <= MAX_TOTAL_INSTANCES:
        return inference_jobs, training_jobs
    if environment == "research":
        inference_jobs = min(inference_jobs, 3)
        training_jobs = min(MAX_TOTAL_INSTANCES - inference_jobs, 4, TRAINING_JOBS_MAX)
    else:
        training_jobs = min(training_jobs, 2)
        inference_jobs = min(inference_jobs, MAX_TOTAL_INSTANCES - training_jobs, INFERENCE_JOBS_MAX)
    return inference_jobs, training_jobs


def normalize_memory_req(raw_value: Any) -> str:
    text = str(raw_value).strip().lower() if raw_value is not None else ""
    if text.endswith("gb"):
        text = text[:-2].strip()
    return text if text in MEMORY_STRATEGIES else "auto"


def normalize_environment(raw_value: Any, default: str) -> str:
    text = str(raw_value).strip().lower() if raw_value is not None else ""
    return text if text in ENVIRONMENTS else default


def default_reasoning(config: WorkloadConfig) -> str:
    return (
        f"Configuration sized for {config.inference_jobs} inference endpoint(s) and "
        f"{config.training_jobs} training pipeline(s) in a {config.environment} environment "
        f"using the '{config.memory_req}' memory strategy."
    )


def validate_config(
    candidate: Mapping[str, Any] | WorkloadConfig | None,
    signals: IssueSignals | None = None,
    reasoning: str | None = None,
) -> tuple[WorkloadConfig, str]:
    inference_jobs = clamp(
        coerce_int(_field(candidate, "inference_jobs"), DEFAULT_INFERENCE_JOBS), 0, INFERENCE_JOBS_MAX
    )
    training_jobs = clamp(
        coerce_int(_field(candidate, "training_jobs"), DEFAULT_TRAINING_JOBS), 0, TRAINING_JOBS_MAX
    )

    fallback_environment = signals.environment if signals is not None else "production"
    environment = normalize_environment(_field(candidate, "environment"), fallback_environment)
    memory_req = normalize_memory_req(_field(candidate, "memory_req"))

    if signals is not None:
        if not signals.has_training_signals and training_jobs != 0:
            logger.info("training jobs overridden %s -> 0: no training signals in issue", training_jobs)
            training_jobs = 0
        elif signals.has_training_signals and training_jobs == 0:
            training_jobs = training_jobs_for_signals(signals)
            logger.info("training jobs overridden 0 -> %s: training signals in issue", training_jobs)

    balanced = rebalance_total(inference_jobs, training_jobs, environment)
    if balanced != (inference_jobs, training_jobs):
        logger.info(
            "instance total rebalanced from %s+%s to %s+%s for %s",
            inference_jobs,
            training_jobs,
            balanced[0],
            balanced[1],
            environment,
        )
    inference_jobs, training_jobs = balanced

    config = WorkloadConfig(
        inference_jobs=inference_jobs,
        training_jobs=training_jobs,
        memory_req=memory_req,
        environment=environment,
    )

    text = (reasoning or "").strip()
    if len(text) < MIN_REASONING_LENGTH:
        text = default_reasoning(config)
    return config, text


def validation_overrides(before: Mapping[str, Any] | WorkloadConfig | None, after: WorkloadConfig) -> list[str]:
    changed: list[str] = []
    for name in ("inference_jobs", "training_jobs", "memory_req", "environment"):
        raw = _field(before, name)
        current = getattr(after, name)
        if name in {"inference_jobs", "training_jobs"}:
            if coerce_int(raw, -1) != current:
                changed.append(name)
        elif raw is None or str(raw).strip().lower() != current:
            changed.append(name)
    return changed
