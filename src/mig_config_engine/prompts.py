from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .allocation import allocate, reconcile_resources
from .commands import profile_list
from .constants import (
    ENVIRONMENT_PRIORITIES,
    H100,
    INFERENCE_JOBS_MAX,
    MEMORY_STRATEGIES,
    MEMORY_STRATEGY_LABELS,
    MIG_PROFILES,
    TRAINING_JOBS_MAX,
)
from .models import IssueSignals, WorkloadConfig

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


class PromptTemplateEngine:
    def __init__(self, template_dir: str | Path = DEFAULT_TEMPLATE_DIR) -> None:
        self.template_dir = Path(template_dir)
        self.environment = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            trim_blocks=False,
            lstrip_blocks=False,
            keep_trailing_newline=False,
            undefined=StrictUndefined,
        )

    def render(self, template_name: str, context: dict) -> str:
        template = self.environment.get_template(f"{template_name}.j2")
        return template.render(**context).strip()


_default_engine: PromptTemplateEngine | None = None


def default_engine() -> PromptTemplateEngine:
    global _default_engine
    if _default_engine is None:
        _default_engine = PromptTemplateEngine()
    return _default_engine


def _allocation_rows() -> list[dict]:
    return [
        {
            "memory_req": memory_req,
            "inference": allocate("inference", memory_req),
            "training": allocate("training", memory_req),
        }
        for memory_req in MEMORY_STRATEGIES
    ]


def build_analysis_prompt(
    issue: str,
    signals: IssueSignals,
    engine: PromptTemplateEngine | None = None,
) -> str:
    engine = engine or default_engine()
    return engine.render(
        "analysis",
        {
            "issue": issue.strip(),
            "signals": signals,
            "problems": signals.detected_problems,
            "business_context": signals.detected_business_context,
            "training_detected": bool(
                signals.problems.get("training")
                or signals.problems.get("finetuning")
                or signals.problems.get("research")
            ),
            "training_matches": [match.text for match in signals.training_matches],
            "service_matches": [match.text for match in signals.service_matches],
            "gpu": H100,
            "profiles": list(MIG_PROFILES),
            "inference_max": INFERENCE_JOBS_MAX,
            "training_max": TRAINING_JOBS_MAX,
            "allocation_rows": _allocation_rows(),
        },
    )


def build_configuration_prompt(
    config: WorkloadConfig,
    engine: PromptTemplateEngine | None = None,
) -> str:
    engine = engine or default_engine()
    return engine.render(
        "configuration",
        {
            "config": config,
            "gpu": H100,
            "profiles": list(MIG_PROFILES),
            "environment_priority": ENVIRONMENT_PRIORITIES.get(
                config.environment, ENVIRONMENT_PRIORITIES["research"]
            ),
            "memory_label": MEMORY_STRATEGY_LABELS.get(config.memory_req, MEMORY_STRATEGY_LABELS["auto"]),
            "inference_profile": allocate("inference", config.memory_req),
            "training_profile": allocate("training", config.memory_req),
            "instance_profiles": profile_list(config),
            "resources": reconcile_resources(config),
        },
    )
