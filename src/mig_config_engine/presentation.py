from __future__ import annotations

import itertools
import threading
from dataclasses import asdict, dataclass, field
from typing import Any

from .commands import CommandStep, annotate_commands
from .models import ConfigurationResult, RiskAnalysis


@dataclass(slots=True)
class ResourceRow:
    label: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ConfigurationView:
    badge: str
    strategy: str
    commands: list[CommandStep]
    copy_text: str
    resource_rows: list[ResourceRow]
    risk: RiskAnalysis
    warnings: list[str] = field(default_factory=list)
    reasoning: str | None = None
    source: str = "model"

    def to_dict(self) -> dict[str, Any]:
        return {
            "badge": self.badge,
            "strategy": self.strategy,
            "commands": [step.to_dict() for step in self.commands],
            "copyText": self.copy_text,
            "resourceRows": [row.to_dict() for row in self.resource_rows],
            "risk": self.risk.to_dict(),
            "warnings": list(self.warnings),
            "reasoning": self.reasoning,
            "source": self.source,
        }


@dataclass(slots=True)
class UIState:
    status: str = "idle"
    error_message: str | None = None
    view: ConfigurationView | None = None
    active_token: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "errorMessage": self.error_message,
            "view": self.view.to_dict() if self.view is not None else None,
        }


class RequestSlot:
    """Single-slot request token.

    Each ``begin()`` supersedes every earlier token, so a result that arrives
    for an older submission is dropped instead of overwriting newer output.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._current: int | None = None
        self._lock = threading.Lock()

    def begin(self) -> int:
        with self._lock:
            token = next(self._counter)
            self._current = token
            return token

    def is_current(self, token: int) -> bool:
        with self._lock:
            return self._current == token

    def finish(self, token: int) -> bool:
        with self._lock:
            if self._current != token:
                return False
            self._current = None
            return True


def build_view(result: ConfigurationResult) -> ConfigurationView:
    config = result.config
    resources = result.resources
    return ConfigurationView(
        badge=f"{config.total_jobs} Instances • {resources.memory_total}",
        strategy=result.strategy,
        commands=annotate_commands(result.commands),
        copy_text=result.commands,
        resource_rows=[
            ResourceRow("Total Memory Allocated", resources.memory_total),
            ResourceRow("Compute Units", resources.compute_units),
            ResourceRow("Efficiency Score", resources.efficiency_score),
            ResourceRow(
                "Instance Distribution",
                f"{config.inference_jobs} Inference + {config.training_jobs} Training",
            ),
            ResourceRow("Reserved for System", f"{resources.reserved_system_gb}GB"),
            ResourceRow("Estimated Hourly Cost", f"${resources.hourly_cost_usd:.2f}"),
            ResourceRow("Estimated Monthly Cost", f"${resources.monthly_cost_usd:,.2f}"),
        ],
        risk=result.risk_analysis or RiskAnalysis(),
        warnings=list(result.warnings),
        reasoning=result.reasoning,
        source=result.source,
    )


def begin_request(state: UIState, slot: RequestSlot) -> int:
    token = slot.begin()
    state.status = "loading"
    state.error_message = None
    state.view = None
    state.active_token = token
    return token


def render_result(state: UIState, result: ConfigurationResult, slot: RequestSlot | None = None, token: int | None = None) -> bool:
    if slot is not None and token is not None and not slot.finish(token):
        return False
    state.status = "results"
    state.error_message = None
    state.view = build_view(result)
    state.active_token = None
    return True


def render_error(state: UIState, message: str, slot: RequestSlot | None = None, token: int | None = None) -> bool:
    if slot is not None and token is not None and not slot.finish(token):
        return False
    state.status = "error"
    state.error_message = message
    state.view = None
    state.active_token = None
    return True


def format_view(view: ConfigurationView) -> str:
    lines = [f"== {view.badge} ==", "", "Strategy", "--------", view.strategy, ""]
    if view.reasoning:
        lines.extend(["Reasoning", "---------", view.reasoning, ""])

    lines.extend(["Commands", "--------"])
    for step in view.commands:
        if step.is_comment:
            lines.append(f"# {step.title}")
        elif step.title:
            lines.append(f"{step.command}    [{step.title}]")
        else:
            lines.append(step.command or "")
    lines.append("")

    lines.extend(["Resources", "---------"])
    width = max((len(row.label) for row in view.resource_rows), default=0)
    for row in view.resource_rows:
        lines.append(f"{row.label.ljust(width)}  {row.value}")
    lines.append("")

    if view.warnings:
        lines.extend(["Warnings", "--------"])
        lines.extend(f"- {warning}" for warning in view.warnings)
        lines.append("")

    lines.extend(["Risk Analysis", "-------------"])
    if view.risk.narrative:
        lines.append(view.risk.narrative)
    lines.extend(f"* {scenario}" for scenario in view.risk.scenarios)
    lines.extend(f"{metric.label}: {metric.value}" for metric in view.risk.metrics)
    return "\n".join(lines).rstrip() + "\n"
