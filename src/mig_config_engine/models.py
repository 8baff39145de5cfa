from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


JobType = str
MemoryStrategy = str
Environment = str


@dataclass(slots=True)
class WorkloadConfig:
    inference_jobs: int
    training_jobs: int
    memory_req: MemoryStrategy = "auto"
    environment: Environment = "production"

    @property
    def total_jobs(self) -> int:
        return self.inference_jobs + self.training_jobs

    def to_dict(self) -> dict[str, Any]:
        return {
            "inferenceJobs": self.inference_jobs,
            "trainingJobs": self.training_jobs,
            "memoryReq": self.memory_req,
            "environment": self.environment,
            "totalJobs": self.total_jobs,
        }


@dataclass(slots=True)
class PatternMatch:
    text: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class IssueSignals:
    environment: Environment
    service_matches: list[PatternMatch]
    training_matches: list[PatternMatch]
    problems: dict[str, bool]
    business_context: dict[str, bool]
    complexity: str

    @property
    def detected_problems(self) -> list[str]:
        return [name for name, present in self.problems.items() if present]

    @property
    def detected_business_context(self) -> list[str]:
        return [name for name, present in self.business_context.items() if present]

    @property
    def has_training_signals(self) -> bool:
        return bool(
            self.problems.get("training")
            or self.problems.get("finetuning")
            or self.problems.get("research")
            or self.training_matches
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class MIGProfile:
    name: str
    memory_gb: int
    compute_units: int


@dataclass(slots=True)
class InstanceAllocation:
    job_type: JobType
    name: str
    profile: str
    memory_gb: int
    compute_units: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ResourceBreakdown:
    memory_total_gb: int
    compute_units_used: int
    compute_units_total: int
    efficiency_pct: int
    reserved_system_gb: int
    over_capacity: bool
    estimated_utilization_pct: int
    hourly_cost_usd: float
    monthly_cost_usd: float
    instances: list[InstanceAllocation] = field(default_factory=list)

    @property
    def memory_total(self) -> str:
        return f"{self.memory_total_gb}GB"

    @property
    def compute_units(self) -> str:
        return f"{self.compute_units_used}/{self.compute_units_total}"

    @property
    def efficiency_score(self) -> str:
        return f"{self.efficiency_pct}%"

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["memory_total"] = self.memory_total
        payload["compute_units"] = self.compute_units
        payload["efficiency_score"] = self.efficiency_score
        return payload


@dataclass(slots=True)
class RiskMetric:
    label: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class RiskAnalysis:
    scenarios: list[str] = field(default_factory=list)
    metrics: list[RiskMetric] = field(default_factory=list)
    narrative: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class AnalysisResult:
    config: WorkloadConfig
    reasoning: str
    strategy: str
    confidence: str = "medium"
    source: str = "model"
    overrides: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "config": self.config.to_dict(),
            "reasoning": self.reasoning,
            "strategy": self.strategy,
            "confidence": self.confidence,
            "source": self.source,
            "overrides": list(self.overrides),
        }


@dataclass(slots=True)
class ConfigurationResult:
    config: WorkloadConfig
    strategy: str
    commands: str
    resources: ResourceBreakdown
    warnings: list[str] = field(default_factory=list)
    risk_analysis: RiskAnalysis | None = None
    reasoning: str | None = None
    source: str = "model"
    model_reported_resources: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "config": self.config.to_dict(),
            "strategy": self.strategy,
            "commands": self.commands,
            "resources": self.resources.to_dict(),
            "warnings": list(self.warnings),
            "riskAnalysis": self.risk_analysis.to_dict() if self.risk_analysis is not None else None,
            "reasoning": self.reasoning,
            "source": self.source,
            "modelReportedResources": self.model_reported_resources,
        }
