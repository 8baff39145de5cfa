from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GPUSpec:
    name: str
    memory_gb: int
    compute_units: int
    max_instances: int
    hourly_cost_usd: float


H100 = GPUSpec(
    name="NVIDIA H100 80GB",
    memory_gb=80,
    compute_units=7,
    max_instances=7,
    hourly_cost_usd=3.20,
)

MIG_PROFILES: dict[str, tuple[int, int]] = {
    # name -> (compute units, memory GB)
    "1g.10gb": (1, 10),
    "2g.20gb": (2, 20),
    "3g.40gb": (3, 40),
    "4g.40gb": (4, 40),
    "7g.80gb": (7, 80),
}

INFERENCE_JOBS_MAX = 5
TRAINING_JOBS_MAX = 3
MAX_TOTAL_INSTANCES = H100.max_instances

DEFAULT_INFERENCE_JOBS = 2
DEFAULT_TRAINING_JOBS = 1

MEMORY_STRATEGIES = ("auto", "10", "20", "40")
ENVIRONMENTS = ("production", "development", "research")
JOB_TYPES = ("inference", "training")

# job type -> memoryReq -> profile name; "auto" and unknown strategies use the "auto" column
ALLOCATION_TABLE: dict[str, dict[str, str]] = {
    "inference": {
        "10": "1g.10gb",
        "20": "2g.20gb",
        "40": "2g.20gb",
        "auto": "1g.10gb",
    },
    "training": {
        "10": "2g.20gb",
        "20": "3g.40gb",
        "40": "3g.40gb",
        "auto": "3g.40gb",
    },
}

MEMORY_STRATEGY_LABELS: dict[str, str] = {
    "auto": "Balanced allocation",
    "10": "Conservative memory per instance",
    "20": "Balanced performance vs isolation",
    "40": "Aggressive memory per instance",
}

ENVIRONMENT_PRIORITIES: dict[str, str] = {
    "production": "PRODUCTION: Maximum reliability, fault tolerance, regulatory compliance, SLA guarantees",
    "development": "DEVELOPMENT: Resource efficiency, flexible allocation, rapid iteration support",
    "research": "RESEARCH: Experimental capabilities, maximum parallel training, academic flexibility",
}

UTILIZATION_BUSY = 0.95
UTILIZATION_NORMAL = 0.75
BUSY_JOB_THRESHOLD = 4

HOURLY_LOSS_BASE_USD = 1000
HOURLY_LOSS_PER_INFERENCE_USD = 500
HOURLY_LOSS_PER_TRAINING_USD = 300
HOURLY_LOSS_CAP_USD = 15000
HOURLY_LOSS_ENV_MULTIPLIER: dict[str, float] = {
    "production": 3.0,
    "development": 1.5,
    "research": 2.0,
}

COMPLEXITY_THRESHOLDS = {
    "low_max": 120,
    "medium_max": 400,
}

MIN_REASONING_LENGTH = 20


SERVICE_COUNT_NOUNS = ("service", "endpoint", "model", "api")
TRAINING_COUNT_NOUNS = (
    "training",
    "pipeline",
    "job",
    "experiment",
    "student",
    "concurrent",
    "fine-tun",
    "retrain",
)

ENVIRONMENT_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("research", ("research", "phd", "university", "academic", "professor", "thesis", "lab ")),
    ("development", ("development", "dev environment", "dev team", "staging", "sandbox", "prototype", "testing")),
    ("production", ("production", "prod ", "customer", "sla ", "uptime", "enterprise")),
)

PROBLEM_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("performance", ("slow", "latency", "performance", "throughput", "lag", "bottleneck", "response time")),
    ("memory", ("memory", "oom", "out of memory", "vram", "cuda out")),
    ("crashes", ("crash", "outage", "goes down", "went down", "failing", "failure", "unstable", "restart")),
    ("scaling", ("scale", "scaling", "growth", "growing", "traffic", "spike", "peak", "more users")),
    ("isolation", ("isolat", "noisy neighbor", "interfer", "tenant", "contention", "compet", "fight")),
    ("training", ("training", "retrain", "pipeline", "experiment", "weekly model", "nightly model", "model update")),
    ("finetuning", ("fine-tun", "finetun", "fine tun", "lora", "adapter")),
    ("research", ("research", "phd", "student", "university", "academic", "lab ")),
)

BUSINESS_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("ecommerce", ("ecommerce", "e-commerce", "retail", "shop", "online store", "storefront", "checkout", "black friday", "recommendation")),
    ("fintech", ("fintech", "bank", "trading", "fraud", "payment", "finance", "financial", "credit")),
    ("ai", ("chatbot", "llm", "gpt", "bert", "ai ", "language model", "vision model", "multimodal")),
    ("realtime", ("real-time", "realtime", "real time", "live", "streaming", "low latency")),
)


ANALYSIS_PERSONA = (
    "You are the world's leading expert in NVIDIA GPU infrastructure and MIG partitioning. "
    "You have architected production AI clusters for Fortune 500 companies, prevented millions in downtime, "
    "and optimized GPU efficiency across thousands of deployments. "
    "You always return precise, well-structured JSON responses for infrastructure analysis."
)

CONFIGURATION_PERSONA = (
    "You are a Senior DevOps Engineer specializing in NVIDIA GPU infrastructure and MIG partitioning. "
    "You have 10+ years of experience with production AI clusters. "
    "You always provide complete, production-ready configurations with detailed explanations in perfect JSON format."
)

DEFAULT_UPSTREAM_BASE_URL = "https://api.openai.com/v1"
DEFAULT_UPSTREAM_MODEL = "gpt-4o"
DEFAULT_UPSTREAM_TEMPERATURE = 0.1
DEFAULT_UPSTREAM_MAX_TOKENS = 2500
DEFAULT_UPSTREAM_TIMEOUT_SECONDS = 60.0
