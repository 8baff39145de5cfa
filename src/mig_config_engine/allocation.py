from __future__ import annotations

from .constants import (
    ALLOCATION_TABLE,
    BUSY_JOB_THRESHOLD,
    H100,
    MIG_PROFILES,
    UTILIZATION_BUSY,
    UTILIZATION_NORMAL,
)
from .models import InstanceAllocation, MIGProfile, ResourceBreakdown, WorkloadConfig


def profile_by_name(name: str) -> MIGProfile:
    if name not in MIG_PROFILES:
        raise ValueError(f"unknown MIG profile: {name}")
    compute_units, memory_gb = MIG_PROFILES[name]
    return MIGProfile(name=name, memory_gb=memory_gb, compute_units=compute_units)


def allocate(job_type: str, memory_req: str) -> MIGProfile:
    key = job_type.strip().lower()
    if key not in ALLOCATION_TABLE:
        raise ValueError(f"unsupported job type: {job_type}")
    column = ALLOCATION_TABLE[key]
    return profile_by_name(column.get(str(memory_req).strip().lower(), column["auto"]))


def workload_profiles(config: WorkloadConfig) -> list[InstanceAllocation]:
    instances: list[InstanceAllocation] = []
    inference_profile = allocate("inference", config.memory_req)
    training_profile = allocate("training", config.memory_req)
    for index in range(max(0, config.inference_jobs)):
        instances.append(
            InstanceAllocation(
                job_type="inference",
                name=f"inference-service-{index + 1}",
                profile=inference_profile.name,
                memory_gb=inference_profile.memory_gb,
                compute_units=inference_profile.compute_units,
            )
        )
    for index in range(max(0, config.training_jobs)):
        instances.append(
            InstanceAllocation(
                job_type="training",
                name=f"training-pipeline-{index + 1}",
                profile=training_profile.name,
                memory_gb=training_profile.memory_gb,
                compute_units=training_profile.compute_units,
            )
        )
    return instances


def efficiency_percentage(memory_gb: int, total_memory_gb: int = H100.memory_gb) -> int:
    if total_memory_gb <= 0:
        return 0
    return int(round(memory_gb / total_memory_gb * 100))


def estimated_utilization(config: WorkloadConfig) -> float:
    return UTILIZATION_BUSY if config.total_jobs > BUSY_JOB_THRESHOLD else UTILIZATION_NORMAL


def reconcile_resources(config: WorkloadConfig) -> ResourceBreakdown:
    instances = workload_profiles(config)
    memory_total = sum(instance.memory_gb for instance in instances)
    compute_units = min(sum(instance.compute_units for instance in instances), H100.compute_units)

    utilization = estimated_utilization(config)
    hourly_cost = round(H100.hourly_cost_usd * utilization, 2)
    monthly_cost = round(hourly_cost * 24 * 30, 2)

    return ResourceBreakdown(
        memory_total_gb=memory_total,
        compute_units_used=compute_units,
        compute_units_total=H100.compute_units,
        efficiency_pct=efficiency_percentage(memory_total),
        reserved_system_gb=max(0, H100.memory_gb - memory_total),
        over_capacity=memory_total > H100.memory_gb,
        estimated_utilization_pct=int(round(utilization * 100)),
        hourly_cost_usd=hourly_cost,
        monthly_cost_usd=monthly_cost,
        instances=instances,
    )
