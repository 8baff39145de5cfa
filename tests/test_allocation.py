from __future__ import annotations

import pytest

from mig_config_engine.allocation import allocate, reconcile_resources, workload_profiles
from mig_config_engine.models import WorkloadConfig


@pytest.mark.parametrize(
    ("job_type", "memory_req", "expected"),
    [
        ("inference", "10", ("1g.10gb", 10, 1)),
        ("inference", "20", ("2g.20gb", 20, 2)),
        ("inference", "40", ("2g.20gb", 20, 2)),
        ("inference", "auto", ("1g.10gb", 10, 1)),
        ("training", "10", ("2g.20gb", 20, 2)),
        ("training", "20", ("3g.40gb", 40, 3)),
        ("training", "40", ("3g.40gb", 40, 3)),
        ("training", "auto", ("3g.40gb", 40, 3)),
    ],
)
def test_allocation_table(job_type, memory_req, expected):
    profile = allocate(job_type, memory_req)
    assert (profile.name, profile.memory_gb, profile.compute_units) == expected


def test_unknown_memory_strategy_uses_auto_column():
    assert allocate("training", "96") == allocate("training", "auto")


def test_unknown_job_type_is_rejected():
    with pytest.raises(ValueError):
        allocate("serving", "auto")


def test_reconcile_mixed_workload():
    resources = reconcile_resources(WorkloadConfig(inference_jobs=2, training_jobs=1, memory_req="auto"))

    assert resources.memory_total_gb == 60
    assert resources.compute_units_used == 5
    assert resources.compute_units == "5/7"
    assert resources.efficiency_pct == 75
    assert resources.reserved_system_gb == 20
    assert resources.over_capacity is False


def test_reconcile_clamps_compute_units_to_hardware_limit():
    resources = reconcile_resources(WorkloadConfig(inference_jobs=4, training_jobs=0, memory_req="20"))

    assert resources.memory_total_gb == 80
    assert resources.compute_units_used == 7
    assert resources.efficiency_score == "100%"


def test_reconcile_flags_memory_over_capacity():
    resources = reconcile_resources(WorkloadConfig(inference_jobs=5, training_jobs=2, memory_req="40"))

    assert resources.memory_total_gb == 180
    assert resources.over_capacity is True
    assert resources.reserved_system_gb == 0


def test_reconcile_is_deterministic():
    config = WorkloadConfig(inference_jobs=3, training_jobs=2, memory_req="10", environment="research")

    assert reconcile_resources(config).to_dict() == reconcile_resources(config).to_dict()


def test_instances_list_inference_before_training():
    instances = workload_profiles(WorkloadConfig(inference_jobs=2, training_jobs=1))

    assert [instance.name for instance in instances] == [
        "inference-service-1",
        "inference-service-2",
        "training-pipeline-1",
    ]
    assert [instance.profile for instance in instances] == ["1g.10gb", "1g.10gb", "3g.40gb"]


def test_cost_estimate_scales_with_utilization():
    light = reconcile_resources(WorkloadConfig(inference_jobs=2, training_jobs=1))
    busy = reconcile_resources(WorkloadConfig(inference_jobs=4, training_jobs=1))

    assert light.estimated_utilization_pct == 75
    assert light.hourly_cost_usd == pytest.approx(2.40)
    assert light.monthly_cost_usd == pytest.approx(1728.0)
    assert busy.estimated_utilization_pct == 95
    assert busy.hourly_cost_usd == pytest.approx(3.04)
    assert busy.monthly_cost_usd == pytest.approx(2188.8)
