from __future__ import annotations

import pytest

from mig_config_engine.constants import ENVIRONMENTS, MEMORY_STRATEGIES
from mig_config_engine.extraction import extract_issue_signals
from mig_config_engine.models import WorkloadConfig
from mig_config_engine.validation import rebalance_total, validate_config, validation_overrides


def test_training_forced_to_zero_without_training_signals():
    signals = extract_issue_signals("We need 2 chatbots")
    model_config = {"inferenceJobs": 2, "trainingJobs": 3, "memoryReq": "20", "environment": "production"}

    config, _ = validate_config(model_config, signals=signals)

    assert config.training_jobs == 0
    assert config.inference_jobs == 2
    assert config.memory_req == "20"


def test_research_signals_override_zero_training_to_two():
    signals = extract_issue_signals("Our research group needs a chatbot demo")
    assert signals.problems["research"] is True

    config, _ = validate_config({"inferenceJobs": 1, "trainingJobs": 0}, signals=signals)

    assert config.training_jobs == 2
    assert config.environment == "research"


def test_research_problem_flag_overrides_to_two_outside_research_environment():
    signals = extract_issue_signals("Our students need a chatbot")
    assert signals.problems["research"] is True
    assert signals.environment == "production"

    config, _ = validate_config({"inferenceJobs": 1, "trainingJobs": 0}, signals=signals)

    assert config.training_jobs == 2
    assert config.environment == "production"


def test_training_signals_outside_research_override_to_one():
    signals = extract_issue_signals("We retrain our model weekly")

    config, _ = validate_config({"inferenceJobs": 2, "trainingJobs": 0}, signals=signals)

    assert config.training_jobs == 1


def test_counts_are_clamped():
    config, _ = validate_config({"inferenceJobs": 12, "trainingJobs": -4})

    assert config.inference_jobs == 5
    assert config.training_jobs == 0


def test_missing_or_unparseable_counts_use_defaults():
    config, _ = validate_config({})
    assert (config.inference_jobs, config.training_jobs) == (2, 1)

    config, _ = validate_config({"inferenceJobs": "lots", "trainingJobs": None})
    assert (config.inference_jobs, config.training_jobs) == (2, 1)

    config, _ = validate_config({"inferenceJobs": "3", "trainingJobs": 2.0})
    assert (config.inference_jobs, config.training_jobs) == (3, 2)


def test_total_rebalance_favors_inference_outside_research():
    config, _ = validate_config({"inferenceJobs": 5, "trainingJobs": 3, "environment": "production"})

    assert (config.inference_jobs, config.training_jobs) == (5, 2)


def test_total_rebalance_favors_training_in_research():
    config, _ = validate_config({"inferenceJobs": 5, "trainingJobs": 3, "environment": "research"})

    assert (config.inference_jobs, config.training_jobs) == (3, 3)


def test_rebalance_leaves_small_workloads_untouched():
    assert rebalance_total(2, 1, "production") == (2, 1)
    assert rebalance_total(4, 3, "research") == (4, 3)


def test_enums_fall_back_to_defaults():
    signals = extract_issue_signals("Staging sandbox for 2 models")

    config, _ = validate_config({"memoryReq": "64", "environment": "qa"}, signals=signals)
    assert config.memory_req == "auto"
    assert config.environment == "development"

    config, _ = validate_config({"memoryReq": "20GB", "environment": "Research"})
    assert config.memory_req == "20"
    assert config.environment == "research"

    config, _ = validate_config({"environment": "qa"})
    assert config.environment == "production"


def test_short_reasoning_is_replaced():
    config, reasoning = validate_config({"inferenceJobs": 3, "trainingJobs": 0}, reasoning="ok")

    assert len(reasoning) >= 20
    assert "3 inference endpoint" in reasoning


def test_long_reasoning_is_kept():
    text = "Three isolated inference slices keep chat latency stable."

    _, reasoning = validate_config({"inferenceJobs": 3}, reasoning=f"  {text} ")

    assert reasoning == text


def test_accepts_workload_config_instances():
    original = WorkloadConfig(inference_jobs=3, training_jobs=2, memory_req="10", environment="development")

    config, _ = validate_config(original)

    assert config == original


def test_validation_overrides_lists_changed_fields():
    signals = extract_issue_signals("We need 2 chatbots")
    candidate = {"inferenceJobs": 9, "trainingJobs": 3, "memoryReq": "20", "environment": "production"}

    config, _ = validate_config(candidate, signals=signals)

    assert validation_overrides(candidate, config) == ["inference_jobs", "training_jobs"]


@pytest.mark.parametrize("environment", [*ENVIRONMENTS, "unknown"])
def test_invariants_hold_for_any_counts(environment):
    for inference in range(-2, 10):
        for training in range(-2, 10):
            config, reasoning = validate_config(
                {"inferenceJobs": inference, "trainingJobs": training, "environment": environment}
            )
            assert 0 <= config.inference_jobs <= 5
            assert 0 <= config.training_jobs <= 3
            assert config.total_jobs <= 7
            assert config.memory_req in MEMORY_STRATEGIES
            assert config.environment in ENVIRONMENTS
            assert len(reasoning) >= 20
