from __future__ import annotations

import pytest

from mig_config_engine.extraction import extract_issue_signals
from mig_config_engine.fallback import synthesize_config, synthesize_fallback
from mig_config_engine.validation import validate_config


def _config_for(text: str):
    return synthesize_config(extract_issue_signals(text))


def test_defaults_without_counts_or_training():
    config = _config_for("Our GPU is slow")

    assert (config.inference_jobs, config.training_jobs, config.memory_req) == (2, 0, "auto")
    assert config.environment == "production"


def test_service_count_is_clamped():
    assert _config_for("We run 9 model endpoints").inference_jobs == 5


def test_training_count_is_clamped():
    config = _config_for("We run 2 services and 5 training jobs nightly")

    assert (config.inference_jobs, config.training_jobs) == (2, 3)


def test_training_keywords_in_research_environment():
    config = _config_for("PhD students at our university need GPU time for research")

    assert config.environment == "research"
    assert config.training_jobs == 2


def test_research_problem_flag_without_research_environment():
    config = _config_for("Our students need a chatbot")

    assert config.environment == "production"
    assert config.training_jobs == 2


def test_training_keywords_outside_research():
    assert _config_for("We retrain our ranking model weekly").training_jobs == 1


def test_memory_crashes_favor_fewer_larger_instances():
    config = _config_for("Our 4 model services keep crashing with out of memory errors")

    assert config.memory_req == "40"
    assert config.inference_jobs == 2
    assert config.training_jobs == 0


def test_ecommerce_scaling_adds_an_inference_instance():
    assert _config_for("Our e-commerce shop sees traffic spikes across 3 services").inference_jobs == 4
    assert _config_for("Our online shop sees traffic spikes across 5 services").inference_jobs == 4


def test_total_instances_are_rebalanced():
    production = _config_for("We serve 5 endpoints and run 3 training experiments")
    research = _config_for("Our research lab serves 5 endpoints and runs 3 experiments")

    assert (production.inference_jobs, production.training_jobs) == (5, 2)
    assert (research.inference_jobs, research.training_jobs) == (3, 3)


def test_fallback_result_describes_detected_problems():
    issue = "Our 4 model services keep crashing with out of memory errors"
    result = synthesize_fallback(issue, extract_issue_signals(issue))

    assert result.source == "fallback"
    assert result.confidence == "low"
    assert "memory pressure" in result.reasoning
    assert "service crashes" in result.reasoning
    assert result.strategy.startswith("For production workload")


@pytest.mark.parametrize(
    "issue",
    [
        "Our GPU is slow",
        "We run 9 model endpoints",
        "We run 2 services and 5 training jobs nightly",
        "PhD students at our university need GPU time for research",
        "Our 4 model services keep crashing with out of memory errors",
        "Our e-commerce shop sees traffic spikes across 3 services",
        "We serve 5 endpoints and run 3 training experiments",
        "Our research lab serves 5 endpoints and runs 3 experiments",
        "Staging sandbox where 2 engineers fine-tune adapters",
        "Our students need a chatbot",
    ],
)
def test_validating_fallback_output_is_a_no_op(issue):
    signals = extract_issue_signals(issue)
    result = synthesize_fallback(issue, signals)

    config, reasoning = validate_config(result.config, signals=signals, reasoning=result.reasoning)

    assert config == result.config
    assert reasoning == result.reasoning
