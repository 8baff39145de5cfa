from __future__ import annotations

from mig_config_engine.models import WorkloadConfig
from mig_config_engine.risk import (
    coerce_risk_analysis,
    default_risk_analysis,
    estimate_hourly_loss,
    generate_risk_analysis,
)


def test_hourly_loss_scales_with_workload_and_environment():
    assert estimate_hourly_loss(WorkloadConfig(inference_jobs=2, training_jobs=1)) == 6900
    assert estimate_hourly_loss(WorkloadConfig(0, 3, environment="research")) == 3800
    assert estimate_hourly_loss(WorkloadConfig(10, 3)) == 15000


def test_generated_analysis_is_capped_and_ends_with_loss():
    analysis = generate_risk_analysis(WorkloadConfig(inference_jobs=2, training_jobs=1))

    assert len(analysis.scenarios) == 2
    assert analysis.scenarios[0].startswith("Resource Competition Crisis")
    assert analysis.metrics[-1].label == "Estimated Hourly Loss"
    assert analysis.metrics[-1].value == "$6,900/hour during conflicts"


def test_research_without_inference_reports_bottleneck():
    analysis = generate_risk_analysis(WorkloadConfig(0, 3, memory_req="20", environment="research"))

    assert analysis.scenarios[0].startswith("Research Bottleneck")


def test_coerce_risk_analysis_prefers_model_scenarios():
    config = WorkloadConfig(2, 1)

    model = coerce_risk_analysis(
        {"scenarios": ["Noisy neighbours"], "metrics": [{"label": "Downtime", "value": "2h"}, "junk"]},
        config,
    )
    narrative = coerce_risk_analysis("Plain text risk summary", config)
    generated = coerce_risk_analysis(None, config)

    assert model.scenarios == ["Noisy neighbours"]
    assert [metric.label for metric in model.metrics] == ["Downtime"]
    assert narrative.narrative == "Plain text risk summary"
    assert generated == generate_risk_analysis(config)


def test_default_risk_analysis_has_static_metrics():
    analysis = default_risk_analysis()

    assert analysis.narrative
    assert [metric.label for metric in analysis.metrics] == [
        "Potential Downtime",
        "Performance Impact",
        "Cost per Hour",
    ]


def test_coerce_risk_analysis_tolerates_malformed_model_fields():
    config = WorkloadConfig(2, 1)

    bad_metrics = coerce_risk_analysis({"scenarios": ["x"], "metrics": 5}, config)
    string_scenarios = coerce_risk_analysis({"scenarios": "abc", "metrics": {"label": "Downtime"}}, config)
    empty = coerce_risk_analysis({"scenarios": [], "metrics": []}, config)

    assert bad_metrics.scenarios == ["x"]
    assert bad_metrics.metrics == []
    assert string_scenarios == generate_risk_analysis(config)
    assert empty == generate_risk_analysis(config)
