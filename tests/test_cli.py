from __future__ import annotations

import json

from mig_config_engine.__main__ import main


def test_demo_configuration_prints_view(monkeypatch, capsys):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    assert main(["configure", "--inference", "2", "--training", "1", "--demo"]) == 0

    out = capsys.readouterr().out
    assert out.startswith("== 3 Instances • 60GB ==")
    assert "sudo nvidia-smi mig -cgi 1g.10gb,1g.10gb,3g.40gb -C" in out


def test_offline_analysis_prints_json(monkeypatch, capsys):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    assert main(["--json", "analyze", "--offline", "We run 9 model endpoints"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["source"] == "fallback"
    assert payload["config"]["inferenceJobs"] == 5
    assert payload["resources"]["memory_total"] == "50GB"


def test_model_commands_without_key_fail(monkeypatch, capsys):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    assert main(["configure", "--inference", "2"]) == 1
    assert "API key not configured" in capsys.readouterr().err


def test_blank_issue_fails(monkeypatch, capsys):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    assert main(["analyze", "--offline", "   "]) == 1
    assert "must not be blank" in capsys.readouterr().err
