from __future__ import annotations

from mig_config_engine.commands import annotate_commands, build_commands, cgi_profiles, executable_lines
from mig_config_engine.models import WorkloadConfig


def test_build_commands_follows_standard_sequence():
    commands = build_commands(WorkloadConfig(inference_jobs=2, training_jobs=1, memory_req="auto"))

    assert executable_lines(commands) == [
        "sudo nvidia-smi -mig 0",
        "sudo nvidia-smi -mig 1",
        "sudo nvidia-smi mig -cgi 1g.10gb,1g.10gb,3g.40gb -C",
        "sudo nvidia-smi mig -lgip",
        "sudo nvidia-smi mig -lcip",
    ]


def test_build_commands_skips_creation_for_empty_workload():
    commands = build_commands(WorkloadConfig(inference_jobs=0, training_jobs=0))

    assert "-cgi" not in commands
    assert cgi_profiles(commands) is None
    assert len(executable_lines(commands)) == 4


def test_annotate_commands_explains_known_lines():
    steps = annotate_commands(build_commands(WorkloadConfig(inference_jobs=1, training_jobs=0, memory_req="20")))

    comments = [step for step in steps if step.is_comment]
    explained = {step.command: step.title for step in steps if step.command}

    assert comments and all(step.command is None for step in comments)
    assert explained == {
        "sudo nvidia-smi -mig 0": "Disable MIG Mode",
        "sudo nvidia-smi -mig 1": "Enable MIG Mode",
        "sudo nvidia-smi mig -cgi 2g.20gb -C": "Create GPU Instances",
        "sudo nvidia-smi mig -lgip": "List GPU Instances",
        "sudo nvidia-smi mig -lcip": "List Compute Instances",
    }


def test_annotate_commands_keeps_unknown_lines_without_explanation():
    steps = annotate_commands("nvidia-smi -L\n\n  # check drivers  \n")

    assert steps[0].command == "nvidia-smi -L"
    assert steps[0].title is None
    assert steps[1].is_comment is True
    assert steps[1].title == "check drivers"


def test_cgi_profiles_reads_model_commands():
    assert cgi_profiles("sudo nvidia-smi mig -cgi 2g.20gb,3g.40gb -C") == ["2g.20gb", "3g.40gb"]
    assert cgi_profiles("sudo nvidia-smi -mig 1\nsudo nvidia-smi mig -cgi 2g.20gb, 3g.40gb -C") == ["2g.20gb"]
    assert cgi_profiles("sudo nvidia-smi mig -cgi") == []
