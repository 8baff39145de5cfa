from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from .allocation import workload_profiles
from .models import WorkloadConfig


@dataclass(slots=True)
class CommandStep:
    command: str | None
    title: str | None = None
    description: str | None = None
    is_comment: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# matched against the command with the "sudo nvidia-smi " prefix removed
COMMAND_EXPLANATIONS: tuple[tuple[str, str, str], ...] = (
    (
        "-mig 0",
        "Disable MIG Mode",
        "Safely disables Multi-Instance GPU mode and clears any existing partitions. "
        "This ensures a clean slate for the new configuration.",
    ),
    (
        "-mig 1",
        "Enable MIG Mode",
        "Activates Multi-Instance GPU functionality, allowing the H100 to be partitioned "
        "into multiple isolated instances.",
    ),
    (
        "mig -cgi",
        "Create GPU Instances",
        "Creates the MIG instances with the specified memory and compute allocations. "
        "Each instance becomes an independent GPU resource.",
    ),
    (
        "mig -lgip",
        "List GPU Instances",
        "Verifies that all instances were created successfully and displays their identifiers "
        "and resource allocations.",
    ),
    (
        "mig -lcip",
        "List Compute Instances",
        "Shows the compute instances that can be used by applications, confirming the "
        "configuration is ready for workloads.",
    ),
)


def profile_list(config: WorkloadConfig) -> list[str]:
    return [instance.profile for instance in workload_profiles(config)]


def build_commands(config: WorkloadConfig) -> str:
    profiles = profile_list(config)
    lines = [
        "# Disable existing MIG configuration",
        "sudo nvidia-smi -mig 0",
        "",
        "# Enable MIG mode",
        "sudo nvidia-smi -mig 1",
        "",
    ]
    if profiles:
        lines.extend(
            [
                "# Create GPU instances with optimal profile distribution",
                f"sudo nvidia-smi mig -cgi {','.join(profiles)} -C",
                "",
            ]
        )
    lines.extend(
        [
            "# Verify the configuration",
            "sudo nvidia-smi mig -lgip",
            "",
            "# List compute instances",
            "sudo nvidia-smi mig -lcip",
        ]
    )
    return "\n".join(lines)


def _explain(command: str) -> tuple[str, str] | None:
    for pattern, title, description in COMMAND_EXPLANATIONS:
        if pattern in command:
            return title, description
    return None


def annotate_commands(commands: str) -> list[CommandStep]:
    steps: list[CommandStep] = []
    for raw_line in commands.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if line.startswith("#"):
            steps.append(CommandStep(command=None, title=line.lstrip("#").strip(), is_comment=True))
            continue
        explanation = _explain(line)
        if explanation is None:
            steps.append(CommandStep(command=line))
            continue
        title, description = explanation
        steps.append(CommandStep(command=line, title=title, description=description))
    return steps


def executable_lines(commands: str) -> list[str]:
    return [step.command for step in annotate_commands(commands) if step.command]


def cgi_profiles(commands: str) -> list[str] | None:
    for line in executable_lines(commands):
        parts = line.split()
        if "-cgi" not in parts:
            continue
        index = parts.index("-cgi")
        if index + 1 >= len(parts):
            return []
        return [item.strip() for item in parts[index + 1].split(",") if item.strip()]
    return None
