from __future__ import annotations

import argparse
import json
import sys

from .constants import ENVIRONMENTS, MEMORY_STRATEGIES
from .errors import MIGConfigError, UpstreamError
from .gateway import InferenceGateway, resolve_gateway_settings
from .logs import configure_logging
from .models import ConfigurationResult
from .pipeline import MIGConfigEngine
from .presentation import build_view, format_view


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="H100 MIG configuration engine")
    parser.add_argument("--json", action="store_true", dest="as_json", help="print the result as JSON")
    parser.add_argument("--log-level", default=None)
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="derive a configuration from an issue description")
    analyze.add_argument("issue")
    analyze.add_argument("--offline", action="store_true", help="skip the model and use local heuristics")

    configure = subparsers.add_parser("configure", help="generate a configuration for explicit workload counts")
    configure.add_argument("--inference", type=int, default=2, dest="inference_jobs")
    configure.add_argument("--training", type=int, default=1, dest="training_jobs")
    configure.add_argument("--memory", choices=list(MEMORY_STRATEGIES), default="auto", dest="memory_req")
    configure.add_argument("--environment", choices=list(ENVIRONMENTS), default="production")
    configure.add_argument("--demo", action="store_true", help="render the offline demo configuration")
    return parser.parse_args(argv)


def _emit(result: ConfigurationResult, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return
    print(format_view(build_view(result)), end="")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level or "WARNING")

    settings = resolve_gateway_settings()
    engine = MIGConfigEngine(gateway=InferenceGateway(settings) if settings.has_api_key else None)

    try:
        if args.command == "analyze":
            result = engine.offline_analysis(args.issue) if args.offline else engine.analyze_issue(args.issue)
        else:
            candidate = {
                "inferenceJobs": args.inference_jobs,
                "trainingJobs": args.training_jobs,
                "memoryReq": args.memory_req,
                "environment": args.environment,
            }
            result = engine.demo_configuration(candidate) if args.demo else engine.generate_configuration(candidate)
    except UpstreamError as exc:
        print(f"error: {exc}: {exc.details}", file=sys.stderr)
        return 1
    except MIGConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    _emit(result, args.as_json)
    return 0


if __name__ == "__main__":
    sys.exit(main())
