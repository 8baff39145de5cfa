from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

from .errors import ParseError
from .fallback import synthesize_fallback
from .models import AnalysisResult, IssueSignals
from .validation import validate_config, validation_overrides

logger = logging.getLogger(__name__)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", flags=re.IGNORECASE)


def extract_message_content(raw_response: Mapping[str, Any] | str) -> str:
    if isinstance(raw_response, str):
        return raw_response.strip()
    try:
        content = raw_response["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ParseError("upstream response has no message content") from exc
    if not isinstance(content, str):
        raise ParseError("upstream message content is not text")
    return content.strip()


def parse_model_json(text: str) -> dict[str, Any]:
    cleaned = _CODE_FENCE_RE.sub("", text.strip())
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        match = _JSON_OBJECT_RE.search(cleaned)
        if match is None:
            raise ParseError("AI returned invalid JSON format") from None
        logger.info("model reply was not pure JSON; salvaging embedded object")
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise ParseError("AI returned invalid JSON format") from exc
    if not isinstance(parsed, dict):
        raise ParseError("AI returned JSON that is not an object")
    return parsed


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return "\n".join(str(item) for item in value).strip()
    return str(value).strip()


def interpret_analysis(
    raw_response: Mapping[str, Any] | str,
    issue: str,
    signals: IssueSignals,
) -> AnalysisResult:
    try:
        payload = parse_model_json(extract_message_content(raw_response))
    except ParseError as exc:
        logger.warning("analysis reply could not be parsed (%s); using local fallback", exc)
        return synthesize_fallback(issue, signals)

    candidate = payload.get("config")
    if not isinstance(candidate, Mapping):
        candidate = payload
    config, reasoning = validate_config(candidate, signals=signals, reasoning=_text(payload.get("reasoning")))
    overrides = validation_overrides(candidate, config)
    if overrides:
        logger.info("validator corrected model fields: %s", ", ".join(overrides))
    confidence = _text(payload.get("confidence")).lower()
    strategy = _text(payload.get("strategy")) or reasoning
    return AnalysisResult(
        config=config,
        reasoning=reasoning,
        strategy=strategy,
        confidence=confidence if confidence in {"high", "medium", "low"} else "medium",
        source="model",
        overrides=overrides,
    )


def interpret_configuration(raw_response: Mapping[str, Any] | str) -> dict[str, Any]:
    payload = parse_model_json(extract_message_content(raw_response))
    strategy = _text(payload.get("strategy"))
    commands = _text(payload.get("commands"))
    if not strategy or not commands:
        raise ParseError("Invalid configuration returned. Please try again.")

    warnings = payload.get("warnings")
    if isinstance(warnings, str):
        warnings = [warnings]
    elif not isinstance(warnings, list):
        warnings = []

    resources = payload.get("resources")
    return {
        "strategy": strategy,
        "commands": commands,
        "resources": dict(resources) if isinstance(resources, Mapping) else None,
        "warnings": [str(item) for item in warnings if str(item).strip()],
        "riskAnalysis": payload.get("riskAnalysis"),
    }
