from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Literal

import requests

from .constants import (
    ANALYSIS_PERSONA,
    CONFIGURATION_PERSONA,
    DEFAULT_UPSTREAM_BASE_URL,
    DEFAULT_UPSTREAM_MAX_TOKENS,
    DEFAULT_UPSTREAM_MODEL,
    DEFAULT_UPSTREAM_TEMPERATURE,
    DEFAULT_UPSTREAM_TIMEOUT_SECONDS,
)
from .errors import TransportError, UpstreamError, UpstreamUnavailable
from .metrics import MetricsRegistry

logger = logging.getLogger(__name__)

Mode = Literal["analysis", "configuration"]


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("ignoring non-numeric %s=%r", name, raw)
        return default


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, float(default)))


@dataclass(frozen=True)
class GatewaySettings:
    api_key: str
    base_url: str = DEFAULT_UPSTREAM_BASE_URL
    model: str = DEFAULT_UPSTREAM_MODEL
    temperature: float = DEFAULT_UPSTREAM_TEMPERATURE
    max_tokens: int = DEFAULT_UPSTREAM_MAX_TOKENS
    timeout_seconds: float = DEFAULT_UPSTREAM_TIMEOUT_SECONDS

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    @property
    def completions_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/chat/completions"


def resolve_gateway_settings() -> GatewaySettings:
    return GatewaySettings(
        api_key=os.environ.get("OPENAI_API_KEY", "").strip(),
        base_url=os.environ.get("OPENAI_BASE_URL", DEFAULT_UPSTREAM_BASE_URL).strip() or DEFAULT_UPSTREAM_BASE_URL,
        model=os.environ.get("MIG_UPSTREAM_MODEL", DEFAULT_UPSTREAM_MODEL).strip() or DEFAULT_UPSTREAM_MODEL,
        temperature=_env_float("MIG_UPSTREAM_TEMPERATURE", DEFAULT_UPSTREAM_TEMPERATURE),
        max_tokens=_env_int("MIG_UPSTREAM_MAX_TOKENS", DEFAULT_UPSTREAM_MAX_TOKENS),
        timeout_seconds=_env_float("MIG_UPSTREAM_TIMEOUT_SECONDS", DEFAULT_UPSTREAM_TIMEOUT_SECONDS),
    )


def normalize_mode(mode: str | None) -> Mode:
    return "analysis" if mode == "analysis" else "configuration"


def persona_for_mode(mode: str | None) -> str:
    return ANALYSIS_PERSONA if normalize_mode(mode) == "analysis" else CONFIGURATION_PERSONA


def build_messages(prompt: str, mode: str | None) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": persona_for_mode(mode)},
        {"role": "user", "content": prompt},
    ]


def _error_details(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "Unknown error"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return "Unknown error"


class InferenceGateway:
    def __init__(
        self,
        settings: GatewaySettings,
        session: requests.Session | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self.settings = settings
        self.session = session or requests.Session()
        self.metrics = metrics

    def build_payload(self, prompt: str, mode: str | None) -> dict[str, Any]:
        return {
            "model": self.settings.model,
            "messages": build_messages(prompt, mode),
            "temperature": self.settings.temperature,
            "max_tokens": self.settings.max_tokens,
        }

    def generate_config(self, prompt: str, mode: str | None = "configuration") -> dict[str, Any]:
        resolved_mode = normalize_mode(mode)
        if not self.settings.has_api_key:
            self._record(resolved_mode, "unavailable")
            raise UpstreamUnavailable()

        started = time.perf_counter()
        try:
            response = self.session.post(
                self.settings.completions_url,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.settings.api_key}",
                },
                json=self.build_payload(prompt, resolved_mode),
                timeout=self.settings.timeout_seconds,
            )
        except requests.RequestException as exc:
            self._record(resolved_mode, "transport_error")
            logger.error("upstream %s request failed: %s", resolved_mode, exc)
            raise TransportError(str(exc)) from exc
        finally:
            if self.metrics is not None:
                self.metrics.observe_gateway_latency(mode=resolved_mode, seconds=time.perf_counter() - started)

        if not response.ok:
            details = _error_details(response)
            self._record(resolved_mode, "upstream_error")
            logger.error("upstream %s request returned %s: %s", resolved_mode, response.status_code, details)
            raise UpstreamError(status=response.status_code, details=details)

        try:
            data = response.json()
        except ValueError as exc:
            self._record(resolved_mode, "transport_error")
            raise TransportError("upstream returned a non-JSON body") from exc

        usage = data.get("usage") if isinstance(data, dict) else None
        logger.info(
            "upstream %s request succeeded (%s tokens)",
            resolved_mode,
            (usage or {}).get("total_tokens", 0) if isinstance(usage, dict) else 0,
        )
        self._record(resolved_mode, "success")
        return data

    def _record(self, mode: str, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.inc_gateway_request(mode=mode, outcome=outcome)
