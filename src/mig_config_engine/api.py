from __future__ import annotations

import json
import logging
import os
from typing import Any

from . import __version__
from .errors import (
    EmptyInputError,
    InputError,
    MIGConfigError,
    ParseError,
    TransportError,
    UpstreamError,
    UpstreamUnavailable,
)
from .gateway import InferenceGateway, resolve_gateway_settings
from .logs import configure_logging
from .metrics import CONTENT_TYPE_LATEST, create_metrics_registry
from .models import ConfigurationResult
from .pipeline import MIGConfigEngine
from .presentation import build_view

try:
    from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware
    from fastapi.middleware.trustedhost import TrustedHostMiddleware
    from fastapi import FastAPI, Request, Response
    from fastapi.concurrency import run_in_threadpool
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel, ConfigDict, Field
except ImportError as exc:  # pragma: no cover
    raise RuntimeError("FastAPI and Pydantic are required for API mode. Install the package first.") from exc

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


class AnalyzeIssueRequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    issue: str = Field(default="", max_length=10_000)
    offline: bool = False


class WorkloadRequestModel(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, populate_by_name=True)

    inference_jobs: int | float | str | None = Field(default=None, alias="inferenceJobs")
    training_jobs: int | float | str | None = Field(default=None, alias="trainingJobs")
    memory_req: int | str = Field(default="auto", alias="memoryReq")
    environment: str = Field(default="production", max_length=32)

    def candidate(self) -> dict[str, Any]:
        return {
            "inferenceJobs": self.inference_jobs,
            "trainingJobs": self.training_jobs,
            "memoryReq": self.memory_req,
            "environment": self.environment,
        }


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_csv(name: str, default: str) -> list[str]:
    raw = os.environ.get(name, default)
    fallback = [item.strip() for item in default.split(",") if item.strip()]
    values = [item.strip() for item in raw.split(",") if item.strip()]
    return values or fallback


def _error(status_code: int, payload: dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=payload)


def _result_payload(result: ConfigurationResult) -> dict[str, Any]:
    return {
        "config": result.config.to_dict(),
        "result": result.to_dict(),
        "view": build_view(result).to_dict(),
    }


configure_logging()

EXPOSE_INTERNALS = _env_bool("EXPOSE_INTERNALS", default=False)
gateway_settings = resolve_gateway_settings()
metrics_registry = create_metrics_registry()
gateway = InferenceGateway(gateway_settings, metrics=metrics_registry)
engine = MIGConfigEngine(gateway=gateway, metrics=metrics_registry)

app = FastAPI(title="H100 MIG Configuration Engine", version=__version__)

if _env_bool("FORCE_HTTPS", default=False):
    app.add_middleware(HTTPSRedirectMiddleware)

trusted_hosts = _env_csv("TRUSTED_HOSTS", "*")
if trusted_hosts != ["*"]:
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)


@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    return response


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    if request.url.scheme == "https":
        response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
    return response


@app.exception_handler(MIGConfigError)
async def mig_config_error_handler(request: Request, exc: MIGConfigError) -> JSONResponse:
    if isinstance(exc, EmptyInputError):
        return _error(400, {"error": "Please describe your issue first"})
    if isinstance(exc, InputError):
        return _error(400, {"error": str(exc)})
    if isinstance(exc, UpstreamUnavailable):
        return _error(500, {"error": "API key not configured"})
    if isinstance(exc, UpstreamError):
        return _error(exc.status, {"error": str(exc), "details": exc.details})
    if isinstance(exc, ParseError):
        return _error(502, {"error": f"Configuration Error: {exc}"})
    if isinstance(exc, TransportError):
        return _error(502, {"error": "Upstream request failed", "message": str(exc)})
    logger.exception("unhandled engine error")
    return _error(500, {"error": "Internal server error", "message": str(exc)})


@app.options("/generate-config")
def generate_config_preflight() -> Response:
    return Response(status_code=200, content=b"")


@app.api_route("/generate-config", methods=["GET", "PUT", "PATCH", "DELETE"])
def generate_config_method_not_allowed() -> JSONResponse:
    return _error(405, {"error": "Method not allowed"})


@app.post("/generate-config")
async def generate_config(request: Request) -> JSONResponse:
    try:
        body = json.loads(await request.body() or b"null")
        prompt = body.get("prompt") if isinstance(body, dict) else None
        if not prompt:
            return _error(400, {"error": "Prompt is required"})
        mode = body.get("type")
        data = await run_in_threadpool(gateway.generate_config, str(prompt), mode)
        return JSONResponse(status_code=200, content=data)
    except UpstreamUnavailable:
        return _error(500, {"error": "API key not configured"})
    except UpstreamError as exc:
        return _error(exc.status, {"error": str(exc), "details": exc.details})
    except Exception as exc:
        logger.exception("generate-config failed")
        return _error(500, {"error": "Internal server error", "message": str(exc)})


@app.get("/health")
def health() -> dict:
    return {
        "status": "ok",
        "version": __version__,
        "has_api_key": gateway_settings.has_api_key,
        "model": gateway_settings.model if EXPOSE_INTERNALS else "hidden",
        "upstream_base_url": gateway_settings.base_url if EXPOSE_INTERNALS else "hidden",
        "prometheus_metrics_enabled": metrics_registry.enabled,
        "endpoints": ["/generate-config", "/analyze-issue", "/configure", "/demo", "/health", "/metrics"],
    }


@app.post("/analyze-issue")
def analyze_issue(payload: AnalyzeIssueRequestModel) -> dict:
    if payload.offline:
        result = engine.offline_analysis(payload.issue)
    else:
        result = engine.analyze_issue(payload.issue)
    return _result_payload(result)


@app.post("/configure")
def configure(payload: WorkloadRequestModel) -> dict:
    return _result_payload(engine.generate_configuration(payload.candidate()))


@app.post("/demo")
def demo(payload: WorkloadRequestModel) -> dict:
    return _result_payload(engine.demo_configuration(payload.candidate()))


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=metrics_registry.export_payload(), media_type=CONTENT_TYPE_LATEST)
