from __future__ import annotations

import os
import time
import uuid
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from macscan_core.config import Config, cors_origins_from_env, get_config
from macscan_core.errors import ValidationError
from macscan_core.logging import configure_logging, get_logger
from macscan_core.mailer import EmailSender, build_sender
from macscan_core.services.scan_pipeline import process_scan

SERVICE_NAME = "macscan-scan-service"
CORRELATION_HEADER = "x-correlation-id"

configure_logging(
    service=SERVICE_NAME,
    env=os.getenv("ENV", "local"),
    version=os.getenv("MACSCAN_VERSION"),
)
logger = get_logger(__name__)

app = FastAPI()

_origins = cors_origins_from_env()
if _origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(_origins),
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def _correlation_id(request: Request, call_next):
    corr = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
    request.state.correlation_id = corr
    response = await call_next(request)
    response.headers[CORRELATION_HEADER] = corr
    return response


class HealthResponse(BaseModel):
    status: str
    service: str
    env: str
    email_backend: str
    version: str
    commit: str
    timestamp: str


class ScanResultsResponse(BaseModel):
    success: bool
    priority_level: str
    system_health: str
    flag_count: int
    trace_id: str


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _get_sender(config: Config) -> EmailSender:
    return build_sender(config)


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    try:
        config = get_config()
    except ValueError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return HealthResponse(
        status="ok",
        service=SERVICE_NAME,
        env=config.env,
        email_backend=config.email_backend,
        version=config.version,
        commit=config.commit,
        timestamp=_now().strftime("%Y-%m-%dT%H:%M:%SZ"),
    )


@app.post("/scan-results", response_model=ScanResultsResponse)
async def scan_results(request: Request) -> ScanResultsResponse:
    trace_id = str(uuid.uuid4())
    correlation = getattr(request.state, "correlation_id", None)
    started = time.monotonic()

    try:
        payload = await request.json()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Body must be valid JSON") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Body must be a JSON object")

    try:
        config = get_config()
        outcome = process_scan(
            payload,
            config=config,
            sender=_get_sender(config),
            now=_now(),
            request_id=trace_id,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(
            "Scan processing failed",
            extra={
                "request_id": trace_id,
                "correlation_id": correlation,
                "status": "failed",
                "error_code": type(exc).__name__,
                "error_message": str(exc),
            },
        )
        raise HTTPException(
            status_code=500, detail=str(exc) or "Internal error"
        ) from exc

    analysis = outcome.analysis
    logger.info(
        "Scan processed",
        extra={
            "request_id": trace_id,
            "correlation_id": correlation,
            "status": "completed",
            "duration_ms": int((time.monotonic() - started) * 1000),
            "priority_level": analysis.priority_level.value,
            "system_health": analysis.system_health.value,
            "flag_count": len(analysis.flags),
        },
    )
    return ScanResultsResponse(
        success=True,
        priority_level=analysis.priority_level.value,
        system_health=analysis.system_health.value,
        flag_count=len(analysis.flags),
        trace_id=trace_id,
    )
