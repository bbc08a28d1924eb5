from __future__ import annotations

"""FastAPI app entry: Gladia connector endpoints, healthz, metrics."""

import uuid

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
import structlog

from app.config.settings import get_settings
from app.connector.services.logging import configure_logging
from app.connector.services.metrics import metrics
from app.connector.webhook import router as connector_router


configure_logging(get_settings().log_level)
logger = structlog.get_logger()
logger.info("startup", gladia_base_url=get_settings().base_url)


app = FastAPI(title="Gladia connector")
app.include_router(connector_router)


@app.middleware("http")
async def add_trace_id(request: Request, call_next):
    trace_id = request.headers.get("X-Trace-Id") or uuid.uuid4().hex
    structlog.contextvars.bind_contextvars(trace_id=trace_id)
    try:
        response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()
    response.headers["X-Trace-Id"] = trace_id
    return response


@app.get("/healthz", response_class=PlainTextResponse)
async def healthz() -> str:
    return "ok"


@app.get("/metrics", response_class=PlainTextResponse)
async def metrics_endpoint() -> str:
    return metrics.to_prometheus()
