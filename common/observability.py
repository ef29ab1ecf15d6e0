from __future__ import annotations

import inspect
import logging
import time
import uuid
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

HealthCheck = Callable[[AsyncSession | None], Awaitable[None] | None]

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger(__name__)
request_logger = logging.getLogger("common.requests")


async def _ping_database(db: AsyncSession) -> None:
    await db.execute(text("SELECT 1"))


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    root.setLevel(level.upper())


def _attach_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
            request_logger.exception(
                "request_failed id=%s %s %s duration_ms=%s",
                request_id, request.method, request.url.path, elapsed_ms,
            )
            raise
        elapsed_ms = round((time.perf_counter() - started) * 1000.0, 2)
        response.headers["X-Request-ID"] = request_id
        request_logger.info(
            "%s %s %s duration_ms=%s id=%s",
            request.method, request.url.path, response.status_code, elapsed_ms, request_id,
        )
        return response


def configure_observability(
    app: FastAPI,
    *,
    settings: Any,
    get_db: Optional[Callable[[], AsyncSession]] = None,
    extra_checks: Mapping[str, HealthCheck] | None = None,
) -> None:
    """Attach request logging plus the shared /health, /healthz and /metrics endpoints."""
    metrics_enabled = getattr(settings, "metrics_enabled", False)
    instrumentator = Instrumentator().instrument(app) if metrics_enabled else None
    if instrumentator:
        app.state.instrumentator = instrumentator

    _attach_request_logging(app)

    checks: dict[str, HealthCheck] = {}
    if get_db:
        checks["database"] = _ping_database
    checks.update(extra_checks or {})

    async def _run_checks(db: AsyncSession | None) -> dict[str, str]:
        results: dict[str, str] = {} if get_db else {"database": "skipped"}
        for name, check in checks.items():
            try:
                outcome = check(db)
                if inspect.isawaitable(outcome):
                    await outcome  # type: ignore[func-returns-value]
            except Exception as exc:
                logger.warning("Health check %s failed: %s", name, exc)
                raise HTTPException(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    detail={"status": "error", "check": name, "error": str(exc)},
                ) from exc
            results[name] = "ok"
        return results

    @app.get("/health", include_in_schema=False)
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok", "time": datetime.now(timezone.utc).isoformat()})

    if get_db:

        @app.get("/healthz")
        async def healthz(db: AsyncSession = Depends(get_db)) -> JSONResponse:
            return JSONResponse({"status": "ok", "checks": await _run_checks(db)})

    else:

        @app.get("/healthz")
        async def healthz() -> JSONResponse:
            return JSONResponse({"status": "ok", "checks": await _run_checks(None)})

    @app.get("/metrics")
    def metrics() -> Response:
        if not metrics_enabled:
            return JSONResponse({"detail": "Metrics disabled"}, status_code=404)
        content = generate_latest()
        return Response(content=content, media_type=CONTENT_TYPE_LATEST)
