from logging import getLogger

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from common import configure_logging, configure_observability

from . import models  # noqa: F401  registers tables on Base.metadata
from .config import get_settings
from .database import Base, async_engine, get_db
from .migrations_runner import run_migrations
from .routers import auth_router, courses_router, payments_router


settings = get_settings()
configure_logging(settings.log_level)
logger = getLogger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.cors_origins,
	allow_credentials=True,
	allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
	allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)

configure_observability(app, settings=settings, get_db=get_db)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
	logger.exception("Unhandled error on %s %s", request.method, request.url.path)
	return JSONResponse({"detail": "Internal server error."}, status_code=500)


@app.on_event("startup")
async def run_startup_tasks() -> None:
	if settings.run_migrations_on_startup:
		await run_in_threadpool(run_migrations)
	elif settings.create_tables_on_startup:
		async with async_engine.begin() as conn:
			await conn.run_sync(Base.metadata.create_all)
		logger.info("Database tables ensured")
	logger.info("%s started (env=%s)", settings.app_name, settings.env)


@app.on_event("shutdown")
async def dispose_engine() -> None:
	await async_engine.dispose()


app.include_router(auth_router)
app.include_router(courses_router)
app.include_router(payments_router)
