"""
Social Admin Analytics API - entry point.

Startup sequence:
  1. Configure OTel tracing (→ Jaeger via OTLP)
  2. Create tables if not present
  3. Expose Prometheus /metrics endpoint
"""
import logging

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from admin_api.config import settings
from admin_api.database import engine, init_db
from admin_api.errors import DataSourceUnavailable, InvalidMetricLogInput
from admin_api.routers import analytics
from admin_api.telemetry import instrument_app, setup_tracing

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup and shutdown of the database pool."""
    logger.info("Starting Admin API (env=%s)", settings.environment)

    await init_db()

    logger.info("Event store connected. API ready.")
    yield

    logger.info("Shutting down...")
    await engine.dispose()


async def data_source_unavailable_handler(request: Request, exc: DataSourceUnavailable):
    logger.warning("Event store unavailable on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"message": "Analytics data source unavailable", "view": exc.view},
    )


async def invalid_metric_log_handler(request: Request, exc: InvalidMetricLogInput):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": exc.message},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Social Admin Analytics API",
        description=(
            "Admin console backend: engagement totals, week-over-week "
            "comparison, daily series, content ranking and user growth."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DataSourceUnavailable, data_source_unavailable_handler)
    app.add_exception_handler(InvalidMetricLogInput, invalid_metric_log_handler)

    # ── Routers ────────────────────────────────────────────────────────────
    app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])

    # ── Prometheus metrics endpoint ────────────────────────────────────────
    app.mount("/metrics", make_asgi_app())

    # ── OTel FastAPI instrumentation ──────────────────────────────────────
    instrument_app(app)

    @app.get("/health", tags=["Health"])
    async def health():
        return {
            "status": "ok",
            "service": settings.service_name,
            "environment": settings.environment,
        }

    return app


# Set up tracing before the app is created so all imports are instrumented
setup_tracing()

app = create_app()
