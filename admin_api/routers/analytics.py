"""
Analytics endpoints:
  GET  /api/analytics/summary             - totals + week-over-week engagement
  GET  /api/analytics/engagement          - per-day likes/comments series
  GET  /api/analytics/content-performance - top posts by engagement
  GET  /api/analytics/user-growth         - cumulative signup series
  GET  /api/analytics/dashboard           - all of the above in one view model,
                                            degraded to placeholder data on failure
  POST /api/analytics/log                 - append an operational metric entry

The four raw endpoints surface DataSourceUnavailable as a 503 (see main.py);
only the dashboard applies the degradation policy.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from admin_api.analytics.degradation import DashboardService
from admin_api.analytics.engine import AggregationEngine
from admin_api.auth import Caller, get_optional_caller, require_caller
from admin_api.database import get_db, get_session_factory
from admin_api.errors import InvalidMetricLogInput
from admin_api.models import AnalyticsLog
from admin_api.schemas import (
    ContentRankingEntry,
    DailyEngagementPoint,
    DashboardView,
    MetricLogCreate,
    MetricLogResponse,
    SummaryResponse,
    UserGrowthPoint,
)
from admin_api.telemetry import METRIC_LOG_ENTRIES_TOTAL

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


def get_aggregation_engine(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> AggregationEngine:
    return AggregationEngine(session_factory)


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    engine: AggregationEngine = Depends(get_aggregation_engine),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    summary = await engine.compute_summary()
    weekly = await engine.compute_weekly_comparison(datetime.now(timezone.utc))
    return SummaryResponse(totals=summary, weekly_comparison=weekly)


@router.get("/engagement", response_model=list[DailyEngagementPoint])
async def get_engagement(
    engine: AggregationEngine = Depends(get_aggregation_engine),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    return await engine.compute_daily_engagement()


@router.get("/content-performance", response_model=list[ContentRankingEntry])
async def get_content_performance(
    limit: int = Query(100, ge=1, le=100, description="Number of posts to return"),
    engine: AggregationEngine = Depends(get_aggregation_engine),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    return await engine.compute_content_ranking(limit)


@router.get("/user-growth", response_model=list[UserGrowthPoint])
async def get_user_growth(
    engine: AggregationEngine = Depends(get_aggregation_engine),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    return await engine.compute_user_growth()


@router.get("/dashboard", response_model=DashboardView)
async def get_dashboard(
    engine: AggregationEngine = Depends(get_aggregation_engine),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    """
    Dashboard view model. Always 200: when any aggregation fails the whole
    payload comes from placeholder data with data_source_state='degraded'.
    """
    with tracer.start_as_current_span("get_dashboard") as span:
        if caller:
            span.set_attribute("caller.id", caller.user_id)
        return await DashboardService(engine).load(datetime.now(timezone.utc))


@router.post("/log", response_model=MetricLogResponse, status_code=status.HTTP_201_CREATED)
async def log_metric(
    body: MetricLogCreate,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    """Append an arbitrary operational metric entry, attributed to the caller."""
    metric_name = (body.metric_name or "").strip()
    if not metric_name:
        raise InvalidMetricLogInput("metric_name required")

    entry = AnalyticsLog(
        metric_name=metric_name,
        metric_value=body.metric_value,
        notes=body.notes,
        created_by=caller.user_id,
    )
    db.add(entry)
    await db.flush()  # materialise id

    METRIC_LOG_ENTRIES_TOTAL.inc()
    logger.info("Metric log %s=%s by user %s", metric_name, body.metric_value, caller.user_id)
    return MetricLogResponse(id=entry.id)
