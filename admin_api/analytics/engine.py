"""
Aggregation engine - derived analytics views computed from the event store.

  View               │ Source
  ───────────────────┼──────────────────────────────────────────────────
  summary            │ COUNT(*) over users, posts, likes, comments
  weekly_comparison  │ likes + comments inside two 7-day windows
  daily_engagement   │ per-post like/comment counts, bucketed by post date
  content_ranking    │ per-post like/comment counts, top-N by engagement
  user_growth        │ signups bucketed by date, folded into a running total

Every call opens its own session so the dashboard can run them concurrently,
reads only, and is bounded by settings.analytics_query_timeout. Any storage
failure surfaces as DataSourceUnavailable; there are no partial results.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from typing import Any, Awaitable, Callable, Optional, TypeVar

from opentelemetry import trace
from sqlalchemy import Date, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from admin_api.analytics import presentation
from admin_api.config import Settings, settings as default_settings
from admin_api.errors import DataSourceUnavailable
from admin_api.models import Comment, Like, Post, User
from admin_api.schemas import (
    ContentRankingEntry,
    DailyEngagementPoint,
    SignupBucket,
    SummarySnapshot,
    UserGrowthPoint,
    WeeklyComparison,
)
from admin_api.telemetry import ANALYTICS_QUERY_ERRORS_TOTAL, ANALYTICS_QUERY_LATENCY

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

T = TypeVar("T")

WINDOW_DAYS = 7


# ─────────────────────────── Weekly windows ───────────────────────────────

@dataclass(frozen=True)
class Window:
    """Half-open [start, end) interval of naive UTC datetimes."""
    start: datetime
    end: datetime


def _as_naive_utc(instant: datetime) -> datetime:
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc).replace(tzinfo=None)
    return instant


def weekly_windows(reference_instant: datetime) -> tuple[Window, Window]:
    """
    (this_week, last_week) for the given "now".

    this_week covers the reference day and the six days before it;
    last_week is the seven days immediately preceding. Both are anchored
    at midnight UTC so each spans exactly seven calendar days.
    """
    now = _as_naive_utc(reference_instant)
    day_start = datetime.combine(now.date(), time.min)
    this_week = Window(
        start=day_start - timedelta(days=WINDOW_DAYS - 1),
        end=day_start + timedelta(days=1),
    )
    last_week = Window(
        start=this_week.start - timedelta(days=WINDOW_DAYS),
        end=this_week.start,
    )
    return this_week, last_week


# ─────────────────────────── Shared subqueries ────────────────────────────

def _per_post_likes():
    return (
        select(Like.post_id, func.count().label("likes_count"))
        .group_by(Like.post_id)
        .subquery("post_likes_agg")
    )


def _per_post_comments():
    return (
        select(Comment.post_id, func.count().label("comments_count"))
        .group_by(Comment.post_id)
        .subquery("post_comments_agg")
    )


def _count(model, *criteria):
    stmt = select(func.count()).select_from(model)
    if criteria:
        stmt = stmt.where(*criteria)
    return stmt.scalar_subquery()


# ─────────────────────────── Engine ───────────────────────────────────────

class AggregationEngine:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        settings: Optional[Settings] = None,
    ) -> None:
        cfg = settings or default_settings
        self._session_factory = session_factory
        self.query_timeout = cfg.analytics_query_timeout
        self.ranking_limit = cfg.content_ranking_limit
        self.excerpt_length = cfg.excerpt_length

    async def _fetch(self, stmt) -> list[Any]:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.mappings().all())

    async def _run(self, view: str, call: Callable[[], Awaitable[T]]) -> T:
        with tracer.start_as_current_span(f"analytics.{view}"):
            with ANALYTICS_QUERY_LATENCY.labels(view=view).time():
                try:
                    return await asyncio.wait_for(call(), timeout=self.query_timeout)
                except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
                    ANALYTICS_QUERY_ERRORS_TOTAL.labels(view=view).inc()
                    reason = str(exc) or type(exc).__name__
                    logger.debug("Aggregation %s failed: %s", view, reason)
                    raise DataSourceUnavailable(view, reason) from exc

    # ── Summary ──────────────────────────────────────────────────────────
    async def compute_summary(self) -> SummarySnapshot:
        stmt = select(
            _count(User).label("total_users"),
            _count(Post).label("total_posts"),
            _count(Like).label("total_likes"),
            _count(Comment).label("total_comments"),
        )
        rows = await self._run("summary", lambda: self._fetch(stmt))
        return presentation.shape_summary(rows[0] if rows else {})

    # ── Weekly comparison ────────────────────────────────────────────────
    async def compute_weekly_comparison(self, reference_instant: datetime) -> WeeklyComparison:
        this_week, last_week = weekly_windows(reference_instant)

        def in_window(model, window: Window):
            return _count(
                model,
                model.created_at >= window.start,
                model.created_at < window.end,
            )

        stmt = select(
            in_window(Like, this_week).label("this_week_likes"),
            in_window(Comment, this_week).label("this_week_comments"),
            in_window(Like, last_week).label("last_week_likes"),
            in_window(Comment, last_week).label("last_week_comments"),
        )
        rows = await self._run("weekly_comparison", lambda: self._fetch(stmt))
        return presentation.shape_weekly_comparison(rows[0] if rows else {})

    # ── Daily engagement ─────────────────────────────────────────────────
    async def compute_daily_engagement(self) -> list[DailyEngagementPoint]:
        likes_agg = _per_post_likes()
        comments_agg = _per_post_comments()
        day = func.date(Post.created_at, type_=Date)

        stmt = (
            select(
                day.label("date"),
                func.coalesce(func.sum(func.coalesce(likes_agg.c.likes_count, 0)), 0).label("likes"),
                func.coalesce(func.sum(func.coalesce(comments_agg.c.comments_count, 0)), 0).label("comments"),
            )
            .select_from(Post)
            .outerjoin(likes_agg, likes_agg.c.post_id == Post.id)
            .outerjoin(comments_agg, comments_agg.c.post_id == Post.id)
            .group_by(day)
            .order_by(day)
        )
        rows = await self._run("daily_engagement", lambda: self._fetch(stmt))
        return presentation.shape_daily_engagement(rows)

    # ── Content ranking ──────────────────────────────────────────────────
    async def compute_content_ranking(self, limit: Optional[int] = None) -> list[ContentRankingEntry]:
        limit = self.ranking_limit if limit is None else limit
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        if limit == 0:
            return []

        likes_agg = _per_post_likes()
        comments_agg = _per_post_comments()
        likes = func.coalesce(likes_agg.c.likes_count, 0)
        comments = func.coalesce(comments_agg.c.comments_count, 0)
        engagement = (likes + comments).label("engagement")

        # engagement desc, newer first on ties, id as the last resort
        stmt = (
            select(
                Post.id.label("post_id"),
                User.username.label("username"),
                Post.content.label("content"),
                Post.created_at.label("created_at"),
                likes.label("likes"),
                comments.label("comments"),
                engagement,
            )
            .select_from(Post)
            .join(User, User.id == Post.user_id)
            .outerjoin(likes_agg, likes_agg.c.post_id == Post.id)
            .outerjoin(comments_agg, comments_agg.c.post_id == Post.id)
            .order_by(engagement.desc(), Post.created_at.desc(), Post.id.desc())
            .limit(limit)
        )
        rows = await self._run("content_ranking", lambda: self._fetch(stmt))
        return presentation.shape_content_ranking(rows, self.excerpt_length)

    # ── User growth ──────────────────────────────────────────────────────
    async def fetch_signup_buckets(self) -> list[SignupBucket]:
        day = func.date(User.created_at, type_=Date)
        stmt = (
            select(day.label("date"), func.count(User.id).label("new_users"))
            .group_by(day)
            .order_by(day)
        )
        rows = await self._run("user_growth", lambda: self._fetch(stmt))
        return presentation.shape_signup_buckets(rows)

    async def compute_user_growth(self) -> list[UserGrowthPoint]:
        return presentation.fold_user_growth(await self.fetch_signup_buckets())
