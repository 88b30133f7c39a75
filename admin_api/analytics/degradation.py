"""
Dashboard load cycle and its degradation policy.

Two states:

  live      - all four aggregation calls succeeded; the view is built from
              their results.
  degraded  - at least one call failed; the whole view comes from the
              built-in placeholder dataset.

The switch is all-or-nothing per load cycle so live and fabricated numbers
are never shown side by side. There is no retry inside a cycle; the next
load starts live again. The degraded view is always flagged through
data_source_state.
"""
import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Optional

from opentelemetry import trace

from admin_api.analytics import presentation
from admin_api.analytics.engine import AggregationEngine
from admin_api.errors import DataSourceUnavailable
from admin_api.schemas import (
    ContentRankingEntry,
    DailyEngagementPoint,
    DashboardView,
    DataSourceState,
    SignupBucket,
    SummarySnapshot,
    WeeklyComparison,
)
from admin_api.telemetry import DASHBOARD_LOADS_TOTAL

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


# ─────────────────────────── Placeholder dataset ──────────────────────────

_PLACEHOLDER_SUMMARY = SummarySnapshot(
    total_users=12847,
    total_posts=3421,
    total_likes=45632,
    total_comments=8934,
    engagement_rate=presentation.engagement_rate(45632, 8934, 3421),
)

_PLACEHOLDER_WEEKLY = WeeklyComparison(this_week=2145, last_week=1876)

_PLACEHOLDER_DAILY = [
    DailyEngagementPoint(date=date(2024, 1, day), likes=likes, comments=comments)
    for day, likes, comments in [
        (1, 1200, 340), (2, 1350, 380), (3, 1100, 290), (4, 1450, 420),
        (5, 1600, 450), (6, 1380, 360), (7, 1520, 410),
    ]
]

_PLACEHOLDER_RANKING = [
    ContentRankingEntry(
        post_id=post_id,
        author_username=author,
        content_excerpt=presentation.excerpt(content, post_id),
        likes=likes,
        comments=comments,
        engagement=likes + comments,
    )
    for post_id, author, content, likes, comments in [
        (1, "sarah_j", "Summer Collection Launch", 2340, 456),
        (2, "mike_c", "Behind the Scenes Video", 1890, 234),
        (3, "emma_w", "Customer Success Story", 1560, 189),
        (4, "alex_r", "Product Tutorial Series", 1230, 167),
        (5, "lisa_t", "Team Building Event", 980, 145),
    ]
]

_PLACEHOLDER_SIGNUPS = [
    SignupBucket(date=date(2024, 1, day), new_users=new_users)
    for day, new_users in [(1, 45), (2, 52), (3, 38), (4, 61), (5, 49), (6, 57), (7, 43)]
]


def placeholder_view() -> DashboardView:
    """A fresh copy of the static fallback dataset, flagged as degraded."""
    view = presentation.build_dashboard_view(
        summary=_PLACEHOLDER_SUMMARY,
        weekly=_PLACEHOLDER_WEEKLY,
        daily=_PLACEHOLDER_DAILY,
        ranking=_PLACEHOLDER_RANKING,
        growth=presentation.fold_user_growth(_PLACEHOLDER_SIGNUPS),
        state=DataSourceState.DEGRADED,
    )
    return view.model_copy(deep=True)


# ─────────────────────────── Load cycle ───────────────────────────────────

class DashboardService:
    """Runs one dashboard load cycle against an AggregationEngine."""

    def __init__(self, engine: AggregationEngine) -> None:
        self.engine = engine

    async def _summary_with_weekly(self, reference_instant: datetime):
        summary = await self.engine.compute_summary()
        weekly = await self.engine.compute_weekly_comparison(reference_instant)
        return summary, weekly

    async def load_live(self, reference_instant: datetime) -> DashboardView:
        """
        Run the four aggregation calls concurrently.

        Raises the first failure after cancelling the calls still in flight.
        Cancelling the caller cancels all four.
        """
        tasks = [
            asyncio.ensure_future(self._summary_with_weekly(reference_instant)),
            asyncio.ensure_future(self.engine.compute_daily_engagement()),
            asyncio.ensure_future(self.engine.compute_content_ranking()),
            asyncio.ensure_future(self.engine.compute_user_growth()),
        ]
        try:
            (summary, weekly), daily, ranking, growth = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            # Reap the cancelled tasks so none is left pending
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return presentation.build_dashboard_view(
            summary=summary,
            weekly=weekly,
            daily=daily,
            ranking=ranking,
            growth=growth,
            state=DataSourceState.LIVE,
        )

    async def load(self, reference_instant: Optional[datetime] = None) -> DashboardView:
        """One load cycle. Never raises for data failures; degrades instead."""
        if reference_instant is None:
            reference_instant = datetime.now(timezone.utc)

        with tracer.start_as_current_span("dashboard_load") as span:
            try:
                view = await self.load_live(reference_instant)
            except DataSourceUnavailable as exc:
                logger.warning(
                    "Dashboard degraded: %s view unavailable (%s)", exc.view, exc.reason
                )
                view = placeholder_view()
            except Exception as exc:
                logger.warning("Dashboard degraded: aggregation failed: %s", exc, exc_info=True)
                view = placeholder_view()

            span.set_attribute("dashboard.data_source_state", view.data_source_state.value)
            DASHBOARD_LOADS_TOTAL.labels(state=view.data_source_state.value).inc()
            return view
