"""
Presentation adapter - turns raw aggregate rows into chart-ready models.

Everything here is a pure function. The transforms are display rules only
(numeric coercion, excerpting, rate rounding, cumulative fold) and must not
change what a metric means.
"""
import logging
import math
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any, Optional

from admin_api.errors import MalformedAggregateRow
from admin_api.schemas import (
    ContentRankingEntry,
    DailyEngagementPoint,
    DashboardView,
    DataSourceState,
    SignupBucket,
    SummarySnapshot,
    UserGrowthPoint,
    WeeklyComparison,
)

logger = logging.getLogger(__name__)

DEFAULT_EXCERPT_LENGTH = 30


# ─────────────────────────── Numeric coercion ─────────────────────────────

def _as_number(field: str, value: Any) -> float:
    if value is None or isinstance(value, bool):
        raise MalformedAggregateRow(field, value)
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError as exc:
            raise MalformedAggregateRow(field, value) from exc
    if not math.isfinite(number):
        raise MalformedAggregateRow(field, value)
    return number


def coerce_number(value: Any, field: str = "value") -> float:
    """Return value as a float; null, missing or garbage becomes 0."""
    try:
        return _as_number(field, value)
    except MalformedAggregateRow as exc:
        # Outer joins against sparse side tables legitimately yield NULLs
        logger.debug("Coercing to zero: %s", exc)
        return 0.0


def coerce_count(value: Any, field: str = "value") -> int:
    return int(coerce_number(value, field))


def read_count(row: Mapping[str, Any], field: str) -> int:
    return coerce_count(row.get(field), field)


# ─────────────────────────── Rates & text ─────────────────────────────────

def engagement_rate(likes: Any, comments: Any, posts: Any) -> float:
    """(likes + comments) per post as a percentage, rounded to one decimal."""
    total_posts = coerce_number(posts, "total_posts")
    if total_posts <= 0:
        return 0.0
    engaged = coerce_number(likes, "total_likes") + coerce_number(comments, "total_comments")
    return round(engaged / total_posts * 100, 1)


def excerpt(content: Optional[str], post_id: Any, length: int = DEFAULT_EXCERPT_LENGTH) -> str:
    """First `length` chars of the post, or a synthetic label when empty."""
    text = (content or "")[:length]
    return text or f"Post #{post_id}"


# ─────────────────────────── Row shaping ──────────────────────────────────

def shape_summary(row: Mapping[str, Any]) -> SummarySnapshot:
    total_posts = read_count(row, "total_posts")
    total_likes = read_count(row, "total_likes")
    total_comments = read_count(row, "total_comments")
    return SummarySnapshot(
        total_users=read_count(row, "total_users"),
        total_posts=total_posts,
        total_likes=total_likes,
        total_comments=total_comments,
        engagement_rate=engagement_rate(total_likes, total_comments, total_posts),
    )


def shape_weekly_comparison(row: Mapping[str, Any]) -> WeeklyComparison:
    return WeeklyComparison(
        this_week=read_count(row, "this_week_likes") + read_count(row, "this_week_comments"),
        last_week=read_count(row, "last_week_likes") + read_count(row, "last_week_comments"),
    )


def shape_daily_engagement(rows: Iterable[Mapping[str, Any]]) -> list[DailyEngagementPoint]:
    points = [
        DailyEngagementPoint(
            date=row["date"],
            likes=read_count(row, "likes"),
            comments=read_count(row, "comments"),
            shares=0,
        )
        for row in rows
    ]
    points.sort(key=lambda p: p.date)
    return points


def shape_content_ranking(
    rows: Iterable[Mapping[str, Any]],
    excerpt_length: int = DEFAULT_EXCERPT_LENGTH,
) -> list[ContentRankingEntry]:
    entries = []
    for row in rows:
        likes = read_count(row, "likes")
        comments = read_count(row, "comments")
        entries.append(
            ContentRankingEntry(
                post_id=row["post_id"],
                author_username=row.get("username"),
                content_excerpt=excerpt(row.get("content"), row["post_id"], excerpt_length),
                likes=likes,
                comments=comments,
                engagement=likes + comments,
                created_at=row.get("created_at"),
            )
        )
    return entries


def shape_signup_buckets(rows: Iterable[Mapping[str, Any]]) -> list[SignupBucket]:
    return [
        SignupBucket(date=row["date"], new_users=read_count(row, "new_users"))
        for row in rows
    ]


def fold_user_growth(buckets: Iterable[SignupBucket]) -> list[UserGrowthPoint]:
    """
    Running total of signups, left to right over ascending dates.

    The series is self-contained: it starts from its own first bucket,
    not from the platform's all-time user count.
    """
    running = 0
    points: list[UserGrowthPoint] = []
    for bucket in sorted(buckets, key=lambda b: b.date):
        new_users = max(bucket.new_users, 0)
        running += new_users
        points.append(
            UserGrowthPoint(date=bucket.date, new_users=new_users, total_users=running)
        )
    return points


# ─────────────────────────── View model ───────────────────────────────────

def build_dashboard_view(
    summary: SummarySnapshot,
    weekly: WeeklyComparison,
    daily: list[DailyEngagementPoint],
    ranking: list[ContentRankingEntry],
    growth: list[UserGrowthPoint],
    state: DataSourceState = DataSourceState.LIVE,
) -> DashboardView:
    return DashboardView(
        summary=summary,
        weekly_comparison=weekly,
        daily_engagement=daily,
        content_ranking=ranking,
        user_growth=growth,
        data_source_state=state,
    )
