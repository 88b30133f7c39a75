"""
Pydantic request / response schemas for the API layer.
Kept separate from ORM models to avoid coupling transport to storage.
"""
import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# ──────────────────────────── Analytics views ─────────────────────────────

class SummarySnapshot(BaseModel):
    total_users: int = 0
    total_posts: int = 0
    total_likes: int = 0
    total_comments: int = 0
    # (likes + comments) / posts * 100, one decimal; 0 when there are no posts
    engagement_rate: float = 0.0


class WeeklyComparison(BaseModel):
    """Likes + comments in the current and the preceding 7-day window."""
    this_week: int = 0
    last_week: int = 0


class DailyEngagementPoint(BaseModel):
    date: dt.date
    likes: int = 0
    comments: int = 0
    # No share entity exists in the store; always 0
    shares: int = 0


class ContentRankingEntry(BaseModel):
    post_id: int
    author_username: Optional[str] = None
    content_excerpt: str
    likes: int = 0
    comments: int = 0
    engagement: int = 0
    created_at: Optional[dt.datetime] = None


class SignupBucket(BaseModel):
    date: dt.date
    new_users: int = 0


class UserGrowthPoint(BaseModel):
    date: dt.date
    new_users: int = 0
    total_users: int = 0


class SummaryResponse(BaseModel):
    totals: SummarySnapshot
    weekly_comparison: WeeklyComparison


# ──────────────────────────── Dashboard ───────────────────────────────────

class DataSourceState(str, Enum):
    LIVE = "live"
    DEGRADED = "degraded"


class DashboardView(BaseModel):
    """Everything the dashboard renders from one load cycle."""
    summary: SummarySnapshot
    weekly_comparison: WeeklyComparison
    daily_engagement: list[DailyEngagementPoint]
    content_ranking: list[ContentRankingEntry]
    user_growth: list[UserGrowthPoint]
    data_source_state: DataSourceState


# ──────────────────────────── Metric log ──────────────────────────────────

class MetricLogCreate(BaseModel):
    # Presence of metric_name is checked by the handler so a missing name
    # is rejected with a 400 rather than a schema error
    metric_name: Optional[str] = Field(None, max_length=100)
    metric_value: Optional[float] = None
    notes: Optional[str] = None


class MetricLogResponse(BaseModel):
    id: int
