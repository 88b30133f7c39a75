"""
Unit tests for the presentation adapter (pure functions, no database).

Run: pytest tests/test_presentation.py -v
"""
from datetime import date
from decimal import Decimal

import pytest

from admin_api.analytics import presentation
from admin_api.schemas import DataSourceState, SignupBucket


class TestCoercion:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, 0),
            ("", 0),
            ("abc", 0),
            (float("nan"), 0),
            (float("inf"), 0),
            (True, 0),
            (7, 7),
            ("12", 12),
            (" 3 ", 3),
            (Decimal("4"), 4),
            (2.0, 2),
        ],
    )
    def test_coerce_number(self, raw, expected):
        assert presentation.coerce_number(raw) == expected

    def test_missing_field_reads_as_zero(self):
        assert presentation.read_count({"likes": 3}, "comments") == 0

    def test_malformed_summary_row_is_zeroed_not_raised(self):
        snapshot = presentation.shape_summary(
            {"total_users": None, "total_posts": "2", "total_likes": 3, "total_comments": None}
        )
        assert snapshot.total_users == 0
        assert snapshot.total_comments == 0
        assert snapshot.engagement_rate == 150.0


class TestEngagementRate:
    def test_no_posts_means_zero_rate(self):
        assert presentation.engagement_rate(10, 5, 0) == 0.0
        assert presentation.engagement_rate(None, None, None) == 0.0

    def test_two_posts_three_likes_one_comment(self):
        assert presentation.engagement_rate(3, 1, 2) == 200.0

    def test_rounded_to_one_decimal(self):
        assert presentation.engagement_rate(1, 0, 3) == 33.3


class TestExcerpt:
    def test_long_content_truncated(self):
        text = "x" * 45
        assert presentation.excerpt(text, 1) == "x" * 30

    def test_short_content_unchanged(self):
        assert presentation.excerpt("hello", 1) == "hello"

    @pytest.mark.parametrize("content", [None, ""])
    def test_missing_content_gets_label(self, content):
        assert presentation.excerpt(content, 42) == "Post #42"

    def test_custom_length(self):
        assert presentation.excerpt("abcdef", 1, length=3) == "abc"


class TestUserGrowthFold:
    def test_cumulative_totals(self):
        buckets = [
            SignupBucket(date=date(2024, 1, 1), new_users=3),
            SignupBucket(date=date(2024, 1, 2), new_users=0),
            SignupBucket(date=date(2024, 1, 3), new_users=2),
        ]
        points = presentation.fold_user_growth(buckets)
        assert [p.total_users for p in points] == [3, 3, 5]
        assert [p.new_users for p in points] == [3, 0, 2]

    def test_fold_orders_by_date_first(self):
        buckets = [
            SignupBucket(date=date(2024, 1, 3), new_users=2),
            SignupBucket(date=date(2024, 1, 1), new_users=3),
        ]
        points = presentation.fold_user_growth(buckets)
        assert [p.date for p in points] == [date(2024, 1, 1), date(2024, 1, 3)]
        assert [p.total_users for p in points] == [3, 5]

    def test_monotonic_non_decreasing(self):
        counts = [5, 0, 1, 0, 0, 9, 2]
        buckets = [
            SignupBucket(date=date(2024, 2, i + 1), new_users=n) for i, n in enumerate(counts)
        ]
        totals = [p.total_users for p in presentation.fold_user_growth(buckets)]
        assert totals == sorted(totals)
        assert totals[-1] == sum(counts)

    def test_empty_series(self):
        assert presentation.fold_user_growth([]) == []


class TestShaping:
    def test_daily_engagement_sorted_with_zero_shares(self):
        rows = [
            {"date": date(2024, 1, 2), "likes": 4, "comments": None},
            {"date": "2024-01-01", "likes": "1", "comments": 2},
        ]
        points = presentation.shape_daily_engagement(rows)
        assert [p.date for p in points] == [date(2024, 1, 1), date(2024, 1, 2)]
        assert points[1].comments == 0
        assert all(p.shares == 0 for p in points)

    def test_ranking_entry_engagement_is_likes_plus_comments(self):
        rows = [{"post_id": 9, "username": "sam", "content": None, "likes": 5, "comments": None}]
        entry = presentation.shape_content_ranking(rows)[0]
        assert entry.engagement == 5
        assert entry.comments == 0
        assert entry.content_excerpt == "Post #9"
        assert entry.author_username == "sam"

    def test_dashboard_view_defaults_to_live(self):
        view = presentation.build_dashboard_view(
            presentation.shape_summary({}),
            presentation.shape_weekly_comparison({}),
            [],
            [],
            [],
        )
        assert view.data_source_state is DataSourceState.LIVE
        assert view.summary.engagement_rate == 0.0
        assert view.weekly_comparison.this_week == 0
