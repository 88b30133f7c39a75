"""
Event store connection settings.

Run: pytest tests/test_database.py -v
"""
from admin_api.config import Settings
from admin_api.database import UTC_SESSION_INIT, connect_args_for
from admin_api.models import AnalyticsLog, Comment, Like, Post, User


class TestSessionTimeZone:
    def test_mysql_sessions_pinned_to_utc(self):
        url = Settings(mysql_host="db.internal", database_url_override=None).database_url
        assert url.startswith("mysql+aiomysql://")
        assert connect_args_for(url) == {"init_command": "SET time_zone = '+00:00'"}
        assert UTC_SESSION_INIT == "SET time_zone = '+00:00'"

    def test_other_backends_untouched(self):
        assert connect_args_for("sqlite+aiosqlite:///events.db") == {}


class TestModels:
    def test_event_tables_have_no_orm_relationships(self):
        for model in (User, Post, Like, Comment, AnalyticsLog):
            assert not model.__mapper__.relationships
