"""
Configuration management using Pydantic BaseSettings.
All values can be overridden via environment variables or a .env file.
"""
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── MySQL (event store) ────────────────────────────────────────────────
    mysql_host: str = "localhost"
    mysql_port: int = 3306
    mysql_user: str = "root"
    mysql_password: str = ""
    mysql_database: str = "sm_analytics"
    # Full SQLAlchemy URL; wins over the mysql_* parts when set
    database_url_override: Optional[str] = None
    db_pool_size: int = 10
    db_max_overflow: int = 5

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"mysql+aiomysql://{self.mysql_user}:{self.mysql_password}"
            f"@{self.mysql_host}:{self.mysql_port}/{self.mysql_database}"
        )

    # ── Analytics ──────────────────────────────────────────────────────────
    analytics_query_timeout: float = 5.0    # seconds, per aggregation call
    content_ranking_limit: int = 100        # top-N posts in the ranking
    excerpt_length: int = 30                # chars of post content shown

    # ── Auth ───────────────────────────────────────────────────────────────
    jwt_secret: str = "devsecret"
    jwt_algorithm: str = "HS256"

    # ── Observability ──────────────────────────────────────────────────────
    otel_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://jaeger:4317"
    service_name: str = "admin-api"
    environment: str = "development"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
