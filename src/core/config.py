"""Application configuration."""

from typing import Literal

from pydantic import computed_field
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "trendscope"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "UTC"

    # PostgreSQL
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "trendscope"

    @computed_field
    @property
    def database_url_object(self) -> MultiHostUrl:
        return MultiHostUrl.build(
            scheme="postgresql+psycopg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    @computed_field
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        return str(self.database_url_object)

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_CLIENT_TIMEOUT_SEC: float = 5.0

    # GitHub
    GITHUB_TOKEN: str | None = None
    GITHUB_API_BASE_URL: str = "https://api.github.com"
    GITHUB_API_VERSION: str = "2022-11-28"
    GITHUB_TIMEOUT_SEC: float = 30.0
    GITHUB_USER_AGENT: str = "trendscope-bot/0.1"
    GITHUB_MAX_RETRIES: int = 3

    # Fetch Settings
    FETCH_PAGE_SIZE: int = 50
    FETCH_REQUEST_DELAY_SEC: float = 1.0  # 两次搜索请求之间的固定间隔
    FETCH_MIN_STARS_BASE: int = 10
    FETCH_MIN_STARS_VARIANT: int = 5

    # Classification
    RELEVANCE_THRESHOLD: float = 0.3
    MAX_SUGGESTED_TAGS: int = 8
    MIN_TAG_CONFIDENCE: float = 0.3

    # Retention
    RETENTION_MAX_AGE_DAYS: int = 30
    RETENTION_MIN_POPULARITY: int = 5

    # Sync Settings
    SYNC_DEFAULT_TIMESPAN: Literal["daily", "weekly", "monthly"] = "daily"
    SYNC_SOURCE_NAME: str = "github"
    SYNC_LOCK_TTL_SEC: int = 1800  # 30 minutes
    SYNC_LOCK_REQUIRED: bool = True  # Redis 不可用时拒绝执行
    SYNC_SCHEDULE_SEC: float = 6 * 3600

    # Celery Settings
    CELERY_BROKER_URL: str | None = None  # 默认使用 REDIS_URL
    CELERY_RESULT_BACKEND: str | None = None  # 默认使用 REDIS_URL
    CELERY_TASK_SERIALIZER: str = "json"
    CELERY_RESULT_SERIALIZER: str = "json"
    CELERY_ACCEPT_CONTENT: list[str] = ["json"]
    CELERY_TASK_DEFAULT_RETRY_DELAY: int = 60
    CELERY_TASK_MAX_RETRIES: int = 3

    @computed_field
    @property
    def celery_broker_url(self) -> str:
        """获取 Celery Broker URL，默认使用 Redis URL。"""
        return self.CELERY_BROKER_URL or self.REDIS_URL

    @computed_field
    @property
    def celery_result_backend(self) -> str:
        """获取 Celery Result Backend URL，默认使用 Redis URL。"""
        return self.CELERY_RESULT_BACKEND or self.REDIS_URL


settings = Settings()
