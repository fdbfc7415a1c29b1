"""Source domain entities."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import Field

from src.core.domain.aggregate_root import AggregateRoot
from src.core.domain.base_entity import utc_now


class SourceType(str, Enum):
    """Source type enum."""

    REPOSITORY = "repository"
    BLOG = "blog"
    PAPER = "paper"
    NEWS = "news"


class Timespan(str, Enum):
    """Fetch window length."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def days(self) -> int:
        return {"daily": 1, "weekly": 7, "monthly": 30}[self.value]

    def window_start(self, now: datetime | None = None) -> datetime:
        return (now or utc_now()) - timedelta(days=self.days)


class DataSource(AggregateRoot):
    """Data source aggregate root - 外部数据源。"""

    name: str = Field(..., description="源名称（唯一，用于选择连接器）")
    type: SourceType = Field(..., description="源类型")
    display_name: str = Field(..., description="显示名称")
    base_url: str | None = Field(default=None, description="API 基础地址")
    api_config: dict[str, Any] = Field(default_factory=dict, description="连接器配置")
    update_frequency_hours: int = Field(default=24, ge=1, description="更新频率（小时）")
    is_active: bool = Field(default=True, description="是否启用")
    last_updated: datetime | None = Field(default=None, description="最近同步完成时间")

    def activate(self) -> None:
        if self.is_active:
            return
        self.is_active = True
        self._update_timestamp()

    def deactivate(self) -> None:
        if not self.is_active:
            return
        self.is_active = False
        self._update_timestamp()

    def mark_synced(self, at: datetime | None = None) -> None:
        self.last_updated = at or utc_now()
        self._update_timestamp()

    def is_due(self, now: datetime | None = None) -> bool:
        """Whether update_frequency_hours has elapsed since the last sync."""
        if self.last_updated is None:
            return True
        now = now or utc_now()
        return now - self.last_updated >= timedelta(hours=self.update_frequency_hours)
