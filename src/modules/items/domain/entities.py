"""Item domain entities."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.domain.aggregate_root import AggregateRoot
from src.core.domain.base_entity import BaseEntity, utc_now


class TagCategory(str, Enum):
    """Tag taxonomy category."""

    FRAMEWORK = "framework"
    APPLICATION = "application"
    TECHNOLOGY = "technology"
    INDUSTRY = "industry"


class TagSource(str, Enum):
    """Provenance of an item-tag association."""

    AUTO = "auto"
    MANUAL = "manual"
    AI = "ai"


class ItemAuthor(BaseModel):
    """Author of an item."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", description="作者名称")
    url: str | None = Field(default=None, description="作者主页")
    avatar_url: str | None = Field(default=None, description="头像")


class ItemMetrics(BaseModel):
    """Engagement metrics; all values are non-negative."""

    model_config = ConfigDict(frozen=True)

    primary: float = Field(default=0, ge=0, description="主指标（如 stars）")
    secondary: float | None = Field(default=None, ge=0, description="次指标（如 forks）")
    engagement: float | None = Field(default=None, ge=0, description="互动指标（如 issues）")


class StandardItem(BaseModel):
    """Source-independent shape of a fetched item.

    由 ItemNormalizer 生成，分类器和编排器只依赖这一结构。
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1, description="标题")
    url: str = Field(..., min_length=1, description="原文URL")
    description: str = Field(default="", description="描述")
    author: ItemAuthor = Field(default_factory=ItemAuthor, description="作者")
    published_at: datetime | None = Field(default=None, description="发布时间")
    metrics: ItemMetrics = Field(default_factory=ItemMetrics, description="指标")
    language: str | None = Field(default=None, description="主要语言")
    license: str | None = Field(default=None, description="许可证")
    topics: tuple[str, ...] = Field(default=(), description="主题（去重，保持原顺序）")

    @field_validator("topics", mode="before")
    @classmethod
    def _dedupe_topics(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        return tuple(dict.fromkeys(str(topic) for topic in value))

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> str:
        return value or ""


class Item(AggregateRoot):
    """Item aggregate root, keyed by (source_id, external_id)."""

    source_id: str = Field(..., description="来源ID")
    external_id: str = Field(..., description="来源内部ID")
    title: str = Field(..., min_length=1, description="标题")
    description: str = Field(default="", description="描述")
    url: str = Field(..., min_length=1, description="原文URL")
    author: ItemAuthor = Field(default_factory=ItemAuthor, description="作者")
    published_at: datetime | None = Field(default=None, description="发布时间")
    popularity_score: int = Field(default=0, ge=0, le=100, description="热度分数")
    metrics: ItemMetrics = Field(default_factory=ItemMetrics, description="指标")
    primary_category: str = Field(default="other", description="主分类")
    trending_date: datetime = Field(default_factory=utc_now, description="最近一次判定相关的时间")
    last_updated: datetime = Field(default_factory=utc_now, description="最近刷新时间")
    processed_metadata: dict[str, Any] = Field(default_factory=dict, description="处理元数据")
    raw_data: dict[str, Any] | None = Field(default=None, description="归档的标准化数据")

    def refresh_from(self, other: "Item") -> None:
        """Apply a re-sighting of the same item.

        published_at 与 created_at 一经设置不再改变。
        """
        self.title = other.title
        self.description = other.description
        self.url = other.url
        self.author = other.author
        self.popularity_score = other.popularity_score
        self.metrics = other.metrics
        self.primary_category = other.primary_category
        self.trending_date = other.trending_date
        self.last_updated = other.last_updated
        self.processed_metadata = other.processed_metadata
        self.raw_data = other.raw_data
        if self.published_at is None:
            self.published_at = other.published_at
        self._update_timestamp()


class Tag(BaseEntity):
    """Tag taxonomy entry."""

    name: str = Field(..., description="标签名（唯一）")
    slug: str = Field(..., description="URL 友好名称")
    category: TagCategory = Field(..., description="分类")
    parent_id: str | None = Field(default=None, description="父标签")
    display_name: str | None = Field(default=None, description="显示名称")
    description: str | None = Field(default=None, description="描述")
    color: str = Field(default="#6B7280", description="颜色")
    icon: str | None = Field(default=None, description="图标")
    sort_order: int = Field(default=0, description="排序")
    is_featured: bool = Field(default=False, description="是否精选")


class ItemTag(BaseEntity):
    """Association between an item and a tag."""

    item_id: str = Field(..., description="Item ID")
    tag_id: str = Field(..., description="Tag ID")
    confidence: float = Field(default=1.0, ge=0, le=1, description="置信度")
    source: TagSource = Field(default=TagSource.AUTO, description="来源")
