"""Item and tag database models."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, Text, UniqueConstraint
from sqlmodel import Field

from src.core.infrastructure.database.base_model import BaseModel, _utc_now
from src.modules.items.domain.entities import TagCategory, TagSource


class ItemModel(BaseModel, table=True):
    """Item database model."""

    __tablename__ = "items"
    __table_args__ = (
        UniqueConstraint("source_id", "external_id", name="uq_items_source_external"),
    )

    source_id: str = Field(nullable=False, index=True)
    external_id: str = Field(nullable=False)
    title: str = Field(nullable=False, sa_type=Text)
    description: str = Field(default="", sa_type=Text, nullable=False)
    url: str = Field(nullable=False, sa_type=Text)
    author_name: str = Field(default="", nullable=False)
    author_url: str | None = Field(default=None, sa_type=Text, nullable=True)
    author_avatar_url: str | None = Field(default=None, sa_type=Text, nullable=True)
    published_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        nullable=True,
    )
    popularity_score: int = Field(default=0, nullable=False, index=True)
    metric_primary: float = Field(default=0, nullable=False)
    metric_secondary: float | None = Field(default=None, nullable=True)
    metric_engagement: float | None = Field(default=None, nullable=True)
    primary_category: str = Field(default="other", nullable=False, index=True)
    # 冗余自 processed_metadata，便于按语言过滤与统计
    language: str | None = Field(default=None, nullable=True, index=True)
    trending_date: datetime = Field(
        default_factory=_utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    last_updated: datetime = Field(
        default_factory=_utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
    processed_metadata: dict[str, Any] = Field(
        default_factory=dict, sa_type=JSON, nullable=False
    )
    raw_data: dict[str, Any] | None = Field(default=None, sa_type=JSON, nullable=True)


class TagModel(BaseModel, table=True):
    """Tag database model."""

    __tablename__ = "tags"

    name: str = Field(nullable=False, unique=True, index=True)
    slug: str = Field(nullable=False)
    category: TagCategory = Field(
        sa_type=Enum(
            TagCategory,
            name="tagcategory",
            values_callable=lambda e: [i.value for i in e],
            create_constraint=False,
        ),
        nullable=False,
        index=True,
    )
    parent_id: str | None = Field(default=None, nullable=True)
    display_name: str | None = Field(default=None, nullable=True)
    description: str | None = Field(default=None, sa_type=Text, nullable=True)
    color: str = Field(default="#6B7280", nullable=False)
    icon: str | None = Field(default=None, nullable=True)
    sort_order: int = Field(default=0, nullable=False)
    is_featured: bool = Field(default=False, nullable=False)


class ItemTagModel(BaseModel, table=True):
    """Item-tag association model."""

    __tablename__ = "item_tags"
    __table_args__ = (
        UniqueConstraint("item_id", "tag_id", name="uq_item_tags_item_tag"),
    )

    item_id: str = Field(nullable=False, index=True)
    tag_id: str = Field(nullable=False, index=True)
    confidence: float = Field(default=1.0, nullable=False)
    source: TagSource = Field(
        default=TagSource.AUTO,
        sa_type=Enum(
            TagSource,
            name="tagsource",
            values_callable=lambda e: [i.value for i in e],
            create_constraint=False,
        ),
        nullable=False,
    )
