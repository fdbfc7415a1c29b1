"""Read-side query objects for items."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.modules.items.domain.entities import Item, Tag, TagSource
from src.modules.sources.domain.entities import Timespan


class SortField(str, Enum):
    POPULARITY = "popularity"
    DATE = "date"
    RELEVANCE = "relevance"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class TrendingFilters(BaseModel):
    """Filters for listing trending items. Unknown keys are rejected."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    tags: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    timespan: Timespan | None = None
    min_popularity: int | None = Field(default=None, ge=0, le=100)
    language: str | None = None
    sort_by: SortField = SortField.POPULARITY
    order: SortOrder = SortOrder.DESC
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)

    @field_validator("tags", "categories", mode="before")
    @classmethod
    def _split_csv(cls, value):
        # 允许 "a,b" 形式的输入
        if isinstance(value, str):
            return tuple(v.strip() for v in value.split(",") if v.strip())
        return value


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    has_more: bool


class CountBucket(BaseModel):
    name: str
    count: int


class ItemStats(BaseModel):
    """Aggregate repository statistics."""

    total: int = 0
    today: int = 0
    top_categories: list[CountBucket] = Field(default_factory=list)
    top_tags: list[CountBucket] = Field(default_factory=list)
    languages: list[CountBucket] = Field(default_factory=list)


class AppliedTag(BaseModel):
    """A tag as attached to one item."""

    tag: Tag
    confidence: float = Field(ge=0, le=1)
    source: TagSource


class ItemDetail(BaseModel):
    """Single item with its tags, highest confidence first."""

    item: Item
    tags: list[AppliedTag] = Field(default_factory=list)
