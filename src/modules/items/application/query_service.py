"""条目查询服务（读侧）。"""

from datetime import datetime, timedelta
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from src.core.domain.base_entity import utc_now
from src.core.domain.exceptions import ValidationError
from src.modules.items.domain.entities import Item
from src.modules.items.domain.exceptions import ItemNotFoundError
from src.modules.items.domain.queries import (
    ItemDetail,
    ItemStats,
    Pagination,
    TrendingFilters,
)
from src.modules.items.domain.repository import ItemRepository, TagRepository


class TrendingPage(BaseModel):
    items: list[Item] = Field(default_factory=list)
    pagination: Pagination


class ItemQueryService:
    """List, search and summarize persisted items."""

    MAX_SEARCH_LIMIT = 100
    STATS_TOP_N = 10

    def __init__(self, item_repository: ItemRepository, tag_repository: TagRepository):
        self.item_repository = item_repository
        self.tag_repository = tag_repository

    @staticmethod
    def parse_filters(raw: dict[str, Any]) -> TrendingFilters:
        """Validate raw filter input; nothing is queried when this fails."""
        try:
            return TrendingFilters.model_validate(raw)
        except PydanticValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationError(f"Invalid filters: {errors}") from e

    async def list_trending(
        self,
        filters: TrendingFilters | dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> TrendingPage:
        if filters is None:
            filters = TrendingFilters()
        elif isinstance(filters, dict):
            filters = self.parse_filters(filters)

        since = filters.timespan.window_start(now) if filters.timespan else None
        items, total = await self.item_repository.list_trending(filters, since=since)

        page = filters.offset // filters.limit + 1
        return TrendingPage(
            items=items,
            pagination=Pagination(
                page=page,
                limit=filters.limit,
                total=total,
                has_more=filters.offset + len(items) < total,
            ),
        )

    async def get_item(self, item_id: str) -> ItemDetail:
        item = await self.item_repository.get_by_id(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        tags = await self.tag_repository.get_item_tags(item.id)
        return ItemDetail(item=item, tags=tags)

    async def search(self, query: str, limit: int = 20) -> list[Item]:
        query = (query or "").strip()
        if not query:
            raise ValidationError("Search query must not be empty")
        if not 1 <= limit <= self.MAX_SEARCH_LIMIT:
            raise ValidationError(
                f"limit must be between 1 and {self.MAX_SEARCH_LIMIT}"
            )
        logger.debug(f"Searching items for '{query}' (limit={limit})")
        return await self.item_repository.search(query, limit)

    async def get_stats(self, now: datetime | None = None) -> ItemStats:
        """Repository totals; "today" counts items created in the last 24 hours."""
        since = (now or utc_now()) - timedelta(days=1)
        return await self.item_repository.get_stats(since, top_n=self.STATS_TOP_N)
