"""Item and tag repository implementations."""

from collections.abc import Sequence
from datetime import datetime

from loguru import logger
from sqlalchemy import delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from src.core.domain.events import EventBus
from src.core.domain.exceptions import EntityNotFoundError
from src.core.infrastructure.database.event_aware_repository import EventAwareRepository
from src.modules.classification.domain.entities import MatchSource, TagMatch
from src.modules.items.domain.entities import Item, Tag, TagSource
from src.modules.items.domain.queries import (
    AppliedTag,
    CountBucket,
    ItemStats,
    SortField,
    SortOrder,
    TrendingFilters,
)
from src.modules.items.domain.repository import ItemRepository, TagRepository
from src.modules.items.infrastructure.mappers import (
    ItemMapper,
    ItemTagMapper,
    TagMapper,
)
from src.modules.items.infrastructure.models import ItemModel, ItemTagModel, TagModel


def _tag_source_for(match: TagMatch) -> TagSource:
    # 只有 AI 产生的匹配保留 ai 来源，其余统一记为 auto
    return TagSource.AI if match.source == MatchSource.AI else TagSource.AUTO


class PostgreSQLItemRepository(EventAwareRepository[Item], ItemRepository):
    """PostgreSQL item repository implementation."""

    def __init__(
        self,
        session: AsyncSession,
        mapper: ItemMapper,
        event_publisher: EventBus,
    ):
        super().__init__(event_publisher)
        self.session = session
        self.mapper = mapper
        self.logger = logger

    async def get_by_id(self, item_id: str) -> Item | None:
        statement = select(ItemModel).where(
            ItemModel.id == item_id,
            col(ItemModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def find_by_source_and_external_id(
        self, source_id: str, external_id: str
    ) -> Item | None:
        statement = select(ItemModel).where(
            ItemModel.source_id == source_id,
            ItemModel.external_id == external_id,
            col(ItemModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def create(self, item: Item) -> Item:
        model = self.mapper.to_model(item)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        await self._publish_events_from_entity(item)
        return self.mapper.to_domain(model)

    async def update(self, item: Item) -> Item:
        statement = select(ItemModel).where(ItemModel.id == item.id)
        result = await self.session.execute(statement)
        existing = result.scalar_one_or_none()
        if not existing:
            raise EntityNotFoundError("Item", item.id)

        existing.title = item.title
        existing.description = item.description
        existing.url = item.url
        existing.author_name = item.author.name
        existing.author_url = item.author.url
        existing.author_avatar_url = item.author.avatar_url
        existing.published_at = item.published_at
        existing.popularity_score = item.popularity_score
        existing.metric_primary = item.metrics.primary
        existing.metric_secondary = item.metrics.secondary
        existing.metric_engagement = item.metrics.engagement
        existing.primary_category = item.primary_category
        existing.language = item.processed_metadata.get("language")
        existing.trending_date = item.trending_date
        existing.last_updated = item.last_updated
        existing.processed_metadata = item.processed_metadata
        existing.raw_data = item.raw_data
        existing.updated_at = item.updated_at
        existing.is_deleted = item.is_deleted

        self.session.add(existing)
        await self.session.flush()
        await self.session.refresh(existing)
        await self._publish_events_from_entity(item)
        return self.mapper.to_domain(existing)

    async def delete_stale_items(self, cutoff: datetime, min_popularity: int) -> int:
        stale_ids = select(ItemModel.id).where(
            ItemModel.created_at < cutoff,
            ItemModel.popularity_score < min_popularity,
        )

        # 先删关联，再删条目
        await self.session.execute(
            delete(ItemTagModel).where(col(ItemTagModel.item_id).in_(stale_ids))
        )
        result = await self.session.execute(
            delete(ItemModel).where(
                ItemModel.created_at < cutoff,
                ItemModel.popularity_score < min_popularity,
            )
        )
        deleted = result.rowcount or 0
        self.logger.debug(f"Deleted {deleted} stale items created before {cutoff}")
        return deleted

    async def list_trending(
        self, filters: TrendingFilters, since: datetime | None = None
    ) -> tuple[list[Item], int]:
        statement = select(
            ItemModel, func.count(ItemModel.id).over().label("total_count")
        ).where(col(ItemModel.is_deleted).is_(False))

        if since:
            statement = statement.where(ItemModel.trending_date >= since)
        if filters.min_popularity is not None:
            statement = statement.where(
                ItemModel.popularity_score >= filters.min_popularity
            )
        if filters.categories:
            statement = statement.where(
                col(ItemModel.primary_category).in_(filters.categories)
            )
        if filters.language:
            statement = statement.where(ItemModel.language == filters.language)
        if filters.tags:
            tagged = (
                select(ItemTagModel.item_id)
                .join(TagModel, col(TagModel.id) == col(ItemTagModel.tag_id))
                .where(col(TagModel.name).in_(filters.tags))
            )
            statement = statement.where(col(ItemModel.id).in_(tagged))

        sort_column = {
            SortField.POPULARITY: col(ItemModel.popularity_score),
            SortField.DATE: col(ItemModel.trending_date),
            SortField.RELEVANCE: col(ItemModel.processed_metadata)[
                ("classification", "relevance_score")
            ].as_float(),
        }[filters.sort_by]
        ordering = (
            sort_column.desc().nullslast()
            if filters.order == SortOrder.DESC
            else sort_column.asc().nullsfirst()
        )

        statement = (
            statement.order_by(ordering, col(ItemModel.id))
            .offset(filters.offset)
            .limit(filters.limit)
        )

        result = await self.session.execute(statement)
        rows = result.all()

        if not rows:
            return [], 0

        total_count = rows[0].total_count
        models = [row.ItemModel for row in rows]
        return self.mapper.to_domain_list(models), total_count

    async def search(self, query: str, limit: int = 20) -> list[Item]:
        pattern = f"%{query}%"
        statement = (
            select(ItemModel)
            .where(
                col(ItemModel.is_deleted).is_(False),
                or_(
                    col(ItemModel.title).ilike(pattern),
                    col(ItemModel.description).ilike(pattern),
                    col(ItemModel.author_name).ilike(pattern),
                ),
            )
            .order_by(col(ItemModel.popularity_score).desc(), col(ItemModel.id))
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return self.mapper.to_domain_list(list(result.scalars().all()))

    async def get_stats(self, since: datetime, top_n: int = 10) -> ItemStats:
        alive = col(ItemModel.is_deleted).is_(False)

        total = await self.session.scalar(
            select(func.count(ItemModel.id)).where(alive)
        )
        today = await self.session.scalar(
            select(func.count(ItemModel.id)).where(alive, ItemModel.created_at >= since)
        )

        categories = await self.session.execute(
            select(ItemModel.primary_category, func.count(ItemModel.id).label("n"))
            .where(alive)
            .group_by(ItemModel.primary_category)
            .order_by(func.count(ItemModel.id).desc())
            .limit(top_n)
        )
        tags = await self.session.execute(
            select(TagModel.name, func.count(ItemTagModel.id).label("n"))
            .join(ItemTagModel, col(ItemTagModel.tag_id) == col(TagModel.id))
            .join(ItemModel, col(ItemModel.id) == col(ItemTagModel.item_id))
            .where(alive)
            .group_by(TagModel.name)
            .order_by(func.count(ItemTagModel.id).desc())
            .limit(top_n)
        )
        languages = await self.session.execute(
            select(ItemModel.language, func.count(ItemModel.id).label("n"))
            .where(alive, col(ItemModel.language).is_not(None))
            .group_by(ItemModel.language)
            .order_by(func.count(ItemModel.id).desc())
            .limit(top_n)
        )

        return ItemStats(
            total=total or 0,
            today=today or 0,
            top_categories=[CountBucket(name=name, count=n) for name, n in categories],
            top_tags=[CountBucket(name=name, count=n) for name, n in tags],
            languages=[CountBucket(name=name, count=n) for name, n in languages],
        )


class PostgreSQLTagRepository(EventAwareRepository[Tag], TagRepository):
    """PostgreSQL tag repository implementation."""

    def __init__(
        self,
        session: AsyncSession,
        mapper: TagMapper,
        event_publisher: EventBus,
        link_mapper: ItemTagMapper | None = None,
    ):
        super().__init__(event_publisher)
        self.session = session
        self.mapper = mapper
        self.link_mapper = link_mapper or ItemTagMapper()

    async def get_by_id(self, tag_id: str) -> Tag | None:
        statement = select(TagModel).where(
            TagModel.id == tag_id,
            col(TagModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def get_by_name(self, name: str) -> Tag | None:
        statement = select(TagModel).where(
            TagModel.name == name,
            col(TagModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def get_by_names(self, names: Sequence[str]) -> dict[str, Tag]:
        if not names:
            return {}

        statement = select(TagModel).where(
            col(TagModel.name).in_(list(names)),
            col(TagModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        return {
            model.name: self.mapper.to_domain(model)
            for model in result.scalars().all()
        }

    async def list_all(self, featured_only: bool = False) -> list[Tag]:
        statement = select(TagModel).where(col(TagModel.is_deleted).is_(False))
        if featured_only:
            statement = statement.where(col(TagModel.is_featured).is_(True))
        statement = statement.order_by(col(TagModel.sort_order), col(TagModel.name))

        result = await self.session.execute(statement)
        return self.mapper.to_domain_list(list(result.scalars().all()))

    async def create(self, tag: Tag) -> Tag:
        model = self.mapper.to_model(tag)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        await self._publish_events_from_entity(tag)
        return self.mapper.to_domain(model)

    async def update(self, tag: Tag) -> Tag:
        statement = select(TagModel).where(TagModel.id == tag.id)
        result = await self.session.execute(statement)
        existing = result.scalar_one_or_none()
        if not existing:
            raise EntityNotFoundError("Tag", tag.id)

        existing.slug = tag.slug
        existing.category = tag.category
        existing.parent_id = tag.parent_id
        existing.display_name = tag.display_name
        existing.description = tag.description
        existing.color = tag.color
        existing.icon = tag.icon
        existing.sort_order = tag.sort_order
        existing.is_featured = tag.is_featured
        existing.updated_at = tag.updated_at
        existing.is_deleted = tag.is_deleted

        self.session.add(existing)
        await self.session.flush()
        await self.session.refresh(existing)
        await self._publish_events_from_entity(tag)
        return self.mapper.to_domain(existing)

    async def replace_auto_tags(self, item_id: str, matches: Sequence[TagMatch]) -> int:
        await self.session.execute(
            delete(ItemTagModel).where(
                ItemTagModel.item_id == item_id,
                col(ItemTagModel.source).in_([TagSource.AUTO, TagSource.AI]),
            )
        )

        manual = await self.session.execute(
            select(ItemTagModel.tag_id).where(
                ItemTagModel.item_id == item_id,
                ItemTagModel.source == TagSource.MANUAL,
            )
        )
        manual_tag_ids = set(manual.scalars().all())

        tags = await self.get_by_names([m.tag_name for m in matches])
        written = 0
        for match in matches:
            tag = tags.get(match.tag_name)
            if tag is None:
                # 分类器可能给出标签表中不存在的标签
                continue
            if tag.id in manual_tag_ids:
                continue
            self.session.add(
                ItemTagModel(
                    item_id=item_id,
                    tag_id=tag.id,
                    confidence=match.confidence,
                    source=_tag_source_for(match),
                )
            )
            manual_tag_ids.add(tag.id)
            written += 1

        await self.session.flush()
        return written

    async def get_item_tags(self, item_id: str) -> list[AppliedTag]:
        statement = (
            select(TagModel, ItemTagModel)
            .join(ItemTagModel, col(ItemTagModel.tag_id) == col(TagModel.id))
            .where(
                ItemTagModel.item_id == item_id,
                col(TagModel.is_deleted).is_(False),
            )
            .order_by(col(ItemTagModel.confidence).desc(), col(TagModel.name))
        )
        result = await self.session.execute(statement)

        applied = []
        for tag_model, link_model in result.all():
            link = self.link_mapper.to_domain(link_model)
            applied.append(
                AppliedTag(
                    tag=self.mapper.to_domain(tag_model),
                    confidence=link.confidence,
                    source=link.source,
                )
            )
        return applied

    async def get_tag_stats(self, limit: int = 20) -> list[CountBucket]:
        statement = (
            select(TagModel.name, func.count(ItemTagModel.id).label("n"))
            .join(ItemTagModel, col(ItemTagModel.tag_id) == col(TagModel.id))
            .where(col(TagModel.is_deleted).is_(False))
            .group_by(TagModel.name)
            .order_by(func.count(ItemTagModel.id).desc(), col(TagModel.name))
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return [CountBucket(name=name, count=n) for name, n in result]

    async def cleanup_unused_tags(self) -> int:
        used = select(ItemTagModel.tag_id).distinct()
        result = await self.session.execute(
            delete(TagModel).where(
                col(TagModel.is_featured).is_(False),
                col(TagModel.id).not_in(used),
            )
        )
        return result.rowcount or 0
