"""Item and tag entity-model mappers."""

from src.core.infrastructure.database.mapper import BaseMapper
from src.modules.items.domain.entities import (
    Item,
    ItemAuthor,
    ItemMetrics,
    ItemTag,
    Tag,
)
from src.modules.items.infrastructure.models import ItemModel, ItemTagModel, TagModel


class ItemMapper(BaseMapper[Item, ItemModel]):
    """Item entity-model mapper. Author and metrics are flattened into columns."""

    def to_domain(self, model: ItemModel) -> Item:
        return Item(
            id=model.id,
            source_id=model.source_id,
            external_id=model.external_id,
            title=model.title,
            description=model.description or "",
            url=model.url,
            author=ItemAuthor(
                name=model.author_name or "",
                url=model.author_url,
                avatar_url=model.author_avatar_url,
            ),
            published_at=model.published_at,
            popularity_score=model.popularity_score,
            metrics=ItemMetrics(
                primary=model.metric_primary,
                secondary=model.metric_secondary,
                engagement=model.metric_engagement,
            ),
            primary_category=model.primary_category,
            trending_date=model.trending_date,
            last_updated=model.last_updated,
            processed_metadata=model.processed_metadata or {},
            raw_data=model.raw_data,
            created_at=model.created_at,
            updated_at=model.updated_at,
            is_deleted=model.is_deleted,
        )

    def to_model(self, entity: Item) -> ItemModel:
        return ItemModel(
            id=entity.id,
            source_id=entity.source_id,
            external_id=entity.external_id,
            title=entity.title,
            description=entity.description,
            url=entity.url,
            author_name=entity.author.name,
            author_url=entity.author.url,
            author_avatar_url=entity.author.avatar_url,
            published_at=entity.published_at,
            popularity_score=entity.popularity_score,
            metric_primary=entity.metrics.primary,
            metric_secondary=entity.metrics.secondary,
            metric_engagement=entity.metrics.engagement,
            primary_category=entity.primary_category,
            language=entity.processed_metadata.get("language"),
            trending_date=entity.trending_date,
            last_updated=entity.last_updated,
            processed_metadata=entity.processed_metadata,
            raw_data=entity.raw_data,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            is_deleted=entity.is_deleted,
        )


class TagMapper(BaseMapper[Tag, TagModel]):
    def to_domain(self, model: TagModel) -> Tag:
        return Tag(
            id=model.id,
            name=model.name,
            slug=model.slug,
            category=model.category,
            parent_id=model.parent_id,
            display_name=model.display_name,
            description=model.description,
            color=model.color,
            icon=model.icon,
            sort_order=model.sort_order,
            is_featured=model.is_featured,
            created_at=model.created_at,
            updated_at=model.updated_at,
            is_deleted=model.is_deleted,
        )

    def to_model(self, entity: Tag) -> TagModel:
        return TagModel(
            id=entity.id,
            name=entity.name,
            slug=entity.slug,
            category=entity.category,
            parent_id=entity.parent_id,
            display_name=entity.display_name,
            description=entity.description,
            color=entity.color,
            icon=entity.icon,
            sort_order=entity.sort_order,
            is_featured=entity.is_featured,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            is_deleted=entity.is_deleted,
        )


class ItemTagMapper(BaseMapper[ItemTag, ItemTagModel]):
    def to_domain(self, model: ItemTagModel) -> ItemTag:
        return ItemTag(
            id=model.id,
            item_id=model.item_id,
            tag_id=model.tag_id,
            confidence=model.confidence,
            source=model.source,
            created_at=model.created_at,
            updated_at=model.updated_at,
            is_deleted=model.is_deleted,
        )

    def to_model(self, entity: ItemTag) -> ItemTagModel:
        return ItemTagModel(
            id=entity.id,
            item_id=entity.item_id,
            tag_id=entity.tag_id,
            confidence=entity.confidence,
            source=entity.source,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            is_deleted=entity.is_deleted,
        )
