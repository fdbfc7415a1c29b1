"""标签管理服务。"""

import re

from loguru import logger

from src.core.domain.exceptions import DuplicateEntityError, ValidationError
from src.core.domain.ports.transaction import (
    NullTransactionManager,
    TransactionManager,
)
from src.modules.items.domain.entities import Tag, TagCategory
from src.modules.items.domain.exceptions import TagNotFoundError
from src.modules.items.domain.queries import CountBucket
from src.modules.items.domain.repository import TagRepository

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


class TagService:
    def __init__(
        self,
        tag_repository: TagRepository,
        transaction_manager: TransactionManager | None = None,
    ):
        self.tag_repository = tag_repository
        self.tx = transaction_manager or NullTransactionManager()

    async def create_tag(
        self,
        name: str,
        category: str,
        slug: str | None = None,
        display_name: str | None = None,
        description: str | None = None,
        color: str = "#6B7280",
        icon: str | None = None,
        parent_name: str | None = None,
        sort_order: int = 0,
        is_featured: bool = False,
    ) -> Tag:
        """Validate and create a taxonomy tag.

        所有校验在写入前完成，失败时不产生任何变更。

        Raises:
            ValidationError: 名称/slug/颜色/分类不合法
            TagNotFoundError: 指定的父标签不存在
            DuplicateEntityError: 同名标签已存在
        """
        name = (name or "").strip().lower()
        slug = (slug or name).strip()
        if not name:
            raise ValidationError("Tag name must not be empty")
        if not SLUG_PATTERN.match(name):
            raise ValidationError(f"Invalid tag name '{name}'")
        if not SLUG_PATTERN.match(slug):
            raise ValidationError(f"Invalid tag slug '{slug}'")
        if not COLOR_PATTERN.match(color):
            raise ValidationError(f"Invalid color '{color}', expected #RRGGBB")
        try:
            tag_category = TagCategory(category)
        except ValueError as e:
            raise ValidationError(f"Unknown tag category '{category}'") from e

        parent_id = None
        if parent_name:
            parent = await self.tag_repository.get_by_name(parent_name)
            if parent is None:
                raise TagNotFoundError(parent_name)
            parent_id = parent.id

        if await self.tag_repository.get_by_name(name) is not None:
            raise DuplicateEntityError("Tag", "name", name)

        tag = Tag(
            name=name,
            slug=slug,
            category=tag_category,
            parent_id=parent_id,
            display_name=display_name,
            description=description,
            color=color,
            icon=icon,
            sort_order=sort_order,
            is_featured=is_featured,
        )
        async with self.tx.transaction():
            created = await self.tag_repository.create(tag)
        logger.info(f"Created tag {created.name} ({created.category.value})")
        return created

    async def get_tag_stats(self, limit: int = 20) -> list[CountBucket]:
        if limit < 1:
            raise ValidationError("limit must be positive")
        return await self.tag_repository.get_tag_stats(limit)

    async def cleanup_unused_tags(self) -> int:
        async with self.tx.transaction():
            return await self.tag_repository.cleanup_unused_tags()
