"""Items module dependencies.

Builders take an open AsyncSession; callers own the session lifecycle.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.domain.events import get_event_bus
from src.core.infrastructure.database.transaction import SQLAlchemyTransactionManager
from src.modules.items.application.query_service import ItemQueryService
from src.modules.items.application.retention_service import RetentionSweeper
from src.modules.items.application.tag_service import TagService
from src.modules.items.infrastructure.mappers import ItemMapper, TagMapper
from src.modules.items.infrastructure.repositories import (
    PostgreSQLItemRepository,
    PostgreSQLTagRepository,
)


def build_item_repository(session: AsyncSession) -> PostgreSQLItemRepository:
    return PostgreSQLItemRepository(session, ItemMapper(), get_event_bus())


def build_tag_repository(session: AsyncSession) -> PostgreSQLTagRepository:
    return PostgreSQLTagRepository(session, TagMapper(), get_event_bus())


def build_retention_sweeper(session: AsyncSession) -> RetentionSweeper:
    return RetentionSweeper(
        item_repository=build_item_repository(session),
        transaction_manager=SQLAlchemyTransactionManager(session),
    )


def build_tag_service(session: AsyncSession) -> TagService:
    return TagService(
        tag_repository=build_tag_repository(session),
        transaction_manager=SQLAlchemyTransactionManager(session),
    )


def build_item_query_service(session: AsyncSession) -> ItemQueryService:
    return ItemQueryService(
        item_repository=build_item_repository(session),
        tag_repository=build_tag_repository(session),
    )
