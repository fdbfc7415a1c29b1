"""Data source repository implementation."""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from src.core.domain.events import EventBus
from src.core.infrastructure.database.event_aware_repository import EventAwareRepository
from src.modules.sources.domain.entities import DataSource
from src.modules.sources.domain.exceptions import SourceNotFoundError
from src.modules.sources.domain.repository import DataSourceRepository
from src.modules.sources.infrastructure.mappers import DataSourceMapper
from src.modules.sources.infrastructure.models import DataSourceModel


class PostgreSQLDataSourceRepository(
    EventAwareRepository[DataSource], DataSourceRepository
):
    """PostgreSQL data source repository implementation."""

    def __init__(
        self,
        session: AsyncSession,
        mapper: DataSourceMapper,
        event_publisher: EventBus,
    ):
        super().__init__(event_publisher)
        self.session = session
        self.mapper = mapper
        self.logger = logger

    async def get_by_id(self, source_id: str) -> DataSource | None:
        statement = select(DataSourceModel).where(
            DataSourceModel.id == source_id,
            col(DataSourceModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def get_by_name(self, name: str) -> DataSource | None:
        statement = select(DataSourceModel).where(
            DataSourceModel.name == name,
            col(DataSourceModel.is_deleted).is_(False),
        )
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def list_active(self) -> list[DataSource]:
        statement = (
            select(DataSourceModel)
            .where(
                col(DataSourceModel.is_active).is_(True),
                col(DataSourceModel.is_deleted).is_(False),
            )
            .order_by(col(DataSourceModel.name))
        )
        result = await self.session.execute(statement)
        return self.mapper.to_domain_list(list(result.scalars().all()))

    async def create(self, source: DataSource) -> DataSource:
        model = self.mapper.to_model(source)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        await self._publish_events_from_entity(source)
        return self.mapper.to_domain(model)

    async def update(self, source: DataSource) -> DataSource:
        statement = select(DataSourceModel).where(DataSourceModel.id == source.id)
        result = await self.session.execute(statement)
        existing = result.scalar_one_or_none()
        if not existing:
            raise SourceNotFoundError(source.name)

        existing.type = source.type
        existing.display_name = source.display_name
        existing.base_url = source.base_url
        existing.api_config = source.api_config
        existing.update_frequency_hours = source.update_frequency_hours
        existing.is_active = source.is_active
        existing.last_updated = source.last_updated
        existing.updated_at = source.updated_at
        existing.is_deleted = source.is_deleted

        self.session.add(existing)
        await self.session.flush()
        await self.session.refresh(existing)
        await self._publish_events_from_entity(source)
        return self.mapper.to_domain(existing)
