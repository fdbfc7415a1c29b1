"""Processing job repository implementation."""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from src.core.domain.events import EventBus
from src.core.infrastructure.database.event_aware_repository import EventAwareRepository
from src.modules.jobs.domain.entities import JobStatus, ProcessingJob
from src.modules.jobs.domain.exceptions import (
    InvalidJobTransitionError,
    JobNotFoundError,
)
from src.modules.jobs.domain.repository import ProcessingJobRepository
from src.modules.jobs.infrastructure.mappers import ProcessingJobMapper
from src.modules.jobs.infrastructure.models import ProcessingJobModel


class PostgreSQLProcessingJobRepository(
    EventAwareRepository[ProcessingJob], ProcessingJobRepository
):
    """PostgreSQL processing job repository implementation."""

    def __init__(
        self,
        session: AsyncSession,
        mapper: ProcessingJobMapper,
        event_publisher: EventBus,
    ):
        super().__init__(event_publisher)
        self.session = session
        self.mapper = mapper
        self.logger = logger

    async def get_by_id(self, job_id: str) -> ProcessingJob | None:
        statement = select(ProcessingJobModel).where(ProcessingJobModel.id == job_id)
        result = await self.session.execute(statement)
        model = result.scalar_one_or_none()
        return self.mapper.to_domain(model) if model else None

    async def create(self, job: ProcessingJob) -> ProcessingJob:
        model = self.mapper.to_model(job)
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        await self._publish_events_from_entity(job)
        return self.mapper.to_domain(model)

    async def update(self, job: ProcessingJob) -> ProcessingJob:
        statement = select(ProcessingJobModel).where(ProcessingJobModel.id == job.id)
        result = await self.session.execute(statement)
        existing = result.scalar_one_or_none()
        if not existing:
            raise JobNotFoundError(job.id)
        # 已落库的终态记录只追加，不再改写
        if existing.status.is_terminal:
            raise InvalidJobTransitionError(job.id, existing.status.value, "update")

        existing.status = job.status
        existing.started_at = job.started_at
        existing.completed_at = job.completed_at
        existing.items_processed = job.items_processed
        existing.error_message = job.error_message
        existing.job_metadata = job.metadata
        existing.retry_count = job.retry_count
        existing.updated_at = job.updated_at

        self.session.add(existing)
        await self.session.flush()
        await self.session.refresh(existing)
        await self._publish_events_from_entity(job)
        return self.mapper.to_domain(existing)

    async def list_by_source(
        self,
        source_id: str,
        status: JobStatus | None = None,
        limit: int = 20,
    ) -> list[ProcessingJob]:
        statement = select(ProcessingJobModel).where(
            ProcessingJobModel.source_id == source_id
        )
        if status is not None:
            statement = statement.where(ProcessingJobModel.status == status)
        statement = statement.order_by(
            col(ProcessingJobModel.created_at).desc()
        ).limit(limit)

        result = await self.session.execute(statement)
        return self.mapper.to_domain_list(list(result.scalars().all()))
