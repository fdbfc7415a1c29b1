"""Source module dependencies.

Builders take an open AsyncSession; callers own the session lifecycle.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.domain.events import get_event_bus
from src.core.infrastructure.adapters.health_checker_adapter import (
    DatabaseHealthCheckerAdapter,
)
from src.core.infrastructure.database.transaction import SQLAlchemyTransactionManager
from src.modules.items.infrastructure.dependencies import (
    build_item_repository,
    build_tag_repository,
)
from src.modules.jobs.infrastructure.mappers import ProcessingJobMapper
from src.modules.jobs.infrastructure.repositories import (
    PostgreSQLProcessingJobRepository,
)
from src.modules.sources.application.ingestion_service import IngestionOrchestrator
from src.modules.sources.infrastructure.connectors.factory import (
    InfrastructureConnectorFactory,
)
from src.modules.sources.infrastructure.mappers import DataSourceMapper
from src.modules.sources.infrastructure.repositories import (
    PostgreSQLDataSourceRepository,
)


def build_source_repository(session: AsyncSession) -> PostgreSQLDataSourceRepository:
    return PostgreSQLDataSourceRepository(session, DataSourceMapper(), get_event_bus())


def build_job_repository(session: AsyncSession) -> PostgreSQLProcessingJobRepository:
    return PostgreSQLProcessingJobRepository(
        session, ProcessingJobMapper(), get_event_bus()
    )


def build_ingestion_orchestrator(session: AsyncSession) -> IngestionOrchestrator:
    return IngestionOrchestrator(
        source_repository=build_source_repository(session),
        item_repository=build_item_repository(session),
        tag_repository=build_tag_repository(session),
        job_repository=build_job_repository(session),
        connector_factory=InfrastructureConnectorFactory(),
        health_checker=DatabaseHealthCheckerAdapter(),
        transaction_manager=SQLAlchemyTransactionManager(session),
    )
