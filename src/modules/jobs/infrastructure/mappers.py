"""Processing job entity-model mapper."""

from src.core.infrastructure.database.mapper import BaseMapper
from src.modules.jobs.domain.entities import ProcessingJob
from src.modules.jobs.infrastructure.models import ProcessingJobModel


class ProcessingJobMapper(BaseMapper[ProcessingJob, ProcessingJobModel]):
    def to_domain(self, model: ProcessingJobModel) -> ProcessingJob:
        return ProcessingJob(
            id=model.id,
            source_id=model.source_id,
            job_type=model.job_type,
            status=model.status,
            started_at=model.started_at,
            completed_at=model.completed_at,
            items_processed=model.items_processed,
            error_message=model.error_message,
            metadata=model.job_metadata or {},
            priority=model.priority,
            retry_count=model.retry_count,
            max_retries=model.max_retries,
            created_at=model.created_at,
            updated_at=model.updated_at,
            is_deleted=model.is_deleted,
        )

    def to_model(self, entity: ProcessingJob) -> ProcessingJobModel:
        return ProcessingJobModel(
            id=entity.id,
            source_id=entity.source_id,
            job_type=entity.job_type,
            status=entity.status,
            started_at=entity.started_at,
            completed_at=entity.completed_at,
            items_processed=entity.items_processed,
            error_message=entity.error_message,
            job_metadata=entity.metadata,
            priority=entity.priority,
            retry_count=entity.retry_count,
            max_retries=entity.max_retries,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            is_deleted=entity.is_deleted,
        )
