"""Processing job database models."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Column, DateTime, Enum, Text
from sqlmodel import Field

from src.core.infrastructure.database.base_model import BaseModel
from src.modules.jobs.domain.entities import JobStatus, JobType


class ProcessingJobModel(BaseModel, table=True):
    """Processing job database model."""

    __tablename__ = "processing_jobs"

    source_id: str = Field(nullable=False, index=True)
    job_type: JobType = Field(
        default=JobType.FETCH,
        sa_type=Enum(
            JobType,
            name="jobtype",
            values_callable=lambda e: [i.value for i in e],
            create_constraint=False,
        ),
        nullable=False,
    )
    status: JobStatus = Field(
        default=JobStatus.PENDING,
        sa_type=Enum(
            JobStatus,
            name="jobstatus",
            values_callable=lambda e: [i.value for i in e],
            create_constraint=False,
        ),
        nullable=False,
        index=True,
    )
    started_at: datetime | None = Field(
        default=None, sa_type=DateTime(timezone=True), nullable=True
    )
    completed_at: datetime | None = Field(
        default=None, sa_type=DateTime(timezone=True), nullable=True
    )
    items_processed: int = Field(default=0, nullable=False)
    error_message: str | None = Field(default=None, sa_type=Text, nullable=True)
    # SQLAlchemy 声明式基类保留了 metadata 属性名
    job_metadata: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column("metadata", JSON, nullable=False),
    )
    priority: int = Field(default=0, nullable=False)
    retry_count: int = Field(default=0, nullable=False)
    max_retries: int = Field(default=3, nullable=False)
