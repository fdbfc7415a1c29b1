"""Processing job domain events."""

from pydantic import Field

from src.core.domain.events import DomainEvent


class JobStartedEvent(DomainEvent):
    job_id: str = Field(..., description="Job ID")
    source_id: str = Field(..., description="数据源ID")


class JobCompletedEvent(DomainEvent):
    job_id: str = Field(..., description="Job ID")
    source_id: str = Field(..., description="数据源ID")
    items_processed: int = Field(..., description="成功处理数")


class JobFailedEvent(DomainEvent):
    job_id: str = Field(..., description="Job ID")
    source_id: str = Field(..., description="数据源ID")
    error_message: str = Field(..., description="错误信息")
