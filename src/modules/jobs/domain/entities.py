"""Processing job aggregate."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field

from src.core.domain.aggregate_root import AggregateRoot
from src.core.domain.base_entity import utc_now
from src.modules.jobs.domain.events import (
    JobCompletedEvent,
    JobFailedEvent,
    JobStartedEvent,
)
from src.modules.jobs.domain.exceptions import InvalidJobTransitionError


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class JobType(str, Enum):
    FETCH = "fetch"
    CLASSIFY = "classify"
    UPDATE_METRICS = "update_metrics"
    CLEANUP = "cleanup"


class ProcessingJob(AggregateRoot):
    """One auditable execution of the ingestion pipeline against one source.

    pending -> running -> completed | failed；终态之后不允许任何修改。
    """

    source_id: str = Field(..., description="数据源ID")
    job_type: JobType = Field(default=JobType.FETCH, description="任务类型")
    status: JobStatus = Field(default=JobStatus.PENDING, description="状态")
    started_at: datetime | None = Field(default=None, description="开始时间")
    completed_at: datetime | None = Field(default=None, description="结束时间")
    items_processed: int = Field(default=0, ge=0, description="成功处理数")
    error_message: str | None = Field(default=None, description="错误信息")
    metadata: dict[str, Any] = Field(default_factory=dict, description="运行元数据")
    priority: int = Field(default=0, description="优先级")
    retry_count: int = Field(default=0, ge=0, description="重试次数")
    max_retries: int = Field(default=3, ge=0, description="最大重试次数")

    def start(self) -> None:
        self._require(JobStatus.PENDING, "start")
        self.status = JobStatus.RUNNING
        self.started_at = utc_now()
        self._update_timestamp()
        self.add_domain_event(
            JobStartedEvent(job_id=self.id, source_id=self.source_id)
        )

    def complete(self, items_processed: int, metadata: dict[str, Any]) -> None:
        self._require(JobStatus.RUNNING, "complete")
        self.status = JobStatus.COMPLETED
        self.items_processed = items_processed
        self.metadata = metadata
        self.completed_at = utc_now()
        self._update_timestamp()
        self.add_domain_event(
            JobCompletedEvent(
                job_id=self.id,
                source_id=self.source_id,
                items_processed=items_processed,
            )
        )

    def fail(self, error_message: str) -> None:
        # 任意非终态都可以失败（pending 阶段的异常同样需要留痕）
        if self.status.is_terminal:
            raise InvalidJobTransitionError(self.id, self.status.value, "fail")
        self.status = JobStatus.FAILED
        self.error_message = error_message
        self.completed_at = utc_now()
        self._update_timestamp()
        self.add_domain_event(
            JobFailedEvent(
                job_id=self.id,
                source_id=self.source_id,
                error_message=error_message,
            )
        )

    def can_retry(self) -> bool:
        return self.status == JobStatus.FAILED and self.retry_count < self.max_retries

    def _require(self, expected: JobStatus, action: str) -> None:
        if self.status != expected:
            raise InvalidJobTransitionError(self.id, self.status.value, action)
