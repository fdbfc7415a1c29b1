"""Processing job repository interface."""

from abc import abstractmethod

from src.core.domain.repository import BaseRepository
from src.modules.jobs.domain.entities import JobStatus, ProcessingJob


class ProcessingJobRepository(BaseRepository[ProcessingJob]):
    """Processing job repository interface.

    update() 只接受非终态记录的变更；终态记录的任何写入都是错误。
    """

    @abstractmethod
    async def list_by_source(
        self,
        source_id: str,
        status: JobStatus | None = None,
        limit: int = 20,
    ) -> list[ProcessingJob]:
        """List a source's jobs, newest first."""
        pass
