"""Processing job exceptions."""

from src.core.domain.exceptions import DomainException, EntityNotFoundError


class JobNotFoundError(EntityNotFoundError):
    def __init__(self, job_id: str | None = None):
        super().__init__("ProcessingJob", job_id)


class InvalidJobTransitionError(DomainException):
    """Raised on an illegal lifecycle transition, including any change to a finished job."""

    error_code = "INVALID_JOB_TRANSITION"

    def __init__(self, job_id: str, status: str, action: str):
        super().__init__(f"Cannot {action} job '{job_id}' in status '{status}'")
