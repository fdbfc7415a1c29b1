"""ProcessingJob 生命周期测试。"""

import pytest

from src.modules.jobs.domain.entities import JobStatus, ProcessingJob
from src.modules.jobs.domain.events import (
    JobCompletedEvent,
    JobFailedEvent,
    JobStartedEvent,
)
from src.modules.jobs.domain.exceptions import InvalidJobTransitionError


@pytest.fixture
def job() -> ProcessingJob:
    return ProcessingJob(source_id="src-1")


class TestTransitions:
    def test_happy_path(self, job):
        job.start()
        assert job.status == JobStatus.RUNNING
        assert job.started_at is not None

        job.complete(items_processed=3, metadata={"stats": {"fetched": 5}})

        assert job.status == JobStatus.COMPLETED
        assert job.items_processed == 3
        assert job.metadata["stats"]["fetched"] == 5
        assert job.completed_at >= job.started_at

    def test_events_are_recorded(self, job):
        job.start()
        job.complete(items_processed=1, metadata={})

        events = job.get_domain_events()
        assert [type(e) for e in events] == [JobStartedEvent, JobCompletedEvent]
        assert events[1].items_processed == 1

    def test_fail_from_running(self, job):
        job.start()
        job.fail("boom")

        assert job.status == JobStatus.FAILED
        assert job.error_message == "boom"
        assert isinstance(job.get_domain_events()[-1], JobFailedEvent)

    def test_fail_from_pending(self, job):
        job.fail("connectivity")
        assert job.status == JobStatus.FAILED

    def test_cannot_complete_pending_job(self, job):
        with pytest.raises(InvalidJobTransitionError):
            job.complete(items_processed=0, metadata={})

    @pytest.mark.parametrize("finish", ["complete", "fail"])
    def test_terminal_job_is_frozen(self, job, finish):
        job.start()
        if finish == "complete":
            job.complete(items_processed=0, metadata={})
        else:
            job.fail("boom")

        with pytest.raises(InvalidJobTransitionError):
            job.start()
        with pytest.raises(InvalidJobTransitionError):
            job.fail("again")
        with pytest.raises(InvalidJobTransitionError):
            job.complete(items_processed=1, metadata={})


class TestRetry:
    def test_only_failed_jobs_can_retry(self, job):
        assert job.can_retry() is False
        job.fail("boom")
        assert job.can_retry() is True

    def test_retry_budget(self):
        job = ProcessingJob(source_id="src-1", retry_count=3, max_retries=3)
        job.fail("boom")
        assert job.can_retry() is False
