"""IngestionOrchestrator 单元测试（内存仓储 + 假连接器）。"""

import pytest

from src.modules.jobs.domain.entities import JobStatus
from src.modules.sources.application.ingestion_service import SyncOptions
from src.modules.sources.domain.entities import Timespan
from src.modules.sources.domain.exceptions import (
    ConnectivityError,
    InactiveSourceError,
    SourceFetchError,
    SourceNotFoundError,
)
from tests.conftest import irrelevant_record, make_record

pytestmark = pytest.mark.anyio


def _overlapping_batches():
    return [
        [make_record(1), make_record(2)],
        [make_record(1), irrelevant_record(3)],
    ]


class TestSyncHappyPath:
    async def test_counts_and_persistence(self, ingestion_harness):
        harness = ingestion_harness(_overlapping_batches())

        result = await harness.orchestrator.sync(SyncOptions())

        assert result.stats() == {"fetched": 3, "processed": 2, "relevant": 2, "errors": 0}
        assert result.has_errors is False
        assert result.relevance_rate == pytest.approx(2 / 3)
        assert len(harness.items.items) == 2
        assert harness.connector.closed is True

    async def test_job_completed_with_stats(self, ingestion_harness):
        harness = ingestion_harness(_overlapping_batches())

        result = await harness.orchestrator.sync(SyncOptions(timespan=Timespan.WEEKLY))

        job = harness.jobs.jobs[result.job_id]
        assert job.status == JobStatus.COMPLETED
        assert job.items_processed == 2
        assert job.metadata["timespan"] == "weekly"
        assert job.metadata["stats"]["fetched"] == 3
        assert harness.source.last_updated == job.completed_at

    async def test_item_fields(self, ingestion_harness):
        harness = ingestion_harness([[make_record(7)]])

        await harness.orchestrator.sync(SyncOptions())

        (item,) = harness.items.items.values()
        assert item.source_id == harness.source.id
        assert item.external_id == "7"
        assert item.popularity_score == 75
        assert item.primary_category == "framework"
        assert item.processed_metadata["language"] == "Python"
        assert item.processed_metadata["classification"]["relevance_score"] == pytest.approx(0.92)
        assert item.raw_data["title"] == "acme/awesome-langchain-tools"

    async def test_only_known_tags_are_linked(self, ingestion_harness):
        harness = ingestion_harness([[make_record(7)]])

        await harness.orchestrator.sync(SyncOptions())

        (item_id,) = harness.items.items
        assert [name for name, _, _ in harness.tags.links[item_id]] == [
            "langchain",
            "agent-tools",
        ]

    async def test_irrelevant_records_are_only_fetched(self, ingestion_harness):
        harness = ingestion_harness([[irrelevant_record(1), irrelevant_record(2)]])

        result = await harness.orchestrator.sync(SyncOptions())

        assert result.stats() == {"fetched": 2, "processed": 0, "relevant": 0, "errors": 0}
        assert harness.items.items == {}
        assert harness.tags.replace_calls == 0


class TestUpsert:
    async def test_second_run_updates_in_place(self, ingestion_harness):
        harness = ingestion_harness(_overlapping_batches())

        await harness.orchestrator.sync(SyncOptions())
        first_ids = set(harness.items.items)
        await harness.orchestrator.sync(SyncOptions())

        assert set(harness.items.items) == first_ids
        assert harness.items.created == 2
        assert harness.items.updated == 2
        assert len(harness.jobs.jobs) == 2

    async def test_resighting_refreshes_metrics(self, ingestion_harness):
        harness = ingestion_harness([[make_record(1)]])
        await harness.orchestrator.sync(SyncOptions())

        harness.connector.batches = [[make_record(1, stargazers_count=5000)]]
        await harness.orchestrator.sync(SyncOptions())

        (item,) = harness.items.items.values()
        assert item.metrics.primary == 5000
        assert item.popularity_score == 100


class TestPartialFailure:
    async def test_single_item_failure_does_not_stop_the_loop(self, ingestion_harness):
        records = [make_record(i) for i in range(1, 11)]
        harness = ingestion_harness([records], fail_for=["3"])

        result = await harness.orchestrator.sync(SyncOptions())

        assert result.stats() == {"fetched": 10, "processed": 9, "relevant": 10, "errors": 1}
        assert result.has_errors is True
        stored = sorted(int(item.external_id) for item in harness.items.items.values())
        assert stored == [1, 2, 4, 5, 6, 7, 8, 9, 10]
        assert harness.tx.rollbacks == 1
        job = harness.jobs.jobs[result.job_id]
        assert job.status == JobStatus.COMPLETED
        assert job.items_processed == 9

    async def test_malformed_record_is_counted_not_stored(self, ingestion_harness):
        malformed = make_record(2)
        data = dict(malformed.data)
        del data["html_url"]
        batches = [[make_record(1), malformed.model_copy(update={"data": data})]]
        harness = ingestion_harness(batches)

        result = await harness.orchestrator.sync(SyncOptions())

        assert result.errors == 1
        assert result.processed == 1
        assert [item.external_id for item in harness.items.items.values()] == ["1"]
        assert all(item.url for item in harness.items.items.values())


class TestFetchFailure:
    async def test_fetch_error_fails_job(self, ingestion_harness):
        harness = ingestion_harness(fetch_error=SourceFetchError("rate limited"))

        with pytest.raises(SourceFetchError, match="rate limited"):
            await harness.orchestrator.sync(SyncOptions())

        (job,) = harness.jobs.jobs.values()
        assert job.status == JobStatus.FAILED
        assert job.error_message == "rate limited"
        assert harness.connector.closed is True
        assert harness.items.items == {}

    async def test_unexpected_error_is_wrapped(self, ingestion_harness):
        harness = ingestion_harness(fetch_error=RuntimeError("socket closed"))

        with pytest.raises(SourceFetchError) as exc_info:
            await harness.orchestrator.sync(SyncOptions())

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert harness.source.last_updated is None


class TestPreconditions:
    async def test_unhealthy_repository_aborts_before_job(self, ingestion_harness):
        harness = ingestion_harness([[make_record(1)]], healthy=False)

        with pytest.raises(ConnectivityError):
            await harness.orchestrator.sync(SyncOptions())

        assert harness.jobs.jobs == {}
        assert harness.connector.fetch_calls == 0

    async def test_unreachable_source_aborts_before_job(self, ingestion_harness):
        harness = ingestion_harness([[make_record(1)]], reachable=False)

        with pytest.raises(ConnectivityError):
            await harness.orchestrator.sync(SyncOptions())

        assert harness.jobs.jobs == {}
        assert harness.connector.closed is True

    async def test_missing_source(self, ingestion_harness):
        harness = ingestion_harness(with_source=False)

        with pytest.raises(SourceNotFoundError):
            await harness.orchestrator.sync(SyncOptions())

    async def test_inactive_source(self, ingestion_harness):
        harness = ingestion_harness(source_active=False)

        with pytest.raises(InactiveSourceError):
            await harness.orchestrator.sync(SyncOptions())


class TestDryRun:
    async def test_dry_run_writes_nothing(self, ingestion_harness):
        harness = ingestion_harness(_overlapping_batches())

        result = await harness.orchestrator.sync(SyncOptions(dry_run=True))

        assert result.dry_run is True
        assert result.job_id is None
        assert result.relevant == 2
        assert harness.items.items == {}
        assert harness.jobs.jobs == {}
        assert harness.tags.replace_calls == 0
        assert harness.tx.commits == 0
        assert harness.source.last_updated is None
