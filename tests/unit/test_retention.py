"""保留清理测试。"""

from datetime import UTC, datetime, timedelta

import pytest

from src.core.domain.exceptions import ValidationError
from src.modules.items.application.retention_service import RetentionSweeper
from src.modules.items.domain.entities import Item
from tests.conftest import InMemoryItemRepository, RecordingTransactionManager

pytestmark = pytest.mark.anyio

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _item(external_id: str, age_days: int, popularity: int) -> Item:
    return Item(
        source_id="src-1",
        external_id=external_id,
        title=f"acme/{external_id}",
        url=f"https://github.com/acme/{external_id}",
        popularity_score=popularity,
        created_at=NOW - timedelta(days=age_days),
    )


@pytest.fixture
def repository() -> InMemoryItemRepository:
    repo = InMemoryItemRepository()
    for item in (
        _item("old-cold", 40, 2),
        _item("old-hot", 40, 60),
        _item("new-cold", 3, 1),
        _item("old-threshold", 40, 5),
    ):
        repo.items[item.id] = item
    return repo


class TestRetentionSweeper:
    async def test_deletes_only_old_and_unpopular(self, repository):
        tx = RecordingTransactionManager()
        sweeper = RetentionSweeper(repository, tx)

        deleted = await sweeper.sweep(now=NOW)

        assert deleted == 1
        remaining = {item.external_id for item in repository.items.values()}
        assert remaining == {"old-hot", "new-cold", "old-threshold"}
        assert tx.commits == 1

    async def test_default_cutoff(self, repository):
        await RetentionSweeper(repository).sweep(now=NOW)

        assert repository.stale_calls == [(NOW - timedelta(days=30), 5)]

    async def test_custom_thresholds(self, repository):
        deleted = await RetentionSweeper(repository).sweep(
            now=NOW, max_age_days=1, min_popularity=100
        )
        assert deleted == 4

    @pytest.mark.parametrize(
        ("max_age_days", "min_popularity"),
        [(-1, 5), (30, -1), (30, 101)],
    )
    async def test_invalid_arguments(self, repository, max_age_days, min_popularity):
        with pytest.raises(ValidationError):
            await RetentionSweeper(repository).sweep(
                now=NOW, max_age_days=max_age_days, min_popularity=min_popularity
            )
        assert repository.stale_calls == []
