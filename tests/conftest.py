"""
pytest 配置和共享 fixtures。

测试分层：
- unit/: 单元测试（不依赖外部服务，仓储使用内存实现）

使用方法：
    # 运行所有测试
    uv run pytest

    # 只运行单元测试
    uv run pytest tests/unit/
"""

from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.domain.ports.health_checker import HealthChecker
from src.core.domain.ports.transaction import TransactionManager
from src.modules.classification.domain.entities import TagMatch
from src.modules.items.domain.entities import Item, Tag, TagCategory, TagSource
from src.modules.items.domain.queries import (
    AppliedTag,
    CountBucket,
    ItemStats,
    TrendingFilters,
)
from src.modules.items.domain.repository import ItemRepository, TagRepository
from src.modules.jobs.domain.entities import JobStatus, ProcessingJob
from src.modules.jobs.domain.exceptions import InvalidJobTransitionError
from src.modules.jobs.domain.repository import ProcessingJobRepository
from src.modules.sources.application.ingestion_service import IngestionOrchestrator
from src.modules.sources.domain.connector import RawRecord, SourceConnector
from src.modules.sources.domain.entities import DataSource, SourceType, Timespan
from src.modules.sources.domain.repository import DataSourceRepository


@pytest.fixture
def anyio_backend() -> str:
    """异步测试只跑 asyncio 后端。"""
    return "asyncio"


# ============================================
# 数据 Fixtures
# ============================================


def make_github_repo(repo_id: int = 1, **overrides: Any) -> dict[str, Any]:
    """构造一条 GitHub 搜索结果。"""
    repo = {
        "id": repo_id,
        "full_name": "acme/awesome-langchain-tools",
        "description": "A curated list of LangChain tools for building AI agents",
        "html_url": f"https://github.com/acme/repo-{repo_id}",
        "owner": {
            "login": "acme",
            "html_url": "https://github.com/acme",
            "avatar_url": "https://avatars.githubusercontent.com/u/1",
        },
        "stargazers_count": 1200,
        "forks_count": 100,
        "open_issues_count": 10,
        "language": "Python",
        "license": {"name": "MIT License"},
        "topics": ["langchain", "ai-agent"],
        "created_at": "2026-10-18T08:00:00Z",
    }
    repo.update(overrides)
    return repo


def make_record(repo_id: int = 1, **overrides: Any) -> RawRecord:
    repo = make_github_repo(repo_id, **overrides)
    return RawRecord(source_name="github", external_id=str(repo["id"]), data=repo)


def irrelevant_record(repo_id: int) -> RawRecord:
    return make_record(
        repo_id,
        full_name="acme/dotfiles",
        description="Personal shell configuration",
        topics=[],
        language="Shell",
        stargazers_count=50,
    )


@pytest.fixture
def github_repo() -> Callable[..., dict[str, Any]]:
    return make_github_repo


@pytest.fixture
def raw_record() -> Callable[..., RawRecord]:
    return make_record


# ============================================
# 内存仓储
# ============================================


class InMemoryDataSourceRepository(DataSourceRepository):
    def __init__(self, sources: Sequence[DataSource] = ()):
        self.sources: dict[str, DataSource] = {s.id: s for s in sources}
        self.updates = 0

    async def get_by_id(self, entity_id: str) -> DataSource | None:
        return self.sources.get(entity_id)

    async def get_by_name(self, name: str) -> DataSource | None:
        return next((s for s in self.sources.values() if s.name == name), None)

    async def list_active(self) -> list[DataSource]:
        return [s for s in self.sources.values() if s.is_active]

    async def create(self, entity: DataSource) -> DataSource:
        self.sources[entity.id] = entity
        return entity

    async def update(self, entity: DataSource) -> DataSource:
        self.sources[entity.id] = entity
        self.updates += 1
        return entity


class InMemoryItemRepository(ItemRepository):
    """按 (source_id, external_id) 存储条目；fail_for 中的 external_id 写入时抛错。"""

    def __init__(self, fail_for: Sequence[str] = ()):
        self.items: dict[str, Item] = {}
        self.fail_for = set(fail_for)
        self.created = 0
        self.updated = 0
        self.stale_calls: list[tuple[datetime, int]] = []

    async def get_by_id(self, entity_id: str) -> Item | None:
        item = self.items.get(entity_id)
        return item.model_copy(deep=True) if item else None

    async def find_by_source_and_external_id(
        self, source_id: str, external_id: str
    ) -> Item | None:
        for item in self.items.values():
            if item.source_id == source_id and item.external_id == external_id:
                return item.model_copy(deep=True)
        return None

    async def create(self, entity: Item) -> Item:
        if entity.external_id in self.fail_for:
            raise RuntimeError(f"write rejected for {entity.external_id}")
        self.items[entity.id] = entity.model_copy(deep=True)
        self.created += 1
        return entity.model_copy(deep=True)

    async def update(self, entity: Item) -> Item:
        if entity.external_id in self.fail_for:
            raise RuntimeError(f"write rejected for {entity.external_id}")
        self.items[entity.id] = entity.model_copy(deep=True)
        self.updated += 1
        return entity.model_copy(deep=True)

    async def delete_stale_items(self, cutoff: datetime, min_popularity: int) -> int:
        self.stale_calls.append((cutoff, min_popularity))
        stale = [
            item_id
            for item_id, item in self.items.items()
            if item.created_at < cutoff and item.popularity_score < min_popularity
        ]
        for item_id in stale:
            del self.items[item_id]
        return len(stale)

    async def list_trending(
        self, filters: TrendingFilters, since: datetime | None = None
    ) -> tuple[list[Item], int]:
        items = list(self.items.values())
        return items[filters.offset : filters.offset + filters.limit], len(items)

    async def search(self, query: str, limit: int = 20) -> list[Item]:
        needle = query.lower()
        return [i for i in self.items.values() if needle in i.title.lower()][:limit]

    async def get_stats(self, since: datetime, top_n: int = 10) -> ItemStats:
        return ItemStats(total=len(self.items))


class InMemoryTagRepository(TagRepository):
    """Links are kept per item as (tag_name, confidence, source)."""

    def __init__(self, tag_names: Sequence[str] = ()):
        self.tags: dict[str, Tag] = {
            name: Tag(name=name, slug=name, category=TagCategory.APPLICATION)
            for name in tag_names
        }
        self.links: dict[str, list[tuple[str, float, str]]] = {}
        self.replace_calls = 0

    async def get_by_id(self, entity_id: str) -> Tag | None:
        return next((t for t in self.tags.values() if t.id == entity_id), None)

    async def get_by_name(self, name: str) -> Tag | None:
        return self.tags.get(name)

    async def get_by_names(self, names: Sequence[str]) -> dict[str, Tag]:
        return {n: self.tags[n] for n in names if n in self.tags}

    async def list_all(self, featured_only: bool = False) -> list[Tag]:
        return [t for t in self.tags.values() if t.is_featured or not featured_only]

    async def create(self, entity: Tag) -> Tag:
        self.tags[entity.name] = entity
        return entity

    async def update(self, entity: Tag) -> Tag:
        self.tags[entity.name] = entity
        return entity

    async def replace_auto_tags(self, item_id: str, matches: Sequence[TagMatch]) -> int:
        self.replace_calls += 1
        self.links[item_id] = [
            (m.tag_name, m.confidence, m.source.value)
            for m in matches
            if m.tag_name in self.tags
        ]
        return len(self.links[item_id])

    async def get_item_tags(self, item_id: str) -> list[AppliedTag]:
        applied = [
            AppliedTag(tag=self.tags[name], confidence=confidence, source=TagSource(source))
            for name, confidence, source in self.links.get(item_id, [])
        ]
        return sorted(applied, key=lambda a: (-a.confidence, a.tag.name))

    async def get_tag_stats(self, limit: int = 20) -> list[CountBucket]:
        return []

    async def cleanup_unused_tags(self) -> int:
        return 0


class InMemoryJobRepository(ProcessingJobRepository):
    def __init__(self):
        self.jobs: dict[str, ProcessingJob] = {}

    async def get_by_id(self, entity_id: str) -> ProcessingJob | None:
        return self.jobs.get(entity_id)

    async def create(self, entity: ProcessingJob) -> ProcessingJob:
        self.jobs[entity.id] = entity.model_copy(deep=True)
        return entity

    async def update(self, entity: ProcessingJob) -> ProcessingJob:
        stored = self.jobs[entity.id]
        if stored.status.is_terminal:
            raise InvalidJobTransitionError(entity.id, stored.status.value, "update")
        self.jobs[entity.id] = entity.model_copy(deep=True)
        return entity

    async def list_by_source(
        self,
        source_id: str,
        status: JobStatus | None = None,
        limit: int = 20,
    ) -> list[ProcessingJob]:
        jobs = [
            j
            for j in self.jobs.values()
            if j.source_id == source_id and (status is None or j.status == status)
        ]
        return jobs[:limit]


# ============================================
# 连接器与端口替身
# ============================================


class FakeConnector(SourceConnector):
    source_name = "github"

    def __init__(
        self,
        batches: list[list[RawRecord]] | None = None,
        error: Exception | None = None,
        reachable: bool = True,
        valid: bool = True,
    ):
        self.batches = batches or []
        self.error = error
        self.reachable = reachable
        self.valid = valid
        self.closed = False
        self.fetch_calls = 0

    async def test_connection(self) -> bool:
        return self.reachable

    async def fetch_by_query(self, query: str, page_size: int) -> list[RawRecord]:
        return []

    async def fetch_window_batches(self, timespan: Timespan) -> list[list[RawRecord]]:
        self.fetch_calls += 1
        if self.error is not None:
            raise self.error
        return self.batches

    def validate_config(self) -> tuple[bool, str | None]:
        return (True, None) if self.valid else (False, "base_url must be an HTTP(S) URL")

    async def aclose(self) -> None:
        self.closed = True


class FakeConnectorFactory:
    def __init__(self, connector: FakeConnector):
        self.connector = connector

    def create(self, source: DataSource) -> SourceConnector:
        return self.connector


class StaticHealthChecker(HealthChecker):
    def __init__(self, healthy: bool = True):
        self.healthy = healthy

    async def check_health(self) -> dict[str, Any]:
        return {"database": {"status": "ok" if self.healthy else "error"}}

    async def is_healthy(self) -> bool:
        return self.healthy


class RecordingTransactionManager(TransactionManager):
    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


class IngestionHarness:
    """Orchestrator wired to in-memory collaborators."""

    def __init__(
        self,
        batches: list[list[RawRecord]] | None = None,
        *,
        fetch_error: Exception | None = None,
        reachable: bool = True,
        healthy: bool = True,
        source_active: bool = True,
        with_source: bool = True,
        fail_for: Sequence[str] = (),
        tag_names: Sequence[str] = ("langchain", "agent-tools", "chatbot"),
    ):
        self.source = DataSource(
            name="github",
            type=SourceType.REPOSITORY,
            display_name="GitHub",
            base_url="https://api.github.com",
            is_active=source_active,
        )
        self.sources = InMemoryDataSourceRepository([self.source] if with_source else [])
        self.items = InMemoryItemRepository(fail_for=fail_for)
        self.tags = InMemoryTagRepository(tag_names)
        self.jobs = InMemoryJobRepository()
        self.connector = FakeConnector(batches, error=fetch_error, reachable=reachable)
        self.tx = RecordingTransactionManager()
        self.orchestrator = IngestionOrchestrator(
            source_repository=self.sources,
            item_repository=self.items,
            tag_repository=self.tags,
            job_repository=self.jobs,
            connector_factory=FakeConnectorFactory(self.connector),
            health_checker=StaticHealthChecker(healthy),
            transaction_manager=self.tx,
        )


@pytest.fixture
def ingestion_harness() -> Callable[..., IngestionHarness]:
    return IngestionHarness


@pytest.fixture
def irrelevant() -> Callable[[int], RawRecord]:
    return irrelevant_record


# ============================================
# Redis Fixtures
# ============================================


@pytest.fixture
def mock_redis_client() -> MagicMock:
    """Mock Redis 客户端（同步锁默认可获取）。"""
    from src.core.infrastructure.redis.client import RedisClient

    client = MagicMock(spec=RedisClient)
    client.ensure_available = MagicMock()
    client.ensure_available.return_value.__aenter__ = AsyncMock(return_value=client)
    client.ensure_available.return_value.__aexit__ = AsyncMock(return_value=False)
    client.acquire_sync_lock = AsyncMock(return_value=True)
    client.release_sync_lock = AsyncMock(return_value=True)
    client.set_json = AsyncMock(return_value=True)
    client.get_json = AsyncMock(return_value=None)
    client.close = AsyncMock()
    return client
