"""信息摄取编排服务。

一次同步运行的完整流程：
连通性检查 -> 创建任务 -> 分批抓取 -> 去重 -> 标准化 -> 分类 -> 逐条入库 -> 结束任务。

单条失败只计数不终止；抓取阶段失败会把任务标记为 failed 后向上抛出。
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from loguru import logger

from src.core.config import settings
from src.core.domain.base_entity import utc_now
from src.core.domain.ports.health_checker import HealthChecker
from src.core.domain.ports.transaction import (
    NullTransactionManager,
    TransactionManager,
)
from src.core.infrastructure.logging import BusinessEvents
from src.modules.classification.application.classifier import RelevanceClassifier
from src.modules.classification.domain.entities import Classification
from src.modules.items.domain.entities import Item, StandardItem
from src.modules.items.domain.popularity import PopularityScorer
from src.modules.items.domain.repository import ItemRepository, TagRepository
from src.modules.jobs.domain.entities import JobType, ProcessingJob
from src.modules.jobs.domain.repository import ProcessingJobRepository
from src.modules.sources.application.normalizer import ItemNormalizer
from src.modules.sources.domain.connector import (
    ConnectorFactory,
    RawRecord,
    SourceConnector,
    deduplicate_batches,
)
from src.modules.sources.domain.entities import DataSource, Timespan
from src.modules.sources.domain.exceptions import (
    ConnectivityError,
    InactiveSourceError,
    InvalidSourceConfigError,
    ItemProcessingError,
    SourceFetchError,
    SourceNotFoundError,
)
from src.modules.sources.domain.repository import DataSourceRepository


@dataclass(frozen=True)
class SyncOptions:
    """Parameters of one sync invocation."""

    timespan: Timespan = Timespan.DAILY
    dry_run: bool = False
    verbose: bool = False
    skip_cleanup: bool = False
    source_name: str = field(default_factory=lambda: settings.SYNC_SOURCE_NAME)


@dataclass
class SyncResult:
    """Aggregate counts of one sync run.

    errors > 0 表示降级成功，而不是运行失败。
    """

    fetched: int = 0
    processed: int = 0
    relevant: int = 0
    errors: int = 0
    job_id: str | None = None
    dry_run: bool = False
    duration_ms: int = 0
    retention: dict[str, int] | None = None

    @property
    def has_errors(self) -> bool:
        return self.errors > 0

    @property
    def relevance_rate(self) -> float:
        return self.relevant / self.fetched if self.fetched else 0.0

    def stats(self) -> dict[str, int]:
        return {
            "fetched": self.fetched,
            "processed": self.processed,
            "relevant": self.relevant,
            "errors": self.errors,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.stats(),
            "job_id": self.job_id,
            "dry_run": self.dry_run,
            "duration_ms": self.duration_ms,
            "retention": self.retention,
        }


class IngestionOrchestrator:
    """信息摄取编排服务。

    职责：
    - 运行前校验仓储与数据源连通性
    - 维护 ProcessingJob 生命周期
    - 逐条标准化、分类、计算热度并 upsert
    - 替换条目的自动标签

    同一数据源不能并发运行，调用方需要持有同步锁。
    """

    def __init__(
        self,
        source_repository: DataSourceRepository,
        item_repository: ItemRepository,
        tag_repository: TagRepository,
        job_repository: ProcessingJobRepository,
        connector_factory: ConnectorFactory,
        health_checker: HealthChecker,
        transaction_manager: TransactionManager | None = None,
        normalizer: ItemNormalizer | None = None,
        classifier: RelevanceClassifier | None = None,
        scorer: PopularityScorer | None = None,
    ):
        self.source_repository = source_repository
        self.item_repository = item_repository
        self.tag_repository = tag_repository
        self.job_repository = job_repository
        self.connector_factory = connector_factory
        self.health_checker = health_checker
        self.tx = transaction_manager or NullTransactionManager()
        self.normalizer = normalizer or ItemNormalizer.default()
        self.classifier = classifier or RelevanceClassifier()
        self.scorer = scorer or PopularityScorer()
        self.logger = logger.bind(service="IngestionOrchestrator")

    async def sync(self, options: SyncOptions) -> SyncResult:
        """Run one sync against options.source_name.

        Raises:
            ConnectivityError: 仓储或数据源不可达（此时不会创建任务）
            SourceNotFoundError: 数据源不存在或未启用
            SourceFetchError: 抓取阶段失败（任务已标记 failed）
        """
        start_time = time.time()
        result = SyncResult(dry_run=options.dry_run)

        source = await self._prepare_source(options.source_name)
        connector = self.connector_factory.create(source)
        try:
            await self._check_connector(connector, source)

            job = await self._start_job(source, options)
            result.job_id = None if options.dry_run else job.id

            records = await self._fetch(connector, source, job, options)
        finally:
            await connector.aclose()

        result.fetched = len(records)
        self.logger.info(
            f"Fetched {result.fetched} unique records from {source.name} "
            f"({options.timespan.value})"
        )

        seen_at = utc_now()
        for record in records:
            await self._process_record(record, source, options, result, seen_at)

        await self._complete_job(job, source, options, result)

        result.duration_ms = int((time.time() - start_time) * 1000)
        return result

    # ------------------------------------------------------------------
    # 运行前检查
    # ------------------------------------------------------------------

    async def _prepare_source(self, source_name: str) -> DataSource:
        if not await self.health_checker.is_healthy():
            raise ConnectivityError("Repository is unreachable")

        source = await self.source_repository.get_by_name(source_name)
        if source is None:
            raise SourceNotFoundError(source_name)
        if not source.is_active:
            raise InactiveSourceError(source_name)
        return source

    async def _check_connector(
        self, connector: SourceConnector, source: DataSource
    ) -> None:
        valid, error = connector.validate_config()
        if not valid:
            raise InvalidSourceConfigError(error or "unknown error")
        if not await connector.test_connection():
            raise ConnectivityError(f"Source '{source.name}' is unreachable")

    # ------------------------------------------------------------------
    # 任务生命周期
    # ------------------------------------------------------------------

    async def _start_job(self, source: DataSource, options: SyncOptions) -> ProcessingJob:
        job = ProcessingJob(
            source_id=source.id,
            job_type=JobType.FETCH,
            metadata={"timespan": options.timespan.value, "dry_run": options.dry_run},
        )

        if options.dry_run:
            # 演练模式只在内存中跟踪任务状态
            job.start()
        else:
            async with self.tx.transaction():
                job = await self.job_repository.create(job)
                job.start()
                job = await self.job_repository.update(job)

        BusinessEvents.sync_job_started(
            job_id=job.id,
            source_name=source.name,
            timespan=options.timespan.value,
            dry_run=options.dry_run,
        )
        return job

    async def _fetch(
        self,
        connector: SourceConnector,
        source: DataSource,
        job: ProcessingJob,
        options: SyncOptions,
    ) -> list[RawRecord]:
        try:
            batches = await connector.fetch_window_batches(options.timespan)
        except Exception as e:
            self.logger.exception(f"Fetch phase failed for {source.name}: {e}")
            await self._fail_job(job, str(e), options)
            BusinessEvents.source_fetch_failed(source_id=source.id, error=str(e))
            if isinstance(e, SourceFetchError):
                raise
            raise SourceFetchError(f"Fetch failed for '{source.name}': {e}") from e

        return deduplicate_batches(batches)

    async def _fail_job(
        self, job: ProcessingJob, message: str, options: SyncOptions
    ) -> None:
        job.fail(message)
        BusinessEvents.sync_job_failed(job_id=job.id, error=message)
        if options.dry_run:
            return
        # 标记失败本身出错时只记录日志，保证原始异常继续上抛
        try:
            async with self.tx.transaction():
                await self.job_repository.update(job)
        except Exception as update_error:
            self.logger.error(f"Failed to mark job {job.id} as failed: {update_error}")

    async def _complete_job(
        self,
        job: ProcessingJob,
        source: DataSource,
        options: SyncOptions,
        result: SyncResult,
    ) -> None:
        job.complete(
            items_processed=result.processed,
            metadata={
                "timespan": options.timespan.value,
                "dry_run": options.dry_run,
                "stats": result.stats(),
            },
        )

        if not options.dry_run:
            async with self.tx.transaction():
                await self.job_repository.update(job)
                source.mark_synced(job.completed_at)
                await self.source_repository.update(source)

        BusinessEvents.sync_job_completed(
            job_id=job.id,
            fetched=result.fetched,
            processed=result.processed,
            relevant=result.relevant,
            errors=result.errors,
            dry_run=options.dry_run,
        )

    # ------------------------------------------------------------------
    # 单条处理
    # ------------------------------------------------------------------

    async def _process_record(
        self,
        record: RawRecord,
        source: DataSource,
        options: SyncOptions,
        result: SyncResult,
        seen_at: datetime,
    ) -> None:
        try:
            standard = self.normalizer.normalize(record)
            classification = self.classifier.classify(standard)

            if not classification.is_relevant:
                BusinessEvents.item_skipped(
                    external_id=record.external_id,
                    relevance=classification.relevance_score,
                )
                return

            result.relevant += 1

            if not options.dry_run:
                async with self.tx.transaction():
                    await self._upsert(record, source, standard, classification, seen_at)

            result.processed += 1
            log = self.logger.info if options.verbose else self.logger.debug
            log(
                f"Processed {standard.title} -> {classification.primary_category} "
                f"({len(classification.suggested_tags)} tags)"
            )
        except Exception as e:
            result.errors += 1
            error = (
                e
                if isinstance(e, ItemProcessingError)
                else ItemProcessingError(record.external_id, str(e))
            )
            self.logger.warning(error.message)
            BusinessEvents.item_processing_failed(
                external_id=record.external_id,
                error=str(e),
                source_id=source.id,
            )

    async def _upsert(
        self,
        record: RawRecord,
        source: DataSource,
        standard: StandardItem,
        classification: Classification,
        seen_at: datetime,
    ) -> Item:
        candidate = self._build_item(record, source, standard, classification, seen_at)

        existing = await self.item_repository.find_by_source_and_external_id(
            source.id, record.external_id
        )
        if existing is None:
            saved = await self.item_repository.create(candidate)
            created = True
        else:
            existing.refresh_from(candidate)
            saved = await self.item_repository.update(existing)
            created = False

        await self.tag_repository.replace_auto_tags(
            saved.id, classification.suggested_tags
        )

        BusinessEvents.item_ingested(
            source_id=source.id,
            item_id=saved.id,
            url=saved.url,
            created=created,
            popularity=saved.popularity_score,
        )
        return saved

    def _build_item(
        self,
        record: RawRecord,
        source: DataSource,
        standard: StandardItem,
        classification: Classification,
        seen_at: datetime,
    ) -> Item:
        return Item(
            source_id=source.id,
            external_id=record.external_id,
            title=standard.title,
            description=standard.description,
            url=standard.url,
            author=standard.author,
            published_at=standard.published_at,
            popularity_score=self.scorer.score_metrics(standard.metrics),
            metrics=standard.metrics,
            primary_category=classification.primary_category,
            trending_date=seen_at,
            last_updated=seen_at,
            processed_metadata={
                "language": standard.language,
                "license": standard.license,
                "topics": list(standard.topics),
                "classification": {
                    "confidence": classification.confidence,
                    "relevance_score": classification.relevance_score,
                    "reasoning": classification.reasoning,
                    "primary_category": classification.primary_category,
                },
            },
            raw_data=standard.model_dump(mode="json"),
        )
