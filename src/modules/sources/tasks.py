"""数据源同步 Celery 任务。

包含：
- sync_trending_source: 持锁执行一次趋势同步，并在同一把锁内执行保留清理
- run_sync_pipeline: 任务与命令行脚本共用的同步流程
"""

from typing import Any

from celery import shared_task
from loguru import logger
from redis.exceptions import RedisError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.domain.base_entity import utc_now
from src.core.infrastructure.celery.queues import Queues
from src.core.infrastructure.celery.retry import DEFAULT_RETRYABLE_EXCEPTIONS
from src.core.infrastructure.logging import BusinessEvents
from src.core.infrastructure.redis import RedisClient, RedisKeys, RedisUnavailableError
from src.modules.sources.application.ingestion_service import SyncOptions, SyncResult
from src.modules.sources.domain.entities import Timespan
from src.modules.sources.domain.exceptions import ConnectivityError

LAST_RESULT_TTL_SEC = 7 * 24 * 3600


@shared_task(
    name="src.modules.sources.tasks.sync_trending_source",
    bind=True,
    max_retries=settings.CELERY_TASK_MAX_RETRIES,
    default_retry_delay=settings.CELERY_TASK_DEFAULT_RETRY_DELAY,
    autoretry_for=DEFAULT_RETRYABLE_EXCEPTIONS,
    retry_backoff=True,
    retry_backoff_max=600,
    queue=Queues.INGEST,
)
def sync_trending_source(
    _self: object,
    timespan: str = settings.SYNC_DEFAULT_TIMESPAN,
    dry_run: bool = False,
    verbose: bool = False,
    skip_cleanup: bool = False,
    source_name: str | None = None,
) -> dict[str, Any] | None:
    """同步一个数据源的趋势条目。

    锁被占用时直接跳过并返回 None。
    """
    import asyncio

    options = SyncOptions(
        timespan=Timespan(timespan),
        dry_run=dry_run,
        verbose=verbose,
        skip_cleanup=skip_cleanup,
        source_name=source_name or settings.SYNC_SOURCE_NAME,
    )
    result = asyncio.run(run_sync_pipeline(options))
    return result.to_dict() if result is not None else None


async def run_sync_pipeline(
    options: SyncOptions,
    redis_client: RedisClient | None = None,
) -> SyncResult | None:
    """Take the per-source lock, run one orchestrated sync, then sweep retention.

    The sweep shares the lock with the sync so it never overlaps an ingestion
    loop; it is skipped for dry runs, when skip_cleanup is set, and when the
    run proceeds without a lock.

    Returns None when another run holds the lock.

    Raises:
        ConnectivityError: 锁存储不可用且 SYNC_LOCK_REQUIRED 为 True
    """
    from src.core.infrastructure.database.session import get_async_session
    from src.modules.sources.infrastructure.dependencies import (
        build_ingestion_orchestrator,
    )

    redis_client = redis_client or RedisClient()
    source_name = options.source_name
    lock_acquired = False
    redis_available = True

    try:
        try:
            async with redis_client.ensure_available(
                timeout=settings.REDIS_CLIENT_TIMEOUT_SEC,
                close_on_exit=False,
            ):
                lock_acquired = await redis_client.acquire_sync_lock(
                    source_name,
                    ttl=settings.SYNC_LOCK_TTL_SEC,
                )
        except (RedisUnavailableError, RedisError) as e:
            redis_available = False
            if settings.SYNC_LOCK_REQUIRED:
                raise ConnectivityError(
                    f"Sync lock store is unavailable for '{source_name}': {e}"
                ) from e
            # 允许降级时无锁运行
            logger.warning(f"Running sync for {source_name} without lock: {e}")
            BusinessEvents.feature_degraded(
                feature="sync_lock",
                reason=str(e),
                source_name=source_name,
            )

        if redis_available and not lock_acquired:
            logger.info(f"Skipping sync for {source_name}: lock is held")
            BusinessEvents.sync_skipped(source_name=source_name, reason="lock_held")
            return None

        async with get_async_session() as session:
            orchestrator = build_ingestion_orchestrator(session)
            result = await orchestrator.sync(options)

            cleanup = not options.dry_run and not options.skip_cleanup
            if cleanup and lock_acquired:
                result.retention = await run_retention_pass(session)
            elif cleanup:
                logger.warning(f"Skipping retention for {source_name}: no sync lock held")

        if redis_available:
            await _store_last_result(redis_client, options, result)

        return result

    finally:
        if redis_available and lock_acquired:
            try:
                await redis_client.release_sync_lock(source_name)
            except RedisError as e:
                logger.warning(f"Failed to release sync lock for {source_name}: {e}")
        await redis_client.close()


async def run_retention_pass(session: AsyncSession) -> dict[str, int]:
    """Delete stale items, then prune tags left without associations.

    调用方必须持有同步锁。
    """
    from src.modules.items.infrastructure.dependencies import (
        build_retention_sweeper,
        build_tag_service,
    )

    deleted_items = await build_retention_sweeper(session).sweep()
    deleted_tags = await build_tag_service(session).cleanup_unused_tags()

    logger.info(
        f"Retention pass finished: items={deleted_items}, tags={deleted_tags}"
    )
    return {"deleted_items": deleted_items, "deleted_tags": deleted_tags}


async def _store_last_result(
    redis_client: RedisClient,
    options: SyncOptions,
    result: SyncResult,
) -> None:
    payload = {
        **result.to_dict(),
        "timespan": options.timespan.value,
        "finished_at": utc_now().isoformat(),
    }
    try:
        await redis_client.set_json(
            RedisKeys.sync_last_result(options.source_name),
            payload,
            ex=LAST_RESULT_TTL_SEC,
        )
    except RedisError as e:
        logger.warning(f"Failed to store last sync result: {e}")
