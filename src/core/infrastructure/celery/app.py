"""Celery 应用配置。

- 使用 JSON 序列化
- 按功能拆分队列
- 支持任务重试与退避
- 配置定时任务（Beat）
"""

from celery import Celery
from celery.signals import worker_process_init
from kombu import Exchange, Queue

from src.core.config import settings
from src.core.infrastructure.celery.queues import TASK_ROUTES, Queues
from src.core.infrastructure.logging import setup_logging

celery_app = Celery("trendscope")

celery_app.conf.update(
    broker_url=settings.celery_broker_url,
    result_backend=settings.celery_result_backend,
    task_serializer=settings.CELERY_TASK_SERIALIZER,
    result_serializer=settings.CELERY_RESULT_SERIALIZER,
    accept_content=settings.CELERY_ACCEPT_CONTENT,
    timezone=settings.TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    # 一次同步包含数十次搜索请求和固定间隔，超时需要留足余量
    task_time_limit=settings.SYNC_LOCK_TTL_SEC,
    task_soft_time_limit=settings.SYNC_LOCK_TTL_SEC - 60,
    task_default_retry_delay=settings.CELERY_TASK_DEFAULT_RETRY_DELAY,
    task_max_retries=settings.CELERY_TASK_MAX_RETRIES,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    result_expires=3600,
    worker_prefetch_multiplier=1,
    worker_concurrency=1,
)

default_exchange = Exchange("default", type="direct")
celery_app.conf.task_queues = (
    Queue(Queues.INGEST, default_exchange, routing_key=Queues.INGEST),
)

celery_app.conf.task_routes = TASK_ROUTES
celery_app.conf.task_default_queue = Queues.INGEST

# 这里只定义调度配置，具体任务在各模块的 tasks.py 中注册
celery_app.conf.beat_schedule = {
    "sync-trending-daily": {
        "task": "src.modules.sources.tasks.sync_trending_source",
        "schedule": settings.SYNC_SCHEDULE_SEC,
        "options": {"queue": Queues.INGEST},
        "kwargs": {"timespan": "daily"},
    },
    "sync-trending-weekly": {
        "task": "src.modules.sources.tasks.sync_trending_source",
        "schedule": 24 * 3600.0,
        "options": {"queue": Queues.INGEST},
        "kwargs": {"timespan": "weekly"},
    },
}

celery_app.autodiscover_tasks(
    [
        "src.modules.sources",
    ],
    related_name="tasks",
)


@worker_process_init.connect
def _init_worker_logging(**_kwargs: object) -> None:
    setup_logging()
