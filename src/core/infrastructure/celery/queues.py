"""Celery 队列定义。

- q_ingest: 数据源同步任务（保留清理在同步任务内持锁执行）
"""

from enum import StrEnum


class Queues(StrEnum):
    """Celery 队列枚举。"""

    INGEST = "q_ingest"

    @classmethod
    def all_queues(cls) -> list[str]:
        return [q.value for q in cls]


# 任务名称模式 -> 队列
TASK_ROUTES = {
    "src.modules.sources.tasks.*": {"queue": Queues.INGEST},
}
