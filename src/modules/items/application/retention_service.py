"""保留清理服务。

删除创建时间早于截止时间且热度低于阈值的条目。
只应在非演练同步完成后运行，且不能与同一数据源的同步并发。
"""

from datetime import datetime, timedelta

from loguru import logger

from src.core.config import settings
from src.core.domain.base_entity import utc_now
from src.core.domain.exceptions import ValidationError
from src.core.domain.ports.transaction import (
    NullTransactionManager,
    TransactionManager,
)
from src.core.infrastructure.logging import BusinessEvents
from src.modules.items.domain.repository import ItemRepository


class RetentionSweeper:
    def __init__(
        self,
        item_repository: ItemRepository,
        transaction_manager: TransactionManager | None = None,
    ):
        self.item_repository = item_repository
        self.tx = transaction_manager or NullTransactionManager()

    async def sweep(
        self,
        now: datetime | None = None,
        max_age_days: int | None = None,
        min_popularity: int | None = None,
    ) -> int:
        """Delete stale low-popularity items and return how many were removed."""
        max_age_days = (
            settings.RETENTION_MAX_AGE_DAYS if max_age_days is None else max_age_days
        )
        min_popularity = (
            settings.RETENTION_MIN_POPULARITY
            if min_popularity is None
            else min_popularity
        )
        if max_age_days < 0:
            raise ValidationError("max_age_days must be non-negative")
        if not 0 <= min_popularity <= 100:
            raise ValidationError("min_popularity must be between 0 and 100")

        cutoff = (now or utc_now()) - timedelta(days=max_age_days)
        async with self.tx.transaction():
            deleted = await self.item_repository.delete_stale_items(
                cutoff, min_popularity
            )

        logger.info(
            f"Retention sweep removed {deleted} items "
            f"(created before {cutoff.isoformat()}, popularity < {min_popularity})"
        )
        BusinessEvents.retention_swept(
            deleted=deleted,
            max_age_days=max_age_days,
            min_popularity=min_popularity,
        )
        return deleted
