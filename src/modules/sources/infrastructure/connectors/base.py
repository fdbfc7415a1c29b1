"""连接器基类定义。

具体连接器只需要实现单次查询与窗口查询构造，分批抓取与限速由基类负责。
"""

import asyncio
from abc import abstractmethod
from datetime import datetime
from typing import Any

from loguru import logger

from src.core.config import settings
from src.modules.sources.domain.connector import RawRecord, SourceConnector
from src.modules.sources.domain.entities import Timespan
from src.modules.sources.domain.exceptions import SourceFetchError


class BaseSourceConnector(SourceConnector):
    """Runs a window's query variants serially with a fixed pause between requests."""

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        page_size: int | None = None,
        request_delay_sec: float | None = None,
    ):
        """初始化连接器。

        Args:
            config: 数据源的 api_config
            page_size: 单次查询返回条数
            request_delay_sec: 相邻请求之间的等待时间，仅用于遵守上游配额
        """
        self.config = config or {}
        self.page_size = page_size or settings.FETCH_PAGE_SIZE
        self.request_delay_sec = (
            settings.FETCH_REQUEST_DELAY_SEC
            if request_delay_sec is None
            else request_delay_sec
        )

    @abstractmethod
    def build_window_queries(
        self, timespan: Timespan, now: datetime | None = None
    ) -> list[str]:
        """Query variants for a window, in the order they should be fetched."""
        ...

    async def fetch_window_batches(
        self, timespan: Timespan, now: datetime | None = None
    ) -> list[list[RawRecord]]:
        queries = self.build_window_queries(timespan, now)
        batches: list[list[RawRecord]] = []

        for index, query in enumerate(queries):
            if index > 0 and self.request_delay_sec > 0:
                await asyncio.sleep(self.request_delay_sec)

            try:
                batch = await self.fetch_by_query(query, self.page_size)
            except SourceFetchError:
                raise
            except Exception as e:
                raise SourceFetchError(
                    f"{self.source_name} query '{query}' failed: {e}"
                ) from e

            logger.debug(f"{self.source_name} query '{query}' returned {len(batch)} records")
            batches.append(batch)

        return batches
