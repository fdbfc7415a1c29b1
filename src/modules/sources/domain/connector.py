"""Source connector domain interfaces and models."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from src.modules.sources.domain.entities import DataSource, Timespan


class RawRecord(BaseModel):
    """Opaque source-native payload tagged with its source name.

    只在抓取与标准化之间流转，不直接落库。
    """

    model_config = ConfigDict(frozen=True)

    source_name: str = Field(..., description="来源名称")
    external_id: str = Field(..., description="来源内部ID")
    data: dict[str, Any] = Field(default_factory=dict, description="原始数据")


class SourceConnector(ABC):
    """Port for fetching raw records from an external provider."""

    source_name: str

    @abstractmethod
    async def test_connection(self) -> bool:
        """Return whether the provider is reachable. Never raises."""
        ...

    @abstractmethod
    async def fetch_by_query(self, query: str, page_size: int) -> list[RawRecord]: ...

    @abstractmethod
    async def fetch_window_batches(self, timespan: Timespan) -> list[list[RawRecord]]:
        """One batch per query variant, in query order, not deduplicated."""
        ...

    async def fetch_window(self, timespan: Timespan) -> list[RawRecord]:
        """All records for the window, concatenated across query variants."""
        batches = await self.fetch_window_batches(timespan)
        return [record for batch in batches for record in batch]

    @abstractmethod
    def validate_config(self) -> tuple[bool, str | None]: ...

    async def aclose(self) -> None:
        return None


class ConnectorFactory(Protocol):
    def create(self, source: DataSource) -> SourceConnector: ...


def deduplicate_batches(batches: Iterable[Sequence[RawRecord]]) -> list[RawRecord]:
    """Collapse overlapping batches to one record per external id.

    先出现者保留，后续重复直接丢弃（不合并）。
    """
    seen: set[str] = set()
    unique: list[RawRecord] = []
    for batch in batches:
        for record in batch:
            if record.external_id in seen:
                continue
            seen.add(record.external_id)
            unique.append(record)
    return unique
