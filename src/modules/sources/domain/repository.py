"""Data source repository interface."""

from abc import abstractmethod

from src.core.domain.repository import BaseRepository
from src.modules.sources.domain.entities import DataSource


class DataSourceRepository(BaseRepository[DataSource]):
    """Data source repository interface."""

    @abstractmethod
    async def get_by_name(self, name: str) -> DataSource | None:
        pass

    @abstractmethod
    async def list_active(self) -> list[DataSource]:
        pass
