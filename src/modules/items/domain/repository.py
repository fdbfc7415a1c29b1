"""Item and tag repository interfaces."""

from abc import abstractmethod
from collections.abc import Sequence
from datetime import datetime

from src.core.domain.repository import BaseRepository
from src.modules.classification.domain.entities import TagMatch
from src.modules.items.domain.entities import Item, Tag
from src.modules.items.domain.queries import (
    AppliedTag,
    CountBucket,
    ItemStats,
    TrendingFilters,
)


class ItemRepository(BaseRepository[Item]):
    """Item repository interface.

    (source_id, external_id) 唯一，是 upsert 的键。
    """

    @abstractmethod
    async def find_by_source_and_external_id(
        self, source_id: str, external_id: str
    ) -> Item | None:
        pass

    @abstractmethod
    async def delete_stale_items(self, cutoff: datetime, min_popularity: int) -> int:
        """Hard-delete items created before cutoff with popularity below threshold."""
        pass

    @abstractmethod
    async def list_trending(
        self, filters: TrendingFilters, since: datetime | None = None
    ) -> tuple[list[Item], int]:
        pass

    @abstractmethod
    async def search(self, query: str, limit: int = 20) -> list[Item]:
        pass

    @abstractmethod
    async def get_stats(self, since: datetime, top_n: int = 10) -> ItemStats:
        pass


class TagRepository(BaseRepository[Tag]):
    """Tag repository interface."""

    @abstractmethod
    async def get_by_name(self, name: str) -> Tag | None:
        pass

    @abstractmethod
    async def get_by_names(self, names: Sequence[str]) -> dict[str, Tag]:
        pass

    @abstractmethod
    async def list_all(self, featured_only: bool = False) -> list[Tag]:
        pass

    @abstractmethod
    async def replace_auto_tags(self, item_id: str, matches: Sequence[TagMatch]) -> int:
        """Replace an item's auto/ai associations with the given matches.

        手动关联保持不变；未在标签表中的标签会被跳过。返回写入的关联数。
        """
        pass

    @abstractmethod
    async def get_item_tags(self, item_id: str) -> list[AppliedTag]:
        """Tags attached to an item, ordered by confidence desc then name."""
        pass

    @abstractmethod
    async def get_tag_stats(self, limit: int = 20) -> list[CountBucket]:
        pass

    @abstractmethod
    async def cleanup_unused_tags(self) -> int:
        """Delete non-featured tags without any item association."""
        pass
