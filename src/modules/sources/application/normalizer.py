"""Raw record normalization.

每个数据源注册一个转换函数，把原始 payload 映射为 StandardItem。
"""

from collections.abc import Callable
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.modules.items.domain.entities import ItemAuthor, ItemMetrics, StandardItem
from src.modules.sources.domain.connector import RawRecord
from src.modules.sources.domain.exceptions import (
    ItemProcessingError,
    UnsupportedSourceError,
)

Transformer = Callable[[dict[str, Any]], StandardItem]


class ItemNormalizer:
    """Dispatches raw records to the transformer registered for their source."""

    def __init__(self) -> None:
        self._transformers: dict[str, Transformer] = {}

    @classmethod
    def default(cls) -> "ItemNormalizer":
        normalizer = cls()
        normalizer.register_transformer("github", github_repository_to_item)
        return normalizer

    def register_transformer(self, source_name: str, transformer: Transformer) -> None:
        self._transformers[source_name] = transformer

    def has_transformer(self, source_name: str) -> bool:
        return source_name in self._transformers

    def normalize(self, record: RawRecord) -> StandardItem:
        transformer = self._transformers.get(record.source_name)
        if transformer is None:
            raise UnsupportedSourceError(record.source_name)
        try:
            return transformer(record.data)
        except PydanticValidationError as e:
            # 缺少标题或链接的记录不能补默认值
            fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
            raise ItemProcessingError(
                record.external_id, f"malformed {record.source_name} record ({fields})"
            ) from e


def github_repository_to_item(repo: dict[str, Any]) -> StandardItem:
    """Map a GitHub search result to StandardItem.

    缺失的可选字段映射为 None / 空值，不做任何推断。
    """
    owner = repo.get("owner") or {}
    license_info = repo.get("license") or {}

    return StandardItem(
        title=repo.get("full_name") or repo.get("name"),
        description=repo.get("description") or "",
        url=repo.get("html_url"),
        author=ItemAuthor(
            name=owner.get("login") or "",
            url=owner.get("html_url"),
            avatar_url=owner.get("avatar_url"),
        ),
        published_at=_parse_datetime(repo.get("created_at")),
        metrics=ItemMetrics(
            primary=_non_negative(repo.get("stargazers_count")) or 0,
            secondary=_non_negative(repo.get("forks_count")),
            engagement=_non_negative(repo.get("open_issues_count")),
        ),
        language=repo.get("language") or None,
        license=license_info.get("name") if isinstance(license_info, dict) else None,
        topics=repo.get("topics") or (),
    )


def _non_negative(value: Any) -> float | None:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return max(0.0, number)


def _parse_datetime(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
