"""Items domain exceptions."""

from src.core.domain.exceptions import EntityNotFoundError


class ItemNotFoundError(EntityNotFoundError):
    def __init__(self, item_id: str | None = None):
        super().__init__("Item", item_id)


class TagNotFoundError(EntityNotFoundError):
    def __init__(self, tag: str | None = None):
        super().__init__("Tag", tag)
