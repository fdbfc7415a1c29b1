"""Base entity class for all domain entities."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from src.core.domain.events import DomainEvent


def utc_now() -> datetime:
    """Return current UTC datetime with timezone info."""
    return datetime.now(UTC)


class BaseEntity(BaseModel):
    """Base entity class for all domain entities."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    is_deleted: bool = Field(default=False)

    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    def __init__(self, **data):
        super().__init__(**data)
        self._domain_events: list[DomainEvent] = []

    def mark_as_deleted(self) -> None:
        """Mark the entity as deleted and update the updated_at timestamp."""
        self.is_deleted = True
        self._update_timestamp()

    def _update_timestamp(self) -> None:
        self.updated_at = utc_now()

    def _add_domain_event(self, event: "DomainEvent") -> None:
        self._domain_events.append(event)

    def get_domain_events(self) -> list["DomainEvent"]:
        """Get all unpublished domain events."""
        return self._domain_events.copy()

    def clear_domain_events(self) -> None:
        """Clear all domain events after publishing."""
        self._domain_events.clear()

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if their IDs are equal."""
        if not isinstance(other, BaseEntity):
            return NotImplemented
        return bool(self.id and other.id and self.id == other.id)

    def __hash__(self) -> int:
        return hash(self.id) if self.id else super().__hash__()
