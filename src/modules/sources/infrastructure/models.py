"""Data source database models."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, Text
from sqlmodel import Field

from src.core.infrastructure.database.base_model import BaseModel
from src.modules.sources.domain.entities import SourceType


class DataSourceModel(BaseModel, table=True):
    """Data source database model."""

    __tablename__ = "data_sources"

    name: str = Field(nullable=False, unique=True, index=True)
    type: SourceType = Field(
        sa_type=Enum(
            SourceType,
            name="sourcetype",
            values_callable=lambda e: [i.value for i in e],
            create_constraint=False,
        ),
        nullable=False,
        index=True,
    )
    display_name: str = Field(nullable=False)
    base_url: str | None = Field(default=None, sa_type=Text, nullable=True)
    api_config: dict[str, Any] = Field(default_factory=dict, sa_type=JSON, nullable=False)
    update_frequency_hours: int = Field(default=24, nullable=False)
    is_active: bool = Field(default=True, nullable=False, index=True)
    last_updated: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),
        nullable=True,
    )
