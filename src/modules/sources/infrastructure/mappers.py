"""Data source entity-model mapper."""

from src.core.infrastructure.database.mapper import BaseMapper
from src.modules.sources.domain.entities import DataSource
from src.modules.sources.infrastructure.models import DataSourceModel


class DataSourceMapper(BaseMapper[DataSource, DataSourceModel]):
    """Data source entity-model mapper."""

    def to_domain(self, model: DataSourceModel) -> DataSource:
        return DataSource(
            id=model.id,
            name=model.name,
            type=model.type,
            display_name=model.display_name,
            base_url=model.base_url,
            api_config=model.api_config or {},
            update_frequency_hours=model.update_frequency_hours,
            is_active=model.is_active,
            last_updated=model.last_updated,
            created_at=model.created_at,
            updated_at=model.updated_at,
            is_deleted=model.is_deleted,
        )

    def to_model(self, entity: DataSource) -> DataSourceModel:
        return DataSourceModel(
            id=entity.id,
            name=entity.name,
            type=entity.type,
            display_name=entity.display_name,
            base_url=entity.base_url,
            api_config=entity.api_config,
            update_frequency_hours=entity.update_frequency_hours,
            is_active=entity.is_active,
            last_updated=entity.last_updated,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            is_deleted=entity.is_deleted,
        )
