"""连接器工厂。

根据数据源名称创建相应的连接器实例。
"""

from src.modules.sources.domain.connector import SourceConnector
from src.modules.sources.domain.entities import DataSource
from src.modules.sources.domain.exceptions import UnsupportedSourceError
from src.modules.sources.infrastructure.connectors.github import GitHubConnector


class InfrastructureConnectorFactory:
    """Select a connector by DataSource.name."""

    connector_map: dict[str, type[GitHubConnector]] = {
        GitHubConnector.source_name: GitHubConnector,
    }

    def create(self, source: DataSource) -> SourceConnector:
        connector_class = self.connector_map.get(source.name)
        if connector_class is None:
            raise UnsupportedSourceError(source.name)
        return connector_class.from_source(source)

    def supports(self, source_name: str) -> bool:
        return source_name in self.connector_map
