"""数据源连接器模块。"""

from src.modules.sources.infrastructure.connectors.base import BaseSourceConnector
from src.modules.sources.infrastructure.connectors.factory import (
    InfrastructureConnectorFactory,
)
from src.modules.sources.infrastructure.connectors.github import GitHubConnector

__all__ = [
    "BaseSourceConnector",
    "GitHubConnector",
    "InfrastructureConnectorFactory",
]
