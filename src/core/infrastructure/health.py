"""统一的健康检查类型定义。

所有基础设施组件的健康检查都使用这些类型，确保类型安全和一致性。
"""

from enum import Enum

from pydantic import BaseModel, Field


class HealthStatus(str, Enum):
    """健康检查状态枚举。"""

    OK = "ok"
    ERROR = "error"
    SKIPPED = "skipped"
    DEGRADED = "degraded"


class DatabaseHealthResult(BaseModel):
    """数据库健康检查结果。"""

    status: HealthStatus = Field(..., description="健康状态")
    connected: bool = Field(..., description="是否已连接")
    version: str | None = Field(None, description="PostgreSQL 版本")
    error: str | None = Field(None, description="错误信息")

    def to_dict(self) -> dict[str, str | bool | None]:
        return self.model_dump(mode="json", exclude_none=False)


class RedisHealthResult(BaseModel):
    """Redis 健康检查结果。"""

    status: HealthStatus = Field(..., description="健康状态")
    connected: bool = Field(..., description="是否已连接")
    version: str | None = Field(None, description="Redis 版本")
    error: str | None = Field(None, description="错误信息")

    def to_dict(self) -> dict[str, str | bool | None]:
        return self.model_dump(mode="json", exclude_none=False)


class SourceHealthResult(BaseModel):
    """外部数据源连通性检查结果。"""

    status: HealthStatus = Field(..., description="健康状态")
    source_name: str = Field(..., description="数据源名称")
    reachable: bool = Field(..., description="是否可访问")
    error: str | None = Field(None, description="错误信息")

    def to_dict(self) -> dict[str, str | bool | None]:
        return self.model_dump(mode="json", exclude_none=False)
