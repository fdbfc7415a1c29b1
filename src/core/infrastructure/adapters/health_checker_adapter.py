"""Health check adapter implementations."""

from typing import Any

from src.core.domain.ports.health_checker import HealthChecker
from src.core.infrastructure.database.session import check_db_health
from src.core.infrastructure.health import HealthStatus


class DatabaseHealthCheckerAdapter(HealthChecker):
    """Adapter exposing the PostgreSQL connectivity check through the port."""

    async def check_health(self) -> dict[str, Any]:
        result = await check_db_health()
        return {"database": result.to_dict()}

    async def is_healthy(self) -> bool:
        result = await check_db_health()
        return result.status == HealthStatus.OK
