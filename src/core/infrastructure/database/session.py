"""Database session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.core.config import settings
from src.core.infrastructure.health import DatabaseHealthResult, HealthStatus

async_engine = create_async_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    echo=False,
    pool_pre_ping=True,
    pool_size=5,
    max_overflow=10,
)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """获取异步数据库会话（上下文管理器版本）。

    用于 Celery 任务和命令行脚本；异常时回滚，退出时关闭。

    Usage:
        async with get_async_session() as session:
            ...
            await session.commit()
    """
    session = AsyncSessionLocal()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db() -> None:
    """Verify the database connection at startup."""
    try:
        async with async_engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection established successfully")
    except Exception as e:
        logger.error(f"Failed to connect to database: {e}")
        raise


async def check_db_health() -> DatabaseHealthResult:
    """检查数据库健康状态（连接与版本）。"""
    try:
        async with async_engine.connect() as conn:
            result = await conn.execute(text("SELECT version()"))
            version = result.scalar()

            return DatabaseHealthResult(
                status=HealthStatus.OK,
                connected=True,
                version=version.split(",")[0] if version else "unknown",
            )
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return DatabaseHealthResult(
            status=HealthStatus.ERROR,
            connected=False,
            error=str(e),
        )
