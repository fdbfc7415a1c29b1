"""Redis 客户端封装。

提供统一的 Redis 访问接口，支持：
- 连接可用性检查
- JSON 读写
- 同步任务锁
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import TYPE_CHECKING, Any

import redis.asyncio as aioredis
from loguru import logger

if TYPE_CHECKING:
    from redis.asyncio import Redis

from src.core.config import settings
from src.core.infrastructure.health import HealthStatus, RedisHealthResult
from src.core.infrastructure.redis.keys import RedisKeys


class RedisUnavailableError(RuntimeError):
    """Redis 不可用（连接失败/超时等）。"""


class RedisClient:
    """Redis 客户端封装类。"""

    def __init__(self, url: str | None = None):
        self._url = url or settings.REDIS_URL
        self._client: Redis | None = None

    @property
    def client(self) -> Redis:
        """获取 Redis 客户端实例（延迟初始化）。"""
        if self._client is None:
            self._client = aioredis.from_url(
                self._url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=10.0,
                socket_connect_timeout=5.0,
                retry_on_timeout=True,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def ping(self) -> bool:
        try:
            return await self.client.ping()
        except Exception as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    @asynccontextmanager
    async def ensure_available(
        self,
        *,
        timeout: float = 5.0,
        close_on_exit: bool = False,
    ) -> AsyncGenerator[RedisClient, None]:
        """确保进入上下文时 Redis 连接可用。

        Usage:
            try:
                async with client.ensure_available(timeout=5.0, close_on_exit=True):
                    ...
            except RedisUnavailableError:
                # Redis 不可用，按需降级/跳过
                ...
        """
        try:
            ok = await asyncio.wait_for(self.client.ping(), timeout=timeout)
            if not ok:
                raise RedisUnavailableError("Redis ping returned falsy result")
        except TimeoutError as e:
            if close_on_exit:
                await self.close()
            raise RedisUnavailableError("Redis ping timeout") from e
        except RedisUnavailableError:
            if close_on_exit:
                await self.close()
            raise
        except Exception as e:
            if close_on_exit:
                await self.close()
            raise RedisUnavailableError(f"Redis ping failed: {e}") from e

        try:
            yield self
        finally:
            if close_on_exit:
                await self.close()

    async def health_check(self) -> RedisHealthResult:
        try:
            is_connected = await self.ping()
            info = await self.client.info("server") if is_connected else {}
            return RedisHealthResult(
                status=HealthStatus.OK if is_connected else HealthStatus.ERROR,
                connected=is_connected,
                version=info.get("redis_version", "unknown"),
            )
        except Exception as e:
            return RedisHealthResult(
                status=HealthStatus.ERROR,
                connected=False,
                error=str(e),
            )

    # ============ 基础操作 ============

    async def get(self, key: str) -> str | None:
        return await self.client.get(key)

    async def set(
        self,
        key: str,
        value: str,
        ex: int | timedelta | None = None,
        nx: bool = False,
    ) -> bool:
        """设置字符串值；nx=True 时仅当键不存在时写入。"""
        return bool(await self.client.set(key, value, ex=ex, nx=nx))

    async def delete(self, *keys: str) -> int:
        return await self.client.delete(*keys)

    async def get_json(self, key: str) -> Any | None:
        value = await self.get(key)
        if value is None:
            return None
        return json.loads(value)

    async def set_json(
        self,
        key: str,
        value: Any,
        ex: int | timedelta | None = None,
    ) -> bool:
        return await self.set(key, json.dumps(value, ensure_ascii=False), ex=ex)

    # ============ 同步任务锁 ============

    async def acquire_sync_lock(self, source_name: str, ttl: int = 1800) -> bool:
        """尝试获取数据源同步锁。

        Args:
            source_name: 数据源名称
            ttl: 锁过期时间（秒），防止进程崩溃后永久占用

        Returns:
            获取成功返回 True
        """
        key = RedisKeys.sync_lock(source_name)
        return await self.set(key, "1", ex=ttl, nx=True)

    async def release_sync_lock(self, source_name: str) -> bool:
        key = RedisKeys.sync_lock(source_name)
        return await self.delete(key) > 0


@asynccontextmanager
async def get_async_redis_client(
    *,
    timeout: float | None = None,
    url: str | None = None,
) -> AsyncGenerator[RedisClient, None]:
    """获取可用的 RedisClient（上下文管理器）。

    - 进入上下文时会执行 ping 校验，并带超时控制
    - 退出上下文时自动关闭连接（避免 Celery 的 asyncio.run() 跨事件循环复用问题）
    """
    client = RedisClient(url=url)
    async with client.ensure_available(
        timeout=timeout or settings.REDIS_CLIENT_TIMEOUT_SEC,
        close_on_exit=True,
    ):
        yield client
