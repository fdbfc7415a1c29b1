"""Unit-of-work port.

应用层通过该端口划定事务边界，避免直接依赖 SQLAlchemy 会话。
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class TransactionManager(ABC):
    """Port for committing or rolling back the current unit of work."""

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """成功退出时提交，异常时回滚并继续抛出。

        Usage:
            async with tx.transaction():
                await repo.create(item)
        """
        try:
            yield
        except BaseException:
            await self.rollback()
            raise
        await self.commit()


class NullTransactionManager(TransactionManager):
    """No-op implementation for dry runs and in-memory repositories."""

    async def commit(self) -> None:
        return None

    async def rollback(self) -> None:
        return None
