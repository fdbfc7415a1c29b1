"""SQLAlchemy-backed TransactionManager."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.domain.ports.transaction import TransactionManager


class SQLAlchemyTransactionManager(TransactionManager):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
