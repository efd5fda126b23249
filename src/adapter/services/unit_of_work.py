from contextlib import nullcontext
from typing import AsyncContextManager

from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.session_repository import SessionRepository
from src.adapter.repositories.user_activity_repository import UserActivityRepository
from src.adapter.repositories.user_identity_repository import UserIdentityRepository
from src.app.services.unit_of_work import UnitOfWork

# SQLite keeps the transaction usable after a failed statement, and pysqlite's
# implicit BEGIN handling makes SAVEPOINT unreliable there
SAVEPOINT_DIALECTS = {"postgresql", "mysql", "mariadb", "mssql", "oracle"}


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.sessions = SessionRepository(self.session)
        self.identities = UserIdentityRepository(self.session)
        self.activities = UserActivityRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()

    def savepoint(self) -> AsyncContextManager:
        if self.session.get_bind().dialect.name in SAVEPOINT_DIALECTS:
            return self.session.begin_nested()
        return nullcontext()
