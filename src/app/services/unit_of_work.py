from abc import ABC, abstractmethod
from typing import AsyncContextManager

from src.app.repositories.session_repository import ISessionRepository
from src.app.repositories.user_activity_repository import IUserActivityRepository
from src.app.repositories.user_identity_repository import IUserIdentityRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    sessions: ISessionRepository
    identities: IUserIdentityRepository
    activities: IUserActivityRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass

    @abstractmethod
    def savepoint(self) -> AsyncContextManager:
        """
        Nested scope for advisory work inside the current transaction.

        An exception leaving the scope undoes only the scope's statements;
        the outer transaction stays usable and the exception propagates.
        """
        pass
