from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def get_by_session_token(self, session_token: str) -> Optional[Session]:
        """Find session by its session token"""
        pass

    @abstractmethod
    async def get_by_refresh_token(self, refresh_token: str) -> Optional[Session]:
        """Find session by its current refresh token"""
        pass

    @abstractmethod
    async def get_active_by_user_id(self, user_id: UUID) -> List[Session]:
        """
        Active sessions for a user, oldest activity first.

        Ordered by last_activity_at then created_at, both ascending.
        """
        pass

    @abstractmethod
    async def list_by_user_id(
        self,
        user_id: UUID,
        is_active: Optional[bool] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Session], int]:
        """Page of a user's sessions (newest first) and the total count"""
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def update(self, session: Session) -> Session:
        """Update existing session"""
        pass

    @abstractmethod
    async def deactivate(self, session_id: UUID) -> bool:
        """Deactivate a session. Returns True only if it was active."""
        pass

    @abstractmethod
    async def deactivate_all_by_user_id(
        self, user_id: UUID, exclude_session_id: Optional[UUID] = None
    ) -> int:
        """Deactivate all active sessions for a user except one. Returns count."""
        pass

    @abstractmethod
    async def rotate_tokens(
        self,
        session_id: UUID,
        expected_refresh_token: str,
        session_token: str,
        refresh_token: str,
        expires_at: datetime,
        last_activity_at: datetime,
    ) -> bool:
        """
        Compare-and-set token rotation.

        Applies only if the stored refresh token still equals
        expected_refresh_token and the session is active.
        """
        pass

    @abstractmethod
    async def deactivate_expired(self, now: datetime) -> int:
        """Deactivate active sessions with expires_at < now. Returns count."""
        pass

    @abstractmethod
    async def get_stats(self, user_id: Optional[UUID], now: datetime) -> dict:
        """Counts of total, active and expired sessions"""
        pass
