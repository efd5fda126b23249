from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import UserActivity


class IUserActivityRepository(ABC):
    """UserActivity repository interface - application layer"""

    @abstractmethod
    async def create(self, activity: UserActivity) -> UserActivity:
        """Append an activity record (immutable)"""
        pass

    @abstractmethod
    async def get_by_user_id(
        self, user_id: UUID, limit: int = 50, since: Optional[datetime] = None
    ) -> List[UserActivity]:
        """Most recent activities for a user (optionally created at or after since), newest first"""
        pass
