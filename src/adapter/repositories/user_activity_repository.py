from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.user_activity_repository import IUserActivityRepository
from src.domain.entities import UserActivity


class UserActivityRepository(IUserActivityRepository):
    """UserActivity repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, activity: UserActivity) -> UserActivity:
        """Append an activity record (immutable)"""
        self.session.add(activity)
        await self.session.flush()
        await self.session.refresh(activity)
        return activity

    async def get_by_user_id(
        self, user_id: UUID, limit: int = 50, since: Optional[datetime] = None
    ) -> List[UserActivity]:
        """Most recent activities for a user"""
        conditions = [UserActivity.user_id == user_id]
        if since is not None:
            conditions.append(UserActivity.created_at >= since)

        stmt = (
            select(UserActivity)
            .where(*conditions)
            .order_by(UserActivity.created_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all())
