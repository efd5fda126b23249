from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_session_token(self, session_token: str) -> Optional[Session]:
        """Find session by session token"""
        stmt = select(Session).where(Session.session_token == session_token)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_refresh_token(self, refresh_token: str) -> Optional[Session]:
        """Find session by current refresh token"""
        stmt = select(Session).where(Session.refresh_token == refresh_token)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_active_by_user_id(self, user_id: UUID) -> List[Session]:
        """Active sessions for a user, least recently active first"""
        stmt = (
            select(Session)
            .where(Session.user_id == user_id, Session.is_active == True)  # noqa: E712
            .order_by(Session.last_activity_at.asc(), Session.created_at.asc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def list_by_user_id(
        self,
        user_id: UUID,
        is_active: Optional[bool] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[Session], int]:
        """Page of a user's sessions, newest first, with total count"""
        conditions = [Session.user_id == user_id]
        if is_active is not None:
            conditions.append(Session.is_active == is_active)

        count_stmt = select(func.count()).select_from(Session).where(*conditions)
        total = (await self.session.exec(count_stmt)).one()

        stmt = (
            select(Session)
            .where(*conditions)
            .order_by(Session.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all()), total

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def update(self, session_obj: Session) -> Session:
        """Update existing session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def deactivate(self, session_id: UUID) -> bool:
        """Deactivate a session; only the first caller sees True"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.is_active == True)  # noqa: E712
            .values(is_active=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def deactivate_all_by_user_id(
        self, user_id: UUID, exclude_session_id: Optional[UUID] = None
    ) -> int:
        """Deactivate all active sessions for a user, optionally keeping one"""
        conditions = [Session.user_id == user_id, Session.is_active == True]  # noqa: E712
        if exclude_session_id is not None:
            conditions.append(Session.id != exclude_session_id)

        stmt = update(Session).where(*conditions).values(is_active=False)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def rotate_tokens(
        self,
        session_id: UUID,
        expected_refresh_token: str,
        session_token: str,
        refresh_token: str,
        expires_at: datetime,
        last_activity_at: datetime,
    ) -> bool:
        """Compare-and-set rotation against the previous refresh token"""
        stmt = (
            update(Session)
            .where(
                Session.id == session_id,
                Session.refresh_token == expected_refresh_token,
                Session.is_active == True,  # noqa: E712
            )
            .values(
                session_token=session_token,
                refresh_token=refresh_token,
                expires_at=expires_at,
                last_activity_at=last_activity_at,
            )
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def deactivate_expired(self, now: datetime) -> int:
        """Batch-deactivate active sessions past expires_at"""
        stmt = (
            update(Session)
            .where(Session.expires_at < now, Session.is_active == True)  # noqa: E712
            .values(is_active=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def get_stats(self, user_id: Optional[UUID], now: datetime) -> dict:
        """Total, active and expired session counts"""
        conditions = [Session.user_id == user_id] if user_id is not None else []

        async def count(*extra) -> int:
            stmt = select(func.count()).select_from(Session).where(*conditions, *extra)
            return (await self.session.exec(stmt)).one()

        return {
            "total": await count(),
            "active": await count(Session.is_active == True),  # noqa: E712
            "expired": await count(Session.expires_at < now),
        }
