from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import case, func
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.user_identity_repository import IUserIdentityRepository
from src.domain.entities import RiskLevel, UserIdentity

UPSERT_DIALECTS = {"sqlite": sqlite_insert, "postgresql": postgresql_insert}


class UserIdentityRepository(IUserIdentityRepository):
    """UserIdentity repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, identity_id: UUID) -> Optional[UserIdentity]:
        """Get identity by ID"""
        stmt = select(UserIdentity).where(UserIdentity.id == identity_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_user_and_hash(
        self, user_id: UUID, fingerprint_hash: str
    ) -> Optional[UserIdentity]:
        """Get identity for one (user, fingerprint hash) pair"""
        stmt = select(UserIdentity).where(
            UserIdentity.user_id == user_id,
            UserIdentity.fingerprint_hash == fingerprint_hash,
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_recent_by_user_id(
        self, user_id: UUID, limit: int = 5
    ) -> List[UserIdentity]:
        """Most recently seen identities for a user"""
        stmt = (
            select(UserIdentity)
            .where(UserIdentity.user_id == user_id)
            .order_by(UserIdentity.last_seen.desc(), UserIdentity.created_at.desc())
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def get_all_by_user_id(self, user_id: UUID) -> List[UserIdentity]:
        """Every identity a user has"""
        stmt = (
            select(UserIdentity)
            .where(UserIdentity.user_id == user_id)
            .order_by(UserIdentity.last_seen.desc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def list_by_user_id(
        self,
        user_id: UUID,
        is_active: Optional[bool] = None,
        is_blocked: Optional[bool] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[UserIdentity], int]:
        """Page of a user's identities with total count"""
        conditions = [UserIdentity.user_id == user_id]
        if is_active is not None:
            conditions.append(UserIdentity.is_active == is_active)
        if is_blocked is not None:
            conditions.append(UserIdentity.is_blocked == is_blocked)

        count_stmt = select(func.count()).select_from(UserIdentity).where(*conditions)
        total = (await self.session.exec(count_stmt)).one()

        stmt = (
            select(UserIdentity)
            .where(*conditions)
            .order_by(UserIdentity.last_seen.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all()), total

    async def list_by_risk_levels(
        self, risk_levels: Sequence[RiskLevel], limit: int = 50, offset: int = 0
    ) -> Tuple[List[UserIdentity], int]:
        """Active identities in the given risk levels, riskiest first"""
        conditions = [
            UserIdentity.risk_level.in_(list(risk_levels)),
            UserIdentity.is_active == True,  # noqa: E712
        ]
        count_stmt = select(func.count()).select_from(UserIdentity).where(*conditions)
        total = (await self.session.exec(count_stmt)).one()

        stmt = (
            select(UserIdentity)
            .where(*conditions)
            .order_by(UserIdentity.risk_score.desc(), UserIdentity.last_seen.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all()), total

    async def create(self, identity: UserIdentity) -> UserIdentity:
        """Create a new identity"""
        self.session.add(identity)
        await self.session.flush()
        await self.session.refresh(identity)
        return identity

    async def get_or_create(self, identity: UserIdentity) -> Tuple[UserIdentity, bool]:
        """
        Insert unless (user_id, fingerprint_hash) exists.

        On SQLite and PostgreSQL the insert is ON CONFLICT DO NOTHING, so two
        concurrent first sightings of a device both end up on one row.
        """
        existing = await self.get_by_user_and_hash(identity.user_id, identity.fingerprint_hash)
        if existing is not None:
            return existing, False

        insert = UPSERT_DIALECTS.get(self.session.get_bind().dialect.name)
        if insert is None:
            return await self.create(identity), True

        stmt = (
            insert(UserIdentity)
            .values(**identity.model_dump())
            .on_conflict_do_nothing(index_elements=["user_id", "fingerprint_hash"])
        )
        result = await self.session.execute(stmt)
        stored = await self.get_by_user_and_hash(identity.user_id, identity.fingerprint_hash)
        return stored, result.rowcount == 1

    async def update(self, identity: UserIdentity) -> UserIdentity:
        """Update existing identity"""
        self.session.add(identity)
        await self.session.flush()
        await self.session.refresh(identity)
        return identity

    async def deactivate_inactive(self, cutoff: datetime) -> int:
        """Batch-deactivate identities not seen since cutoff (rows are kept)"""
        stmt = (
            update(UserIdentity)
            .where(UserIdentity.last_seen < cutoff, UserIdentity.is_active == True)  # noqa: E712
            .values(is_active=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def get_stats(self, user_id: Optional[UUID] = None) -> dict:
        """Aggregate counts and average scores"""
        stmt = select(
            func.count(UserIdentity.id),
            func.sum(case((UserIdentity.is_active == True, 1), else_=0)),  # noqa: E712
            func.sum(case((UserIdentity.is_blocked == True, 1), else_=0)),  # noqa: E712
            func.sum(case((UserIdentity.is_verified == True, 1), else_=0)),  # noqa: E712
            func.avg(UserIdentity.risk_score),
            func.avg(UserIdentity.trust_score),
        )
        if user_id is not None:
            stmt = stmt.where(UserIdentity.user_id == user_id)

        total, active, blocked, verified, avg_risk, avg_trust = (
            await self.session.exec(stmt)
        ).one()
        return {
            "total": total or 0,
            "active": active or 0,
            "blocked": blocked or 0,
            "verified": verified or 0,
            "average_risk_score": float(avg_risk) if avg_risk is not None else 0.0,
            "average_trust_score": float(avg_trust) if avg_trust is not None else 100.0,
        }
