"""
Enforce Concurrency Cap Use Case

Evict-oldest policy: when a user has reached the session cap, the least
recently active session is deactivated to make room for a new one.
"""

import logging
from typing import Optional
from uuid import UUID

from src.app.repositories.session_repository import ISessionRepository
from src.app.services.activity_logger import ActivityLogger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import ActivityAction, Session
from src.libs.result import Result, Return
from .dtos import EnforceConcurrencyCapResponse

logger = logging.getLogger(__name__)


async def evict_oldest_session(
    sessions: ISessionRepository, user_id: UUID, max_sessions: int
) -> Optional[Session]:
    """
    Deactivate the single oldest active session if the user is at the cap.

    Oldest means lowest last_activity_at, ties broken by created_at.

    Returns:
        The evicted session, or None if nothing was evicted
    """
    active = await sessions.get_active_by_user_id(user_id)
    if len(active) < max_sessions:
        return None

    for candidate in active:
        # A concurrent eviction may have taken this one already
        if await sessions.deactivate(candidate.id):
            logger.info(
                f"Evicted session {candidate.id} for user {user_id} "
                f"({len(active)} active, cap {max_sessions})"
            )
            return candidate
    return None


class EnforceConcurrencyCapUseCase:
    """
    Use case for applying the concurrent-session cap to a user.

    Business Rules:
    - Cap applies to active sessions only
    - At most one session is evicted per call
    - Eviction is recorded in the activity log
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, user_id: UUID, max_sessions: int
    ) -> Result[EnforceConcurrencyCapResponse]:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")

        async with self.uow:
            evicted = await evict_oldest_session(self.uow.sessions, user_id, max_sessions)
            await self.uow.commit()

            active = await self.uow.sessions.get_active_by_user_id(user_id)

            if evicted is not None:
                await ActivityLogger(self.uow).record(
                    ActivityAction.session_evicted,
                    user_id,
                    session_id=evicted.id,
                    metadata={"max_sessions": max_sessions},
                )

            return Return.ok(
                EnforceConcurrencyCapResponse(
                    evicted_session_id=evicted.id if evicted else None,
                    active_count=len(active),
                )
            )
