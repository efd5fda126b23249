"""
Terminate Session Use Cases

Single-session termination (owner only) and terminate-all for a user.
"""

import logging
from typing import Optional
from uuid import UUID

from src.app.services.activity_logger import ActivityLogger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import ActivityAction
from src.libs.result import Error, Result, Return
from .dtos import TerminateAllSessionsResponse, TerminateSessionResponse

logger = logging.getLogger(__name__)


class TerminateSessionUseCase:
    """
    Use case for terminating one session.

    Business Rules:
    - Only the session owner may terminate it (UNAUTHORIZED otherwise)
    - Terminating an inactive session is a no-op (terminated=False)
    - Terminated sessions are kept for audit
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, session_id: UUID, requesting_user_id: UUID
    ) -> Result[TerminateSessionResponse]:
        async with self.uow:
            session = await self.uow.sessions.get_by_id(session_id)
            if session is None:
                return Return.err(Error("SESSION_NOT_FOUND", "Session not found"))

            if session.user_id != requesting_user_id:
                return Return.err(
                    Error("UNAUTHORIZED", "Session does not belong to the requesting user")
                )

            terminated = await self.uow.sessions.deactivate(session_id)
            await self.uow.commit()

            if terminated:
                logger.info(f"Terminated session {session_id} for user {requesting_user_id}")
                await ActivityLogger(self.uow).record(
                    ActivityAction.session_terminated,
                    requesting_user_id,
                    session_id=session_id,
                )

            return Return.ok(
                TerminateSessionResponse(session_id=session_id, terminated=terminated)
            )


class TerminateAllSessionsUseCase:
    """
    Use case for terminating every active session of a user.

    Business Rules:
    - exclude_session_id (e.g. the caller's current session) stays active
    - Returns the number of sessions terminated
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, user_id: UUID, exclude_session_id: Optional[UUID] = None
    ) -> Result[TerminateAllSessionsResponse]:
        async with self.uow:
            count = await self.uow.sessions.deactivate_all_by_user_id(
                user_id, exclude_session_id=exclude_session_id
            )
            await self.uow.commit()

            logger.info(f"Terminated {count} sessions for user {user_id}")
            if count:
                await ActivityLogger(self.uow).record(
                    ActivityAction.session_terminated,
                    user_id,
                    session_id=exclude_session_id,
                    metadata={
                        "terminated_count": count,
                        "kept_session_id": str(exclude_session_id) if exclude_session_id else None,
                    },
                )

            return Return.ok(TerminateAllSessionsResponse(terminated_count=count))
