"""
Session Query Use Cases

Paginated session listing and session statistics.
"""

from typing import Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.libs.result import Result, Return
from .dtos import (
    SessionListResponse,
    SessionResponse,
    SessionStatsResponse,
    paginate,
)

MAX_PAGE_SIZE = 100


class GetUserSessionsUseCase:
    """
    Use case for listing a user's sessions, newest first.

    Args validated here are caller errors (ValueError), not business errors.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        user_id: UUID,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Result[SessionListResponse]:
        if page < 1:
            raise ValueError("page must be at least 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

        async with self.uow:
            sessions, total = await self.uow.sessions.list_by_user_id(
                user_id, is_active=is_active, limit=limit, offset=(page - 1) * limit
            )

            return Return.ok(
                SessionListResponse(
                    sessions=[SessionResponse.model_validate(s) for s in sessions],
                    pagination=paginate(page, limit, total),
                )
            )


class GetSessionStatsUseCase:
    """Use case for session counts (total, active, expired)"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: Optional[UUID] = None) -> Result[SessionStatsResponse]:
        async with self.uow:
            stats = await self.uow.sessions.get_stats(user_id, utcnow())
            return Return.ok(SessionStatsResponse(**stats))
