"""
Activity Logger

Fire-and-forget activity recording. Runs after the caller's own commit in
the same unit of work; a failure is logged and rolled back, never raised.
"""

import logging
from typing import Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import ActivityAction, UserActivity
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class ActivityLogger:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def record(
        self,
        action: ActivityAction,
        user_id: Optional[UUID],
        session_id: Optional[UUID] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        metadata: Optional[dict] = None,
    ) -> Result[None]:
        activity = UserActivity(
            user_id=user_id,
            session_id=session_id,
            action=action.value,
            ip_address=ip_address,
            user_agent=user_agent,
            event_metadata=metadata,
        )
        try:
            await self.uow.activities.create(activity)
            await self.uow.commit()
        except Exception as exc:
            logger.warning(f"Activity log '{action.value}' failed for user {user_id}: {exc}")
            await self.uow.rollback()
            return Return.err(Error("ACTIVITY_LOG_FAILED", str(exc)))
        return Return.ok(None)
