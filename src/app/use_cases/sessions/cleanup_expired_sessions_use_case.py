"""
Cleanup Expired Sessions Use Case

Storage hygiene sweep. Safe to run concurrently with live traffic: a single
batch UPDATE that only touches still-active rows.
"""

import logging

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.libs.result import Result, Return
from .dtos import CleanupExpiredSessionsResponse

logger = logging.getLogger(__name__)


class CleanupExpiredSessionsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[CleanupExpiredSessionsResponse]:
        async with self.uow:
            count = await self.uow.sessions.deactivate_expired(utcnow())
            await self.uow.commit()

        logger.info(f"Expired session sweep deactivated {count} sessions")
        return Return.ok(CleanupExpiredSessionsResponse(deactivated_count=count))
