"""
Cleanup Inactive Identities Use Case

Deactivates identities not seen within the inactivity window. Rows are
kept for audit retention.
"""

import logging
from datetime import timedelta

from config import ApplicationConfig
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.libs.result import Result, Return
from .dtos import CleanupInactiveIdentitiesResponse

logger = logging.getLogger(__name__)


class CleanupInactiveIdentitiesUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, days_inactive: int = ApplicationConfig.IDENTITY_INACTIVE_DAYS
    ) -> Result[CleanupInactiveIdentitiesResponse]:
        if days_inactive < 0:
            raise ValueError("days_inactive must not be negative")

        cutoff = utcnow() - timedelta(days=days_inactive)
        async with self.uow:
            count = await self.uow.identities.deactivate_inactive(cutoff)
            await self.uow.commit()

        logger.info(f"Deactivated {count} identities inactive since {cutoff.isoformat()}")
        return Return.ok(CleanupInactiveIdentitiesResponse(deactivated_count=count, cutoff=cutoff))
