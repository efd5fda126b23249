"""
Block / Unblock Identity Use Cases

Blocking deactivates the identity and rejects future logins from the device.
Sessions already issued under it are NOT terminated; callers that need that
must also run TerminateAllSessionsUseCase.
"""

import logging
from uuid import UUID

from src.app.services import identity_rules
from src.app.services.activity_logger import ActivityLogger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import ActivityAction
from src.libs.result import Error, Result, Return
from .dtos import IdentityResponse

logger = logging.getLogger(__name__)


class BlockIdentityUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, identity_id: UUID, reason: str) -> Result[IdentityResponse]:
        async with self.uow:
            identity = await self.uow.identities.get_by_id(identity_id)
            if identity is None:
                return Return.err(Error("IDENTITY_NOT_FOUND", "Identity not found"))

            identity_rules.mark_blocked(identity, reason, utcnow())
            identity = await self.uow.identities.update(identity)
            await self.uow.commit()

            logger.warning(f"Blocked identity {identity_id} for user {identity.user_id}: {reason}")
            await ActivityLogger(self.uow).record(
                ActivityAction.identity_blocked,
                identity.user_id,
                metadata={"identity_id": str(identity.id), "reason": reason},
            )

            return Return.ok(IdentityResponse.model_validate(identity))


class UnblockIdentityUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, identity_id: UUID) -> Result[IdentityResponse]:
        async with self.uow:
            identity = await self.uow.identities.get_by_id(identity_id)
            if identity is None:
                return Return.err(Error("IDENTITY_NOT_FOUND", "Identity not found"))

            identity_rules.mark_unblocked(identity, utcnow())
            identity = await self.uow.identities.update(identity)
            await self.uow.commit()

            logger.info(f"Unblocked identity {identity_id} for user {identity.user_id}")
            await ActivityLogger(self.uow).record(
                ActivityAction.identity_unblocked,
                identity.user_id,
                metadata={"identity_id": str(identity.id)},
            )

            return Return.ok(IdentityResponse.model_validate(identity))
