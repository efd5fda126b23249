"""
Update Risk Score Use Case

Sets an identity's persistent risk score. The score is clamped to [0, 100]
and the risk level recomputed from it in the same write.
"""

import logging
from uuid import UUID

from src.app.services import identity_rules
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.libs.result import Error, Result, Return
from .dtos import IdentityResponse

logger = logging.getLogger(__name__)


class UpdateRiskScoreUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, identity_id: UUID, score: float) -> Result[IdentityResponse]:
        async with self.uow:
            identity = await self.uow.identities.get_by_id(identity_id)
            if identity is None:
                return Return.err(Error("IDENTITY_NOT_FOUND", "Identity not found"))

            identity_rules.apply_risk_score(identity, score, utcnow())
            identity = await self.uow.identities.update(identity)
            await self.uow.commit()

            logger.info(
                f"Identity {identity_id} risk set to {identity.risk_score} "
                f"({identity.risk_level.value})"
            )
            return Return.ok(IdentityResponse.model_validate(identity))
