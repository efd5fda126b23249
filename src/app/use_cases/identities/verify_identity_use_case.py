"""
Verify Identity Use Case

Marks a device identity as verified. Idempotent: verifying again only
refreshes the method and timestamp.
"""

from typing import Union
from uuid import UUID

from src.app.services import identity_rules
from src.app.services.activity_logger import ActivityLogger
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import ActivityAction, VerificationMethod
from src.libs.result import Error, Result, Return
from .dtos import IdentityResponse


class VerifyIdentityUseCase:
    """
    Use case for verifying a device identity.

    Business Rules:
    - Method must be one of email, sms, 2fa, biometric, manual
    - Verification is monotonic (never reverts to unverified)
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, identity_id: UUID, method: Union[VerificationMethod, str]
    ) -> Result[IdentityResponse]:
        try:
            method = VerificationMethod(method)
        except ValueError:
            return Return.err(
                Error("INVALID_VERIFICATION_METHOD", f"Unsupported verification method: {method}")
            )

        async with self.uow:
            identity = await self.uow.identities.get_by_id(identity_id)
            if identity is None:
                return Return.err(Error("IDENTITY_NOT_FOUND", "Identity not found"))

            identity_rules.mark_verified(identity, method, utcnow())
            identity = await self.uow.identities.update(identity)
            await self.uow.commit()

            await ActivityLogger(self.uow).record(
                ActivityAction.identity_verified,
                identity.user_id,
                metadata={"identity_id": str(identity.id), "method": method.value},
            )

            return Return.ok(IdentityResponse.model_validate(identity))
