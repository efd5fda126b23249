"""
Record Sighting Use Case

Standalone entry point for recording a (user, device) sighting outside of
session creation.
"""

from uuid import UUID

from src.app.services.identity_tracker import record_sighting
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.fingerprint import DeviceFingerprint
from src.libs.result import Result, Return
from .dtos import IdentityResponse, RecordSightingResponse


class RecordSightingUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, user_id: UUID, fingerprint: DeviceFingerprint
    ) -> Result[RecordSightingResponse]:
        if user_id is None:
            raise ValueError("user_id is required to record a sighting")

        async with self.uow:
            identity, is_new, assessment = await record_sighting(
                self.uow.identities, user_id, fingerprint, utcnow()
            )
            await self.uow.commit()

            return Return.ok(
                RecordSightingResponse(
                    identity=IdentityResponse.model_validate(identity),
                    is_new=is_new,
                    assessment=assessment,
                )
            )
