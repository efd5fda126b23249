"""
Compare Identities Use Case

Side-by-side weighted comparison of two stored device fingerprints, for
operators investigating whether two identities are the same device.
"""

from uuid import UUID

from src.app.services.identity_tracker import fingerprints_of
from src.app.services.risk_scorer import compare_fingerprints
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import UserIdentity
from src.domain.fingerprint import DeviceFingerprint
from src.libs.result import Error, Result, Return
from .dtos import CompareIdentitiesResponse, IdentityResponse


def _fingerprint_of(identity: UserIdentity) -> DeviceFingerprint:
    stored = fingerprints_of([identity])
    return stored[0] if stored else DeviceFingerprint()


class CompareIdentitiesUseCase:
    """
    Use case for comparing two identities' fingerprints.

    Business Rules:
    - Both identities must exist (they may belong to different users)
    - A missing or unreadable fingerprint compares as all-unknown
    - Read only: neither identity's risk score changes
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, first_id: UUID, second_id: UUID) -> Result[CompareIdentitiesResponse]:
        async with self.uow:
            first = await self.uow.identities.get_by_id(first_id)
            second = await self.uow.identities.get_by_id(second_id)
            if first is None or second is None:
                return Return.err(Error("IDENTITY_NOT_FOUND", "Identity not found"))

            comparison = compare_fingerprints(_fingerprint_of(first), _fingerprint_of(second))
            return Return.ok(
                CompareIdentitiesResponse(
                    first=IdentityResponse.model_validate(first),
                    second=IdentityResponse.model_validate(second),
                    comparison=comparison,
                )
            )
