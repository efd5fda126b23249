"""
Identity Query Use Cases

Per-user identity listing, suspicious identity listing and statistics.
"""

from typing import Optional
from uuid import UUID

from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions.dtos import paginate
from src.domain.entities import RiskLevel
from src.libs.result import Result, Return
from .dtos import IdentityListResponse, IdentityResponse, IdentityStatsResponse

MAX_PAGE_SIZE = 100
SUSPICIOUS_RISK_LEVELS = (RiskLevel.medium, RiskLevel.high, RiskLevel.critical)


def _check_page(page: int, limit: int) -> None:
    if page < 1:
        raise ValueError("page must be at least 1")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")


class GetUserIdentitiesUseCase:
    """Use case for listing a user's device identities, most recently seen first"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        user_id: UUID,
        is_active: Optional[bool] = None,
        is_blocked: Optional[bool] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Result[IdentityListResponse]:
        _check_page(page, limit)

        async with self.uow:
            identities, total = await self.uow.identities.list_by_user_id(
                user_id,
                is_active=is_active,
                is_blocked=is_blocked,
                limit=limit,
                offset=(page - 1) * limit,
            )
            return Return.ok(
                IdentityListResponse(
                    identities=[IdentityResponse.model_validate(i) for i in identities],
                    pagination=paginate(page, limit, total),
                )
            )


class GetSuspiciousIdentitiesUseCase:
    """
    Use case for listing active identities at elevated risk.

    risk_level=None means all elevated levels (medium, high, critical).
    Ordered by risk score, then most recent sighting.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        risk_level: Optional[RiskLevel] = None,
        page: int = 1,
        limit: int = 50,
    ) -> Result[IdentityListResponse]:
        _check_page(page, limit)
        levels = (risk_level,) if risk_level is not None else SUSPICIOUS_RISK_LEVELS

        async with self.uow:
            identities, total = await self.uow.identities.list_by_risk_levels(
                levels, limit=limit, offset=(page - 1) * limit
            )
            return Return.ok(
                IdentityListResponse(
                    identities=[IdentityResponse.model_validate(i) for i in identities],
                    pagination=paginate(page, limit, total),
                )
            )


class GetIdentityStatsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: Optional[UUID] = None) -> Result[IdentityStatsResponse]:
        async with self.uow:
            stats = await self.uow.identities.get_stats(user_id)
            return Return.ok(IdentityStatsResponse(**stats))
