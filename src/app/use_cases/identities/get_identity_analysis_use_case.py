"""
User Identity Analysis Use Case

Summarizes a user's identities and recent login activity into a behavior
profile with recommendations for operators.
"""

from datetime import timedelta
from uuid import UUID

from src.app.services import behavior_profiler
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.libs.result import Result, Return
from .dtos import ActivityResponse, IdentityAnalysisResponse, IdentityStatsResponse

DEFAULT_ANALYSIS_DAYS = 7
MAX_ANALYSIS_DAYS = 90
MAX_ANALYSIS_ACTIVITIES = 500


class GetUserIdentityAnalysisUseCase:
    """
    Use case for analyzing one user's identity behavior.

    Business Rules:
    - The activity window is the last `days` days (1-90)
    - The identity summary covers every identity, whatever its age
    - Read only
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, user_id: UUID, days: int = DEFAULT_ANALYSIS_DAYS
    ) -> Result[IdentityAnalysisResponse]:
        if not 1 <= days <= MAX_ANALYSIS_DAYS:
            raise ValueError(f"days must be between 1 and {MAX_ANALYSIS_DAYS}")

        now = utcnow()
        async with self.uow:
            identities = await self.uow.identities.get_all_by_user_id(user_id)
            stats = await self.uow.identities.get_stats(user_id)
            activities = await self.uow.activities.get_by_user_id(
                user_id, limit=MAX_ANALYSIS_ACTIVITIES, since=now - timedelta(days=days)
            )

        summary = behavior_profiler.summarize_identities(identities, now)
        profile = behavior_profiler.build_profile(activities)

        return Return.ok(
            IdentityAnalysisResponse(
                user_id=user_id,
                days=days,
                identity_summary=summary,
                identity_stats=IdentityStatsResponse(**stats),
                behavior_profile=profile,
                recent_activities=[ActivityResponse.model_validate(a) for a in activities],
                recommendations=behavior_profiler.recommendations_for(summary, profile),
            )
        )
