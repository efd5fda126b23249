"""
Identity Use Cases

Device identity lifecycle: sightings, risk score, verification,
block/unblock, inactivity cleanup, comparison, analysis and queries.
"""

from .record_sighting_use_case import RecordSightingUseCase
from .update_risk_score_use_case import UpdateRiskScoreUseCase
from .verify_identity_use_case import VerifyIdentityUseCase
from .block_identity_use_case import BlockIdentityUseCase, UnblockIdentityUseCase
from .cleanup_inactive_identities_use_case import CleanupInactiveIdentitiesUseCase
from .compare_identities_use_case import CompareIdentitiesUseCase
from .get_identity_analysis_use_case import GetUserIdentityAnalysisUseCase
from .get_identities_use_case import (
    GetUserIdentitiesUseCase,
    GetSuspiciousIdentitiesUseCase,
    GetIdentityStatsUseCase,
)
from .dtos import (
    IdentityResponse,
    RecordSightingResponse,
    IdentityListResponse,
    IdentityStatsResponse,
    CleanupInactiveIdentitiesResponse,
    CompareIdentitiesResponse,
    ActivityResponse,
    IdentityAnalysisResponse,
)

__all__ = [
    # Use Cases
    "RecordSightingUseCase",
    "UpdateRiskScoreUseCase",
    "VerifyIdentityUseCase",
    "BlockIdentityUseCase",
    "UnblockIdentityUseCase",
    "CleanupInactiveIdentitiesUseCase",
    "GetUserIdentitiesUseCase",
    "GetSuspiciousIdentitiesUseCase",
    "GetIdentityStatsUseCase",
    "CompareIdentitiesUseCase",
    "GetUserIdentityAnalysisUseCase",
    # DTOs - Responses
    "IdentityResponse",
    "RecordSightingResponse",
    "IdentityListResponse",
    "IdentityStatsResponse",
    "CleanupInactiveIdentitiesResponse",
    "CompareIdentitiesResponse",
    "ActivityResponse",
    "IdentityAnalysisResponse",
]
