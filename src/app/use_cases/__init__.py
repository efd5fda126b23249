"""
Use Cases

Organized into domain folders:
- sessions/: Session lifecycle
- identities/: Device identities and risk

Import from subdirectories for DTOs and helpers.
"""

from .sessions import (
    CreateSessionUseCase,
    ValidateSessionUseCase,
    RefreshSessionUseCase,
    TerminateSessionUseCase,
    TerminateAllSessionsUseCase,
    EnforceConcurrencyCapUseCase,
    CleanupExpiredSessionsUseCase,
    GetUserSessionsUseCase,
    GetSessionStatsUseCase,
)
from .identities import (
    RecordSightingUseCase,
    UpdateRiskScoreUseCase,
    VerifyIdentityUseCase,
    BlockIdentityUseCase,
    UnblockIdentityUseCase,
    CleanupInactiveIdentitiesUseCase,
    GetUserIdentitiesUseCase,
    GetSuspiciousIdentitiesUseCase,
    GetIdentityStatsUseCase,
    CompareIdentitiesUseCase,
    GetUserIdentityAnalysisUseCase,
)

__all__ = [
    # Sessions
    "CreateSessionUseCase",
    "ValidateSessionUseCase",
    "RefreshSessionUseCase",
    "TerminateSessionUseCase",
    "TerminateAllSessionsUseCase",
    "EnforceConcurrencyCapUseCase",
    "CleanupExpiredSessionsUseCase",
    "GetUserSessionsUseCase",
    "GetSessionStatsUseCase",
    # Identities
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
]
