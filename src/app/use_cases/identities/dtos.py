"""
Identity Use Case DTOs (Data Transfer Objects)

Response classes for the identity domain.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from src.app.use_cases.sessions.dtos import Pagination
from src.domain.entities import RiskLevel, VerificationMethod
from src.domain.risk import (
    BehaviorAssessment,
    BehaviorProfile,
    FingerprintComparison,
    IdentitySummary,
)


class IdentityResponse(BaseModel):
    """One (user, device) identity and its risk state"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    fingerprint_hash: str
    confidence: int
    location: Optional[dict] = None
    risk_score: int
    risk_level: RiskLevel
    trust_score: int
    is_verified: bool
    verification_method: Optional[VerificationMethod] = None
    verified_at: Optional[datetime] = None
    first_seen: datetime
    last_seen: datetime
    activity_count: int
    is_active: bool
    is_blocked: bool
    blocked_reason: Optional[str] = None
    blocked_at: Optional[datetime] = None


class RecordSightingResponse(BaseModel):
    """Response for record sighting use case"""

    identity: IdentityResponse
    is_new: bool
    assessment: BehaviorAssessment


class IdentityListResponse(BaseModel):
    """Response for identity listing use cases"""

    identities: List[IdentityResponse]
    pagination: Pagination


class IdentityStatsResponse(BaseModel):
    """Response for identity stats use case"""

    total: int
    active: int
    blocked: int
    verified: int
    average_risk_score: float
    average_trust_score: float


class CleanupInactiveIdentitiesResponse(BaseModel):
    """Response for cleanup inactive identities use case"""

    deactivated_count: int
    cutoff: datetime


class CompareIdentitiesResponse(BaseModel):
    """Response for compare identities use case"""

    first: IdentityResponse
    second: IdentityResponse
    comparison: FingerprintComparison


class ActivityResponse(BaseModel):
    """One activity log entry"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    action: str
    session_id: Optional[UUID] = None
    ip_address: Optional[str] = None
    event_metadata: Optional[dict] = None
    created_at: datetime


class IdentityAnalysisResponse(BaseModel):
    """Response for user identity analysis use case"""

    user_id: UUID
    days: int
    identity_summary: IdentitySummary
    identity_stats: IdentityStatsResponse
    behavior_profile: BehaviorProfile
    recent_activities: List[ActivityResponse]
    recommendations: List[str]
