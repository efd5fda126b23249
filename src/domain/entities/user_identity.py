"""
UserIdentity Entity

Durable record of one (user, device fingerprint) pairing and its risk state.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel, UniqueConstraint

from src.domain.base import utcnow

from .enums import RiskLevel, VerificationMethod


class UserIdentity(SQLModel, table=True):
    """
    UserIdentity entity - one row per observed (user, fingerprint_hash).

    Business Rules:
    - risk_level is derived from risk_score (>=80 critical, >=60 high, >=30 medium)
    - is_blocked implies is_active=False
    - Re-seeing a device updates the row, never duplicates it
    - Inactive identities are deactivated, never deleted
    """

    __tablename__ = "user_identities"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(nullable=False, index=True)

    fingerprint_hash: str = Field(max_length=64, index=True)
    device_fingerprint: dict = Field(default_factory=dict, sa_column=Column(JSON))
    confidence: int = Field(default=0)
    location: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Risk assessment
    risk_score: int = Field(default=0)
    risk_level: RiskLevel = Field(default=RiskLevel.low)
    trust_score: int = Field(default=100)
    suspicious_activity: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Verification
    is_verified: bool = Field(default=False)
    verification_method: Optional[VerificationMethod] = Field(default=None)
    verified_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Activity tracking
    first_seen: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_seen: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    activity_count: int = Field(default=1)

    # Status
    is_active: bool = Field(default=True)
    is_blocked: bool = Field(default=False)
    blocked_reason: Optional[str] = Field(default=None, max_length=500)
    blocked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        UniqueConstraint("user_id", "fingerprint_hash", name="uq_identity_user_fingerprint"),
        Index("idx_identity_last_seen", "last_seen"),
        Index("idx_identity_risk_level", "risk_level"),
    )
