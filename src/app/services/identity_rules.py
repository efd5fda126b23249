"""
Identity Rules

Free functions applying state transitions to UserIdentity records.
Persistence stays with the repository; callers save the result.
"""

from datetime import datetime
from uuid import UUID

from src.app.services.risk_scorer import risk_level_for
from src.domain.entities import UserIdentity, VerificationMethod
from src.domain.fingerprint import DeviceFingerprint

MIN_RISK_SCORE = 0
MAX_RISK_SCORE = 100
MAX_TRUST_SCORE = 100
VERIFIED_TRUST_BONUS = 20


def location_of(fingerprint: DeviceFingerprint) -> dict:
    return {
        "country": fingerprint.network.country,
        "isp": fingerprint.network.isp,
        "timezone": fingerprint.network.timezone,
        "ip_address": fingerprint.network.ip_address,
    }


def new_identity(
    user_id: UUID, fingerprint: DeviceFingerprint, confidence: int, now: datetime
) -> UserIdentity:
    return UserIdentity(
        user_id=user_id,
        fingerprint_hash=fingerprint.fingerprint_hash,
        device_fingerprint=fingerprint.to_record(),
        confidence=confidence,
        location=location_of(fingerprint),
        risk_score=MIN_RISK_SCORE,
        risk_level=risk_level_for(MIN_RISK_SCORE),
        trust_score=MAX_TRUST_SCORE,
        first_seen=now,
        last_seen=now,
        activity_count=1,
        is_active=True,
        created_at=now,
        updated_at=now,
    )


def register_sighting(
    identity: UserIdentity,
    fingerprint: DeviceFingerprint,
    confidence: int,
    now: datetime,
) -> None:
    identity.activity_count = (identity.activity_count or 0) + 1
    identity.last_seen = now
    identity.device_fingerprint = fingerprint.to_record()
    identity.confidence = confidence
    identity.location = location_of(fingerprint)
    identity.updated_at = now


def apply_risk_score(identity: UserIdentity, score: float, now: datetime) -> None:
    """Clamp to [0, 100] and recompute the level from the same value"""
    clamped = int(max(MIN_RISK_SCORE, min(MAX_RISK_SCORE, round(score))))
    identity.risk_score = clamped
    identity.risk_level = risk_level_for(clamped)
    identity.updated_at = now


def mark_verified(identity: UserIdentity, method: VerificationMethod, now: datetime) -> None:
    """Verification raises trust by VERIFIED_TRUST_BONUS, capped at 100"""
    identity.is_verified = True
    identity.trust_score = min(MAX_TRUST_SCORE, (identity.trust_score or 0) + VERIFIED_TRUST_BONUS)
    identity.verification_method = method
    identity.verified_at = now
    identity.updated_at = now


def mark_blocked(identity: UserIdentity, reason: str, now: datetime) -> None:
    identity.is_blocked = True
    identity.is_active = False
    identity.blocked_reason = reason
    identity.blocked_at = now
    identity.updated_at = now


def mark_unblocked(identity: UserIdentity, now: datetime) -> None:
    identity.is_blocked = False
    identity.is_active = True
    identity.blocked_reason = None
    identity.blocked_at = None
    identity.updated_at = now
