"""
Unit tests for identity sighting recording
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from src.app.services import identity_rules
from src.app.services.identity_tracker import record_sighting
from src.domain.entities import RiskLevel, UserIdentity, VerificationMethod
from src.domain.fingerprint import (
    BrowserInfo,
    DeviceFingerprint,
    DeviceInfo,
    FingerprintMetadata,
    NetworkInfo,
)

NOW = datetime(2024, 5, 1, 12, 0, 0)


def make_fp(country="US", fp_hash="hash-a", seen=NOW):
    return DeviceFingerprint(
        device=DeviceInfo(type="desktop", platform="Windows"),
        browser=BrowserInfo(name="Chrome"),
        network=NetworkInfo(ip_address="203.0.113.10", country=country),
        metadata=FingerprintMetadata(timestamp=seen, fingerprint_hash=fp_hash),
    )


def identities_repo(history, stored=None):
    repo = MagicMock()
    repo.get_recent_by_user_id = AsyncMock(return_value=history)
    if stored is None:
        repo.get_or_create = AsyncMock(side_effect=lambda identity: (identity, True))
    else:
        repo.get_or_create = AsyncMock(return_value=(stored, False))
    repo.update = AsyncMock(side_effect=lambda identity: identity)
    return repo


@pytest.mark.asyncio
async def test_first_sighting_creates_clean_identity():
    user_id = uuid4()
    repo = identities_repo([])

    identity, is_new, assessment = await record_sighting(repo, user_id, make_fp(), NOW)

    assert is_new is True
    assert identity.user_id == user_id
    assert identity.fingerprint_hash == "hash-a"
    assert identity.risk_score == 0
    assert identity.risk_level == RiskLevel.low
    assert identity.trust_score == 100
    assert identity.is_active is True
    assert identity.activity_count == 1
    assert identity.first_seen == NOW
    assert identity.location["country"] == "US"
    assert assessment.is_suspicious is False
    repo.update.assert_called_once()


@pytest.mark.asyncio
async def test_repeat_sighting_updates_existing_identity():
    user_id = uuid4()
    first_seen = NOW - timedelta(days=2)
    stored = identity_rules.new_identity(user_id, make_fp(), 40, first_seen)
    repo = identities_repo([stored], stored=stored)

    identity, is_new, _ = await record_sighting(repo, user_id, make_fp(), NOW)

    assert is_new is False
    assert identity is stored
    assert identity.activity_count == 2
    assert identity.last_seen == NOW
    assert identity.first_seen == first_seen


@pytest.mark.asyncio
async def test_suspicious_sighting_raises_persistent_risk():
    user_id = uuid4()
    other = identity_rules.new_identity(
        user_id, make_fp(country="DE", fp_hash="hash-b", seen=NOW - timedelta(hours=1)), 40, NOW
    )
    repo = identities_repo([other])

    identity, _, assessment = await record_sighting(repo, user_id, make_fp(country="US"), NOW)

    assert assessment.is_suspicious is True
    assert identity.risk_score == 55
    assert identity.risk_level == RiskLevel.medium
    assert identity.suspicious_activity["reasons"] == ["location_change", "rapid_location_change"]


@pytest.mark.asyncio
async def test_same_device_history_is_not_compared_with_itself():
    user_id = uuid4()
    stored = identity_rules.new_identity(user_id, make_fp(country="DE"), 40, NOW)
    repo = identities_repo([stored], stored=stored)

    _, _, assessment = await record_sighting(repo, user_id, make_fp(country="US"), NOW)

    assert assessment.is_suspicious is False


# ============================================================================
# identity_rules transitions
# ============================================================================


def test_apply_risk_score_clamps_and_recomputes_level():
    identity = UserIdentity(user_id=uuid4(), fingerprint_hash="h")

    identity_rules.apply_risk_score(identity, 150, NOW)
    assert identity.risk_score == 100
    assert identity.risk_level == RiskLevel.critical

    identity_rules.apply_risk_score(identity, -5, NOW)
    assert identity.risk_score == 0
    assert identity.risk_level == RiskLevel.low

    identity_rules.apply_risk_score(identity, 60, NOW)
    assert identity.risk_level == RiskLevel.high


def test_block_and_unblock_toggle_active_together():
    identity = UserIdentity(user_id=uuid4(), fingerprint_hash="h")

    identity_rules.mark_blocked(identity, "manual review", NOW)
    assert identity.is_blocked is True
    assert identity.is_active is False
    assert identity.blocked_reason == "manual review"
    assert identity.blocked_at == NOW

    identity_rules.mark_unblocked(identity, NOW)
    assert identity.is_blocked is False
    assert identity.is_active is True
    assert identity.blocked_reason is None
    assert identity.blocked_at is None


def test_verification_is_idempotent_but_refreshes_timestamp():
    identity = UserIdentity(user_id=uuid4(), fingerprint_hash="h")
    later = NOW + timedelta(hours=1)

    identity_rules.mark_verified(identity, VerificationMethod.email, NOW)
    identity_rules.mark_verified(identity, VerificationMethod.two_factor, later)

    assert identity.is_verified is True
    assert identity.verification_method == VerificationMethod.two_factor
    assert identity.verified_at == later
