"""
Identity Tracker

Records sightings of (user, device) pairs in the identity store and folds
behavioral assessments into the persistent risk score.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Tuple
from uuid import UUID

from pydantic import ValidationError

from src.app.repositories.user_identity_repository import IUserIdentityRepository
from src.app.services import identity_rules
from src.app.services.fingerprint_builder import compute_confidence
from src.app.services.risk_scorer import BEHAVIOR_WINDOW, assess_behavior
from src.domain.entities import UserIdentity
from src.domain.fingerprint import DeviceFingerprint
from src.domain.risk import BehaviorAssessment

logger = logging.getLogger(__name__)


def fingerprints_of(identities: Iterable[UserIdentity]) -> List[DeviceFingerprint]:
    """Stored fingerprints in input order; unreadable records are skipped"""
    fingerprints = []
    for identity in identities:
        if not identity.device_fingerprint:
            continue
        try:
            fingerprints.append(DeviceFingerprint.from_record(identity.device_fingerprint))
        except ValidationError:
            logger.warning(f"Skipping unreadable fingerprint on identity {identity.id}")
    return fingerprints


async def record_sighting(
    identities: IUserIdentityRepository,
    user_id: UUID,
    fingerprint: DeviceFingerprint,
    now: datetime,
) -> Tuple[UserIdentity, bool, BehaviorAssessment]:
    """
    Find-or-create the identity for (user_id, fingerprint hash).

    New identities start at risk 0 (low), trust 100, active. Known ones get
    activity_count + 1 and last_seen = now. A suspicious behavioral
    assessment adds its score to the identity's risk score.

    Returns:
        (identity, is_new, assessment)
    """
    confidence = compute_confidence(fingerprint)

    history = await identities.get_recent_by_user_id(user_id, limit=BEHAVIOR_WINDOW + 1)
    others = [i for i in history if i.fingerprint_hash != fingerprint.fingerprint_hash]
    assessment = assess_behavior(fingerprint, fingerprints_of(others), now)

    identity, is_new = await identities.get_or_create(
        identity_rules.new_identity(user_id, fingerprint, confidence, now)
    )
    if not is_new:
        identity_rules.register_sighting(identity, fingerprint, confidence, now)

    if assessment.is_suspicious:
        identity_rules.apply_risk_score(
            identity, identity.risk_score + assessment.risk_score, now
        )
        identity.suspicious_activity = assessment.model_dump(mode="json")
        logger.info(
            f"Suspicious behavior for user {user_id} on identity {identity.id}: "
            f"{list(assessment.reasons)} -> risk {identity.risk_score}"
        )

    identity = await identities.update(identity)
    return identity, is_new, assessment
