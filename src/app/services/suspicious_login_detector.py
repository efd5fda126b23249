"""
Suspicious Login Detector

Compares a login's fingerprint with the user's most recent identities.
Advisory only: evaluate() never raises and fails open.
"""

import logging
from contextlib import nullcontext
from typing import AsyncContextManager, Callable, Optional
from uuid import UUID

from config import ApplicationConfig
from src.app.repositories.user_identity_repository import IUserIdentityRepository
from src.app.services.identity_tracker import fingerprints_of
from src.app.services.risk_scorer import flags_for
from src.domain.fingerprint import DeviceFingerprint
from src.domain.risk import LoginVerdict

logger = logging.getLogger(__name__)


class SuspiciousLoginDetector:
    """
    Business Rules:
    - No history (first-ever login) is never suspicious
    - The most recent prior identity is the comparison baseline
    - Lookup failures yield a clean verdict (fail-open)
    - The lookup runs inside savepoint() so a failed query leaves the
      surrounding transaction usable
    """

    def __init__(
        self,
        identities: IUserIdentityRepository,
        history_size: int = ApplicationConfig.SUSPICIOUS_LOGIN_HISTORY_SIZE,
        similarity_threshold: float = ApplicationConfig.FINGERPRINT_SIMILARITY_THRESHOLD,
        savepoint: Optional[Callable[[], AsyncContextManager]] = None,
    ):
        self.identities = identities
        self.history_size = history_size
        self.similarity_threshold = similarity_threshold
        self.savepoint = savepoint or nullcontext

    async def evaluate(self, user_id: UUID, current: DeviceFingerprint) -> LoginVerdict:
        try:
            async with self.savepoint():
                history = await self.identities.get_recent_by_user_id(
                    user_id, limit=self.history_size
                )
            previous = fingerprints_of(history)
            if not previous:
                return LoginVerdict.clean()
            return flags_for(current, previous, self.similarity_threshold)
        except Exception as exc:
            logger.warning(f"Suspicious login detection failed for user {user_id}: {exc}")
            return LoginVerdict.clean()
