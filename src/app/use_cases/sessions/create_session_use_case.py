"""
Create Session Use Case

Opens a session for a user the credential checker has already
authenticated: builds the device fingerprint, evaluates the login against
the user's device history, records the identity sighting, applies the
concurrency cap and issues the token pair.
"""

import logging
from datetime import timedelta
from typing import Optional
from uuid import uuid4

from config import ApplicationConfig
from src.app.services import identity_rules
from src.app.services.activity_logger import ActivityLogger
from src.app.services.fingerprint_builder import FingerprintBuilder
from src.app.services.geolocator import IGeoLocator, NullGeoLocator
from src.app.services.identity_tracker import record_sighting
from src.app.services.suspicious_login_detector import SuspiciousLoginDetector
from src.app.services.token_issuer import ITokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import ActivityAction, RiskLevel, Session
from src.domain.fingerprint import DeviceFingerprint, RawSignals
from src.libs.result import Error, Result, Return
from .dtos import CreateSessionCommand, CreateSessionResponse
from .enforce_concurrency_cap_use_case import evict_oldest_session

logger = logging.getLogger(__name__)

AUTO_BLOCK_REASON = "Automatic block: critical risk level"


class CreateSessionUseCase:
    """
    Use case for session creation after successful authentication.

    Business Rules:
    - A login from a blocked device fails with DEVICE_BLOCKED
    - The first login of a user is never suspicious
    - Suspicious-login detection and activity logging never fail the login
    - At the concurrency cap the oldest active session is evicted (best effort)
    - expires_at = now + session TTL
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_issuer: ITokenIssuer,
        geolocator: Optional[IGeoLocator] = None,
        fingerprint_builder: Optional[FingerprintBuilder] = None,
        session_ttl_seconds: int = ApplicationConfig.SESSION_TTL_SECONDS,
        refresh_ttl_seconds: int = ApplicationConfig.REFRESH_TOKEN_TTL_SECONDS,
        max_sessions: int = ApplicationConfig.MAX_CONCURRENT_SESSIONS,
        auto_block_critical: bool = ApplicationConfig.AUTO_BLOCK_CRITICAL_RISK,
    ):
        if session_ttl_seconds <= 0 or refresh_ttl_seconds <= 0:
            raise ValueError("Session and refresh TTLs must be positive")
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")

        self.uow = uow
        self.token_issuer = token_issuer
        self.geolocator = geolocator or NullGeoLocator()
        self.fingerprint_builder = fingerprint_builder or FingerprintBuilder()
        self.session_ttl = timedelta(seconds=session_ttl_seconds)
        self.refresh_ttl = timedelta(seconds=refresh_ttl_seconds)
        self.max_sessions = max_sessions
        self.auto_block_critical = auto_block_critical

    async def execute(self, command: CreateSessionCommand) -> Result[CreateSessionResponse]:
        """
        Execute create session use case.

        Args:
            command: Authenticated user id plus request signals

        Returns:
            Result with CreateSessionResponse, or Error (DEVICE_BLOCKED)

        Raises:
            ValueError: user_id is missing
        """
        if command.user_id is None:
            raise ValueError("user_id is required to create a session")

        user_id = command.user_id
        fingerprint = command.fingerprint or await self._build_fingerprint(command)
        fingerprint_hash = fingerprint.fingerprint_hash

        async with self.uow:
            existing = await self.uow.identities.get_by_user_and_hash(user_id, fingerprint_hash)
            if existing is not None and existing.is_blocked:
                logger.warning(f"Login from blocked device {fingerprint_hash} for user {user_id}")
                return Return.err(Error("DEVICE_BLOCKED", "This device has been blocked"))

            # Compare against history before this sighting joins it
            detector = SuspiciousLoginDetector(self.uow.identities, savepoint=self.uow.savepoint)
            verdict = await detector.evaluate(user_id, fingerprint)

            now = utcnow()
            identity, is_new, _ = await record_sighting(
                self.uow.identities, user_id, fingerprint, now
            )

            if self.auto_block_critical and identity.risk_level == RiskLevel.critical:
                identity_rules.mark_blocked(identity, AUTO_BLOCK_REASON, now)
                await self.uow.identities.update(identity)
                await self.uow.commit()
                logger.warning(f"Auto-blocked identity {identity.id} for user {user_id}")
                await ActivityLogger(self.uow).record(
                    ActivityAction.identity_blocked,
                    user_id,
                    ip_address=command.ip_address,
                    user_agent=command.user_agent,
                    metadata={"identity_id": str(identity.id), "reason": AUTO_BLOCK_REASON},
                )
                return Return.err(Error("DEVICE_BLOCKED", "This device has been blocked"))

            evicted = None
            try:
                async with self.uow.savepoint():
                    evicted = await evict_oldest_session(
                        self.uow.sessions, user_id, self.max_sessions
                    )
            except Exception as exc:
                logger.warning(f"Session eviction failed for user {user_id}: {exc}")

            session_id = uuid4()
            session_token = self.token_issuer.issue(
                {"sub": str(user_id), "sid": str(session_id), "type": "session"},
                self.session_ttl,
            )
            refresh_token = self.token_issuer.issue(
                {"sub": str(user_id), "sid": str(session_id), "type": "refresh"},
                self.refresh_ttl,
            )

            session = Session(
                id=session_id,
                user_id=user_id,
                session_token=session_token,
                refresh_token=refresh_token,
                device_fingerprint=fingerprint.to_record(),
                fingerprint_hash=fingerprint_hash,
                ip_address=command.ip_address or fingerprint.network.ip_address,
                user_agent=command.user_agent,
                is_active=True,
                created_at=now,
                expires_at=now + self.session_ttl,
                last_activity_at=now,
            )
            session = await self.uow.sessions.create(session)

            await self.uow.commit()
            logger.info(f"Created session {session.id} for user {user_id}")

            activity_logger = ActivityLogger(self.uow)
            if evicted is not None:
                await activity_logger.record(
                    ActivityAction.session_evicted,
                    user_id,
                    session_id=evicted.id,
                    metadata={"max_sessions": self.max_sessions, "replaced_by": str(session.id)},
                )
            await activity_logger.record(
                ActivityAction.login,
                user_id,
                session_id=session.id,
                ip_address=session.ip_address,
                user_agent=session.user_agent,
                metadata={
                    "fingerprint_hash": fingerprint_hash,
                    "is_new_device": is_new,
                    "country": fingerprint.network.country,
                    "device_type": fingerprint.device.type,
                    "suspicious": verdict.is_suspicious,
                    "flags": list(verdict.flags),
                },
            )

            return Return.ok(
                CreateSessionResponse(
                    session_id=session.id,
                    session_token=session.session_token,
                    refresh_token=session.refresh_token,
                    expires_at=session.expires_at,
                    fingerprint_hash=fingerprint_hash,
                    identity_id=identity.id,
                    is_new_device=is_new,
                    suspicious_login=verdict,
                )
            )

    async def _build_fingerprint(self, command: CreateSessionCommand) -> DeviceFingerprint:
        country, isp, timezone = command.country, command.isp, None
        if country is None:
            location = await self.geolocator.lookup(command.ip_address)
            if location is not None:
                country, isp = location.country, isp or location.isp
                timezone = location.timezone

        raw_signals = RawSignals(
            user_agent=command.user_agent,
            ip_address=command.ip_address,
            headers=command.headers,
            country=country,
            isp=isp,
            timezone=timezone,
        )
        return self.fingerprint_builder.build(raw_signals, command.client_hints)
