"""
Refresh Session Use Case

Rotates the session and refresh tokens of a live session in place.
"""

import logging
from datetime import timedelta
from typing import Optional

from config import ApplicationConfig
from src.app.services.activity_logger import ActivityLogger
from src.app.services.token_issuer import ITokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import ActivityAction, is_session_expired
from src.libs.result import Error, Result, Return
from .dtos import RefreshSessionResponse

logger = logging.getLogger(__name__)


class RefreshSessionUseCase:
    """
    Use case for refreshing a session's credentials.

    Business Rules:
    - Unknown or already rotated refresh token: INVALID_TOKEN
    - Expired session: deactivated, SESSION_EXPIRED
    - Rotation is a compare-and-set on the previous refresh token; a
      concurrent refresh that lost the race gets REFRESH_CONFLICT
    - Same session id; old tokens stop validating immediately
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_issuer: ITokenIssuer,
        session_ttl_seconds: int = ApplicationConfig.SESSION_TTL_SECONDS,
        refresh_ttl_seconds: int = ApplicationConfig.REFRESH_TOKEN_TTL_SECONDS,
    ):
        if session_ttl_seconds <= 0 or refresh_ttl_seconds <= 0:
            raise ValueError("Session and refresh TTLs must be positive")

        self.uow = uow
        self.token_issuer = token_issuer
        self.session_ttl = timedelta(seconds=session_ttl_seconds)
        self.refresh_ttl = timedelta(seconds=refresh_ttl_seconds)

    async def execute(
        self,
        refresh_token: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Result[RefreshSessionResponse]:
        """
        Execute refresh session use case.

        Args:
            refresh_token: Current refresh token of the session
            ip_address: Client IP of the refresh request
            user_agent: Client user agent of the refresh request

        Returns:
            Result with RefreshSessionResponse containing new tokens, or Error
        """
        if not refresh_token:
            return Return.err(Error("INVALID_TOKEN", "Refresh token is required"))

        async with self.uow:
            session = await self.uow.sessions.get_by_refresh_token(refresh_token)
            if session is None or not session.is_active:
                return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

            now = utcnow()
            if is_session_expired(session, now):
                if await self.uow.sessions.deactivate(session.id):
                    await self.uow.commit()
                return Return.err(Error("SESSION_EXPIRED", "Session has expired"))

            claims = self.token_issuer.verify(refresh_token)
            if claims.is_err():
                if claims.error.code == "TOKEN_EXPIRED":
                    if await self.uow.sessions.deactivate(session.id):
                        await self.uow.commit()
                    return Return.err(Error("SESSION_EXPIRED", "Refresh token has expired"))
                return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

            if claims.value.get("type") != "refresh" or claims.value.get("sid") != str(session.id):
                return Return.err(Error("INVALID_TOKEN", "Invalid refresh token"))

            base_claims = {"sub": str(session.user_id), "sid": str(session.id)}
            new_session_token = self.token_issuer.issue(
                {**base_claims, "type": "session"}, self.session_ttl
            )
            new_refresh_token = self.token_issuer.issue(
                {**base_claims, "type": "refresh"}, self.refresh_ttl
            )
            expires_at = now + self.session_ttl

            rotated = await self.uow.sessions.rotate_tokens(
                session.id,
                expected_refresh_token=refresh_token,
                session_token=new_session_token,
                refresh_token=new_refresh_token,
                expires_at=expires_at,
                last_activity_at=now,
            )
            if not rotated:
                logger.warning(f"Concurrent refresh rejected for session {session.id}")
                return Return.err(
                    Error("REFRESH_CONFLICT", "Session was refreshed concurrently")
                )

            await self.uow.commit()
            logger.info(f"Refreshed session {session.id}")

            await ActivityLogger(self.uow).record(
                ActivityAction.session_refreshed,
                session.user_id,
                session_id=session.id,
                ip_address=ip_address,
                user_agent=user_agent,
            )

            return Return.ok(
                RefreshSessionResponse(
                    session_id=session.id,
                    session_token=new_session_token,
                    refresh_token=new_refresh_token,
                    expires_at=expires_at,
                )
            )
