"""
Validate Session Use Case

Resolves a session token to a live session. Expiry is checked lazily here,
so correctness never depends on the background cleanup having run.
"""

import logging

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Session, is_session_expired
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class ValidateSessionUseCase:
    """
    Use case for validating a session token.

    Business Rules:
    - Unknown token: INVALID_TOKEN
    - Past expires_at: session deactivated (once), SESSION_EXPIRED
    - Terminated session: INVALID_TOKEN
    - Otherwise last_activity_at is refreshed and the session returned
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, session_token: str) -> Result[Session]:
        if not session_token:
            return Return.err(Error("INVALID_TOKEN", "Session token is required"))

        async with self.uow:
            session = await self.uow.sessions.get_by_session_token(session_token)
            if session is None:
                return Return.err(Error("INVALID_TOKEN", "Invalid session token"))

            now = utcnow()
            if is_session_expired(session, now):
                if session.is_active and await self.uow.sessions.deactivate(session.id):
                    await self.uow.commit()
                    logger.info(f"Session {session.id} expired on validation")
                return Return.err(Error("SESSION_EXPIRED", "Session has expired"))

            if not session.is_active:
                return Return.err(Error("INVALID_TOKEN", "Session is no longer active"))

            session.last_activity_at = now
            session = await self.uow.sessions.update(session)
            await self.uow.commit()

            return Return.ok(session)
