"""
Session Entity

Binds a session/refresh token pair to a user for a bounded time window.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class Session(SQLModel, table=True):
    """
    Session entity - one row per issued credential pair.

    Business Rules:
    - expires_at > created_at
    - Live iff is_active and now < expires_at
    - session_token and refresh_token are unique across all sessions
    - Refresh rotates both tokens in place (same id)
    - Terminated sessions (is_active=False) are kept for audit, never reused
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(nullable=False, index=True)

    session_token: str = Field(unique=True, index=True, max_length=1024)
    refresh_token: str = Field(unique=True, index=True, max_length=1024)

    # Embedded fingerprint snapshot (DeviceFingerprint.model_dump(mode="json"))
    device_fingerprint: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    # Reference to the UserIdentity row for this device (not owned)
    fingerprint_hash: Optional[str] = Field(default=None, max_length=64, index=True)

    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=1024)

    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))
    last_activity_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_user_active", "user_id", "is_active"),
    )


def is_session_expired(session: Session, now: datetime) -> bool:
    return now >= session.expires_at


def is_session_live(session: Session, now: datetime) -> bool:
    return session.is_active and not is_session_expired(session, now)
