"""
UserActivity Entity

Append-only log of login/logout/termination and identity events.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class UserActivity(SQLModel, table=True):
    """
    UserActivity entity - immutable activity log.

    Business Rules:
    - Never updated or deleted
    - Writing it must never fail the operation that produced it
    """

    __tablename__ = "user_activities"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: Optional[UUID] = Field(default=None, index=True)
    session_id: Optional[UUID] = Field(default=None, index=True)

    action: str = Field(max_length=100)  # ActivityAction value
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=1024)
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_activity_created_at", "created_at"),
        Index("idx_activity_user_action", "user_id", "action"),
    )
