"""
Session Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the session domain.
Provides type safety and clear contracts between layers.
"""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.domain.fingerprint import ClientHints, DeviceFingerprint
from src.domain.risk import LoginVerdict


# ============================================================================
# Command DTOs
# ============================================================================


class CreateSessionCommand(BaseModel):
    """
    Command to open a session for an already authenticated user.

    fingerprint may be passed pre-built; otherwise it is built from the
    request signals (user_agent, ip_address, headers, client_hints).
    """

    user_id: Optional[UUID] = None
    user_agent: str = ""
    ip_address: Optional[str] = None
    # Network details already known to the caller (e.g. from an edge proxy)
    country: Optional[str] = None
    isp: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    client_hints: Optional[ClientHints] = None
    fingerprint: Optional[DeviceFingerprint] = None


# ============================================================================
# Response DTOs
# ============================================================================


class CreateSessionResponse(BaseModel):
    """Response for create session use case"""

    session_id: UUID
    session_token: str
    refresh_token: str
    expires_at: datetime
    fingerprint_hash: str
    identity_id: UUID
    is_new_device: bool
    suspicious_login: LoginVerdict


class RefreshSessionResponse(BaseModel):
    """Response for refresh session use case"""

    session_id: UUID
    session_token: str
    refresh_token: str
    expires_at: datetime


class SessionResponse(BaseModel):
    """Session details without credentials"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    fingerprint_hash: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    is_active: bool
    created_at: datetime
    expires_at: datetime
    last_activity_at: datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class SessionListResponse(BaseModel):
    """Response for get user sessions use case"""

    sessions: List[SessionResponse]
    pagination: Pagination


class SessionStatsResponse(BaseModel):
    """Response for get session stats use case"""

    total: int
    active: int
    expired: int


class TerminateSessionResponse(BaseModel):
    """Response for terminate session use case"""

    session_id: UUID
    terminated: bool


class TerminateAllSessionsResponse(BaseModel):
    """Response for terminate all sessions use case"""

    terminated_count: int


class EnforceConcurrencyCapResponse(BaseModel):
    """Response for enforce concurrency cap use case"""

    evicted_session_id: Optional[UUID] = None
    active_count: int


class CleanupExpiredSessionsResponse(BaseModel):
    """Response for cleanup expired sessions use case"""

    deactivated_count: int


def paginate(page: int, limit: int, total: int) -> Pagination:
    total_pages = (total + limit - 1) // limit if limit > 0 else 0
    return Pagination(page=page, limit=limit, total=total, total_pages=total_pages)
