"""
Session Use Cases

Session lifecycle: creation, validation, refresh, termination,
concurrency cap, expiry sweep and queries.
"""

from .create_session_use_case import CreateSessionUseCase
from .validate_session_use_case import ValidateSessionUseCase
from .refresh_session_use_case import RefreshSessionUseCase
from .terminate_session_use_case import TerminateSessionUseCase, TerminateAllSessionsUseCase
from .enforce_concurrency_cap_use_case import EnforceConcurrencyCapUseCase, evict_oldest_session
from .cleanup_expired_sessions_use_case import CleanupExpiredSessionsUseCase
from .get_user_sessions_use_case import GetUserSessionsUseCase, GetSessionStatsUseCase
from .dtos import (
    CreateSessionCommand,
    CreateSessionResponse,
    RefreshSessionResponse,
    SessionResponse,
    SessionListResponse,
    SessionStatsResponse,
    Pagination,
    TerminateSessionResponse,
    TerminateAllSessionsResponse,
    EnforceConcurrencyCapResponse,
    CleanupExpiredSessionsResponse,
)

__all__ = [
    # Use Cases
    "CreateSessionUseCase",
    "ValidateSessionUseCase",
    "RefreshSessionUseCase",
    "TerminateSessionUseCase",
    "TerminateAllSessionsUseCase",
    "EnforceConcurrencyCapUseCase",
    "CleanupExpiredSessionsUseCase",
    "GetUserSessionsUseCase",
    "GetSessionStatsUseCase",
    # Helpers
    "evict_oldest_session",
    # DTOs - Commands
    "CreateSessionCommand",
    # DTOs - Responses
    "CreateSessionResponse",
    "RefreshSessionResponse",
    "SessionResponse",
    "SessionListResponse",
    "SessionStatsResponse",
    "Pagination",
    "TerminateSessionResponse",
    "TerminateAllSessionsResponse",
    "EnforceConcurrencyCapResponse",
    "CleanupExpiredSessionsResponse",
]
