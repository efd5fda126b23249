"""
Session & Identity Domain Entities

All persisted entities, one per file.
"""

# Export all enums
from .enums import (
    ActivityAction,
    DeviceType,
    LoginFlag,
    RiskLevel,
    SuspicionLevel,
    VerificationMethod,
)

# Export all entities
from .session import Session, is_session_expired, is_session_live
from .user_identity import UserIdentity
from .user_activity import UserActivity

__all__ = [
    # Enums
    "ActivityAction",
    "DeviceType",
    "LoginFlag",
    "RiskLevel",
    "SuspicionLevel",
    "VerificationMethod",
    # Entities
    "Session",
    "UserIdentity",
    "UserActivity",
    # Session helpers
    "is_session_expired",
    "is_session_live",
]
