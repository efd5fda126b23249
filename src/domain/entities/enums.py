"""
Session & Identity Domain Enums

All enumeration types used across domain entities and value objects.
"""

from enum import Enum


class RiskLevel(str, Enum):
    """Persistent identity risk tier (0-100 risk score scale)"""

    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class SuspicionLevel(str, Enum):
    """One-shot login verdict tier (flag-sum scale)"""

    none = "none"
    low = "low"
    medium = "medium"
    high = "high"


class VerificationMethod(str, Enum):
    """How an identity was verified"""

    email = "email"
    sms = "sms"
    two_factor = "2fa"
    biometric = "biometric"
    manual = "manual"


class DeviceType(str, Enum):
    """Device class inferred from the user agent or screen geometry"""

    desktop = "desktop"
    mobile = "mobile"
    tablet = "tablet"
    smart_tv = "smart-tv"
    unknown = "unknown"


class LoginFlag(str, Enum):
    """Flags raised by the suspicious login comparison"""

    new_device = "new_device"
    location_change = "location_change"
    unknown_device = "unknown_device"
    limited_fingerprint = "limited_fingerprint"


class ActivityAction(str, Enum):
    """Actions recorded by the activity logger"""

    login = "login"
    logout = "logout"
    session_refreshed = "session_refreshed"
    session_terminated = "session_terminated"
    session_evicted = "session_evicted"
    identity_blocked = "identity_blocked"
    identity_unblocked = "identity_unblocked"
    identity_verified = "identity_verified"
