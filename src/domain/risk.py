"""
Risk Value Objects

Two distinct scales live here and are never mixed:
- LoginVerdict: one-shot flag-sum verdict for a single login (none/low/medium/high)
- BehaviorAssessment: contribution to the persistent 0-100 identity risk score

FingerprintComparison and BehaviorProfile are operator-facing reports and
feed neither.
"""

from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from src.domain.entities.enums import SuspicionLevel


class LoginVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_suspicious: bool = False
    flags: Tuple[str, ...] = ()
    risk_level: SuspicionLevel = SuspicionLevel.none

    @classmethod
    def clean(cls) -> "LoginVerdict":
        return cls()


class BehaviorAssessment(BaseModel):
    model_config = ConfigDict(frozen=True)

    is_suspicious: bool = False
    reasons: Tuple[str, ...] = ()
    risk_score: int = 0
    recommendations: Tuple[str, ...] = ()


class FieldMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    value: Any = None


class FieldDifference(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    first: Any = None
    second: Any = None


class FingerprintComparison(BaseModel):
    """Weighted field-by-field comparison of two stored fingerprints (0-100)"""

    model_config = ConfigDict(frozen=True)

    score: int = 0
    matches: Tuple[FieldMatch, ...] = ()
    differences: Tuple[FieldDifference, ...] = ()
    risk: SuspicionLevel = SuspicionLevel.high


class LoginPatterns(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_logins: int = 0
    average_per_day: float = 0.0
    devices_used: int = 0
    locations_used: int = 0


class DeviceUsage(BaseModel):
    model_config = ConfigDict(frozen=True)

    unique_devices: int = 0
    most_used_device: Optional[str] = None
    device_types: Tuple[str, ...] = ()


class LocationPatterns(BaseModel):
    model_config = ConfigDict(frozen=True)

    unique_locations: int = 0
    most_frequent_location: Optional[str] = None
    countries: Tuple[str, ...] = ()


class TimePatterns(BaseModel):
    """Login hours (UTC); all None when there is no activity"""

    model_config = ConfigDict(frozen=True)

    average_hour: Optional[float] = None
    most_active_hour: Optional[int] = None
    earliest_hour: Optional[int] = None
    latest_hour: Optional[int] = None


class BehaviorProfile(BaseModel):
    """Patterns over a user's recent login activity and their 0-100 risk score"""

    model_config = ConfigDict(frozen=True)

    login_patterns: LoginPatterns = LoginPatterns()
    device_usage: DeviceUsage = DeviceUsage()
    location_patterns: LocationPatterns = LocationPatterns()
    time_patterns: TimePatterns = TimePatterns()
    risk_score: int = 0


class IdentitySummary(BaseModel):
    """Aggregate view over every identity a user has"""

    model_config = ConfigDict(frozen=True)

    total_identities: int = 0
    unique_devices: int = 0
    countries: Tuple[str, ...] = ()
    risk_levels: Dict[str, int] = {}
    average_risk_score: float = 0.0
    average_trust_score: float = 100.0
    verified_count: int = 0
    blocked_count: int = 0
    recently_seen: int = 0
