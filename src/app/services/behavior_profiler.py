"""
Behavior Profiler

Pure functions summarizing a user's identities and recent login activity
into an operator-facing profile with recommendations. The profile score is
its own 0-100 scale and is never written to an identity.
"""

import math
from collections import Counter
from datetime import datetime, timedelta
from typing import Hashable, Iterable, List, Optional, Sequence

from src.domain.entities import ActivityAction, RiskLevel, UserActivity, UserIdentity
from src.domain.risk import (
    BehaviorProfile,
    DeviceUsage,
    IdentitySummary,
    LocationPatterns,
    LoginPatterns,
    TimePatterns,
)

RECENTLY_SEEN_WINDOW = timedelta(days=7)
UNKNOWN_VALUES = (None, "", "unknown", "Unknown")

# Profile score contributions
MANY_DEVICES_THRESHOLD = 3
MANY_DEVICES_SCORE = 20
MANY_LOCATIONS_THRESHOLD = 2
MANY_LOCATIONS_SCORE = 15
EARLY_HOUR = 6
LATE_HOUR = 22
UNUSUAL_HOURS_SCORE = 10
HIGH_FREQUENCY_PER_DAY = 5
HIGH_FREQUENCY_SCORE = 15
MAX_PROFILE_SCORE = 100

HIGH_PROFILE_RISK = 70


def _known(values: Iterable) -> List:
    return [value for value in values if value not in UNKNOWN_VALUES]


def most_frequent(values: Iterable[Hashable]) -> Optional[Hashable]:
    """Most common known value; ties go to the value seen first"""
    counts = Counter(_known(values))
    if not counts:
        return None
    return counts.most_common(1)[0][0]


def days_between(start: Optional[datetime], end: Optional[datetime]) -> int:
    """Whole days spanned, rounded up; 1 when either end is missing"""
    if start is None or end is None:
        return 1
    return math.ceil(abs((end - start).total_seconds()) / 86400)


def summarize_identities(
    identities: Sequence[UserIdentity], now: datetime
) -> IdentitySummary:
    """Counts and averages over every identity a user has"""
    if not identities:
        return IdentitySummary()

    countries = _known((identity.location or {}).get("country") for identity in identities)
    risk_levels = Counter(RiskLevel(identity.risk_level).value for identity in identities)
    recent_cutoff = now - RECENTLY_SEEN_WINDOW
    total = len(identities)

    return IdentitySummary(
        total_identities=total,
        unique_devices=len({identity.fingerprint_hash for identity in identities}),
        countries=tuple(sorted(set(countries))),
        risk_levels=dict(risk_levels),
        average_risk_score=sum(identity.risk_score for identity in identities) / total,
        average_trust_score=sum(identity.trust_score for identity in identities) / total,
        verified_count=sum(1 for identity in identities if identity.is_verified),
        blocked_count=sum(1 for identity in identities if identity.is_blocked),
        recently_seen=sum(1 for identity in identities if identity.last_seen >= recent_cutoff),
    )


def build_profile(activities: Sequence[UserActivity]) -> BehaviorProfile:
    """
    Profile a user's recent login activity.

    Only login activities count. Device and location come from the login's
    metadata (fingerprint_hash, device_type, country); hours are UTC.
    """
    logins = [a for a in activities if a.action == ActivityAction.login.value]
    metadata = [login.event_metadata or {} for login in logins]
    hashes = [m.get("fingerprint_hash") for m in metadata]
    countries = [m.get("country") for m in metadata]
    hours = [login.created_at.hour for login in logins]

    timestamps = sorted(login.created_at for login in logins)
    span = days_between(timestamps[0], timestamps[-1]) if timestamps else 1

    unique_devices = len(set(_known(hashes)))
    unique_locations = len(set(_known(countries)))

    profile = BehaviorProfile(
        login_patterns=LoginPatterns(
            total_logins=len(logins),
            average_per_day=len(logins) / max(1, span),
            devices_used=unique_devices,
            locations_used=unique_locations,
        ),
        device_usage=DeviceUsage(
            unique_devices=unique_devices,
            most_used_device=most_frequent(hashes),
            device_types=tuple(sorted(set(_known(m.get("device_type") for m in metadata)))),
        ),
        location_patterns=LocationPatterns(
            unique_locations=unique_locations,
            most_frequent_location=most_frequent(countries),
            countries=tuple(sorted(set(_known(countries)))),
        ),
        time_patterns=TimePatterns(
            average_hour=sum(hours) / len(hours) if hours else None,
            most_active_hour=most_frequent(hours),
            earliest_hour=min(hours) if hours else None,
            latest_hour=max(hours) if hours else None,
        ),
    )
    return profile.model_copy(update={"risk_score": profile_risk_score(profile)})


def _unusual_hours(time_patterns: TimePatterns) -> bool:
    average = time_patterns.average_hour
    return average is not None and (average < EARLY_HOUR or average > LATE_HOUR)


def profile_risk_score(profile: BehaviorProfile) -> int:
    score = 0
    if profile.device_usage.unique_devices > MANY_DEVICES_THRESHOLD:
        score += MANY_DEVICES_SCORE
    if profile.location_patterns.unique_locations > MANY_LOCATIONS_THRESHOLD:
        score += MANY_LOCATIONS_SCORE
    if _unusual_hours(profile.time_patterns):
        score += UNUSUAL_HOURS_SCORE
    if profile.login_patterns.average_per_day > HIGH_FREQUENCY_PER_DAY:
        score += HIGH_FREQUENCY_SCORE
    return min(MAX_PROFILE_SCORE, score)


def recommendations_for(summary: IdentitySummary, profile: BehaviorProfile) -> List[str]:
    recommendations = []
    if profile.risk_score > HIGH_PROFILE_RISK:
        recommendations.append(
            "High risk behavior detected. Consider additional security measures."
        )
    if summary.unique_devices > MANY_DEVICES_THRESHOLD:
        recommendations.append(
            f"User has {summary.unique_devices} different devices. "
            "Consider device verification."
        )
    if len(summary.countries) > MANY_LOCATIONS_THRESHOLD:
        recommendations.append(
            f"User has accessed from {len(summary.countries)} different locations. "
            "Monitor for unusual activity."
        )
    if _unusual_hours(profile.time_patterns):
        recommendations.append(
            "User has unusual login time patterns. Consider time-based restrictions."
        )
    if profile.login_patterns.average_per_day > HIGH_FREQUENCY_PER_DAY:
        recommendations.append(
            "High login frequency detected. Consider implementing rate limiting."
        )
    if summary.verified_count < summary.total_identities:
        recommendations.append(
            "Some user identities are unverified. Consider identity verification."
        )
    return recommendations
