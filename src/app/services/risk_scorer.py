"""
Similarity & Risk Scorer

Pure functions comparing fingerprints and turning behavioral signals into
risk levels. No state, no I/O, never raises on well-formed fingerprints.

Two scales are kept apart:
- risk_level_for: persistent identity score 0-100 -> low/medium/high/critical
- flags_for / suspicion_level_for: one-shot flag sum -> none/low/medium/high
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from src.domain.entities.enums import DeviceType, LoginFlag, RiskLevel, SuspicionLevel
from src.domain.fingerprint import DeviceFingerprint
from src.domain.risk import (
    BehaviorAssessment,
    FieldDifference,
    FieldMatch,
    FingerprintComparison,
    LoginVerdict,
)

DEFAULT_SIMILARITY_THRESHOLD = 0.8
DISPLAY_TOLERANCE_PX = 50

FLAG_WEIGHTS = {
    LoginFlag.new_device.value: 2,
    LoginFlag.location_change.value: 3,
    LoginFlag.unknown_device.value: 1,
    LoginFlag.limited_fingerprint.value: 1,
}

# Behavioral assessment contributions (persistent 0-100 scale)
LOCATION_CHANGE_SCORE = 30
MULTIPLE_DEVICE_TYPES_SCORE = 20
MULTIPLE_BROWSERS_SCORE = 15
RAPID_LOCATION_CHANGE_SCORE = 25
BEHAVIOR_SUSPICIOUS_SCORE = 50
BEHAVIOR_WINDOW = 5
VERIFY_IDENTITY_RECOMMENDATION = "Verify user identity"
EXTRA_AUTH_RECOMMENDATION = "Consider additional authentication"
RAPID_CHANGE_WINDOW = timedelta(hours=24)

# Side-by-side comparison weights, summing to 100
COMPARISON_FIELDS = (
    ("browser.name", 15),
    ("browser.version", 10),
    ("device.platform", 15),
    ("device.platform_version", 10),
    ("device.type", 10),
    ("network.country", 20),
    ("network.timezone", 15),
    ("display.width", 5),
)
COMPARISON_UNKNOWN = (None, "Unknown", "unknown")


def similarity(fp_a: DeviceFingerprint, fp_b: DeviceFingerprint) -> float:
    """
    Weighted match ratio in [0, 1].

    device type, platform and browser name (3 points), IP and timezone
    (2 points), screen width/height closer than 50px (2 points, only when
    both sides have geometry) and fingerprint hash equality (1 point).
    """
    matches = 0
    total = 0

    matches += fp_a.device.type == fp_b.device.type
    matches += fp_a.device.platform == fp_b.device.platform
    matches += fp_a.browser.name == fp_b.browser.name
    total += 3

    matches += fp_a.network.ip_address == fp_b.network.ip_address
    matches += fp_a.network.timezone == fp_b.network.timezone
    total += 2

    if _has_geometry(fp_a) and _has_geometry(fp_b):
        matches += abs(fp_a.display.width - fp_b.display.width) < DISPLAY_TOLERANCE_PX
        matches += abs(fp_a.display.height - fp_b.display.height) < DISPLAY_TOLERANCE_PX
        total += 2

    matches += fp_a.metadata.fingerprint_hash == fp_b.metadata.fingerprint_hash
    total += 1

    return matches / total if total > 0 else 0.0


def is_consistent(
    fp_a: DeviceFingerprint,
    fp_b: DeviceFingerprint,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> bool:
    return similarity(fp_a, fp_b) >= threshold


def risk_level_for(score: float) -> RiskLevel:
    if score >= 80:
        return RiskLevel.critical
    if score >= 60:
        return RiskLevel.high
    if score >= 30:
        return RiskLevel.medium
    return RiskLevel.low


def suspicion_level_for(flags: Iterable[str]) -> SuspicionLevel:
    total = sum(FLAG_WEIGHTS.get(flag, 0) for flag in flags)
    if total >= 5:
        return SuspicionLevel.high
    if total >= 3:
        return SuspicionLevel.medium
    if total >= 1:
        return SuspicionLevel.low
    return SuspicionLevel.none


def flags_for(
    current: DeviceFingerprint,
    previous_fingerprints: Sequence[DeviceFingerprint],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> LoginVerdict:
    """
    Flag a login against prior fingerprints.

    previous_fingerprints is ordered most recent first; only the most
    recent one is the comparison baseline.
    """
    flags: List[str] = []
    baseline: Optional[DeviceFingerprint] = (
        previous_fingerprints[0] if previous_fingerprints else None
    )

    if baseline is not None:
        if not is_consistent(current, baseline, threshold):
            flags.append(LoginFlag.new_device.value)
        if current.network.country != baseline.network.country:
            flags.append(LoginFlag.location_change.value)

    if current.device.type == DeviceType.unknown.value:
        flags.append(LoginFlag.unknown_device.value)

    signals = current.client_signals
    if not signals.canvas_hash and not signals.webgl_hash:
        flags.append(LoginFlag.limited_fingerprint.value)

    return LoginVerdict(
        is_suspicious=bool(flags),
        flags=tuple(flags),
        risk_level=suspicion_level_for(flags),
    )


def assess_behavior(
    current: DeviceFingerprint,
    previous_fingerprints: Sequence[DeviceFingerprint],
    now: datetime,
) -> BehaviorAssessment:
    """
    Score a sighting against the user's other recent devices (0-100 scale).

    previous_fingerprints is ordered most recent first.
    """
    if not previous_fingerprints:
        return BehaviorAssessment()

    reasons: List[str] = []
    recommendations: List[str] = []
    score = 0
    is_suspicious = False

    recent = previous_fingerprints[:BEHAVIOR_WINDOW]
    location_changed = any(
        fp.network.country != current.network.country for fp in recent
    )
    if location_changed:
        is_suspicious = True
        reasons.append("location_change")
        recommendations.append(VERIFY_IDENTITY_RECOMMENDATION)
        score += LOCATION_CHANGE_SCORE

    if len({fp.device.type for fp in previous_fingerprints}) > 1:
        reasons.append("multiple_device_types")
        score += MULTIPLE_DEVICE_TYPES_SCORE

    if len({fp.browser.name for fp in previous_fingerprints}) > 2:
        reasons.append("multiple_browsers")
        score += MULTIPLE_BROWSERS_SCORE

    latest_seen = recent[0].metadata.timestamp
    if location_changed and abs(now - latest_seen) < RAPID_CHANGE_WINDOW:
        reasons.append("rapid_location_change")
        score += RAPID_LOCATION_CHANGE_SCORE

    if score >= BEHAVIOR_SUSPICIOUS_SCORE:
        is_suspicious = True
        recommendations.append(EXTRA_AUTH_RECOMMENDATION)

    return BehaviorAssessment(
        is_suspicious=is_suspicious,
        reasons=tuple(reasons),
        risk_score=min(score, 100),
        recommendations=tuple(recommendations),
    )


def compare_fingerprints(
    fp_a: DeviceFingerprint, fp_b: DeviceFingerprint
) -> FingerprintComparison:
    """
    Weighted comparison for operators reviewing two devices.

    A field scores its weight only when both sides hold the same known
    value; unequal values are listed as differences. Score >= 80 is low
    risk, >= 60 medium, anything below high.
    """
    score = 0
    matches: List[FieldMatch] = []
    differences: List[FieldDifference] = []

    for path, weight in COMPARISON_FIELDS:
        first, second = _field(fp_a, path), _field(fp_b, path)
        if first == second and first not in COMPARISON_UNKNOWN:
            score += weight
            matches.append(FieldMatch(field=path, value=first))
        elif first != second:
            differences.append(FieldDifference(field=path, first=first, second=second))

    if score >= 80:
        risk = SuspicionLevel.low
    elif score >= 60:
        risk = SuspicionLevel.medium
    else:
        risk = SuspicionLevel.high

    return FingerprintComparison(
        score=score,
        matches=tuple(matches),
        differences=tuple(differences),
        risk=risk,
    )


def _field(fp: DeviceFingerprint, path: str):
    section, name = path.split(".")
    return getattr(getattr(fp, section), name)


def _has_geometry(fp: DeviceFingerprint) -> bool:
    return fp.display.width is not None and fp.display.height is not None
