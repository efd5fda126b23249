"""
Fingerprint Builder

Turns raw request signals and optional client hints into a DeviceFingerprint.
Pure: no state, no I/O. build() never raises; any internal failure yields
the minimal fallback fingerprint.
"""

import hashlib
import json
import logging
import re
from typing import Mapping, Optional, Tuple

from user_agents import parse as parse_user_agent
from user_agents.parsers import UserAgent

from src.domain.base import utcnow
from src.domain.entities.enums import DeviceType
from src.domain.fingerprint import (
    BrowserInfo,
    ClientHints,
    ClientSignals,
    DeviceFingerprint,
    DeviceInfo,
    DisplayInfo,
    FingerprintMetadata,
    HardwareInfo,
    MobileInfo,
    NetworkInfo,
    RawSignals,
    SecurityInfo,
)

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
OTHER = "Other"
FALLBACK_TIMEZONE = "UTC"

MOBILE_KEYWORDS = (
    "Mobile",
    "Android",
    "iPhone",
    "iPad",
    "iPod",
    "BlackBerry",
    "Windows Phone",
    "webOS",
    "Opera Mini",
    "IEMobile",
)
TABLET_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE) for p in (r"iPad", r"Android.*Tablet", r"Tablet")
)
DESKTOP_KEYWORDS = ("Windows", "Mac", "Linux", "CrOS")
SMART_TV_KEYWORDS = ("SmartTV", "SMART-TV", "TV")
NATIVE_APP_KEYWORDS = ("MyApp/", "CompanyApp/", "com.company.app", "CFNetwork", "Darwin", "okhttp")
APP_VERSION_PATTERN = re.compile(r"(?:MyApp|CompanyApp)/(\d+\.\d+\.\d+)")

# user_agents does not report the rendering engine; first fragment match wins
BROWSER_ENGINES = (
    ("Edge", "Blink"),
    ("Opera", "Blink"),
    ("Samsung Internet", "Blink"),
    ("Vivaldi", "Blink"),
    ("Brave", "Blink"),
    ("Yandex", "Blink"),
    ("Chrom", "Blink"),
    ("Firefox", "Gecko"),
    ("Safari", "WebKit"),
    ("IE", "Trident"),
)


def is_mobile(user_agent: str) -> bool:
    return any(keyword in user_agent for keyword in MOBILE_KEYWORDS)


def is_tablet(user_agent: str) -> bool:
    return any(pattern.search(user_agent) for pattern in TABLET_PATTERNS)


def is_native_app(user_agent: str) -> bool:
    return any(keyword in user_agent for keyword in NATIVE_APP_KEYWORDS)


def extract_app_version(user_agent: str) -> Optional[str]:
    match = APP_VERSION_PATTERN.search(user_agent)
    return match.group(1) if match else None


def detect_device_type(user_agent: str, hints: ClientHints) -> str:
    """
    Keyword match first, screen aspect ratio second, else unknown.

    A keyword match always wins over conflicting screen geometry.
    """
    if is_mobile(user_agent):
        return DeviceType.tablet.value if is_tablet(user_agent) else DeviceType.mobile.value

    if any(keyword in user_agent for keyword in DESKTOP_KEYWORDS):
        return DeviceType.desktop.value

    if any(keyword in user_agent for keyword in SMART_TV_KEYWORDS):
        return DeviceType.smart_tv.value

    if hints.screen_width and hints.screen_height:
        ratio = hints.screen_width / hints.screen_height
        if ratio > 1.5:
            return DeviceType.desktop.value
        if ratio < 0.8:
            return DeviceType.mobile.value

    return DeviceType.unknown.value


def _known(value: Optional[str]) -> str:
    if not value or value == OTHER:
        return UNKNOWN
    return value


def parse_browser(user_agent: UserAgent) -> BrowserInfo:
    name = _known(user_agent.browser.family)
    version = _known(user_agent.browser.version_string)
    engine = _engine_for(name, user_agent.os.family)
    engine_version = version if engine in ("Blink", "Gecko") else UNKNOWN
    return BrowserInfo(name=name, version=version, engine=engine, engine_version=engine_version)


def parse_platform(user_agent: UserAgent) -> Tuple[str, str]:
    return _known(user_agent.os.family), _known(user_agent.os.version_string)


def parse_hardware_vendor(user_agent: UserAgent) -> Tuple[str, str]:
    return _known(user_agent.device.brand), _known(user_agent.device.model)


def _engine_for(browser: str, platform: str) -> str:
    # Every iOS browser renders with WebKit
    if platform == "iOS" and browser != UNKNOWN:
        return "WebKit"
    for fragment, engine in BROWSER_ENGINES:
        if fragment in browser:
            return engine
    return UNKNOWN


def client_ip(headers: Mapping[str, str], peer_ip: Optional[str] = None) -> str:
    """First X-Forwarded-For hop, else X-Real-IP, else the socket peer"""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return headers.get("x-real-ip") or peer_ip or "unknown"


def compute_fingerprint_hash(user_agent: str, hints: ClientHints) -> str:
    """
    SHA-256 over a canonical JSON projection of the stable signal subset.

    Only user agent, screen geometry, timezone, language and the canvas and
    webgl hashes participate, so equal inputs always hash identically.
    """
    projection = {
        "userAgent": user_agent,
        "screen": f"{hints.screen_width}x{hints.screen_height}",
        "timezone": hints.timezone,
        "language": hints.language,
        "canvas": hints.canvas,
        "webgl": hints.webgl,
    }
    canonical = json.dumps(projection, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def compute_confidence(fingerprint: DeviceFingerprint) -> int:
    """Completeness of a fingerprint on a 0-100 scale"""
    checks = (
        (fingerprint.browser.name != UNKNOWN, 10),
        (fingerprint.browser.version != UNKNOWN, 10),
        (fingerprint.device.platform != UNKNOWN, 10),
        (fingerprint.device.platform_version != UNKNOWN, 10),
        (fingerprint.device.type != DeviceType.unknown.value, 15),
        (fingerprint.network.country != "unknown", 15),
        (fingerprint.network.timezone is not None, 5),
        (fingerprint.display.width is not None, 5),
        (fingerprint.display.height is not None, 5),
        (bool(fingerprint.security.language), 5),
        (fingerprint.client_signals.canvas_hash is not None, 5),
        (fingerprint.client_signals.webgl_hash is not None, 5),
    )
    return sum(weight for present, weight in checks if present)


class FingerprintBuilder:
    """
    Builds DeviceFingerprint values from partially-missing signals.

    Business Rules:
    - Always returns a fully-populated structure
    - Empty user agent classifies as Unknown/unknown
    - Never raises; falls back to a minimal fingerprint on failure
    """

    def build(
        self, raw_signals: RawSignals, client_hints: Optional[ClientHints] = None
    ) -> DeviceFingerprint:
        try:
            return self._build(raw_signals, client_hints or ClientHints())
        except Exception:
            logger.exception("Fingerprint construction failed, using fallback")
            return self.fallback(raw_signals)

    def _build(self, raw: RawSignals, hints: ClientHints) -> DeviceFingerprint:
        user_agent = raw.user_agent or ""
        headers = {k.lower(): v for k, v in raw.headers.items()}
        parsed = parse_user_agent(user_agent)
        platform, platform_version = parse_platform(parsed)
        brand, model = parse_hardware_vendor(parsed)

        return DeviceFingerprint(
            device=DeviceInfo(
                type=detect_device_type(user_agent, hints),
                brand=brand,
                model=model,
                platform=platform,
                platform_version=platform_version,
            ),
            browser=parse_browser(parsed),
            network=NetworkInfo(
                ip_address=raw.ip_address or client_ip(headers),
                isp=raw.isp or "unknown",
                country=raw.country or "unknown",
                timezone=hints.timezone or raw.timezone,
            ),
            display=DisplayInfo(
                width=hints.screen_width,
                height=hints.screen_height,
                pixel_ratio=hints.pixel_ratio,
                color_depth=hints.color_depth,
                orientation=hints.orientation or "unknown",
            ),
            hardware=HardwareInfo(
                cpu_cores=hints.cpu_cores,
                memory=hints.memory,
                battery=hints.battery,
                sensors=tuple(hints.sensors),
            ),
            client_signals=ClientSignals(
                canvas_hash=hints.canvas,
                webgl_hash=hints.webgl,
                audio_hash=hints.audio,
                fonts=tuple(hints.fonts),
                plugins=tuple(hints.plugins),
            ),
            mobile=MobileInfo(
                is_mobile=is_mobile(user_agent),
                is_tablet=is_tablet(user_agent),
                is_native_app=is_native_app(user_agent),
                app_version=extract_app_version(user_agent),
                device_id=hints.device_id,
                push_token=hints.push_token,
            ),
            security=_security_info(headers),
            metadata=FingerprintMetadata(
                timestamp=utcnow(),
                raw_user_agent=user_agent,
                fingerprint_hash=compute_fingerprint_hash(user_agent, hints),
            ),
        )

    def fallback(self, raw_signals: RawSignals) -> DeviceFingerprint:
        """Minimal fingerprint: device-type guess, IP, timezone and hash of the user agent"""
        user_agent = (raw_signals.user_agent if raw_signals else "") or ""
        ip_address = (raw_signals.ip_address if raw_signals else None) or "unknown"
        timezone = (raw_signals.timezone if raw_signals else None) or FALLBACK_TIMEZONE
        mobile = is_mobile(user_agent)
        return DeviceFingerprint(
            device=DeviceInfo(
                type=DeviceType.mobile.value if mobile else DeviceType.desktop.value
            ),
            network=NetworkInfo(ip_address=ip_address, timezone=timezone),
            mobile=MobileInfo(is_mobile=mobile),
            metadata=FingerprintMetadata(
                timestamp=utcnow(),
                raw_user_agent=user_agent,
                fingerprint_hash=compute_fingerprint_hash(user_agent, ClientHints()),
            ),
        )


def _security_info(headers: Mapping[str, str]) -> SecurityInfo:
    return SecurityInfo(
        do_not_track=headers.get("dnt", "0"),
        language=headers.get("accept-language", "en"),
        encoding=headers.get("accept-encoding", ""),
    )
