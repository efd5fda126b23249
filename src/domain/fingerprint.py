"""
Device Fingerprint Value Objects

DeviceFingerprint is built fresh on every login, never mutated and compared
by value. Every field is always present; missing signals are None or empty.
"""

from datetime import datetime
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from src.domain.base import utcnow


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class DeviceInfo(_Frozen):
    type: str = "unknown"
    brand: str = "Unknown"
    model: str = "Unknown"
    platform: str = "Unknown"
    platform_version: str = "Unknown"


class BrowserInfo(_Frozen):
    name: str = "Unknown"
    version: str = "Unknown"
    engine: str = "Unknown"
    engine_version: str = "Unknown"


class NetworkInfo(_Frozen):
    ip_address: str = "unknown"
    isp: str = "unknown"
    country: str = "unknown"
    timezone: Optional[str] = None


class DisplayInfo(_Frozen):
    width: Optional[int] = None
    height: Optional[int] = None
    pixel_ratio: Optional[float] = None
    color_depth: Optional[int] = None
    orientation: str = "unknown"


class HardwareInfo(_Frozen):
    cpu_cores: Optional[int] = None
    memory: Optional[float] = None
    battery: Optional[float] = None
    sensors: Tuple[str, ...] = ()


class ClientSignals(_Frozen):
    canvas_hash: Optional[str] = None
    webgl_hash: Optional[str] = None
    audio_hash: Optional[str] = None
    fonts: Tuple[str, ...] = ()
    plugins: Tuple[str, ...] = ()


class MobileInfo(_Frozen):
    is_mobile: bool = False
    is_tablet: bool = False
    is_native_app: bool = False
    app_version: Optional[str] = None
    device_id: Optional[str] = None
    push_token: Optional[str] = None


class SecurityInfo(_Frozen):
    do_not_track: str = "0"
    language: str = "en"
    encoding: str = ""


class FingerprintMetadata(_Frozen):
    timestamp: datetime = Field(default_factory=utcnow)
    raw_user_agent: str = ""
    fingerprint_hash: str = ""


class DeviceFingerprint(_Frozen):
    """Structured, hashed summary of a client's device/browser/network signals"""

    device: DeviceInfo = Field(default_factory=DeviceInfo)
    browser: BrowserInfo = Field(default_factory=BrowserInfo)
    network: NetworkInfo = Field(default_factory=NetworkInfo)
    display: DisplayInfo = Field(default_factory=DisplayInfo)
    hardware: HardwareInfo = Field(default_factory=HardwareInfo)
    client_signals: ClientSignals = Field(default_factory=ClientSignals)
    mobile: MobileInfo = Field(default_factory=MobileInfo)
    security: SecurityInfo = Field(default_factory=SecurityInfo)
    metadata: FingerprintMetadata = Field(default_factory=FingerprintMetadata)

    @property
    def fingerprint_hash(self) -> str:
        return self.metadata.fingerprint_hash

    def to_record(self) -> dict:
        """JSON-safe dict for storage in a JSON column"""
        return self.model_dump(mode="json")

    @classmethod
    def from_record(cls, record: dict) -> "DeviceFingerprint":
        return cls.model_validate(record)


class RawSignals(BaseModel):
    """Server-observed request signals"""

    user_agent: str = ""
    ip_address: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    # IP-derived enrichment (geolocation lookup), optional
    country: Optional[str] = None
    isp: Optional[str] = None
    timezone: Optional[str] = None


class ClientHints(BaseModel):
    """Optional client-collected signals; every field may be absent"""

    model_config = ConfigDict(extra="ignore")

    screen_width: Optional[int] = None
    screen_height: Optional[int] = None
    pixel_ratio: Optional[float] = None
    color_depth: Optional[int] = None
    orientation: Optional[str] = None
    timezone: Optional[str] = None
    language: Optional[str] = None
    canvas: Optional[str] = None
    webgl: Optional[str] = None
    audio: Optional[str] = None
    fonts: Tuple[str, ...] = ()
    plugins: Tuple[str, ...] = ()
    cpu_cores: Optional[int] = None
    memory: Optional[float] = None
    battery: Optional[float] = None
    sensors: Tuple[str, ...] = ()
    device_id: Optional[str] = None
    push_token: Optional[str] = None
