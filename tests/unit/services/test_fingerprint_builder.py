"""
Unit tests for the Fingerprint Builder
"""

from unittest.mock import patch

from src.app.services.fingerprint_builder import (
    FingerprintBuilder,
    client_ip,
    compute_confidence,
    compute_fingerprint_hash,
    detect_device_type,
)
from src.domain.fingerprint import ClientHints, RawSignals

CHROME_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1"
)
SAFARI_IPAD = (
    "Mozilla/5.0 (iPad; CPU OS 17_1 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1"
)
CHROME_SAMSUNG = (
    "Mozilla/5.0 (Linux; Android 13; SM-S918B) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/116.0.0.0 Mobile Safari/537.36"
)
FIREFOX_LINUX = "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"
FIREFOX_ANDROID = "Mozilla/5.0 (Android 13; Mobile; rv:121.0) Gecko/121.0 Firefox/121.0"
VIVALDI_WINDOWS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Vivaldi/6.5.3206.48"
)

FULL_HINTS = ClientHints(
    screen_width=1920,
    screen_height=1080,
    timezone="America/New_York",
    language="en-US",
    canvas="canvas-abc",
    webgl="webgl-def",
)


def build(user_agent="", hints=None, **raw):
    return FingerprintBuilder().build(RawSignals(user_agent=user_agent, **raw), hints)


def test_chrome_on_windows_is_parsed():
    fp = build(CHROME_WINDOWS, ip_address="203.0.113.10", country="US")

    assert fp.device.type == "desktop"
    assert fp.device.platform == "Windows"
    assert fp.device.platform_version == "10"
    assert fp.device.brand == "Unknown"
    assert fp.browser.name == "Chrome"
    assert fp.browser.version.startswith("120.0")
    assert fp.browser.engine == "Blink"
    assert fp.network.ip_address == "203.0.113.10"
    assert fp.network.country == "US"
    assert fp.mobile.is_mobile is False


def test_iphone_safari_is_mobile_apple():
    fp = build(SAFARI_IPHONE)

    assert fp.device.type == "mobile"
    assert fp.device.brand == "Apple"
    assert fp.device.model == "iPhone"
    assert fp.device.platform == "iOS"
    assert fp.device.platform_version == "17.1"
    assert fp.browser.name == "Mobile Safari"
    assert fp.browser.engine == "WebKit"
    assert fp.mobile.is_mobile is True


def test_ipad_is_tablet():
    fp = build(SAFARI_IPAD)

    assert fp.device.type == "tablet"
    assert fp.device.model == "iPad"
    assert fp.mobile.is_tablet is True


def test_android_vendor_from_model():
    fp = build(CHROME_SAMSUNG)

    assert fp.device.type == "mobile"
    assert fp.device.brand == "Samsung"
    assert fp.device.model == "SM-S918B"
    assert fp.device.platform == "Android"
    assert fp.device.platform_version == "13"
    assert fp.browser.name == "Chrome Mobile"
    assert fp.browser.engine == "Blink"


def test_firefox_on_android_has_no_gecko_token_as_model():
    fp = build(FIREFOX_ANDROID)

    assert fp.device.type == "mobile"
    assert fp.device.brand == "Generic"
    assert fp.device.model == "Smartphone"
    assert fp.device.platform == "Android"
    assert fp.browser.name == "Firefox Mobile"
    assert fp.browser.engine == "Gecko"


def test_chromium_derivative_keeps_its_own_name():
    fp = build(VIVALDI_WINDOWS)

    assert fp.browser.name == "Vivaldi"
    assert fp.browser.engine == "Blink"


def test_firefox_on_linux_uses_gecko():
    fp = build(FIREFOX_LINUX)

    assert fp.device.type == "desktop"
    assert fp.device.platform == "Linux"
    assert fp.browser.name == "Firefox"
    assert fp.browser.version == "121.0"
    assert fp.browser.engine == "Gecko"


def test_empty_user_agent_is_unknown_everywhere():
    fp = build("")

    assert fp.device.type == "unknown"
    assert fp.device.brand == "Unknown"
    assert fp.device.platform == "Unknown"
    assert fp.browser.name == "Unknown"
    assert fp.browser.version == "Unknown"
    assert fp.network.ip_address == "unknown"
    assert fp.network.country == "unknown"
    assert fp.fingerprint_hash


def test_every_section_present_without_hints():
    fp = build(CHROME_WINDOWS)

    assert fp.display.width is None
    assert fp.display.orientation == "unknown"
    assert fp.hardware.sensors == ()
    assert fp.client_signals.canvas_hash is None
    assert fp.client_signals.fonts == ()
    assert fp.mobile.device_id is None
    assert fp.metadata.raw_user_agent == CHROME_WINDOWS


def test_device_type_from_aspect_ratio_when_no_keyword():
    assert detect_device_type("", ClientHints(screen_width=1920, screen_height=1080)) == "desktop"
    assert detect_device_type("", ClientHints(screen_width=390, screen_height=844)) == "mobile"
    assert detect_device_type("", ClientHints(screen_width=1000, screen_height=1000)) == "unknown"


def test_keyword_wins_over_conflicting_aspect_ratio():
    portrait = ClientHints(screen_width=390, screen_height=844)

    assert detect_device_type(CHROME_WINDOWS, portrait) == "desktop"


def test_smart_tv_keyword():
    ua = "Mozilla/5.0 (SMART-TV; Tizen 6.0) AppleWebKit/537.36 SamsungBrowser/4.0 TV Safari/537.36"

    assert detect_device_type(ua, ClientHints()) == "smart-tv"


def test_hash_is_deterministic():
    first = build(CHROME_WINDOWS, FULL_HINTS, ip_address="203.0.113.10")
    second = build(CHROME_WINDOWS, FULL_HINTS, ip_address="203.0.113.10")

    assert first.fingerprint_hash == second.fingerprint_hash
    assert len(first.fingerprint_hash) == 64


def test_hash_ignores_unstable_signals():
    first = build(CHROME_WINDOWS, FULL_HINTS, ip_address="203.0.113.10", country="US")
    second = build(CHROME_WINDOWS, FULL_HINTS, ip_address="198.51.100.7", country="DE")

    assert first.fingerprint_hash == second.fingerprint_hash


def test_hash_changes_with_stable_signals():
    other_canvas = FULL_HINTS.model_copy(update={"canvas": "canvas-xyz"})

    assert compute_fingerprint_hash(CHROME_WINDOWS, FULL_HINTS) != compute_fingerprint_hash(
        CHROME_WINDOWS, other_canvas
    )
    assert compute_fingerprint_hash(CHROME_WINDOWS, FULL_HINTS) != compute_fingerprint_hash(
        FIREFOX_LINUX, FULL_HINTS
    )


def test_build_falls_back_on_internal_failure():
    builder = FingerprintBuilder()
    raw = RawSignals(user_agent=SAFARI_IPHONE, ip_address="203.0.113.10")

    with patch.object(builder, "_build", side_effect=RuntimeError("boom")):
        fp = builder.build(raw, FULL_HINTS)

    assert fp.device.type == "mobile"
    assert fp.network.ip_address == "203.0.113.10"
    assert fp.fingerprint_hash == compute_fingerprint_hash(SAFARI_IPHONE, ClientHints())
    assert fp.browser.name == "Unknown"


def test_security_info_from_headers():
    fp = build(
        CHROME_WINDOWS,
        headers={"DNT": "1", "Accept-Language": "fr-FR", "Accept-Encoding": "gzip"},
    )

    assert fp.security.do_not_track == "1"
    assert fp.security.language == "fr-FR"
    assert fp.security.encoding == "gzip"


def test_client_ip_resolution_order():
    assert client_ip({"x-forwarded-for": "203.0.113.1, 10.0.0.1"}, "127.0.0.1") == "203.0.113.1"
    assert client_ip({"x-real-ip": "203.0.113.2"}, "127.0.0.1") == "203.0.113.2"
    assert client_ip({}, "127.0.0.1") == "127.0.0.1"
    assert client_ip({}) == "unknown"


def test_confidence_reflects_completeness():
    sparse = build("")
    rich = build(CHROME_WINDOWS, FULL_HINTS, country="US")

    assert 0 <= compute_confidence(sparse) < compute_confidence(rich) <= 100
    assert compute_confidence(rich) == 100


def test_fingerprint_survives_storage_round_trip():
    fp = build(CHROME_WINDOWS, FULL_HINTS, country="US")

    restored = type(fp).from_record(fp.to_record())

    assert restored == fp


def test_ip_timezone_fills_in_when_hints_have_none():
    assert build(CHROME_WINDOWS, timezone="Europe/Paris").network.timezone == "Europe/Paris"
    assert build(CHROME_WINDOWS, FULL_HINTS, timezone="Europe/Paris").network.timezone == (
        "America/New_York"
    )


def test_fallback_timezone_defaults_to_utc():
    builder = FingerprintBuilder()

    assert builder.fallback(RawSignals(user_agent=CHROME_WINDOWS)).network.timezone == "UTC"
    assert (
        builder.fallback(RawSignals(user_agent=CHROME_WINDOWS, timezone="Asia/Tokyo")).network.timezone
        == "Asia/Tokyo"
    )
