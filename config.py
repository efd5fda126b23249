import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./sessions.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")
    SERVICE_API_KEY = data.get("SERVICE_API_KEY", "test-service-key-12345")

    # Session lifecycle
    SESSION_TTL_SECONDS = int(data.get("SESSION_TTL_SECONDS", 3600))
    REFRESH_TOKEN_TTL_SECONDS = int(data.get("REFRESH_TOKEN_TTL_SECONDS", 604800))
    MAX_CONCURRENT_SESSIONS = int(data.get("MAX_CONCURRENT_SESSIONS", 5))

    # Identity risk
    SUSPICIOUS_LOGIN_HISTORY_SIZE = int(data.get("SUSPICIOUS_LOGIN_HISTORY_SIZE", 5))
    FINGERPRINT_SIMILARITY_THRESHOLD = float(
        data.get("FINGERPRINT_SIMILARITY_THRESHOLD", 0.8)
    )
    IDENTITY_INACTIVE_DAYS = int(data.get("IDENTITY_INACTIVE_DAYS", 30))
    AUTO_BLOCK_CRITICAL_RISK = bool(data.get("AUTO_BLOCK_CRITICAL_RISK", False))

    # IP geolocation enrichment
    GEOLOCATION_ENABLED = bool(data.get("GEOLOCATION_ENABLED", False))
    GEOLOCATION_API_URL = data.get(
        "GEOLOCATION_API_URL", "http://ip-api.com/json/{ip}?fields=status,country,isp,timezone"
    )
    GEOLOCATION_TIMEOUT_SECONDS = float(data.get("GEOLOCATION_TIMEOUT_SECONDS", 3))
