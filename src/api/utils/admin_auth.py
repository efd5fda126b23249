"""
API Key Authentication

Validates API keys for service-to-service and administration endpoints.
"""

from fastapi import Header, status
from src.libs.result import Error
from src.api.error import ClientError
from config import ApplicationConfig


def _check_api_key(provided: str, expected: str, label: str) -> bool:
    if not provided:
        raise ClientError(
            Error("UNAUTHORIZED", f"{label} API key required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    if provided != expected:
        raise ClientError(
            Error("INVALID_API_KEY", f"Invalid {label.lower()} API key"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return True


async def verify_admin_api_key(x_admin_api_key: str = Header(None)):
    """
    Verify admin API key from X-Admin-API-Key header.

    Used by operators and scheduled jobs (expiry sweeps, identity review).

    Raises:
        ClientError: 401 if key is missing or invalid
    """
    return _check_api_key(x_admin_api_key, ApplicationConfig.ADMIN_API_KEY, "Admin")


async def verify_service_api_key(x_service_api_key: str = Header(None)):
    """
    Verify service API key from X-Service-API-Key header.

    Session creation is only called by the credential checker after it has
    authenticated the user, never by end users directly.

    Raises:
        ClientError: 401 if key is missing or invalid
    """
    return _check_api_key(x_service_api_key, ApplicationConfig.SERVICE_API_KEY, "Service")
