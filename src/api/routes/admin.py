"""
Admin API Routes - Session and Identity Administration

These endpoints are for operators and scheduled jobs.
Authentication is via Admin API Key, not session tokens.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.identities import (
    BlockIdentityUseCase,
    CleanupInactiveIdentitiesResponse,
    CleanupInactiveIdentitiesUseCase,
    CompareIdentitiesResponse,
    CompareIdentitiesUseCase,
    GetIdentityStatsUseCase,
    GetSuspiciousIdentitiesUseCase,
    GetUserIdentitiesUseCase,
    GetUserIdentityAnalysisUseCase,
    IdentityAnalysisResponse,
    IdentityListResponse,
    IdentityResponse,
    IdentityStatsResponse,
    UnblockIdentityUseCase,
    UpdateRiskScoreUseCase,
    VerifyIdentityUseCase,
)
from src.app.use_cases.sessions import (
    CleanupExpiredSessionsResponse,
    CleanupExpiredSessionsUseCase,
    EnforceConcurrencyCapResponse,
    EnforceConcurrencyCapUseCase,
    TerminateAllSessionsResponse,
    TerminateAllSessionsUseCase,
)
from src.depends import get_unit_of_work
from src.domain.entities import RiskLevel
from src.libs.result import Error

router = APIRouter(
    prefix="/admin", tags=["Admin"], dependencies=[Depends(verify_admin_api_key)]
)


def _raise_identity_error(error: Error):
    if error.code == "IDENTITY_NOT_FOUND":
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    elif error.code == "INVALID_VERIFICATION_METHOD":
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    raise ServerError(error)


# ============================================================================
# Sessions
# ============================================================================


@router.post(
    "/sessions/cleanup",
    status_code=status.HTTP_200_OK,
    response_model=CleanupExpiredSessionsResponse,
)
async def cleanup_expired_sessions(uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Cleanup Expired Sessions

    Deactivates every active session past its expiry. Safe to run while
    serving traffic.

    Requires: X-Admin-API-Key header
    """
    result = await CleanupExpiredSessionsUseCase(uow).execute()

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.post(
    "/users/{user_id}/sessions/terminate",
    status_code=status.HTTP_200_OK,
    response_model=TerminateAllSessionsResponse,
)
async def terminate_user_sessions(
    user_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Terminate All Sessions of a User

    Typically paired with blocking a device, since blocking alone does not
    end sessions that were already issued.

    Requires: X-Admin-API-Key header
    """
    result = await TerminateAllSessionsUseCase(uow).execute(user_id)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


class EnforceCapRequest(BaseModel):
    max_sessions: int = Field(
        ApplicationConfig.MAX_CONCURRENT_SESSIONS, ge=1, description="Session cap"
    )


@router.post(
    "/users/{user_id}/sessions/enforce-cap",
    status_code=status.HTTP_200_OK,
    response_model=EnforceConcurrencyCapResponse,
)
async def enforce_concurrency_cap(
    user_id: UUID,
    body: EnforceCapRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Enforce Concurrency Cap

    Evicts the least recently active session if the user is at the cap.

    Requires: X-Admin-API-Key header
    """
    result = await EnforceConcurrencyCapUseCase(uow).execute(user_id, body.max_sessions)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


# ============================================================================
# Identities
# ============================================================================


@router.get(
    "/users/{user_id}/identities",
    status_code=status.HTTP_200_OK,
    response_model=IdentityListResponse,
)
async def list_user_identities(
    user_id: UUID,
    is_active: Optional[bool] = Query(None),
    is_blocked: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """List a user's device identities, most recently seen first"""
    result = await GetUserIdentitiesUseCase(uow).execute(
        user_id, is_active=is_active, is_blocked=is_blocked, page=page, limit=limit
    )

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.get(
    "/users/{user_id}/identities/analysis",
    status_code=status.HTTP_200_OK,
    response_model=IdentityAnalysisResponse,
)
async def analyze_user_identities(
    user_id: UUID,
    days: int = Query(7, ge=1, le=90, description="Activity window in days"),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    User Identity Analysis

    Identity summary, behavior profile over the last `days` days of login
    activity, and recommendations.
    """
    result = await GetUserIdentityAnalysisUseCase(uow).execute(user_id, days=days)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.get(
    "/identities/suspicious",
    status_code=status.HTTP_200_OK,
    response_model=IdentityListResponse,
)
async def list_suspicious_identities(
    risk_level: str = Query("all", description="all, low, medium, high or critical"),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    List Suspicious Identities

    Active identities at the given risk level ("all" = medium and above),
    riskiest first.

    Raises:
        - 400 Bad Request: INVALID_RISK_LEVEL
    """
    level = None
    if risk_level != "all":
        try:
            level = RiskLevel(risk_level)
        except ValueError:
            raise ClientError(
                Error("INVALID_RISK_LEVEL", f"Unknown risk level: {risk_level}"),
                status_code=status.HTTP_400_BAD_REQUEST,
            )

    result = await GetSuspiciousIdentitiesUseCase(uow).execute(level, page=page, limit=limit)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.get(
    "/identities/stats",
    status_code=status.HTTP_200_OK,
    response_model=IdentityStatsResponse,
)
async def identity_stats(
    user_id: Optional[UUID] = Query(None),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Identity counts and average risk/trust scores"""
    result = await GetIdentityStatsUseCase(uow).execute(user_id)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.get(
    "/identities/compare",
    status_code=status.HTTP_200_OK,
    response_model=CompareIdentitiesResponse,
)
async def compare_identities(
    first_id: UUID = Query(...),
    second_id: UUID = Query(...),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Compare Identities

    Weighted field-by-field comparison of two identities' fingerprints.

    Raises:
        - 404 Not Found: IDENTITY_NOT_FOUND
    """
    result = await CompareIdentitiesUseCase(uow).execute(first_id, second_id)

    if result.is_err():
        _raise_identity_error(result.error)

    return result.value


class VerifyIdentityRequest(BaseModel):
    method: str = Field(..., description="email, sms, 2fa, biometric or manual")


@router.post(
    "/identities/{identity_id}/verify",
    status_code=status.HTTP_200_OK,
    response_model=IdentityResponse,
)
async def verify_identity(
    identity_id: UUID,
    body: VerifyIdentityRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Verify Identity

    Raises:
        - 400 Bad Request: INVALID_VERIFICATION_METHOD
        - 404 Not Found: IDENTITY_NOT_FOUND
    """
    result = await VerifyIdentityUseCase(uow).execute(identity_id, body.method)

    if result.is_err():
        _raise_identity_error(result.error)

    return result.value


class BlockIdentityRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500, description="Block reason")


@router.post(
    "/identities/{identity_id}/block",
    status_code=status.HTTP_200_OK,
    response_model=IdentityResponse,
)
async def block_identity(
    identity_id: UUID,
    body: BlockIdentityRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Block Identity

    Future logins from the device fail with DEVICE_BLOCKED. Existing
    sessions stay valid until terminated separately.

    Raises:
        - 404 Not Found: IDENTITY_NOT_FOUND
    """
    result = await BlockIdentityUseCase(uow).execute(identity_id, body.reason)

    if result.is_err():
        _raise_identity_error(result.error)

    return result.value


@router.post(
    "/identities/{identity_id}/unblock",
    status_code=status.HTTP_200_OK,
    response_model=IdentityResponse,
)
async def unblock_identity(
    identity_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Unblock Identity

    Raises:
        - 404 Not Found: IDENTITY_NOT_FOUND
    """
    result = await UnblockIdentityUseCase(uow).execute(identity_id)

    if result.is_err():
        _raise_identity_error(result.error)

    return result.value


class UpdateRiskScoreRequest(BaseModel):
    risk_score: float = Field(..., description="New score, clamped to 0-100")


@router.put(
    "/identities/{identity_id}/risk-score",
    status_code=status.HTTP_200_OK,
    response_model=IdentityResponse,
)
async def update_risk_score(
    identity_id: UUID,
    body: UpdateRiskScoreRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Update Risk Score

    Raises:
        - 404 Not Found: IDENTITY_NOT_FOUND
    """
    result = await UpdateRiskScoreUseCase(uow).execute(identity_id, body.risk_score)

    if result.is_err():
        _raise_identity_error(result.error)

    return result.value


class CleanupIdentitiesRequest(BaseModel):
    days_inactive: int = Field(ApplicationConfig.IDENTITY_INACTIVE_DAYS, ge=0)


@router.post(
    "/identities/cleanup",
    status_code=status.HTTP_200_OK,
    response_model=CleanupInactiveIdentitiesResponse,
)
async def cleanup_inactive_identities(
    body: CleanupIdentitiesRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Cleanup Inactive Identities

    Deactivates identities not seen for days_inactive days. Rows are kept.
    """
    result = await CleanupInactiveIdentitiesUseCase(uow).execute(body.days_inactive)

    if result.is_err():
        raise ServerError(result.error)

    return result.value
