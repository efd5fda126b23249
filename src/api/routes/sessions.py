from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel, Field

from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_service_api_key
from src.app.services.fingerprint_builder import client_ip
from src.app.services.geolocator import IGeoLocator
from src.app.services.token_issuer import ITokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import (
    CreateSessionCommand,
    CreateSessionResponse,
    CreateSessionUseCase,
    GetSessionStatsUseCase,
    GetUserSessionsUseCase,
    RefreshSessionResponse,
    RefreshSessionUseCase,
    SessionListResponse,
    SessionResponse,
    SessionStatsResponse,
    TerminateAllSessionsResponse,
    TerminateAllSessionsUseCase,
    TerminateSessionResponse,
    TerminateSessionUseCase,
)
from src.depends import (
    get_current_session,
    get_geolocator,
    get_token_issuer,
    get_unit_of_work,
)
from src.domain.entities import Session
from src.domain.fingerprint import ClientHints

router = APIRouter(prefix="/sessions", tags=["Sessions"])

TOKEN_ERRORS = ("INVALID_TOKEN", "SESSION_EXPIRED")


def _request_ip(request: Request) -> str:
    peer = request.client.host if request.client else None
    return client_ip(request.headers, peer)


class CreateSessionRequest(BaseModel):
    """
    Create session HTTP request payload

    Sent by the credential checker once the user is authenticated. Signals
    default to the ones observed on this request when omitted.
    """

    user_id: UUID = Field(..., description="Authenticated user ID")
    user_agent: Optional[str] = Field(None, description="Client user agent")
    ip_address: Optional[str] = Field(None, description="Client IP address")
    country: Optional[str] = Field(None, description="Client country, if known")
    isp: Optional[str] = Field(None, description="Client ISP, if known")
    client_hints: Optional[ClientHints] = Field(
        None, description="Client-collected device signals"
    )


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=CreateSessionResponse,
    dependencies=[Depends(verify_service_api_key)],
)
async def create_session(
    body: CreateSessionRequest,
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_issuer: ITokenIssuer = Depends(get_token_issuer),
    geolocator: IGeoLocator = Depends(get_geolocator),
):
    """
    Create Session

    Builds the device fingerprint, evaluates the login against the user's
    device history and issues a session/refresh token pair.

    Requires: X-Service-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid service API key
        - 403 Forbidden: DEVICE_BLOCKED
        - 500 Internal Server Error: Server error
    """
    command = CreateSessionCommand(
        user_id=body.user_id,
        user_agent=(
            body.user_agent
            if body.user_agent is not None
            else request.headers.get("user-agent", "")
        ),
        ip_address=body.ip_address or _request_ip(request),
        country=body.country,
        isp=body.isp,
        headers=dict(request.headers),
        client_hints=body.client_hints,
    )

    use_case = CreateSessionUseCase(uow, token_issuer, geolocator=geolocator)
    result = await use_case.execute(command)

    if result.is_err():
        error = result.error
        if error.code == "DEVICE_BLOCKED":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return result.value


class RefreshSessionRequest(BaseModel):
    """Refresh session HTTP request payload"""

    refresh_token: str = Field(..., min_length=1, description="Current refresh token")


@router.post(
    "/refresh", status_code=status.HTTP_200_OK, response_model=RefreshSessionResponse
)
async def refresh_session(
    body: RefreshSessionRequest,
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    token_issuer: ITokenIssuer = Depends(get_token_issuer),
):
    """
    Refresh Session

    Rotates both tokens of the session in place. The previous pair stops
    working immediately.

    Raises:
        - 401 Unauthorized: INVALID_TOKEN, SESSION_EXPIRED
        - 409 Conflict: REFRESH_CONFLICT (concurrent refresh lost the race)
        - 500 Internal Server Error: Server error
    """
    use_case = RefreshSessionUseCase(uow, token_issuer)
    result = await use_case.execute(
        body.refresh_token,
        ip_address=_request_ip(request),
        user_agent=request.headers.get("user-agent"),
    )

    if result.is_err():
        error = result.error
        if error.code in TOKEN_ERRORS:
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == "REFRESH_CONFLICT":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)

    return result.value


@router.get("/current", status_code=status.HTTP_200_OK, response_model=SessionResponse)
async def get_current(current_session: Session = Depends(get_current_session)):
    """
    Validate Session

    Returns the session behind the Bearer token and records activity.

    Raises:
        - 401 Unauthorized: INVALID_TOKEN, SESSION_EXPIRED
    """
    return SessionResponse.model_validate(current_session)


@router.get("", status_code=status.HTTP_200_OK, response_model=SessionListResponse)
async def list_sessions(
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_session: Session = Depends(get_current_session),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """List the caller's sessions, newest first"""
    use_case = GetUserSessionsUseCase(uow)
    result = await use_case.execute(
        current_session.user_id, is_active=is_active, page=page, limit=limit
    )

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.get("/stats", status_code=status.HTTP_200_OK, response_model=SessionStatsResponse)
async def session_stats(
    current_session: Session = Depends(get_current_session),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Session counts for the caller"""
    result = await GetSessionStatsUseCase(uow).execute(current_session.user_id)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_200_OK,
    response_model=TerminateSessionResponse,
)
async def terminate_session(
    session_id: UUID,
    current_session: Session = Depends(get_current_session),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Terminate Session

    Logs out one of the caller's sessions (including the current one).

    Raises:
        - 401 Unauthorized: INVALID_TOKEN, SESSION_EXPIRED
        - 403 Forbidden: UNAUTHORIZED (session belongs to another user)
        - 404 Not Found: SESSION_NOT_FOUND
        - 500 Internal Server Error: Server error
    """
    use_case = TerminateSessionUseCase(uow)
    result = await use_case.execute(session_id, current_session.user_id)

    if result.is_err():
        error = result.error
        if error.code == "UNAUTHORIZED":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code == "SESSION_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


class TerminateAllSessionsRequest(BaseModel):
    """Terminate all sessions HTTP request payload"""

    keep_current: bool = Field(True, description="Keep the calling session active")


@router.post(
    "/terminate-all",
    status_code=status.HTTP_200_OK,
    response_model=TerminateAllSessionsResponse,
)
async def terminate_all_sessions(
    body: TerminateAllSessionsRequest,
    current_session: Session = Depends(get_current_session),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Terminate All Sessions

    Logs out every session of the caller, optionally keeping the current one.

    Raises:
        - 401 Unauthorized: INVALID_TOKEN, SESSION_EXPIRED
        - 500 Internal Server Error: Server error
    """
    use_case = TerminateAllSessionsUseCase(uow)
    result = await use_case.execute(
        current_session.user_id,
        exclude_session_id=current_session.id if body.keep_current else None,
    )

    if result.is_err():
        raise ServerError(result.error)

    return result.value
