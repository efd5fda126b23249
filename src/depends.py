from typing import Optional

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.http_geolocator import HttpGeoLocator
from src.adapter.services.jwt_token_issuer import JwtTokenIssuer
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError, ServerError
from src.app.services.geolocator import IGeoLocator, NullGeoLocator
from src.app.services.token_issuer import ITokenIssuer
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import ValidateSessionUseCase
from src.domain.entities import Session
from src.libs.result import Error

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_token_issuer() -> ITokenIssuer:
    return JwtTokenIssuer()


def get_geolocator() -> IGeoLocator:
    if ApplicationConfig.GEOLOCATION_ENABLED:
        return HttpGeoLocator()
    return NullGeoLocator()


async def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> Session:
    """
    Dependency resolving the Bearer session token to a live session.

    Raises:
        ClientError: 401 INVALID_TOKEN / SESSION_EXPIRED
    """
    if credentials is None:
        raise ClientError(
            Error("INVALID_TOKEN", "Session token required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    result = await ValidateSessionUseCase(uow).execute(credentials.credentials)
    if result.is_err():
        error = result.error
        if error.code in ("INVALID_TOKEN", "SESSION_EXPIRED"):
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    return result.value
