"""
Unit tests for Refresh Session Use Case
"""

import pytest
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from src.app.use_cases.sessions import RefreshSessionUseCase
from src.domain.base import utcnow
from src.domain.entities import ActivityAction, Session
from src.libs.result import Error, Return


def make_session(expires_in=timedelta(hours=1), is_active=True):
    now = utcnow()
    return Session(
        id=uuid4(),
        user_id=uuid4(),
        session_token="old-session",
        refresh_token="old-refresh",
        is_active=is_active,
        created_at=now - timedelta(minutes=30),
        expires_at=now + expires_in,
        last_activity_at=now - timedelta(minutes=30),
    )


def issuer_for(session, claims=None):
    issuer = MagicMock()
    counter = iter(range(1000))
    issuer.issue = MagicMock(side_effect=lambda c, ttl: f"{c['type']}-{next(counter)}")
    issuer.verify = MagicMock(
        return_value=Return.ok(
            claims or {"sub": str(session.user_id), "sid": str(session.id), "type": "refresh"}
        )
    )
    return issuer


@pytest.mark.asyncio
async def test_refresh_rotates_tokens(mock_uow):
    session = make_session()
    mock_uow.sessions.get_by_refresh_token = AsyncMock(return_value=session)
    mock_uow.sessions.rotate_tokens = AsyncMock(return_value=True)
    mock_uow.activities.create = AsyncMock()

    use_case = RefreshSessionUseCase(mock_uow, issuer_for(session), session_ttl_seconds=600)
    result = await use_case.execute("old-refresh", ip_address="203.0.113.10")

    assert result.is_ok()
    response = result.value
    assert response.session_id == session.id
    assert response.session_token not in ("old-session", response.refresh_token)
    assert response.refresh_token != "old-refresh"

    kwargs = mock_uow.sessions.rotate_tokens.call_args.kwargs
    assert kwargs["expected_refresh_token"] == "old-refresh"
    assert kwargs["session_token"] == response.session_token
    assert kwargs["refresh_token"] == response.refresh_token
    assert (kwargs["expires_at"] - kwargs["last_activity_at"]).total_seconds() == 600
    mock_uow.commit.assert_called()

    activity = mock_uow.activities.create.call_args.args[0]
    assert activity.action == ActivityAction.session_refreshed.value


@pytest.mark.asyncio
async def test_refresh_unknown_token(mock_uow):
    mock_uow.sessions.get_by_refresh_token = AsyncMock(return_value=None)

    result = await RefreshSessionUseCase(mock_uow, MagicMock()).execute("missing")

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_refresh_inactive_session(mock_uow):
    session = make_session(is_active=False)
    mock_uow.sessions.get_by_refresh_token = AsyncMock(return_value=session)

    result = await RefreshSessionUseCase(mock_uow, issuer_for(session)).execute("old-refresh")

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_refresh_expired_session_deactivates(mock_uow):
    session = make_session(expires_in=-timedelta(minutes=1))
    mock_uow.sessions.get_by_refresh_token = AsyncMock(return_value=session)
    mock_uow.sessions.deactivate = AsyncMock(return_value=True)
    mock_uow.sessions.rotate_tokens = AsyncMock()

    result = await RefreshSessionUseCase(mock_uow, issuer_for(session)).execute("old-refresh")

    assert result.error.code == "SESSION_EXPIRED"
    mock_uow.sessions.deactivate.assert_called_once_with(session.id)
    mock_uow.sessions.rotate_tokens.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_rejects_bad_signature(mock_uow):
    session = make_session()
    mock_uow.sessions.get_by_refresh_token = AsyncMock(return_value=session)
    issuer = issuer_for(session)
    issuer.verify = MagicMock(return_value=Return.err(Error("INVALID_TOKEN", "bad")))

    result = await RefreshSessionUseCase(mock_uow, issuer).execute("old-refresh")

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_refresh_rejects_session_token_used_as_refresh(mock_uow):
    session = make_session()
    mock_uow.sessions.get_by_refresh_token = AsyncMock(return_value=session)
    issuer = issuer_for(
        session, claims={"sub": str(session.user_id), "sid": str(session.id), "type": "session"}
    )

    result = await RefreshSessionUseCase(mock_uow, issuer).execute("old-refresh")

    assert result.error.code == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_concurrent_refresh_conflict(mock_uow):
    session = make_session()
    mock_uow.sessions.get_by_refresh_token = AsyncMock(return_value=session)
    mock_uow.sessions.rotate_tokens = AsyncMock(return_value=False)

    result = await RefreshSessionUseCase(mock_uow, issuer_for(session)).execute("old-refresh")

    assert result.is_err()
    assert result.error.code == "REFRESH_CONFLICT"
    mock_uow.commit.assert_not_called()
