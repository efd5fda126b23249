"""
Unit tests for concurrency cap, expiry sweep and session queries
"""

import pytest
from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

from src.app.use_cases.sessions import (
    CleanupExpiredSessionsUseCase,
    EnforceConcurrencyCapUseCase,
    GetSessionStatsUseCase,
    GetUserSessionsUseCase,
    evict_oldest_session,
)
from src.domain.base import utcnow
from src.domain.entities import Session


def make_session(user_id, minutes_ago=0):
    now = utcnow()
    seen = now - timedelta(minutes=minutes_ago)
    return Session(
        id=uuid4(),
        user_id=user_id,
        session_token=f"s-{uuid4()}",
        refresh_token=f"r-{uuid4()}",
        created_at=seen,
        expires_at=now + timedelta(hours=1),
        last_activity_at=seen,
    )


@pytest.mark.asyncio
async def test_evict_nothing_below_cap(mock_uow):
    user_id = uuid4()
    mock_uow.sessions.get_active_by_user_id = AsyncMock(return_value=[make_session(user_id)])
    mock_uow.sessions.deactivate = AsyncMock()

    evicted = await evict_oldest_session(mock_uow.sessions, user_id, 2)

    assert evicted is None
    mock_uow.sessions.deactivate.assert_not_called()


@pytest.mark.asyncio
async def test_evict_skips_session_taken_by_concurrent_eviction(mock_uow):
    user_id = uuid4()
    oldest, middle, newest = (make_session(user_id, m) for m in (30, 20, 10))
    mock_uow.sessions.get_active_by_user_id = AsyncMock(return_value=[oldest, middle, newest])
    mock_uow.sessions.deactivate = AsyncMock(side_effect=[False, True])

    evicted = await evict_oldest_session(mock_uow.sessions, user_id, 3)

    assert evicted is middle


@pytest.mark.asyncio
async def test_enforce_cap_of_one_keeps_most_recent(mock_uow):
    user_id = uuid4()
    older, recent = make_session(user_id, 30), make_session(user_id, 1)
    mock_uow.sessions.get_active_by_user_id = AsyncMock(side_effect=[[older, recent], [recent]])
    mock_uow.sessions.deactivate = AsyncMock(return_value=True)
    mock_uow.activities.create = AsyncMock()

    result = await EnforceConcurrencyCapUseCase(mock_uow).execute(user_id, 1)

    assert result.is_ok()
    assert result.value.evicted_session_id == older.id
    assert result.value.active_count == 1
    mock_uow.sessions.deactivate.assert_called_once_with(older.id)


@pytest.mark.asyncio
async def test_enforce_cap_rejects_non_positive_cap(mock_uow):
    with pytest.raises(ValueError):
        await EnforceConcurrencyCapUseCase(mock_uow).execute(uuid4(), 0)


@pytest.mark.asyncio
async def test_cleanup_expired_sessions(mock_uow):
    mock_uow.sessions.deactivate_expired = AsyncMock(return_value=4)

    result = await CleanupExpiredSessionsUseCase(mock_uow).execute()

    assert result.value.deactivated_count == 4
    mock_uow.sessions.deactivate_expired.assert_called_once()
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_list_sessions_paginates(mock_uow):
    user_id = uuid4()
    page_items = [make_session(user_id), make_session(user_id)]
    mock_uow.sessions.list_by_user_id = AsyncMock(return_value=(page_items, 12))

    result = await GetUserSessionsUseCase(mock_uow).execute(user_id, is_active=True, page=2, limit=5)

    assert result.is_ok()
    assert len(result.value.sessions) == 2
    pagination = result.value.pagination
    assert (pagination.page, pagination.limit, pagination.total, pagination.total_pages) == (2, 5, 12, 3)
    mock_uow.sessions.list_by_user_id.assert_called_once_with(
        user_id, is_active=True, limit=5, offset=5
    )


@pytest.mark.asyncio
async def test_list_sessions_rejects_bad_page(mock_uow):
    with pytest.raises(ValueError):
        await GetUserSessionsUseCase(mock_uow).execute(uuid4(), page=0)


@pytest.mark.asyncio
async def test_session_stats(mock_uow):
    mock_uow.sessions.get_stats = AsyncMock(return_value={"total": 5, "active": 2, "expired": 3})

    result = await GetSessionStatsUseCase(mock_uow).execute(uuid4())

    assert result.value.total == 5
    assert result.value.active == 2
    assert result.value.expired == 3
