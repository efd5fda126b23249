import pytest
from datetime import timedelta
from uuid import uuid4

from httpx import AsyncClient

from src.adapter.repositories.session_repository import SessionRepository
from src.adapter.repositories.user_identity_repository import UserIdentityRepository
from src.domain.base import utcnow
from tests.utils.api import ADMIN_HEADERS, bearer


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_admin_requires_api_key(client: AsyncClient):
    missing = await client.get("/admin/identities/stats")
    assert missing.status_code == 401
    assert missing.json()["error"]["code"] == "UNAUTHORIZED"

    wrong = await client.get("/admin/identities/stats", headers={"X-Admin-API-Key": "nope"})
    assert wrong.status_code == 401
    assert wrong.json()["error"]["code"] == "INVALID_API_KEY"


@pytest.mark.asyncio
async def test_user_identities_listing(client: AsyncClient, login):
    user_id = uuid4()
    await login(user_id)
    await login(user_id, user_agent="CustomHttpClient/0.9", hints=None)

    response = await client.get(f"/admin/users/{user_id}/identities", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["total"] == 2
    assert {i["user_id"] for i in body["identities"]} == {str(user_id)}


@pytest.mark.asyncio
async def test_risk_score_update_and_suspicious_listing(client: AsyncClient, login):
    data = (await login(uuid4())).json()
    identity_id = data["identity_id"]

    updated = await client.put(
        f"/admin/identities/{identity_id}/risk-score",
        json={"risk_score": 150},
        headers=ADMIN_HEADERS,
    )
    assert updated.status_code == 200
    assert updated.json()["risk_score"] == 100
    assert updated.json()["risk_level"] == "critical"

    critical = await client.get(
        "/admin/identities/suspicious?risk_level=critical", headers=ADMIN_HEADERS
    )
    assert critical.status_code == 200
    assert [i["id"] for i in critical.json()["identities"]] == [identity_id]

    lowered = await client.put(
        f"/admin/identities/{identity_id}/risk-score",
        json={"risk_score": 10},
        headers=ADMIN_HEADERS,
    )
    assert lowered.json()["risk_level"] == "low"

    default = await client.get("/admin/identities/suspicious", headers=ADMIN_HEADERS)
    assert default.json()["identities"] == []


@pytest.mark.asyncio
async def test_suspicious_listing_rejects_unknown_level(client: AsyncClient):
    response = await client.get(
        "/admin/identities/suspicious?risk_level=extreme", headers=ADMIN_HEADERS
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_RISK_LEVEL"


@pytest.mark.asyncio
async def test_risk_score_unknown_identity(client: AsyncClient):
    response = await client.put(
        f"/admin/identities/{uuid4()}/risk-score",
        json={"risk_score": 50},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "IDENTITY_NOT_FOUND"


@pytest.mark.asyncio
async def test_verify_identity(client: AsyncClient, login):
    data = (await login(uuid4())).json()

    invalid = await client.post(
        f"/admin/identities/{data['identity_id']}/verify",
        json={"method": "carrier-pigeon"},
        headers=ADMIN_HEADERS,
    )
    assert invalid.status_code == 400
    assert invalid.json()["error"]["code"] == "INVALID_VERIFICATION_METHOD"

    response = await client.post(
        f"/admin/identities/{data['identity_id']}/verify",
        json={"method": "2fa"},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["is_verified"] is True
    assert body["verification_method"] == "2fa"
    assert body["verified_at"] is not None
    assert body["trust_score"] == 100


@pytest.mark.asyncio
async def test_block_then_unblock_allows_login_again(client: AsyncClient, login):
    user_id = uuid4()
    data = (await login(user_id)).json()

    await client.post(
        f"/admin/identities/{data['identity_id']}/block",
        json={"reason": "chargeback"},
        headers=ADMIN_HEADERS,
    )
    assert (await login(user_id)).status_code == 403

    response = await client.post(
        f"/admin/identities/{data['identity_id']}/unblock", headers=ADMIN_HEADERS
    )
    assert response.status_code == 200
    assert response.json()["is_blocked"] is False
    assert response.json()["is_active"] is True
    assert response.json()["blocked_reason"] is None

    again = await login(user_id)
    assert again.status_code == 201
    assert again.json()["identity_id"] == data["identity_id"]


@pytest.mark.asyncio
async def test_identity_stats(client: AsyncClient, login):
    user_id = uuid4()
    first = (await login(user_id)).json()
    await login(user_id, user_agent="CustomHttpClient/0.9", hints=None)
    await client.post(
        f"/admin/identities/{first['identity_id']}/block",
        json={"reason": "manual review"},
        headers=ADMIN_HEADERS,
    )

    response = await client.get(f"/admin/identities/stats?user_id={user_id}", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    stats = response.json()
    assert stats["total"] == 2
    assert stats["active"] == 1
    assert stats["blocked"] == 1
    assert stats["verified"] == 0


@pytest.mark.asyncio
async def test_cleanup_inactive_identities(client: AsyncClient, login, db_session):
    user_id = uuid4()
    stale = (await login(user_id)).json()
    fresh = (await login(user_id, user_agent="CustomHttpClient/0.9", hints=None)).json()

    repo = UserIdentityRepository(db_session)
    identity = await repo.get_by_user_and_hash(user_id, stale["fingerprint_hash"])
    identity.last_seen = utcnow() - timedelta(days=45)
    db_session.add(identity)
    await db_session.commit()

    response = await client.post(
        "/admin/identities/cleanup", json={"days_inactive": 30}, headers=ADMIN_HEADERS
    )

    assert response.status_code == 200
    assert response.json()["deactivated_count"] == 1

    await db_session.refresh(identity)
    assert identity.is_active is False
    kept = await repo.get_by_user_and_hash(user_id, fresh["fingerprint_hash"])
    await db_session.refresh(kept)
    assert kept.is_active is True


@pytest.mark.asyncio
async def test_cleanup_expired_sessions(client: AsyncClient, login, db_session):
    expired = (await login(uuid4())).json()
    live = (await login(uuid4())).json()

    repo = SessionRepository(db_session)
    stored = await repo.get_by_session_token(expired["session_token"])
    stored.expires_at = utcnow() - timedelta(minutes=5)
    db_session.add(stored)
    await db_session.commit()

    first = await client.post("/admin/sessions/cleanup", headers=ADMIN_HEADERS)
    assert first.status_code == 200
    assert first.json()["deactivated_count"] == 1

    second = await client.post("/admin/sessions/cleanup", headers=ADMIN_HEADERS)
    assert second.json()["deactivated_count"] == 0

    assert (await client.get("/sessions/current", headers=bearer(live["session_token"]))).status_code == 200


@pytest.mark.asyncio
async def test_enforce_cap_rejects_zero(client: AsyncClient):
    response = await client.post(
        f"/admin/users/{uuid4()}/sessions/enforce-cap",
        json={"max_sessions": 0},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_compare_identities(client: AsyncClient, login):
    user_id = uuid4()
    first = (await login(user_id)).json()
    second = (await login(user_id, user_agent="CustomHttpClient/0.9", hints=None)).json()

    same = await client.get(
        "/admin/identities/compare",
        params={"first_id": first["identity_id"], "second_id": first["identity_id"]},
        headers=ADMIN_HEADERS,
    )
    assert same.status_code == 200
    assert same.json()["comparison"]["differences"] == []
    assert same.json()["comparison"]["risk"] == "low"

    different = await client.get(
        "/admin/identities/compare",
        params={"first_id": first["identity_id"], "second_id": second["identity_id"]},
        headers=ADMIN_HEADERS,
    )
    assert different.status_code == 200
    body = different.json()
    assert body["second"]["id"] == second["identity_id"]
    assert body["comparison"]["score"] < same.json()["comparison"]["score"]
    assert body["comparison"]["differences"] != []

    missing = await client.get(
        "/admin/identities/compare",
        params={"first_id": first["identity_id"], "second_id": str(uuid4())},
        headers=ADMIN_HEADERS,
    )
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "IDENTITY_NOT_FOUND"


@pytest.mark.asyncio
async def test_user_identity_analysis(client: AsyncClient, login):
    user_id = uuid4()
    await login(user_id)
    await login(user_id, user_agent="CustomHttpClient/0.9", hints=None, country="FR")

    response = await client.get(
        f"/admin/users/{user_id}/identities/analysis", headers=ADMIN_HEADERS
    )

    assert response.status_code == 200
    body = response.json()
    assert body["days"] == 7
    assert body["identity_summary"]["total_identities"] == 2
    assert body["identity_summary"]["countries"] == ["FR", "US"]
    assert body["identity_stats"]["total"] == 2
    profile = body["behavior_profile"]
    assert profile["login_patterns"]["total_logins"] == 2
    assert profile["device_usage"]["unique_devices"] == 2
    assert profile["location_patterns"]["countries"] == ["FR", "US"]
    assert {a["action"] for a in body["recent_activities"]} == {"login"}
    assert "Some user identities are unverified. Consider identity verification." in body[
        "recommendations"
    ]

    bad = await client.get(
        f"/admin/users/{user_id}/identities/analysis?days=0", headers=ADMIN_HEADERS
    )
    assert bad.status_code == 422
