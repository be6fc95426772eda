from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.models.user import utcnow


def season_payload(season_id: str | None = "s1", **overrides) -> dict:
    now = utcnow()
    payload = {
        "name": "Spring",
        "start_at": (now - timedelta(hours=1)).isoformat(),
        "end_at": (now + timedelta(days=14)).isoformat(),
    }
    if season_id:
        payload["id"] = season_id
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_start_season(client: AsyncClient, admin_headers: dict):
    response = await client.post(
        "/api/v1/admin/seasons",
        json=season_payload(default_visibility="ANON_COUNT"),
        headers=admin_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["id"] == "s1"
    assert data["active"] is True
    assert data["default_visibility"] == "ANON_COUNT"
    assert data["mutual_reveal_enabled"] is True

    active = await client.get("/api/v1/seasons/active")
    assert active.status_code == 200
    assert active.json()["id"] == "s1"


@pytest.mark.asyncio
async def test_start_season_generates_id(client: AsyncClient, admin_headers: dict):
    response = await client.post(
        "/api/v1/admin/seasons",
        json=season_payload(season_id=None),
        headers=admin_headers,
    )

    assert response.status_code == 201
    assert response.json()["id"]


@pytest.mark.asyncio
async def test_start_season_requires_admin(client: AsyncClient, login_as):
    headers = await login_as("alice")

    response = await client.post(
        "/api/v1/admin/seasons",
        json=season_payload(),
        headers=headers,
    )

    assert response.status_code == 403
    assert response.json()["code"] == "AUTHZ_ADMIN_REQUIRED"


@pytest.mark.asyncio
async def test_start_season_rejects_bad_window(client: AsyncClient, admin_headers: dict):
    now = utcnow()

    response = await client.post(
        "/api/v1/admin/seasons",
        json=season_payload(
            start_at=now.isoformat(),
            end_at=(now - timedelta(days=1)).isoformat(),
        ),
        headers=admin_headers,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_start_season_duplicate_id(client: AsyncClient, admin_headers: dict):
    await client.post("/api/v1/admin/seasons", json=season_payload(), headers=admin_headers)

    response = await client.post(
        "/api/v1/admin/seasons",
        json=season_payload(),
        headers=admin_headers,
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_new_season_replaces_active(client: AsyncClient, admin_headers: dict):
    await client.post("/api/v1/admin/seasons", json=season_payload("s1"), headers=admin_headers)
    await client.post(
        "/api/v1/admin/seasons",
        json=season_payload("s2", name="Summer"),
        headers=admin_headers,
    )

    active = await client.get("/api/v1/seasons/active")
    assert active.json()["id"] == "s2"

    response = await client.get("/api/v1/seasons/")
    data = response.json()
    assert data["total"] == 2
    assert {s["id"]: s["active"] for s in data["seasons"]} == {"s1": False, "s2": True}


@pytest.mark.asyncio
async def test_end_season(client: AsyncClient, admin_headers: dict):
    await client.post("/api/v1/admin/seasons", json=season_payload(), headers=admin_headers)

    response = await client.post("/api/v1/admin/seasons/s1/end", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["active"] is False

    active = await client.get("/api/v1/seasons/active")
    assert active.status_code == 404

    again = await client.post("/api/v1/admin/seasons/s1/end", headers=admin_headers)
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_end_unknown_season(client: AsyncClient, admin_headers: dict):
    response = await client.post("/api/v1/admin/seasons/nope/end", headers=admin_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_season(client: AsyncClient, active_season):
    response = await client.get("/api/v1/seasons/s1")

    assert response.status_code == 200
    assert response.json()["name"] == "Spring"

    missing = await client.get("/api/v1/seasons/nope")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_no_active_season(client: AsyncClient):
    response = await client.get("/api/v1/seasons/active")

    assert response.status_code == 404
