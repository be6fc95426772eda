from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.models.user import utcnow

SEASON_ID = "s1"


async def create_match(
    client: AsyncClient,
    headers_a: dict,
    handle_a: str,
    headers_b: dict,
    handle_b: str,
    season_id: str = SEASON_ID,
) -> str:
    """Helper to create a match between two users. Returns match_id."""
    await client.post(
        "/api/v1/crushes/",
        json={"season_id": season_id, "target_handle": handle_b},
        headers=headers_a,
    )
    response = await client.post(
        "/api/v1/crushes/",
        json={"season_id": season_id, "target_handle": handle_a},
        headers=headers_b,
    )
    return response.json()["match_id"]


@pytest.mark.asyncio
async def test_get_matches_empty(client: AsyncClient, login_as, active_season):
    headers = await login_as("alice")

    response = await client.get("/api/v1/matches/", headers=headers)

    assert response.status_code == 200
    assert response.json() == {"matches": [], "total": 0}


@pytest.mark.asyncio
async def test_both_sides_see_the_match(client: AsyncClient, login_as, active_season):
    alice = await login_as("alice", "Alice")
    bob = await login_as("bob", "Bob")
    carol = await login_as("carol")

    match_id = await create_match(client, bob, "bob", alice, "alice")

    for headers in (alice, bob):
        response = await client.get("/api/v1/matches/", headers=headers)
        data = response.json()
        assert data["total"] == 1
        match = data["matches"][0]
        assert match["id"] == match_id == "s1_alice_bob"
        assert match["user_a_identity"] == "alice"
        assert match["user_a_display_name"] == "Alice"
        assert match["user_b_identity"] == "bob"
        assert match["user_b_display_name"] == "Bob"

    response = await client.get("/api/v1/matches/", headers=carol)
    assert response.json()["total"] == 0


@pytest.mark.asyncio
async def test_one_sided_crush_is_not_a_match(client: AsyncClient, login_as, active_season):
    alice = await login_as("alice")
    bob = await login_as("bob")

    await client.post(
        "/api/v1/crushes/",
        json={"season_id": SEASON_ID, "target_handle": "bob"},
        headers=alice,
    )
    await client.post(
        "/api/v1/crushes/",
        json={"season_id": SEASON_ID, "target_handle": "carol"},
        headers=bob,
    )

    for headers in (alice, bob):
        response = await client.get("/api/v1/matches/", headers=headers)
        assert response.json()["total"] == 0


@pytest.mark.asyncio
async def test_matches_filtered_by_season(
    client: AsyncClient, login_as, active_season, admin_headers
):
    alice = await login_as("alice")
    bob = await login_as("bob")
    await create_match(client, alice, "alice", bob, "bob")

    now = utcnow()
    await client.post(
        "/api/v1/admin/seasons",
        json={
            "id": "s2",
            "name": "Summer",
            "start_at": (now - timedelta(hours=1)).isoformat(),
            "end_at": (now + timedelta(days=1)).isoformat(),
        },
        headers=admin_headers,
    )
    await create_match(client, alice, "alice", bob, "bob", season_id="s2")

    response = await client.get("/api/v1/matches/", headers=alice)
    assert response.json()["total"] == 2

    response = await client.get("/api/v1/matches/", params={"season_id": "s2"}, headers=alice)
    data = response.json()
    assert data["total"] == 1
    assert data["matches"][0]["id"] == "s2_alice_bob"


@pytest.mark.asyncio
async def test_get_matches_requires_auth(client: AsyncClient):
    response = await client.get("/api/v1/matches/")

    assert response.status_code == 401
