import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_register_success(client: AsyncClient):
    user_data = {
        "handle": " @NewUser ",
        "password": "securepassword123",
        "display_name": "New User",
    }

    response = await client.post("/api/v1/auth/register", json=user_data)

    assert response.status_code == 201
    data = response.json()
    assert data["handle"] == "newuser"
    assert data["display_name"] == "New User"
    assert data["is_admin"] is False
    assert "id" in data
    assert "created_at" in data
    assert "password" not in data
    assert "password_hash" not in data


@pytest.mark.asyncio
async def test_register_legacy_field_name(client: AsyncClient):
    response = await client.post(
        "/api/v1/auth/register",
        json={"instagramUsername": "@Legacy", "password": "securepassword123"},
    )

    assert response.status_code == 201
    assert response.json()["handle"] == "legacy"


@pytest.mark.asyncio
async def test_register_duplicate_handle(client: AsyncClient, registered_user: dict):
    user_data = {
        "handle": "ALICE",
        "password": "anotherpassword123",
    }

    response = await client.post("/api/v1/auth/register", json=user_data)

    assert response.status_code == 409
    data = response.json()
    assert data["detail"] == "Handle already registered"
    assert data["code"] == "RESOURCE_ALREADY_EXISTS"
    assert data["field"] == "handle"


@pytest.mark.asyncio
async def test_register_invalid_handle(client: AsyncClient):
    user_data = {
        "handle": "alice smith",
        "password": "securepassword123",
    }

    response = await client.post("/api/v1/auth/register", json=user_data)

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_register_short_password(client: AsyncClient):
    user_data = {
        "handle": "shorty",
        "password": "short",
    }

    response = await client.post("/api/v1/auth/register", json=user_data)

    assert response.status_code == 422
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_register_counts_users(client: AsyncClient, registered_user: dict):
    response = await client.get("/api/v1/stats/")

    assert response.status_code == 200
    assert response.json()["total_users"] == 1


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, registered_user: dict):
    response = await client.post(
        "/api/v1/auth/login",
        data={
            "username": registered_user["handle"],
            "password": registered_user["password"],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert data["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_login_with_any_handle_form(client: AsyncClient, registered_user: dict):
    response = await client.post(
        "/api/v1/auth/login",
        data={
            "username": "  aLiCe ",
            "password": registered_user["password"],
        },
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, registered_user: dict):
    response = await client.post(
        "/api/v1/auth/login",
        data={
            "username": registered_user["handle"],
            "password": "wrongpassword",
        },
    )

    assert response.status_code == 401
    data = response.json()
    assert data["detail"] == "Incorrect handle or password"
    assert data["code"] == "AUTH_INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_login_nonexistent_user(client: AsyncClient):
    response = await client.post(
        "/api/v1/auth/login",
        data={
            "username": "nobody",
            "password": "somepassword123",
        },
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Incorrect handle or password"


@pytest.mark.asyncio
async def test_get_me_with_token(client: AsyncClient, registered_user: dict, auth_token: str):
    response = await client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {auth_token}"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["handle"] == "alice"
    assert data["display_name"] == registered_user["display_name"]
    assert data["id"] == registered_user["response"]["id"]
    assert "password" not in data


@pytest.mark.asyncio
async def test_get_me_without_token(client: AsyncClient):
    response = await client.get("/api/v1/auth/me")

    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_NOT_AUTHENTICATED"


@pytest.mark.asyncio
async def test_get_me_invalid_token(client: AsyncClient):
    response = await client.get(
        "/api/v1/auth/me",
        headers={"Authorization": "Bearer invalid-token"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
