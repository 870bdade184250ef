from datetime import timedelta

from app.core.config import settings

from app.core.security import create_access_token, decode_access_token


async def test_register_returns_token_and_user(registered_user):
    assert registered_user["token_type"] == "bearer"
    user = registered_user["user"]
    assert user["email"] == "john@example.com"
    assert user["userName"] == "john_trader"
    assert user["hasCompletedOnboarding"] is False
    assert decode_access_token(registered_user["access_token"]).sub == user["id"]


async def test_register_duplicate(client, registered_user):
    response = await client.post("/api/auth/register", json={
        "email": "other@example.com",
        "userName": "someone",
        "firebaseUid": "firebase-uid-001",
    })

    assert response.status_code == 400
    assert response.json()["error"] == "User already exists"


async def test_register_requires_valid_email(client):
    response = await client.post("/api/auth/register", json={
        "email": "not-an-email",
        "userName": "someone",
        "firebaseUid": "firebase-uid-002",
    })

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "email"


async def test_login_by_firebase_uid(client, registered_user):
    response = await client.post("/api/auth/login", json={"firebaseUid": "firebase-uid-001"})

    assert response.status_code == 200
    assert response.json()["user"]["id"] == registered_user["user"]["id"]


async def test_login_unknown_user(client):
    response = await client.post("/api/auth/login", json={"firebaseUid": "missing"})

    assert response.status_code == 404


async def test_expired_token_is_unauthorized(client, registered_user, trading_answers):
    token = create_access_token(registered_user["user"]["id"], expires_delta=timedelta(minutes=-5))

    response = await client.post(
        "/api/onboarding", json=trading_answers, headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid or expired token"


async def test_health(client):
    body = (await client.get("/health")).json()

    assert body["status"] == "ok"
    assert body["environment"] == settings.ENVIRONMENT
