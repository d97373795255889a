import uuid

import pytest

from store_rating.models import Role, User


pytestmark = pytest.mark.asyncio


def _registration(**overrides):
    tag = uuid.uuid4().hex[:6]
    payload = {
        "name": f"Registered Customer Number {tag}",
        "email": f"customer_{tag}@mail.com",
        "password": "StrongPass!23",
        "address": "12 Baker Street, London",
    }
    payload.update(overrides)
    return payload


async def register_user(client, **overrides):
    payload = _registration(**overrides)
    return payload, await client.post("/api/auth/register", json=payload)


async def login_user(client, email: str, password: str):
    return await client.post("/api/auth/login", json={"email": email, "password": password})


async def test_register_and_login_flow(client):
    payload, resp = await register_user(client)
    body = resp.json()
    assert resp.status_code == 201
    assert body["token"]
    assert body["user"]["email"] == payload["email"]
    assert body["user"]["role"] == "user"
    assert "password_hash" not in body["user"]

    # Duplicate email should fail
    _, dup_resp = await register_user(client, email=payload["email"])
    assert dup_resp.status_code == 400
    assert dup_resp.json()["error"]["code"] == "EMAIL_EXISTS"

    # Successful login
    login_resp = await login_user(client, payload["email"], payload["password"])
    assert login_resp.status_code == 200
    assert login_resp.json()["user"]["id"] == body["user"]["id"]
    assert login_resp.json()["token"]

    # Invalid password
    bad_login = await login_user(client, payload["email"], "WrongPass!23")
    assert bad_login.status_code == 401
    assert bad_login.json()["error"]["code"] == "AUTH_INVALID_CREDENTIALS"

    # Unknown email gets the same answer
    unknown = await login_user(client, "nobody@mail.com", payload["password"])
    assert unknown.status_code == 401
    assert unknown.json()["error"]["code"] == "AUTH_INVALID_CREDENTIALS"


async def test_register_ignores_requested_role(client):
    _, resp = await register_user(client, role="admin")
    assert resp.status_code == 201
    assert resp.json()["user"]["role"] == "user"
    assert await User.filter(role=Role.ADMIN).count() == 0


async def test_email_is_case_insensitive(client):
    payload, resp = await register_user(client, email="Mixed.Case@Mail.com")
    assert resp.json()["user"]["email"] == "mixed.case@mail.com"

    login_resp = await login_user(client, "MIXED.CASE@mail.com", payload["password"])
    assert login_resp.status_code == 200

    _, dup = await register_user(client, email="mixed.case@MAIL.com")
    assert dup.json()["error"]["code"] == "EMAIL_EXISTS"


@pytest.mark.parametrize(
    "field,value",
    [
        ("name", "Too Short"),
        ("name", "N" * 61),
        ("email", "not-an-email"),
        ("password", "short1"),
        ("password", "nouppercase!1"),
        ("password", "NoSpecial123"),
        ("address", "A" * 401),
    ],
)
async def test_register_validation(client, field, value):
    _, resp = await register_user(client, **{field: value})
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "VALIDATION_FAILED"
    assert any(d["field"] == field for d in error["details"])
    assert await User.all().count() == 0


async def test_verify_and_profile(client):
    payload, resp = await register_user(client)
    headers = {"Authorization": f"Bearer {resp.json()['token']}"}

    verify_resp = await client.get("/api/auth/verify", headers=headers)
    assert verify_resp.status_code == 200
    assert verify_resp.json()["valid"] is True
    assert verify_resp.json()["user"]["email"] == payload["email"]

    profile_resp = await client.get("/api/auth/profile", headers=headers)
    assert profile_resp.status_code == 200
    assert profile_resp.json()["user"]["address"] == payload["address"]


async def test_change_password(client):
    payload, resp = await register_user(client)
    headers = {"Authorization": f"Bearer {resp.json()['token']}"}
    new_password = "BrandNew#456"

    wrong_current = await client.put(
        "/api/auth/password",
        headers=headers,
        json={"currentPassword": "NotMine!123", "newPassword": new_password},
    )
    assert wrong_current.status_code == 400
    assert wrong_current.json()["error"]["code"] == "CURRENT_PASSWORD_INCORRECT"

    weak_new = await client.put(
        "/api/auth/password",
        headers=headers,
        json={"currentPassword": payload["password"], "newPassword": "weak"},
    )
    assert weak_new.status_code == 400
    assert weak_new.json()["error"]["code"] == "VALIDATION_FAILED"

    ok = await client.put(
        "/api/auth/password",
        headers=headers,
        json={"currentPassword": payload["password"], "newPassword": new_password},
    )
    assert ok.status_code == 200

    assert (await login_user(client, payload["email"], payload["password"])).status_code == 401
    assert (await login_user(client, payload["email"], new_password)).status_code == 200
