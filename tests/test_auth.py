import pytest

from fakes import register


def test_register_returns_token_and_profile(client):
    resp = client.post(
        "/auth/register",
        json={"name": " Ada ", "email": "Ada@Example.com", "password": "correct-horse", "currency": "EUR"},
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["name"] == "Ada"
    assert body["email"] == "ada@example.com"
    assert body["currency"] == "EUR"
    assert body["token"]


def test_duplicate_email_is_rejected(client):
    register(client)
    resp = client.post(
        "/auth/register",
        json={"name": "Ada", "email": "ADA@example.com", "password": "another-pass"},
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "User already exists"


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "Ada", "email": "not-an-email", "password": "correct-horse"},
        {"name": "Ada", "email": "ada@example.com", "password": "short"},
        {"name": "", "email": "ada@example.com", "password": "correct-horse"},
        {"name": "Ada", "email": "ada@example.com", "password": "correct-horse", "currency": "usd"},
    ],
)
def test_register_validation(client, payload):
    resp = client.post("/auth/register", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid_request"


def test_login(client):
    register(client)
    resp = client.post("/auth/login", json={"email": "ada@example.com", "password": "correct-horse"})
    assert resp.status_code == 200
    assert resp.get_json()["token"]


def test_login_with_wrong_password(client):
    register(client)
    resp = client.post("/auth/login", json={"email": "ada@example.com", "password": "wrong-horse"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid email or password"


def test_me(client, user):
    headers, owner = user
    resp = client.get("/auth/me", headers=headers)
    assert resp.status_code == 200
    assert str(resp.get_json()["id"]) == owner


def test_me_requires_token(client):
    assert client.get("/auth/me").status_code == 401
