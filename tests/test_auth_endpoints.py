from auth import verify_token
from conftest import auth_headers, register


def test_register_returns_user_and_token(client, settings):
    response = client.post(
        "/auth/register",
        json={"email": "demo@example.com", "password": "demo123", "name": "Demo User"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    user = body["data"]["user"]
    assert user["email"] == "demo@example.com"
    assert user["name"] == "Demo User"
    assert "password" not in user
    assert verify_token(body["data"]["token"], settings)["userId"] == user["id"]


def test_register_then_login_share_user_id(client, settings):
    registered = register(client, email="someone@example.com", password="s3cret!")

    response = client.post(
        "/auth/login", json={"email": "someone@example.com", "password": "s3cret!"}
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["id"] == registered["user"]["id"]
    assert verify_token(data["token"], settings)["userId"] == registered["user"]["id"]
    assert verify_token(registered["token"], settings)["userId"] == registered["user"]["id"]


def test_register_rejects_duplicate_email(client):
    register(client)

    response = client.post(
        "/auth/register",
        json={"email": "demo@example.com", "password": "another1", "name": "Again"},
    )

    assert response.status_code == 409
    assert response.json() == {"success": False, "error": "User already exists"}


def test_register_rejects_short_password(client):
    response = client.post(
        "/auth/register",
        json={"email": "demo@example.com", "password": "12345", "name": "Demo"},
    )

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "Password must be at least 6 characters",
    }


def test_register_requires_all_fields(client):
    response = client.post("/auth/register", json={"email": "demo@example.com"})

    assert response.status_code == 400
    assert response.json()["error"] == "Email, password, and name are required"


def test_register_without_body(client):
    response = client.post("/auth/register")

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_login_failures_are_indistinguishable(client):
    register(client)

    wrong_password = client.post(
        "/auth/login", json={"email": "demo@example.com", "password": "wrong-password"}
    )
    unknown_email = client.post(
        "/auth/login", json={"email": "nobody@example.com", "password": "demo123"}
    )

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.content == unknown_email.content
    assert wrong_password.json() == {"success": False, "error": "Invalid credentials"}


def test_login_email_is_case_sensitive(client):
    register(client)

    response = client.post(
        "/auth/login", json={"email": "Demo@Example.com", "password": "demo123"}
    )

    assert response.status_code == 401


def test_login_requires_email_and_password(client):
    response = client.post("/auth/login", json={"email": "demo@example.com"})

    assert response.status_code == 400
    assert response.json()["error"] == "Email and password are required"


def test_login_writes_activity_entry(client, demo):
    client.post("/auth/login", json={"email": "demo@example.com", "password": "demo123"})

    logs = client.get("/activity", headers=demo[1]).json()["data"]
    assert [log["action"] for log in logs] == ["LOGIN", "REGISTER"]
    assert all(log["entity"] == "User" for log in logs)


def test_protected_endpoint_requires_token(client):
    response = client.get("/tasks")

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Unauthorized"}


def test_protected_endpoint_rejects_malformed_header(client):
    response = client.get("/tasks", headers={"Authorization": "Token abc"})

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


def test_protected_endpoint_rejects_invalid_token(client):
    response = client.get("/activity", headers=auth_headers("not-a-token"))

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Unauthorized"}
