"""Login, token use, the error envelope and permission checks over HTTP."""
from src.db.session import session_scope
from src.repositories.security import LoginLogRepository

PASSWORD = "password123"


async def _login(client, email, password=PASSWORD):
    return await client.post("/api/v1/auth/login", data={"username": email, "password": password})


async def test_health(client):
    resp = await client.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.json()["message"] == "Healthy"
    assert resp.headers.get("X-Correlation-ID")


async def test_login_returns_tokens_and_user(client, seeded):
    resp = await _login(client, "manager@sweetreats.com")

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"] and body["refresh_token"]
    assert body["user"]["role"] == "manager"
    assert resp.cookies.get("access_token") == body["access_token"]

    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "manager@sweetreats.com"


async def test_failed_login_is_logged(client, seeded):
    resp = await _login(client, "manager@sweetreats.com", "wrong-password")

    assert resp.status_code == 401
    assert resp.json()["error"]["type"] == "unauthorized"

    async with session_scope() as s:
        logs = await LoginLogRepository(s).list()
    assert [(log.status, log.failure_reason) for log in logs] == [("failed", "Invalid password")]


async def test_missing_token_uses_error_envelope(client, seeded):
    resp = await client.get("/api/v1/auth/me")

    assert resp.status_code == 401
    body = resp.json()
    assert body["status"] == 401
    assert body["error"] == {"type": "http_error", "message": "Not authenticated", "details": None}
    assert body["method"] == "GET"
    assert resp.headers["WWW-Authenticate"] == "Bearer"


async def test_refresh_issues_new_pair(client, seeded):
    tokens = (await _login(client, "staff@sweetreats.com")).json()

    resp = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

    assert resp.status_code == 200
    assert resp.json()["access_token"]

    rejected = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert rejected.status_code == 401


async def test_staff_cannot_manage_users(client, auth_headers):
    resp = await client.get("/api/v1/users", headers=auth_headers("staff"))

    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "Missing permission users:read"


async def test_admin_creates_user_and_cannot_delete_self(client, users, auth_headers):
    headers = auth_headers("admin")
    created = await client.post(
        "/api/v1/users",
        json={"email": "baker@sweetreats.com", "password": "secret99", "first_name": "Ben", "role": "staff"},
        headers=headers,
    )
    assert created.status_code == 201, created.text
    assert created.json()["full_name"] == "Ben"

    resp = await client.delete(f"/api/v1/users/{users['admin'].id}", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "You cannot delete your own account"
