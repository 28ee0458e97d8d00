"""Audit trail, security metrics and suspicious activity."""


async def test_security_metrics(client, auth_headers):
    await client.post("/api/v1/auth/login", data={"username": "manager@sweetreats.com", "password": "nope"})
    denied = await client.post("/api/v1/parties", json={"name": "Mill Co"}, headers=auth_headers("staff"))
    assert denied.status_code == 403
    created = await client.post("/api/v1/customers", json={"name": "Green Deli"}, headers=auth_headers("manager"))
    assert created.status_code == 201

    resp = await client.get("/api/v1/audit/security-metrics", headers=auth_headers("admin"))

    assert resp.status_code == 200, resp.text
    assert resp.json() == {"period_hours": 24, "failed_logins": 1, "failed_operations": 1, "active_users": 2}


async def test_denied_requests_show_up_as_suspicious(client, auth_headers, users):
    await client.post("/api/v1/parties", json={"name": "Mill Co"}, headers=auth_headers("staff"))

    resp = await client.get("/api/v1/audit/logs/suspicious", headers=auth_headers("admin"))

    assert resp.status_code == 200, resp.text
    entries = resp.json()
    assert len(entries) == 1
    entry = entries[0]
    assert (entry["action"], entry["resource"], entry["status"]) == ("ACCESS_DENIED", "parties", "failed")
    assert entry["user_id"] == users["staff"].id
    assert entry["details"] == {"permission": "parties:write"}


async def test_security_views_need_admin_write(client, auth_headers):
    headers = auth_headers("manager")

    assert (await client.get("/api/v1/audit/security-metrics", headers=headers)).status_code == 403
    assert (await client.get("/api/v1/audit/logs/suspicious", headers=headers)).status_code == 403


async def test_audit_log_filters(client, auth_headers):
    manager = auth_headers("manager")
    await client.post("/api/v1/customers", json={"name": "Green Deli"}, headers=manager)
    await client.post("/api/v1/parties", json={"name": "Mill Co"}, headers=manager)

    resp = await client.get("/api/v1/audit/logs?resource=party", headers=auth_headers("admin"))

    assert resp.status_code == 200, resp.text
    page = resp.json()
    assert page["total"] == 1
    assert page["items"][0]["action"] == "CREATE"
    assert page["items"][0]["new_values"]["name"] == "Mill Co"
