import pytest

from conftest import API, create_post, join_member, login

pytestmark = pytest.mark.anyio


async def test_grant_path_and_body_must_agree(client, admin, member, other_member):
    resp = await client.put(
        f"{API}/admin/accounts/{member.account_id}/moderator",
        json={"account_id": other_member.account_id},
        headers=admin.headers,
    )
    assert resp.status_code == 400


async def test_grant_is_idempotent_and_revoke_is_not(client, admin, member):
    url = f"{API}/admin/accounts/{member.account_id}/moderator"
    body = {"account_id": member.account_id}

    first = await client.put(url, json=body, headers=admin.headers)
    assert first.status_code == 200
    assert first.json()["is_active"] is True
    assert first.json()["assigned_by_account_id"] == admin.account_id

    again = await client.put(url, json=body, headers=admin.headers)
    assert again.json()["id"] == first.json()["id"]

    revoked = await client.delete(url, headers=admin.headers)
    assert revoked.status_code == 200
    assert revoked.json()["is_active"] is False
    assert revoked.json()["revoked_at"] is not None
    assert (await client.delete(url, headers=admin.headers)).status_code == 409

    regranted = await client.put(url, json=body, headers=admin.headers)
    assert regranted.json()["id"] == first.json()["id"]
    assert regranted.json()["revoked_at"] is None
    await login(client, "moderator", member.email)


async def test_revoke_without_grant_is_not_found(client, admin, member):
    resp = await client.delete(
        f"{API}/admin/accounts/{member.account_id}/moderator", headers=admin.headers
    )
    assert resp.status_code == 404


async def test_grant_to_unknown_account_is_not_found(client, admin):
    missing = "00000000-0000-4000-8000-000000000000"
    resp = await client.put(
        f"{API}/admin/accounts/{missing}/moderator", json={"account_id": missing}, headers=admin.headers
    )
    assert resp.status_code == 404


async def test_admin_endpoints_reject_other_roles(client, member, moderator):
    url = f"{API}/admin/accounts/{member.account_id}/moderator"
    body = {"account_id": member.account_id}
    assert (await client.put(url, json=body, headers=member.headers)).status_code == 403
    assert (await client.put(url, json=body, headers=moderator.headers)).status_code == 403
    assert (await client.patch(f"{API}/admin/audit-logs", json={}, headers=moderator.headers)).status_code == 403


async def test_list_moderators(client, admin, moderator):
    carol = await join_member(client, "carol")
    url = f"{API}/admin/accounts/{carol.account_id}/moderator"
    await client.put(url, json={"account_id": carol.account_id}, headers=admin.headers)
    await client.delete(url, headers=admin.headers)

    everyone = await client.patch(f"{API}/admin/moderators", json={}, headers=admin.headers)
    assert everyone.json()["pagination"]["records"] == 2

    active = await client.patch(f"{API}/admin/moderators", json={"revoked": False}, headers=admin.headers)
    assert [m["user_account_id"] for m in active.json()["data"]] == [moderator.account_id]


async def test_audit_log_records_mutations(client, admin, member):
    post = await create_post(client, member, title="Audited")
    await client.put(f"{API}/posts/{post['id']}", json={"title": "Audited twice"}, headers=member.headers)

    resp = await client.patch(
        f"{API}/admin/audit-logs",
        json={"entity_type": "post", "entity_id": post["id"]},
        headers=admin.headers,
    )
    entries = resp.json()["data"]
    assert sorted(e["action"] for e in entries) == ["create", "update"]
    update = next(e for e in entries if e["action"] == "update")
    assert update["old_values"] == {"title": "Audited"}
    assert update["new_values"] == {"title": "Audited twice"}
    assert update["actor_account_id"] == member.account_id


async def test_health_and_response_headers(client):
    resp = await client.get("/api/health", headers={"X-Request-ID": "req-123"})
    assert resp.status_code == 200
    assert resp.json()["database"] == "ok"
    assert resp.headers["X-Request-ID"] == "req-123"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["Content-Security-Policy"].startswith("default-src 'none'")


async def test_unknown_route_uses_the_error_envelope(client):
    resp = await client.get(f"{API}/nowhere", headers={"X-Request-ID": "req-404"})
    assert resp.status_code == 404
    assert resp.json()["success"] is False
    assert resp.json()["error"]["code"] == "NOT_FOUND"
    assert resp.json()["error"]["request_id"] == "req-404"


async def test_request_validation_names_the_field(client, member):
    resp = await client.post(f"{API}/posts", json={"title": ""}, headers=member.headers)
    assert resp.status_code == 422
    error = resp.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert {d["field"] for d in error["details"]} == {"title", "body"}
