import pytest

from conftest import API, CONSENTS, PASSWORD, join_member, login

pytestmark = pytest.mark.anyio


async def test_member_join_returns_tokens_and_profile(client):
    resp = await client.post(f"{API}/auth/member/join", json={
        "email": "Carol@Example.com",
        "password": PASSWORD,
        "display_name": "carol",
        "consents": CONSENTS,
    })
    assert resp.status_code == 201
    body = resp.json()
    assert body["role"] == "member"
    assert body["member"]["display_name"] == "carol"
    assert body["member"]["bio"] is None
    assert body["member"]["deleted_at"] is None
    assert body["token"]["access"] and body["token"]["refresh"]
    assert body["token"]["expired_at"].endswith("Z")


async def test_join_requires_policy_consents(client):
    resp = await client.post(f"{API}/auth/member/join", json={
        "email": "dave@example.com",
        "password": PASSWORD,
        "display_name": "dave",
        "consents": CONSENTS[:1],
    })
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_duplicate_email_conflicts_case_insensitively(client, member):
    resp = await client.post(f"{API}/auth/member/join", json={
        "email": member.email.upper(),
        "password": PASSWORD,
        "display_name": "someone-else",
        "consents": CONSENTS,
    })
    assert resp.status_code == 409


async def test_duplicate_display_name_conflicts(client, member):
    resp = await client.post(f"{API}/auth/member/join", json={
        "email": "fresh@example.com",
        "password": PASSWORD,
        "display_name": "alice",
        "consents": CONSENTS,
    })
    assert resp.status_code == 409


async def test_login_with_wrong_password(client, member):
    resp = await client.post(
        f"{API}/auth/member/login", json={"email": member.email, "password": "not-the-password"}
    )
    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"


async def test_login_as_moderator_without_grant_is_forbidden(client, member):
    resp = await client.post(
        f"{API}/auth/moderator/login", json={"email": member.email, "password": PASSWORD}
    )
    assert resp.status_code == 403


async def test_refresh_rotates_the_token(client, member):
    resp = await client.post(f"{API}/auth/member/refresh", json={"refresh_token": member.refresh})
    assert resp.status_code == 200
    rotated = resp.json()["token"]["refresh"]
    assert rotated != member.refresh

    replay = await client.post(f"{API}/auth/member/refresh", json={"refresh_token": member.refresh})
    assert replay.status_code == 401

    again = await client.post(f"{API}/auth/member/refresh", json={"refresh_token": rotated})
    assert again.status_code == 200


async def test_refresh_for_another_role_is_rejected(client, member):
    resp = await client.post(f"{API}/auth/moderator/refresh", json={"refresh_token": member.refresh})
    assert resp.status_code == 401


async def test_access_token_cannot_be_used_to_refresh(client, member):
    access = member.headers["Authorization"].split()[1]
    resp = await client.post(f"{API}/auth/member/refresh", json={"refresh_token": access})
    assert resp.status_code == 401


async def test_refresh_token_is_not_a_bearer_credential(client, member):
    resp = await client.get(
        f"{API}/members/{member.member_id}",
        headers={"Authorization": f"Bearer {member.refresh}"},
    )
    assert resp.status_code == 401


async def test_missing_and_garbage_tokens(client, member):
    resp = await client.get(f"{API}/members/{member.member_id}")
    assert resp.status_code == 401
    resp = await client.get(
        f"{API}/members/{member.member_id}", headers={"Authorization": "Bearer nope"}
    )
    assert resp.status_code == 401


async def test_administrator_join_is_bootstrap_only(client, admin):
    assert admin.member_id is not None
    resp = await client.post(f"{API}/auth/administrator/join", json={
        "email": "second-root@example.com",
        "password": PASSWORD,
        "display_name": "root2",
    })
    assert resp.status_code == 403


async def test_revoked_moderator_token_stops_working(client, admin, moderator):
    resp = await client.patch(f"{API}/content-reports", json={}, headers=moderator.headers)
    assert resp.status_code == 200

    resp = await client.delete(
        f"{API}/admin/accounts/{moderator.account_id}/moderator", headers=admin.headers
    )
    assert resp.status_code == 200

    resp = await client.patch(f"{API}/content-reports", json={}, headers=moderator.headers)
    assert resp.status_code == 401

    member_session = await login(client, "member", moderator.email)
    resp = await client.patch(f"{API}/content-reports", json={}, headers=member_session.headers)
    assert resp.status_code == 403


async def test_deleted_member_cannot_log_in_as_member(client):
    carol = await join_member(client, "carol")
    resp = await client.delete(f"{API}/members/{carol.member_id}", headers=carol.headers)
    assert resp.status_code == 200

    resp = await client.post(
        f"{API}/auth/member/login", json={"email": carol.email, "password": PASSWORD}
    )
    assert resp.status_code == 403
