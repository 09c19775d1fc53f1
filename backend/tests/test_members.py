import anyio
import pytest

from conftest import API, join_member

pytestmark = pytest.mark.anyio


async def test_bio_only_update_keeps_display_name(client, member):
    before = (await client.get(f"{API}/members/{member.member_id}", headers=member.headers)).json()
    await anyio.sleep(0.01)

    resp = await client.put(
        f"{API}/members/{member.member_id}", json={"bio": "Hello there"}, headers=member.headers
    )
    assert resp.status_code == 200
    after = resp.json()
    assert after["bio"] == "Hello there"
    assert after["display_name"] == before["display_name"]
    assert after["updated_at"] > before["updated_at"]


async def test_explicit_null_display_name_is_left_unchanged(client, member):
    resp = await client.put(
        f"{API}/members/{member.member_id}",
        json={"display_name": None, "bio": None},
        headers=member.headers,
    )
    assert resp.status_code == 200
    assert resp.json()["display_name"] == "alice"
    assert resp.json()["bio"] is None


async def test_non_owner_update_is_forbidden_and_changes_nothing(client, member, other_member):
    resp = await client.put(
        f"{API}/members/{member.member_id}",
        json={"display_name": "hijacked"},
        headers=other_member.headers,
    )
    assert resp.status_code == 403

    profile = (await client.get(f"{API}/members/{member.member_id}", headers=member.headers)).json()
    assert profile["display_name"] == "alice"


async def test_administrator_may_edit_any_profile(client, admin, member):
    resp = await client.put(
        f"{API}/members/{member.member_id}", json={"bio": "edited by staff"}, headers=admin.headers
    )
    assert resp.status_code == 200


async def test_display_name_conflict(client, member, other_member):
    resp = await client.put(
        f"{API}/members/{member.member_id}", json={"display_name": "bob"}, headers=member.headers
    )
    assert resp.status_code == 409


async def test_unknown_member_is_not_found(client, member):
    resp = await client.get(
        f"{API}/members/00000000-0000-4000-8000-000000000000", headers=member.headers
    )
    assert resp.status_code == 404
    assert resp.json()["success"] is False


async def test_missing_target_wins_over_forbidden(client, member, other_member):
    resp = await client.delete(f"{API}/members/{member.member_id}", headers=member.headers)
    assert resp.status_code == 200
    assert resp.json()["deleted_at"] is not None

    resp = await client.put(
        f"{API}/members/{member.member_id}", json={"bio": "x"}, headers=other_member.headers
    )
    assert resp.status_code == 404


async def test_list_members_filters_and_paginates(client, member):
    for name in ("zed-one", "zed-two", "zed-three"):
        await join_member(client, name)

    resp = await client.patch(
        f"{API}/members",
        json={"display_name": "ZED", "limit": 2, "sort": "display_name:asc"},
        headers=member.headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["pagination"] == {"current": 1, "limit": 2, "records": 3, "pages": 2}
    assert [m["display_name"] for m in body["data"]] == ["zed-one", "zed-three"]


async def test_list_ignores_unknown_keys_and_bad_sort(client, member):
    resp = await client.patch(
        f"{API}/members",
        json={"sort": "password_hash", "unexpected": True},
        headers=member.headers,
    )
    assert resp.status_code == 200
    assert resp.json()["pagination"]["records"] == 1
