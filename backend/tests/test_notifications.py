import pytest

from conftest import API, join_member

pytestmark = pytest.mark.anyio


async def _warn(client, moderator, member_id):
    resp = await client.post(f"{API}/moderation-actions", json={
        "content_type": "member",
        "target_member_id": member_id,
        "action_type": "warn",
        "action_reason": "Mind the rules",
    }, headers=moderator.headers)
    assert resp.status_code == 201, resp.text


async def test_mark_read_and_filter(client, member, other_member, moderator):
    await _warn(client, moderator, member.member_id)
    inbox = (await client.patch(f"{API}/notifications", json={}, headers=member.headers)).json()
    note_id = inbox["data"][0]["id"]

    resp = await client.put(f"{API}/notifications/{note_id}/read", headers=other_member.headers)
    assert resp.status_code == 403

    resp = await client.put(f"{API}/notifications/{note_id}/read", headers=member.headers)
    assert resp.status_code == 200
    assert resp.json()["is_read"] is True
    assert resp.json()["read_at"] is not None

    unread = await client.patch(f"{API}/notifications", json={"is_read": False}, headers=member.headers)
    assert unread.json()["pagination"]["records"] == 0


async def test_delete_notification(client, member, moderator):
    await _warn(client, moderator, member.member_id)
    inbox = (await client.patch(f"{API}/notifications", json={}, headers=member.headers)).json()
    note_id = inbox["data"][0]["id"]

    assert (await client.delete(f"{API}/notifications/{note_id}", headers=member.headers)).status_code == 200
    assert (await client.delete(f"{API}/notifications/{note_id}", headers=member.headers)).status_code == 404


async def test_admin_lists_every_inbox(client, member, other_member, moderator, admin):
    await _warn(client, moderator, member.member_id)
    await _warn(client, moderator, other_member.member_id)

    resp = await client.patch(f"{API}/admin/notifications", json={}, headers=admin.headers)
    assert resp.json()["pagination"]["records"] == 2

    resp = await client.patch(
        f"{API}/admin/notifications",
        json={"recipient_account_id": member.account_id},
        headers=admin.headers,
    )
    assert [n["recipient_account_id"] for n in resp.json()["data"]] == [member.account_id]

    resp = await client.patch(f"{API}/admin/notifications", json={}, headers=moderator.headers)
    assert resp.status_code == 403


# --- channels ---

async def test_channel_key_is_member_subscriber_and_type(client, member, other_member):
    url = f"{API}/notification-channels"
    first = await client.post(
        url, json={"member_id": other_member.member_id, "channel_type": "email"}, headers=member.headers
    )
    assert first.status_code == 201
    assert first.json()["is_enabled"] is True
    assert first.json()["subscriber_member_id"] == member.member_id

    dup = await client.post(
        url,
        json={"member_id": other_member.member_id, "channel_type": "email", "is_enabled": False},
        headers=member.headers,
    )
    assert dup.status_code == 409

    push = await client.post(
        url, json={"member_id": other_member.member_id, "channel_type": "app_push"}, headers=member.headers
    )
    assert push.status_code == 201

    rekey = await client.put(
        f"{url}/{push.json()['id']}", json={"channel_type": "email"}, headers=member.headers
    )
    assert rekey.status_code == 409

    carol = await join_member(client, "carol")
    resp = await client.post(
        url, json={"member_id": other_member.member_id, "channel_type": "email"}, headers=carol.headers
    )
    assert resp.status_code == 201


async def test_channel_is_private_to_its_subscriber(client, member, other_member):
    url = f"{API}/notification-channels"
    channel = (await client.post(
        url, json={"member_id": other_member.member_id, "channel_type": "sms"}, headers=member.headers
    )).json()

    assert (await client.get(f"{url}/{channel['id']}", headers=other_member.headers)).status_code == 403
    assert (await client.patch(url, json={}, headers=other_member.headers)).json()["pagination"]["records"] == 0

    resp = await client.put(f"{url}/{channel['id']}", json={"is_enabled": False}, headers=member.headers)
    assert resp.json()["is_enabled"] is False

    assert (await client.delete(f"{url}/{channel['id']}", headers=member.headers)).status_code == 200
    resp = await client.post(
        url, json={"member_id": other_member.member_id, "channel_type": "sms"}, headers=member.headers
    )
    assert resp.status_code == 201
