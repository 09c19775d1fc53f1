import pytest

from conftest import API, create_comment, create_post

pytestmark = pytest.mark.anyio


async def _warn(client, moderator, member_id, reason="Be nice"):
    resp = await client.post(f"{API}/moderation-actions", json={
        "content_type": "member",
        "target_member_id": member_id,
        "action_type": "warn",
        "action_reason": reason,
    }, headers=moderator.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


# --- content reports ---

async def test_report_target_must_match_content_type(client, member, other_member):
    post = await create_post(client, member)
    comment = await create_comment(client, member, post["id"])

    resp = await client.post(f"{API}/content-reports", json={
        "content_type": "post",
        "content_post_id": post["id"],
        "content_comment_id": comment["id"],
        "reason": "spam",
    }, headers=other_member.headers)
    assert resp.status_code == 400

    resp = await client.post(f"{API}/content-reports", json={
        "content_type": "comment",
        "reason": "spam",
    }, headers=other_member.headers)
    assert resp.status_code == 400

    resp = await client.post(f"{API}/content-reports", json={
        "content_type": "comment",
        "content_comment_id": comment["id"],
        "reason": "spam",
    }, headers=other_member.headers)
    assert resp.status_code == 201
    assert resp.json()["content_post_id"] is None
    assert resp.json()["status"] == "pending"


async def test_duplicate_report_conflicts(client, member, other_member):
    post = await create_post(client, member)
    payload = {"content_type": "post", "content_post_id": post["id"], "reason": "spam"}
    assert (await client.post(f"{API}/content-reports", json=payload, headers=other_member.headers)).status_code == 201
    assert (await client.post(f"{API}/content-reports", json=payload, headers=other_member.headers)).status_code == 409


async def test_report_review_moves_forward_only(client, member, other_member, moderator):
    post = await create_post(client, member)
    report = (await client.post(f"{API}/content-reports", json={
        "content_type": "post", "content_post_id": post["id"], "reason": "spam",
    }, headers=other_member.headers)).json()
    url = f"{API}/content-reports/{report['id']}"

    assert (await client.put(url, json={"status": "resolved"}, headers=other_member.headers)).status_code == 403

    resp = await client.put(url, json={"status": "under_review"}, headers=moderator.headers)
    assert resp.status_code == 200
    assert resp.json()["reviewed_at"] is not None

    assert (await client.put(url, json={"status": "under_review"}, headers=moderator.headers)).status_code == 200
    assert (await client.put(url, json={"status": "pending"}, headers=moderator.headers)).status_code == 409
    assert (await client.put(url, json={"status": "dismissed"}, headers=moderator.headers)).status_code == 200
    assert (await client.put(url, json={"status": "resolved"}, headers=moderator.headers)).status_code == 409

    inbox = await client.patch(
        f"{API}/notifications", json={"notification_type": "report_update"}, headers=other_member.headers
    )
    assert inbox.json()["pagination"]["records"] == 2


async def test_report_visibility(client, member, other_member, moderator):
    post = await create_post(client, member)
    report = (await client.post(f"{API}/content-reports", json={
        "content_type": "post", "content_post_id": post["id"], "reason": "spam",
    }, headers=other_member.headers)).json()
    url = f"{API}/content-reports/{report['id']}"

    assert (await client.get(url, headers=other_member.headers)).status_code == 200
    assert (await client.get(url, headers=member.headers)).status_code == 403
    assert (await client.get(url, headers=moderator.headers)).status_code == 200
    assert (await client.patch(f"{API}/content-reports", json={}, headers=member.headers)).status_code == 403


# --- moderation actions ---

async def test_action_listing_uses_strict_paging(client, member, moderator):
    for i in range(5):
        await _warn(client, moderator, member.member_id, reason=f"warning {i}")
    url = f"{API}/moderation-actions"

    resp = await client.patch(url, json={"page": 2, "limit": 20}, headers=moderator.headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "pagination": {"current": 2, "limit": 20, "records": 5, "pages": 1},
        "data": [],
    }

    resp = await client.patch(url, json={"limit": 0}, headers=moderator.headers)
    assert resp.json()["pagination"] == {"current": 1, "limit": 0, "records": 5, "pages": 0}
    assert resp.json()["data"] == []

    for bad in ({"page": 0}, {"limit": -1}, {"limit": 101}):
        resp = await client.patch(url, json=bad, headers=moderator.headers)
        assert resp.status_code == 400, bad


async def test_action_target_must_match_content_type(client, member, moderator):
    post = await create_post(client, member)
    resp = await client.post(f"{API}/moderation-actions", json={
        "content_type": "post",
        "target_member_id": member.member_id,
        "action_type": "remove",
        "action_reason": "spam",
    }, headers=moderator.headers)
    assert resp.status_code == 400

    resp = await client.post(f"{API}/moderation-actions", json={
        "content_type": "post",
        "target_post_id": post["id"],
        "action_type": "remove",
        "action_reason": "spam",
    }, headers=moderator.headers)
    assert resp.status_code == 201


async def test_action_notifies_the_affected_member(client, member, moderator):
    action = await _warn(client, moderator, member.member_id)
    inbox = (await client.patch(f"{API}/notifications", json={}, headers=member.headers)).json()
    assert inbox["pagination"]["records"] == 1
    note = inbox["data"][0]
    assert note["notification_type"] == "moderation_action"
    assert note["entity_id"] == action["id"]
    assert note["is_read"] is False


async def test_null_filter_on_target_columns(client, member, moderator):
    post = await create_post(client, member)
    await _warn(client, moderator, member.member_id)
    await client.post(f"{API}/moderation-actions", json={
        "content_type": "post",
        "target_post_id": post["id"],
        "action_type": "remove",
        "action_reason": "spam",
    }, headers=moderator.headers)

    resp = await client.patch(
        f"{API}/moderation-actions", json={"target_post_id": None}, headers=moderator.headers
    )
    (only,) = resp.json()["data"]
    assert only["content_type"] == "member"


async def test_action_status_changes_and_revoke(client, member, moderator):
    action = await _warn(client, moderator, member.member_id)
    url = f"{API}/moderation-actions/{action['id']}"

    resp = await client.put(url, json={"status": "revoked"}, headers=moderator.headers)
    assert resp.status_code == 400

    resp = await client.post(f"{url}/revoke", headers=moderator.headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "revoked"
    assert resp.json()["revoked_at"] is not None

    resp = await client.post(f"{url}/revoke", headers=moderator.headers)
    assert resp.status_code == 409

    second = await _warn(client, moderator, member.member_id)
    url = f"{API}/moderation-actions/{second['id']}"
    resp = await client.put(url, json={"status": "completed"}, headers=moderator.headers)
    assert resp.json()["status"] == "completed"
    assert (await client.post(f"{url}/revoke", headers=moderator.headers)).status_code == 409


async def test_action_is_visible_to_the_member_it_concerns(client, member, other_member, moderator):
    action = await _warn(client, moderator, member.member_id)
    url = f"{API}/moderation-actions/{action['id']}"
    assert (await client.get(url, headers=member.headers)).status_code == 200
    assert (await client.get(url, headers=other_member.headers)).status_code == 403


# --- appeals ---

async def test_appeal_for_someone_elses_action_is_forbidden(client, member, other_member, moderator):
    action = await _warn(client, moderator, member.member_id)
    resp = await client.post(f"{API}/appeals", json={
        "moderation_action_id": action["id"],
        "appeal_rationale": "Not me",
    }, headers=other_member.headers)
    assert resp.status_code == 403

    listed = await client.patch(f"{API}/appeals", json={}, headers=moderator.headers)
    assert listed.json()["pagination"]["records"] == 0


async def test_appeal_for_content_action_reaches_the_author(client, member, moderator):
    post = await create_post(client, member)
    action = (await client.post(f"{API}/moderation-actions", json={
        "content_type": "post",
        "target_post_id": post["id"],
        "action_type": "remove",
        "action_reason": "spam",
    }, headers=moderator.headers)).json()

    resp = await client.post(f"{API}/appeals", json={
        "moderation_action_id": action["id"],
        "appeal_rationale": "It was not spam",
    }, headers=member.headers)
    assert resp.status_code == 201


async def test_appeal_review_flow(client, member, moderator):
    action = await _warn(client, moderator, member.member_id)
    payload = {"moderation_action_id": action["id"], "appeal_rationale": "I was quoting"}
    appeal = (await client.post(f"{API}/appeals", json=payload, headers=member.headers)).json()
    assert appeal["status"] == "pending"
    assert (await client.post(f"{API}/appeals", json=payload, headers=member.headers)).status_code == 409

    url = f"{API}/appeals/{appeal['id']}"
    resp = await client.put(url, json={"appeal_rationale": "I was quoting someone"}, headers=member.headers)
    assert resp.json()["appeal_rationale"] == "I was quoting someone"

    assert (await client.put(url, json={"status": "accepted"}, headers=member.headers)).status_code == 403
    assert (await client.put(url, json={"status": "withdrawn"}, headers=moderator.headers)).status_code == 400

    resp = await client.put(url, json={"status": "under_review"}, headers=moderator.headers)
    assert resp.json()["status"] == "under_review"
    resp = await client.put(url, json={"appeal_rationale": "too late"}, headers=member.headers)
    assert resp.status_code == 409

    resp = await client.put(
        url, json={"status": "accepted", "resolution_notes": "Warning lifted"}, headers=moderator.headers
    )
    body = resp.json()
    assert body["status"] == "accepted"
    assert body["resolved_at"] is not None
    assert body["resolved_by_account_id"] == moderator.account_id

    assert (await client.put(url, json={"status": "rejected"}, headers=moderator.headers)).status_code == 409

    inbox = await client.patch(
        f"{API}/notifications", json={"notification_type": "appeal_update"}, headers=member.headers
    )
    assert inbox.json()["pagination"]["records"] == 2


async def test_appellant_may_withdraw(client, member, moderator):
    action = await _warn(client, moderator, member.member_id)
    appeal = (await client.post(f"{API}/appeals", json={
        "moderation_action_id": action["id"], "appeal_rationale": "Sorry",
    }, headers=member.headers)).json()

    resp = await client.put(
        f"{API}/appeals/{appeal['id']}", json={"status": "withdrawn"}, headers=member.headers
    )
    assert resp.json()["status"] == "withdrawn"
    resp = await client.put(
        f"{API}/appeals/{appeal['id']}", json={"status": "under_review"}, headers=moderator.headers
    )
    assert resp.status_code == 409


async def test_appeal_delete_is_admin_only(client, member, moderator, admin):
    action = await _warn(client, moderator, member.member_id)
    appeal = (await client.post(f"{API}/appeals", json={
        "moderation_action_id": action["id"], "appeal_rationale": "Please",
    }, headers=member.headers)).json()
    url = f"{API}/appeals/{appeal['id']}"

    assert (await client.delete(url, headers=moderator.headers)).status_code == 403
    assert (await client.delete(url, headers=admin.headers)).status_code == 200
    assert (await client.get(url, headers=member.headers)).status_code == 404
