import pytest

from conftest import API, create_comment, create_post

pytestmark = pytest.mark.anyio


async def test_comment_crud(client, member, other_member):
    post = await create_post(client, member)
    comment = await create_comment(client, other_member, post["id"], "First!")
    url = f"{API}/posts/{post['id']}/comments/{comment['id']}"

    assert comment["parent_id"] is None
    assert (await client.get(url)).json()["body"] == "First!"

    resp = await client.put(url, json={"body": "Edited"}, headers=other_member.headers)
    assert resp.status_code == 200
    assert resp.json()["body"] == "Edited"

    resp = await client.put(url, json={"body": "Not yours"}, headers=member.headers)
    assert resp.status_code == 403


async def test_reply_must_stay_in_the_same_post(client, member):
    first = await create_post(client, member)
    second = await create_post(client, member)
    parent = await create_comment(client, member, first["id"])

    resp = await client.post(
        f"{API}/posts/{second['id']}/comments",
        json={"body": "reply", "parent_id": parent["id"]},
        headers=member.headers,
    )
    assert resp.status_code == 400

    resp = await client.post(
        f"{API}/posts/{first['id']}/comments",
        json={"body": "reply", "parent_id": parent["id"]},
        headers=member.headers,
    )
    assert resp.status_code == 201
    assert resp.json()["parent_id"] == parent["id"]


async def test_comment_addressed_through_another_post_is_not_found(client, member):
    first = await create_post(client, member)
    second = await create_post(client, member)
    comment = await create_comment(client, member, first["id"])

    resp = await client.get(f"{API}/posts/{second['id']}/comments/{comment['id']}")
    assert resp.status_code == 404


async def test_only_staff_may_lock_comments(client, member, moderator):
    post = await create_post(client, member)
    comment = await create_comment(client, member, post["id"])
    url = f"{API}/posts/{post['id']}/comments/{comment['id']}"

    resp = await client.put(url, json={"is_locked": True}, headers=member.headers)
    assert resp.status_code == 403

    resp = await client.put(url, json={"is_locked": True}, headers=moderator.headers)
    assert resp.status_code == 200

    resp = await client.put(url, json={"body": "changed"}, headers=member.headers)
    assert resp.status_code == 409


async def test_deleted_comments_are_listed_for_moderators_only(client, member, moderator):
    post = await create_post(client, member)
    keep = await create_comment(client, member, post["id"], "keep")
    gone = await create_comment(client, member, post["id"], "gone")
    await client.delete(f"{API}/posts/{post['id']}/comments/{gone['id']}", headers=member.headers)
    url = f"{API}/posts/{post['id']}/comments"

    public = (await client.patch(url, json={})).json()
    assert [c["id"] for c in public["data"]] == [keep["id"]]

    resp = await client.patch(url, json={"deleted": "include"}, headers=member.headers)
    assert resp.status_code == 403
    resp = await client.patch(url, json={"deleted": "only"})
    assert resp.status_code == 403

    resp = await client.patch(url, json={"deleted": "only"}, headers=moderator.headers)
    assert [c["id"] for c in resp.json()["data"]] == [gone["id"]]
    resp = await client.patch(url, json={"deleted": "include"}, headers=moderator.headers)
    assert resp.json()["pagination"]["records"] == 2


async def test_moderator_delete_writes_a_deletion_log(client, member, moderator):
    post = await create_post(client, member)
    comment = await create_comment(client, member, post["id"])
    url = f"{API}/posts/{post['id']}/comments/{comment['id']}"

    resp = await client.request(
        "DELETE", url, json={"reason": "off-topic"}, headers=moderator.headers
    )
    assert resp.status_code == 200
    assert resp.json()["deleted_at"] is not None
    assert (await client.get(url)).status_code == 404

    logs = await client.patch(f"{url}/deletion-logs", json={}, headers=moderator.headers)
    assert logs.status_code == 200
    (entry,) = logs.json()["data"]
    assert entry["actor_role"] == "moderator"
    assert entry["reason"] == "off-topic"
    assert entry["deleted_by_account_id"] == moderator.account_id


async def test_deletion_logs_for_mismatched_post_are_empty(client, member, moderator):
    post = await create_post(client, member)
    other_post = await create_post(client, member)
    comment = await create_comment(client, member, post["id"])
    await client.delete(f"{API}/posts/{post['id']}/comments/{comment['id']}", headers=member.headers)

    resp = await client.patch(
        f"{API}/posts/{other_post['id']}/comments/{comment['id']}/deletion-logs",
        json={},
        headers=moderator.headers,
    )
    assert resp.status_code == 200
    assert resp.json()["pagination"] == {"current": 1, "limit": 20, "records": 0, "pages": 0}


async def test_deletion_logs_need_staff(client, member):
    post = await create_post(client, member)
    comment = await create_comment(client, member, post["id"])
    resp = await client.patch(
        f"{API}/posts/{post['id']}/comments/{comment['id']}/deletion-logs",
        json={},
        headers=member.headers,
    )
    assert resp.status_code == 403


# --- reactions ---

async def test_reaction_lifecycle(client, member, other_member):
    post = await create_post(client, member)
    comment = await create_comment(client, member, post["id"])

    resp = await client.post(
        f"{API}/comment-reactions",
        json={"comment_id": comment["id"], "reaction_type": "like"},
        headers=other_member.headers,
    )
    assert resp.status_code == 201
    reaction = resp.json()

    dup = await client.post(
        f"{API}/comment-reactions",
        json={"comment_id": comment["id"], "reaction_type": "dislike"},
        headers=other_member.headers,
    )
    assert dup.status_code == 409

    url = f"{API}/comment-reactions/{reaction['id']}"
    resp = await client.put(url, json={"reaction_type": "dislike"}, headers=other_member.headers)
    assert resp.json()["reaction_type"] == "dislike"

    resp = await client.put(url, json={"reaction_type": "like"}, headers=member.headers)
    assert resp.status_code == 403

    assert (await client.delete(url, headers=other_member.headers)).status_code == 200
    assert (await client.get(url, headers=other_member.headers)).status_code == 404

    revived = await client.post(
        f"{API}/comment-reactions",
        json={"comment_id": comment["id"], "reaction_type": "like"},
        headers=other_member.headers,
    )
    assert revived.status_code == 201
    assert revived.json()["id"] == reaction["id"]
    assert revived.json()["created_at"] == reaction["created_at"]
    assert revived.json()["deleted_at"] is None


async def test_cannot_react_to_own_comment(client, member):
    post = await create_post(client, member)
    comment = await create_comment(client, member, post["id"])
    resp = await client.post(
        f"{API}/comment-reactions",
        json={"comment_id": comment["id"], "reaction_type": "like"},
        headers=member.headers,
    )
    assert resp.status_code == 403


async def test_members_list_only_their_own_reactions(client, member, other_member, moderator):
    post = await create_post(client, member)
    comment = await create_comment(client, member, post["id"])
    await client.post(
        f"{API}/comment-reactions",
        json={"comment_id": comment["id"], "reaction_type": "like"},
        headers=other_member.headers,
    )

    mine = await client.patch(f"{API}/comment-reactions", json={}, headers=member.headers)
    assert mine.json()["pagination"]["records"] == 0

    staff = await client.patch(
        f"{API}/comment-reactions",
        json={"member_id": other_member.member_id},
        headers=moderator.headers,
    )
    assert staff.json()["pagination"]["records"] == 1


async def test_comments_of_a_hidden_post_follow_its_visibility(client, member, other_member, moderator):
    post = await create_post(client, member)
    comment = await create_comment(client, member, post["id"], "before hiding")
    resp = await client.put(
        f"{API}/posts/{post['id']}", json={"status": "hidden"}, headers=member.headers
    )
    assert resp.status_code == 200
    url = f"{API}/posts/{post['id']}/comments"

    assert (await client.patch(url, json={})).status_code == 404
    assert (await client.patch(url, json={}, headers=other_member.headers)).status_code == 404
    assert (await client.get(f"{url}/{comment['id']}")).status_code == 404
    resp = await client.post(url, json={"body": "sneaky"}, headers=other_member.headers)
    assert resp.status_code == 404
    resp = await client.post(
        f"{API}/comment-reactions",
        json={"comment_id": comment["id"], "reaction_type": "like"},
        headers=other_member.headers,
    )
    assert resp.status_code == 404

    assert (await client.patch(url, json={}, headers=member.headers)).json()["pagination"]["records"] == 1
    assert (await client.patch(url, json={}, headers=moderator.headers)).json()["pagination"]["records"] == 1
    assert (await client.get(f"{url}/{comment['id']}", headers=member.headers)).status_code == 200
