import pytest

from conftest import API, create_comment, create_post

pytestmark = pytest.mark.anyio


async def _tag(client, moderator, name):
    resp = await client.post(f"{API}/tags", json={"name": name}, headers=moderator.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_create_post_with_tags(client, member, moderator):
    python = await _tag(client, moderator, "python")
    asyncio = await _tag(client, moderator, "asyncio")

    post = await create_post(client, member, tag_ids=[python["id"], asyncio["id"], python["id"]])
    assert post["author_member_id"] == member.member_id
    assert post["status"] == "public"
    assert post["is_locked"] is False
    assert [t["name"] for t in post["tags"]] == ["asyncio", "python"]


async def test_unknown_tag_is_not_found(client, member):
    resp = await client.post(
        f"{API}/posts",
        json={"title": "t", "body": "b", "tag_ids": ["00000000-0000-4000-8000-000000000000"]},
        headers=member.headers,
    )
    assert resp.status_code == 404


async def test_tags_are_created_by_staff_only(client, member, moderator):
    resp = await client.post(f"{API}/tags", json={"name": "general"}, headers=member.headers)
    assert resp.status_code == 403
    await _tag(client, moderator, "general")
    resp = await client.post(f"{API}/tags", json={"name": "general"}, headers=moderator.headers)
    assert resp.status_code == 409


async def test_staff_cannot_author_posts(client, moderator):
    resp = await client.post(
        f"{API}/posts", json={"title": "t", "body": "b"}, headers=moderator.headers
    )
    assert resp.status_code == 403


async def test_listing_is_public(client, member):
    await create_post(client, member, title="Visible")
    resp = await client.patch(f"{API}/posts", json={})
    assert resp.status_code == 200
    assert resp.json()["pagination"]["records"] == 1


async def test_filter_by_unused_tag_yields_empty_page(client, member, moderator):
    tag = await _tag(client, moderator, "unused")
    await create_post(client, member)

    resp = await client.patch(f"{API}/posts", json={"tag_id": tag["id"]})
    assert resp.json() == {
        "pagination": {"current": 1, "limit": 20, "records": 0, "pages": 0},
        "data": [],
    }


async def test_page_far_past_the_end_is_empty(client, member):
    await create_post(client, member)

    resp = await client.patch(f"{API}/posts", json={"page": 10**20, "limit": 20})
    assert resp.status_code == 200
    body = resp.json()
    assert body["data"] == []
    assert body["pagination"]["current"] == 10**20
    assert body["pagination"]["records"] == 1
    assert body["pagination"]["pages"] == 1


async def test_keyword_and_sort_order(client, member):
    await create_post(client, member, title="Alpha release", body="notes")
    await create_post(client, member, title="Beta release", body="notes")
    await create_post(client, member, title="Unrelated", body="other")

    resp = await client.patch(
        f"{API}/posts", json={"keyword": "RELEASE", "sort": "title", "sort_order": "asc"}
    )
    titles = [p["title"] for p in resp.json()["data"]]
    assert titles == ["Alpha release", "Beta release"]


async def test_hidden_posts_are_visible_to_author_and_staff_only(client, member, other_member, moderator):
    post = await create_post(client, member)
    resp = await client.put(
        f"{API}/posts/{post['id']}", json={"status": "hidden"}, headers=member.headers
    )
    assert resp.status_code == 200

    assert (await client.get(f"{API}/posts/{post['id']}")).status_code == 404
    assert (await client.get(f"{API}/posts/{post['id']}", headers=other_member.headers)).status_code == 404
    assert (await client.get(f"{API}/posts/{post['id']}", headers=member.headers)).status_code == 200
    assert (await client.get(f"{API}/posts/{post['id']}", headers=moderator.headers)).status_code == 200

    listed = await client.patch(f"{API}/posts", json={}, headers=other_member.headers)
    assert listed.json()["pagination"]["records"] == 0
    listed = await client.patch(f"{API}/posts", json={}, headers=member.headers)
    assert listed.json()["pagination"]["records"] == 1


async def test_only_staff_may_lock_and_locked_posts_are_frozen(client, member, moderator):
    post = await create_post(client, member)
    url = f"{API}/posts/{post['id']}"

    resp = await client.put(url, json={"status": "locked"}, headers=member.headers)
    assert resp.status_code == 403

    resp = await client.put(url, json={"status": "locked"}, headers=moderator.headers)
    assert resp.status_code == 200
    assert resp.json()["is_locked"] is True

    resp = await client.put(url, json={"title": "sneaky"}, headers=member.headers)
    assert resp.status_code == 409

    resp = await client.post(f"{url}/comments", json={"body": "late"}, headers=member.headers)
    assert resp.status_code == 409


async def test_update_replaces_tags(client, member, moderator):
    first = await _tag(client, moderator, "first")
    second = await _tag(client, moderator, "second")
    post = await create_post(client, member, tag_ids=[first["id"]])

    resp = await client.put(
        f"{API}/posts/{post['id']}", json={"tag_ids": [second["id"]]}, headers=member.headers
    )
    assert [t["name"] for t in resp.json()["tags"]] == ["second"]

    resp = await client.patch(f"{API}/posts", json={"tag_id": first["id"]})
    assert resp.json()["pagination"]["records"] == 0


async def test_non_author_cannot_edit(client, member, other_member):
    post = await create_post(client, member)
    resp = await client.put(
        f"{API}/posts/{post['id']}", json={"title": "mine now"}, headers=other_member.headers
    )
    assert resp.status_code == 403


async def test_soft_deleted_post_disappears(client, member):
    post = await create_post(client, member)
    await create_comment(client, member, post["id"])

    resp = await client.delete(f"{API}/posts/{post['id']}", headers=member.headers)
    assert resp.status_code == 200
    assert resp.json()["deleted_at"] is not None

    assert (await client.get(f"{API}/posts/{post['id']}")).status_code == 404
    assert (await client.delete(f"{API}/posts/{post['id']}", headers=member.headers)).status_code == 404
    resp = await client.patch(f"{API}/posts/{post['id']}/comments", json={})
    assert resp.status_code == 404


async def test_invalid_post_id_is_rejected(client):
    resp = await client.get(f"{API}/posts/not-a-uuid")
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
