import uuid

import pytest

from conftest import API, create_comment, create_post

pytestmark = pytest.mark.anyio


async def test_post_edits_are_recorded(client, member, moderator):
    post = await create_post(client, member, title="Draft", body="v1")
    url = f"{API}/posts/{post['id']}"

    await client.put(url, json={"title": "Final"}, headers=member.headers)
    await client.put(url, json={"body": "v2 by mod"}, headers=moderator.headers)
    # status-only changes do not touch the text
    await client.put(url, json={"status": "locked"}, headers=moderator.headers)

    resp = await client.patch(f"{url}/edit-histories", json={})
    assert resp.status_code == 200
    rows = resp.json()["data"]
    assert resp.json()["pagination"]["records"] == 2
    assert rows[0]["previous_body"] == "v1"
    assert rows[0]["edited_body"] == "v2 by mod"
    assert rows[0]["editor_role"] == "moderator"
    assert rows[1]["previous_title"] == "Draft"
    assert rows[1]["edited_title"] == "Final"
    assert rows[1]["editor_id"] == member.account_id

    resp = await client.patch(f"{url}/edit-histories", json={"editor_id": member.account_id})
    assert [r["edited_title"] for r in resp.json()["data"]] == ["Final"]

    resp = await client.get(f"{url}/edit-histories/{rows[1]['id']}")
    assert resp.status_code == 200
    assert resp.json()["previous_title"] == "Draft"

    assert (await client.get(f"{url}/edit-histories/{uuid.uuid4()}")).status_code == 404


async def test_post_edit_history_uses_strict_paging(client, member):
    post = await create_post(client, member)
    resp = await client.patch(f"{API}/posts/{post['id']}/edit-histories", json={"page": -3})
    assert resp.status_code == 400


async def test_history_of_a_hidden_post_is_not_found(client, member, other_member):
    post = await create_post(client, member)
    url = f"{API}/posts/{post['id']}"
    await client.put(url, json={"title": "Renamed"}, headers=member.headers)
    await client.put(url, json={"status": "hidden"}, headers=member.headers)

    assert (await client.patch(f"{url}/edit-histories", json={})).status_code == 404
    resp = await client.patch(f"{url}/edit-histories", json={}, headers=other_member.headers)
    assert resp.status_code == 404
    resp = await client.patch(f"{url}/edit-histories", json={}, headers=member.headers)
    assert resp.json()["pagination"]["records"] == 1


async def test_history_is_not_reachable_through_another_post(client, member):
    first = await create_post(client, member)
    second = await create_post(client, member)
    await client.put(f"{API}/posts/{first['id']}", json={"title": "Renamed"}, headers=member.headers)
    history = (await client.patch(f"{API}/posts/{first['id']}/edit-histories", json={})).json()["data"][0]

    resp = await client.get(f"{API}/posts/{second['id']}/edit-histories/{history['id']}")
    assert resp.status_code == 404


async def test_comment_history_is_for_author_and_staff(client, member, other_member, moderator):
    post = await create_post(client, member)
    comment = await create_comment(client, other_member, post["id"], body="frist")
    url = f"{API}/posts/{post['id']}/comments/{comment['id']}"

    resp = await client.put(url, json={"body": "first"}, headers=other_member.headers)
    assert resp.status_code == 200

    resp = await client.patch(f"{url}/edit-histories", json={}, headers=other_member.headers)
    assert resp.status_code == 200
    [history] = resp.json()["data"]
    assert history["previous_content"] == "frist"
    assert history["edited_content"] == "first"
    assert history["editor_id"] == other_member.account_id
    assert history["comment_id"] == comment["id"]

    resp = await client.patch(f"{url}/edit-histories", json={}, headers=moderator.headers)
    assert resp.json()["pagination"]["records"] == 1

    # the post author is not the comment author
    resp = await client.patch(f"{url}/edit-histories", json={}, headers=member.headers)
    assert resp.status_code == 403
    resp = await client.get(f"{url}/edit-histories/{history['id']}", headers=member.headers)
    assert resp.status_code == 403
    assert (await client.patch(f"{url}/edit-histories", json={})).status_code == 401

    resp = await client.get(f"{url}/edit-histories/{history['id']}", headers=other_member.headers)
    assert resp.status_code == 200
    resp = await client.get(f"{url}/edit-histories/{uuid.uuid4()}", headers=other_member.headers)
    assert resp.status_code == 404
