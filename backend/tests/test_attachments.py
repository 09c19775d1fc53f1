import pytest

from conftest import API, create_comment, create_post

pytestmark = pytest.mark.anyio

PDF = {
    "file_name": "agenda.pdf",
    "file_url": "https://files.example.com/agenda.pdf",
    "content_type": "application/pdf",
    "size_bytes": 2048,
}


async def test_author_attaches_and_lists(client, member, other_member):
    post = await create_post(client, member)
    url = f"{API}/posts/{post['id']}/attachments"

    resp = await client.post(url, json=PDF, headers=member.headers)
    assert resp.status_code == 201
    attachment = resp.json()
    assert attachment["post_id"] == post["id"]
    assert attachment["comment_id"] is None

    assert (await client.post(url, json=PDF, headers=other_member.headers)).status_code == 403
    assert (await client.patch(url, json={}, headers=other_member.headers)).status_code == 403

    listed = await client.patch(url, json={"file_name": "AGENDA"}, headers=member.headers)
    assert listed.json()["pagination"]["records"] == 1


async def test_comment_attachment(client, member):
    post = await create_post(client, member)
    comment = await create_comment(client, member, post["id"])
    url = f"{API}/posts/{post['id']}/comments/{comment['id']}/attachments"

    resp = await client.post(url, json=PDF, headers=member.headers)
    assert resp.status_code == 201
    assert resp.json()["comment_id"] == comment["id"]
    assert resp.json()["post_id"] is None


async def test_disallowed_content_type_and_size(client, member):
    post = await create_post(client, member)
    url = f"{API}/posts/{post['id']}/attachments"

    resp = await client.post(url, json=PDF | {"content_type": "application/x-msdownload"}, headers=member.headers)
    assert resp.status_code == 400
    resp = await client.post(url, json=PDF | {"size_bytes": 1024 ** 3}, headers=member.headers)
    assert resp.status_code == 400


async def test_uploader_soft_delete_then_admin_purge(client, member, admin):
    post = await create_post(client, member)
    url = f"{API}/posts/{post['id']}/attachments"
    attachment = (await client.post(url, json=PDF, headers=member.headers)).json()

    resp = await client.delete(f"{API}/attachments/{attachment['id']}", headers=member.headers)
    assert resp.status_code == 200
    assert resp.json()["deleted_at"] is not None

    listed = await client.patch(url, json={"deleted": "only"}, headers=admin.headers)
    assert listed.json()["pagination"]["records"] == 1

    resp = await client.delete(f"{API}/admin/attachments/{attachment['id']}", headers=admin.headers)
    assert resp.status_code == 204
    resp = await client.delete(f"{API}/admin/attachments/{attachment['id']}", headers=admin.headers)
    assert resp.status_code == 404

    listed = await client.patch(url, json={"deleted": "include"}, headers=admin.headers)
    assert listed.json()["pagination"]["records"] == 0


async def test_purge_requires_administrator(client, member, moderator):
    post = await create_post(client, member)
    attachment = (
        await client.post(f"{API}/posts/{post['id']}/attachments", json=PDF, headers=member.headers)
    ).json()
    resp = await client.delete(f"{API}/admin/attachments/{attachment['id']}", headers=moderator.headers)
    assert resp.status_code == 403


async def test_comment_attachments_under_a_hidden_post(client, member, other_member):
    post = await create_post(client, member)
    comment = await create_comment(client, other_member, post["id"])
    await client.put(f"{API}/posts/{post['id']}", json={"status": "hidden"}, headers=member.headers)
    url = f"{API}/posts/{post['id']}/comments/{comment['id']}/attachments"

    assert (await client.post(url, json=PDF, headers=other_member.headers)).status_code == 404
    assert (await client.patch(url, json={}, headers=other_member.headers)).status_code == 404
