import uuid

import pytest

from conftest import API, create_post

pytestmark = pytest.mark.anyio


async def _word(client, admin, expression, description=None):
    resp = await client.post(
        f"{API}/forbidden-words",
        json={"expression": expression, "description": description},
        headers=admin.headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_only_administrators_manage_words(client, admin, member, moderator):
    resp = await client.post(f"{API}/forbidden-words", json={"expression": "spam"}, headers=member.headers)
    assert resp.status_code == 403
    resp = await client.post(f"{API}/forbidden-words", json={"expression": "spam"}, headers=moderator.headers)
    assert resp.status_code == 403

    word = await _word(client, admin, "spam")
    resp = await client.post(f"{API}/forbidden-words", json={"expression": "spam"}, headers=admin.headers)
    assert resp.status_code == 409

    assert (await client.get(f"{API}/forbidden-words/{word['id']}", headers=moderator.headers)).status_code == 200
    assert (await client.get(f"{API}/forbidden-words/{word['id']}", headers=member.headers)).status_code == 403


async def test_search_by_keyword_with_paging(client, admin):
    await _word(client, admin, "scam", "fraud bait")
    await _word(client, admin, "spam")
    await _word(client, admin, "slur", "hate speech")

    resp = await client.patch(f"{API}/forbidden-words", json={"keyword": "SPAM"}, headers=admin.headers)
    assert [w["expression"] for w in resp.json()["data"]] == ["spam"]

    resp = await client.patch(f"{API}/forbidden-words", json={"keyword": "speech"}, headers=admin.headers)
    assert [w["expression"] for w in resp.json()["data"]] == ["slur"]

    resp = await client.patch(f"{API}/forbidden-words", json={"page": 2, "limit": 2}, headers=admin.headers)
    assert resp.json()["pagination"] == {"current": 2, "limit": 2, "records": 3, "pages": 2}
    assert [w["expression"] for w in resp.json()["data"]] == ["spam"]


async def test_update_and_missing_word(client, admin):
    word = await _word(client, admin, "spam")
    other = await _word(client, admin, "scam")

    resp = await client.put(
        f"{API}/forbidden-words/{word['id']}", json={"description": "unsolicited ads"}, headers=admin.headers
    )
    assert resp.status_code == 200
    assert resp.json()["description"] == "unsolicited ads"

    resp = await client.put(
        f"{API}/forbidden-words/{other['id']}", json={"expression": "spam"}, headers=admin.headers
    )
    assert resp.status_code == 409

    resp = await client.put(
        f"{API}/forbidden-words/{uuid.uuid4()}", json={"description": "x"}, headers=admin.headers
    )
    assert resp.status_code == 404


async def test_forbidden_words_block_posts_and_comments(client, admin, member):
    post = await create_post(client, member)
    word = await _word(client, admin, "spam")

    resp = await client.post(
        f"{API}/posts", json={"title": "Cheap SPAM here", "body": "b"}, headers=member.headers
    )
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["details"][0]["field"] == "title"

    resp = await client.put(
        f"{API}/posts/{post['id']}", json={"body": "more spam"}, headers=member.headers
    )
    assert resp.status_code == 400

    resp = await client.post(
        f"{API}/posts/{post['id']}/comments", json={"body": "spammy"}, headers=member.headers
    )
    assert resp.status_code == 400

    resp = await client.delete(f"{API}/forbidden-words/{word['id']}", headers=admin.headers)
    assert resp.status_code == 200
    resp = await client.post(
        f"{API}/posts/{post['id']}/comments", json={"body": "spammy"}, headers=member.headers
    )
    assert resp.status_code == 201

    # the expression is free again once the old row is gone
    await _word(client, admin, "spam")
