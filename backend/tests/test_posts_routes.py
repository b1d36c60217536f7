"""
Blog API - Post Endpoint Tests
==============================

What:  /api/posts CRUD over HTTP against a real SQLite database.

What we test:
    ✅ Create: author populated, slug derived, draft default, validation
    ✅ List: visibility per caller, filters, pagination arithmetic
    ✅ Get by slug: hidden drafts answer exactly like missing posts
    ✅ Update/delete: author only, 403 for others, 404 for missing/deleted
    ✅ Soft delete hides the post everywhere
"""

import uuid

import pytest


async def create_post(client, user, **fields):
    body = {"title": "Hello World", "content": "Some content", "status": "published"}
    body.update(fields)
    response = await client.post("/api/posts", json=body, headers=user["headers"])
    assert response.status_code == 201, response.text
    return response.json()["data"]


# ══════════════════════════════════════════════════════════════════════════
# Create
# ══════════════════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_create_post(client, register_user):
    ada = await register_user("ada")
    response = await client.post(
        "/api/posts",
        json={
            "title": "  Getting Started with Node.js! ",
            "content": "Body",
            "tags": ["nodejs", "javascript"],
        },
        headers=ada["headers"],
    )

    assert response.status_code == 201
    post = response.json()["data"]
    assert post["title"] == "Getting Started with Node.js!"
    assert post["slug"] == "getting-started-with-nodejs"
    assert post["status"] == "draft"
    assert post["tags"] == ["nodejs", "javascript"]
    assert post["deleted_at"] is None
    assert post["author"] == {
        "id": ada["user"]["id"],
        "name": "ada",
        "email": "ada@example.com",
    }


@pytest.mark.asyncio
async def test_create_validation(client, register_user):
    ada = await register_user("ada")
    response = await client.post(
        "/api/posts",
        json={"title": "", "content": "", "status": "archived", "tags": "x"},
        headers=ada["headers"],
    )

    assert response.status_code == 400
    assert [e["message"] for e in response.json()["errors"]] == [
        "Title is required",
        "Content is required",
        "Status must be either draft or published",
        "Tags must be an array",
    ]


@pytest.mark.asyncio
async def test_non_string_tags_rejected(client, register_user):
    ada = await register_user("ada")
    post = await create_post(client, ada, tags=["keep"])

    created = await client.post(
        "/api/posts",
        json={"title": "Tagged", "content": "Body", "tags": [{"x": 1}, None]},
        headers=ada["headers"],
    )
    updated = await client.put(
        f"/api/posts/{post['id']}", json={"tags": ["ok", 7]}, headers=ada["headers"]
    )

    for response in (created, updated):
        assert response.status_code == 400
        assert [e["message"] for e in response.json()["errors"]] == ["Each tag must be a string"]
    assert (await client.get("/api/posts/hello-world")).json()["data"]["tags"] == ["keep"]


@pytest.mark.asyncio
async def test_long_title_and_tags_are_stored(client, register_user):
    ada = await register_user("ada")
    title = "word " * 60
    tag = "t" * 150

    post = await create_post(client, ada, title=title, tags=[tag])

    assert post["title"] == title.strip()
    assert len(post["slug"]) > 255
    assert post["tags"] == [tag]


@pytest.mark.asyncio
async def test_create_duplicate_slug(client, register_user):
    ada = await register_user("ada")
    await create_post(client, ada, title="Same Title")
    response = await client.post(
        "/api/posts",
        json={"title": "same title!", "content": "Body"},
        headers=ada["headers"],
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Slug already exists"


# ══════════════════════════════════════════════════════════════════════════
# List
# ══════════════════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_pagination_arithmetic(client, register_user):
    ada = await register_user("ada")
    for i in range(25):
        await create_post(client, ada, title=f"Post number {i}")

    response = await client.get("/api/posts", params={"page": 3, "limit": 10})

    assert response.status_code == 200
    body = response.json()
    assert len(body["data"]) == 5
    assert body["pagination"] == {"page": 3, "limit": 10, "total": 25, "pages": 3}


@pytest.mark.asyncio
async def test_list_newest_first_with_lenient_numbers(client, register_user):
    ada = await register_user("ada")
    for i in range(3):
        await create_post(client, ada, title=f"Ordered {i}")

    body = (await client.get("/api/posts", params={"page": "abc", "limit": "2xyz"})).json()

    assert body["pagination"]["page"] == 1
    assert body["pagination"]["limit"] == 2
    assert [p["title"] for p in body["data"]] == ["Ordered 2", "Ordered 1"]


@pytest.mark.asyncio
async def test_list_visibility_per_caller(client, register_user):
    ada = await register_user("ada")
    bob = await register_user("bob")
    await create_post(client, ada, title="Ada public")
    await create_post(client, ada, title="Ada draft", status="draft")
    await create_post(client, bob, title="Bob draft", status="draft")

    anonymous = (await client.get("/api/posts")).json()["data"]
    as_ada = (await client.get("/api/posts", headers=ada["headers"])).json()["data"]

    assert [p["title"] for p in anonymous] == ["Ada public"]
    assert sorted(p["title"] for p in as_ada) == ["Ada draft", "Ada public"]


@pytest.mark.asyncio
async def test_status_filter_requires_token(client):
    response = await client.get("/api/posts", params={"status": "draft"})
    assert response.status_code == 401
    assert response.json()["error"] == "Authentication required to filter by status"


@pytest.mark.asyncio
async def test_draft_filter_ignores_foreign_author(client, register_user):
    ada = await register_user("ada")
    bob = await register_user("bob")
    await create_post(client, ada, title="Ada draft", status="draft")
    await create_post(client, bob, title="Bob draft", status="draft")

    response = await client.get(
        "/api/posts",
        params={"status": "draft", "author": bob["user"]["id"]},
        headers=ada["headers"],
    )

    assert [p["title"] for p in response.json()["data"]] == ["Ada draft"]


@pytest.mark.asyncio
async def test_invalid_status_filter(client, register_user):
    ada = await register_user("ada")
    response = await client.get("/api/posts", params={"status": "archived"}, headers=ada["headers"])
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_search_tag_and_author_filters(client, register_user):
    ada = await register_user("ada")
    bob = await register_user("bob")
    await create_post(client, ada, title="FastAPI tips", content="async all the way", tags=["python"])
    await create_post(client, bob, title="Cooking", content="100% butter", tags=["food"])

    by_search = (await client.get("/api/posts", params={"search": "ASYNC"})).json()["data"]
    by_percent = (await client.get("/api/posts", params={"search": "%"})).json()["data"]
    by_tag = (await client.get("/api/posts", params={"tag": "food"})).json()["data"]
    by_author = (await client.get("/api/posts", params={"author": ada["user"]["id"]})).json()["data"]
    bad_author = (await client.get("/api/posts", params={"author": "nope"})).json()

    assert [p["title"] for p in by_search] == ["FastAPI tips"]
    assert [p["title"] for p in by_percent] == ["Cooking"]
    assert [p["title"] for p in by_tag] == ["Cooking"]
    assert [p["title"] for p in by_author] == ["FastAPI tips"]
    assert bad_author["data"] == []
    assert bad_author["pagination"]["total"] == 0


# ══════════════════════════════════════════════════════════════════════════
# Get by slug
# ══════════════════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_get_published_by_slug(client, register_user):
    ada = await register_user("ada")
    await create_post(client, ada, title="Public Post")

    response = await client.get("/api/posts/public-post")

    assert response.status_code == 200
    assert response.json()["data"]["author"]["name"] == "ada"


@pytest.mark.asyncio
async def test_hidden_draft_is_indistinguishable_from_missing(client, register_user):
    ada = await register_user("ada")
    bob = await register_user("bob")
    await create_post(client, ada, title="Secret Draft", status="draft")

    anonymous = await client.get("/api/posts/secret-draft")
    as_bob = await client.get("/api/posts/secret-draft", headers=bob["headers"])
    missing = await client.get("/api/posts/no-such-post")
    as_ada = await client.get("/api/posts/secret-draft", headers=ada["headers"])

    assert anonymous.status_code == as_bob.status_code == missing.status_code == 404
    assert anonymous.json() == as_bob.json() == missing.json() == {
        "success": False,
        "error": "Post not found",
    }
    assert as_ada.status_code == 200


# ══════════════════════════════════════════════════════════════════════════
# Update
# ══════════════════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_update_by_author(client, register_user):
    ada = await register_user("ada")
    post = await create_post(client, ada, title="Old Title", status="draft", tags=["a", "b"])

    response = await client.put(
        f"/api/posts/{post['id']}",
        json={"title": "New Title", "content": "", "tags": ["b", "c"]},
        headers=ada["headers"],
    )

    assert response.status_code == 400  # empty content is rejected

    response = await client.put(
        f"/api/posts/{post['id']}",
        json={"title": "New Title", "status": "published", "tags": ["b", "c"]},
        headers=ada["headers"],
    )

    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["slug"] == "new-title"
    assert updated["content"] == "Some content"
    assert updated["status"] == "published"
    assert updated["tags"] == ["b", "c"]
    assert (await client.get("/api/posts/new-title")).status_code == 200
    assert (await client.get("/api/posts/old-title")).status_code == 404


@pytest.mark.asyncio
async def test_update_with_empty_tags_clears_them(client, register_user):
    ada = await register_user("ada")
    post = await create_post(client, ada, tags=["a"])

    response = await client.put(
        f"/api/posts/{post['id']}", json={"tags": []}, headers=ada["headers"]
    )

    assert response.json()["data"]["tags"] == []


@pytest.mark.asyncio
async def test_update_by_other_user_forbidden(client, register_user):
    ada = await register_user("ada")
    bob = await register_user("bob")
    post = await create_post(client, ada)

    response = await client.put(
        f"/api/posts/{post['id']}", json={"title": "Hijacked"}, headers=bob["headers"]
    )

    assert response.status_code == 403
    assert response.json()["error"] == "Not authorized to update this post"


@pytest.mark.asyncio
async def test_update_without_token(client, register_user):
    ada = await register_user("ada")
    post = await create_post(client, ada)
    response = await client.put(f"/api/posts/{post['id']}", json={"title": "X"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_unknown_or_malformed_id(client, register_user):
    ada = await register_user("ada")
    unknown = await client.put(
        f"/api/posts/{uuid.uuid4()}", json={"title": "X"}, headers=ada["headers"]
    )
    malformed = await client.put(
        "/api/posts/not-an-id", json={"title": "X"}, headers=ada["headers"]
    )
    assert unknown.status_code == malformed.status_code == 404


# ══════════════════════════════════════════════════════════════════════════
# Delete
# ══════════════════════════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_soft_delete_hides_post_everywhere(client, register_user):
    ada = await register_user("ada")
    post = await create_post(client, ada, title="Doomed")

    response = await client.delete(f"/api/posts/{post['id']}", headers=ada["headers"])
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Post deleted successfully"}

    assert (await client.get("/api/posts/doomed")).status_code == 404
    listing = (await client.get("/api/posts", headers=ada["headers"])).json()
    assert listing["pagination"]["total"] == 0

    again = await client.delete(f"/api/posts/{post['id']}", headers=ada["headers"])
    assert again.status_code == 404
    update = await client.put(
        f"/api/posts/{post['id']}", json={"title": "Revived"}, headers=ada["headers"]
    )
    assert update.status_code == 404


@pytest.mark.asyncio
async def test_delete_by_other_user_forbidden(client, register_user):
    ada = await register_user("ada")
    bob = await register_user("bob")
    post = await create_post(client, ada)

    response = await client.delete(f"/api/posts/{post['id']}", headers=bob["headers"])

    assert response.status_code == 403
    assert response.json()["error"] == "Not authorized to delete this post"
    assert (await client.get("/api/posts/hello-world")).status_code == 200


@pytest.mark.asyncio
async def test_deleted_post_keeps_its_slug(client, register_user):
    ada = await register_user("ada")
    post = await create_post(client, ada, title="Reused")
    await client.delete(f"/api/posts/{post['id']}", headers=ada["headers"])

    response = await client.post(
        "/api/posts", json={"title": "Reused", "content": "Again"}, headers=ada["headers"]
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Slug already exists"
