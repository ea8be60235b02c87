"""Endpoint tests over the ASGI app with a per-test SQLite database."""

import pytest
import pytest_asyncio

from docshelf.db.models import Document


@pytest_asyncio.fixture
async def create_doc(client, auth_headers):
    async def _create(user, **body):
        payload = {"title": "Intro", "slug": "intro", "content": "Hello world"}
        payload.update(body)
        response = await client.post("/api/v1/documents", json=payload, headers=auth_headers(user))
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


# ---------------------------------------------------------------------------
# End-to-end document lifecycle
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_intro_document_lifecycle(client, auth_headers, member_user, pdf_renderer):
    headers = auth_headers(member_user)

    response = await client.post(
        "/api/v1/documents",
        json={"title": "Intro", "slug": "intro", "content": "Hello world"},
        headers=headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    created = body["data"]
    assert created["version"] == 1
    assert created["published"] is False
    assert created["authorId"] == member_user.id
    assert created["versions"][0]["versionNumber"] == 1
    doc_id = created["id"]

    response = await client.put(
        f"/api/v1/documents/{doc_id}",
        json={"content": "Hello world, updated", "published": True},
        headers=headers,
    )
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["version"] == 2
    assert updated["title"] == "Intro"
    assert [v["versionNumber"] for v in updated["versions"]] == [2, 1]

    v1 = (await client.get(f"/api/v1/documents/{doc_id}/versions/1")).json()["data"]
    v2 = (await client.get(f"/api/v1/documents/{doc_id}/versions/2")).json()["data"]
    assert v1["content"] == "Hello world"
    assert v2["content"] == "Hello world, updated"

    page = (await client.get("/api/v1/documents/slug/intro")).json()["data"]
    assert page["content"] == "Hello world, updated"
    assert page["author"]["name"] == "Member User"
    assert page["prevDoc"] is None
    assert page["nextDoc"] is None
    assert page["comments"] == []

    hits = (await client.get("/api/v1/search", params={"q": "updated"})).json()["data"]
    assert [h["slug"] for h in hits] == ["intro"]
    assert hits[0]["contentSnippet"] == "Hello world, updated"

    response = await client.post("/api/v1/export/pdf", json={"documentId": doc_id})
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == 'attachment; filename="intro.pdf"'
    assert response.content == pdf_renderer.render.return_value

    response = await client.delete(f"/api/v1/documents/{doc_id}", headers=headers)
    assert response.status_code == 200
    assert (await client.get(f"/api/v1/documents/{doc_id}")).status_code == 404
    assert (await client.get(f"/api/v1/documents/{doc_id}/versions/1")).status_code == 404


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_requires_authentication(client):
    response = await client.post("/api/v1/documents", json={"title": "T", "slug": "t", "content": "c"})

    assert response.status_code == 401
    body = response.json()
    assert body["status"] == "error"
    assert body["data"] is None
    assert body["errors"][0]["code"] == "UNAUTHENTICATED"
    assert body["error"] == body["errors"][0]["message"]


@pytest.mark.asyncio
async def test_invalid_token_is_rejected(client):
    response = await client.post(
        "/api/v1/documents",
        json={"title": "T", "slug": "t", "content": "c"},
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_missing_fields_are_a_400(client, auth_headers, member_user):
    response = await client.post("/api/v1/documents", json={"title": "T"}, headers=auth_headers(member_user))

    assert response.status_code == 400
    fields = {e["field"] for e in response.json()["errors"]}
    assert {"slug", "content"} <= fields


@pytest.mark.asyncio
async def test_duplicate_slug_is_a_400(client, create_doc, auth_headers, member_user):
    await create_doc(member_user)

    response = await client.post(
        "/api/v1/documents",
        json={"title": "Again", "slug": "intro", "content": "x"},
        headers=auth_headers(member_user),
    )

    assert response.status_code == 400
    assert "already in use" in response.json()["error"]


@pytest.mark.asyncio
async def test_update_by_non_author_is_forbidden(client, create_doc, auth_headers, member_user, other_user):
    doc = await create_doc(member_user)

    response = await client.put(
        f"/api/v1/documents/{doc['id']}", json={"title": "Mine now"}, headers=auth_headers(other_user),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_with_null_category_detaches_it(client, create_doc, auth_headers, member_user, category):
    doc = await create_doc(member_user, categoryId=category.id, subtitle="Sub")
    assert doc["category"]["slug"] == "guides"

    response = await client.put(
        f"/api/v1/documents/{doc['id']}", json={"categoryId": None}, headers=auth_headers(member_user),
    )

    updated = response.json()["data"]
    assert updated["category"] is None
    assert updated["categoryId"] is None
    assert updated["subtitle"] == "Sub"


@pytest.mark.asyncio
async def test_update_with_null_title_is_a_400(client, create_doc, auth_headers, member_user):
    doc = await create_doc(member_user)
    response = await client.put(
        f"/api/v1/documents/{doc['id']}", json={"title": None}, headers=auth_headers(member_user),
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_unknown_slug_is_a_404(client):
    response = await client.get("/api/v1/documents/slug/missing")
    assert response.status_code == 404
    assert response.json()["errors"][0]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_slug_page_navigation(client, create_doc, member_user):
    for slug in ("alpha", "beta", "gamma"):
        await create_doc(member_user, title=slug, slug=slug, published=True)

    page = (await client.get("/api/v1/documents/slug/beta")).json()["data"]

    assert page["prevDoc"] == {"title": "alpha", "slug": "alpha"}
    assert page["nextDoc"] == {"title": "gamma", "slug": "gamma"}


@pytest.mark.asyncio
async def test_list_filters_published(client, create_doc, member_user):
    await create_doc(member_user, slug="live", published=True)
    await create_doc(member_user, slug="draft")

    public = (await client.get("/api/v1/documents", params={"published": "true"})).json()["data"]
    drafts = (await client.get("/api/v1/documents", params={"published": "false"})).json()["data"]
    everything = (await client.get("/api/v1/documents")).json()["data"]

    assert [d["slug"] for d in public] == ["live"]
    assert [d["slug"] for d in drafts] == ["draft"]
    assert {d["slug"] for d in everything} == {"live", "draft"}


# ---------------------------------------------------------------------------
# Page cache
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_public_page_is_cached_and_revalidated_on_edit(
    client, create_doc, auth_headers, member_user, pages,
):
    doc = await create_doc(member_user, published=True)

    await client.get("/api/v1/documents/slug/intro")
    assert pages.store["/docs/intro"]["content"] == "Hello world"

    await client.put(
        f"/api/v1/documents/{doc['id']}", json={"content": "Changed"}, headers=auth_headers(member_user),
    )
    assert "/docs/intro" not in pages.store

    page = (await client.get("/api/v1/documents/slug/intro")).json()["data"]
    assert page["content"] == "Changed"


@pytest.mark.asyncio
async def test_cached_neighbour_page_follows_new_document(client, create_doc, member_user):
    await create_doc(member_user, title="a", slug="a", published=True)
    await create_doc(member_user, title="c", slug="c", published=True)
    page = (await client.get("/api/v1/documents/slug/a")).json()["data"]
    assert page["nextDoc"] == {"title": "c", "slug": "c"}

    await create_doc(member_user, title="b", slug="b", published=True)

    page = (await client.get("/api/v1/documents/slug/a")).json()["data"]
    assert page["nextDoc"] == {"title": "b", "slug": "b"}


@pytest.mark.asyncio
async def test_cached_page_reflects_category_rename(
    client, create_doc, auth_headers, member_user, admin_user, category,
):
    await create_doc(member_user, slug="d", categoryId=category.id, published=True)
    await client.get("/api/v1/documents", params={"published": "true"})
    page = (await client.get("/api/v1/documents/slug/d")).json()["data"]
    assert page["category"]["name"] == "Guides"

    response = await client.put(
        f"/api/v1/categories/{category.id}", json={"name": "Renamed"}, headers=auth_headers(admin_user),
    )
    assert response.status_code == 200

    page = (await client.get("/api/v1/documents/slug/d")).json()["data"]
    listed = (await client.get("/api/v1/documents", params={"published": "true"})).json()["data"]
    assert page["category"]["name"] == "Renamed"
    assert listed[0]["category"]["name"] == "Renamed"


@pytest.mark.asyncio
async def test_listing_served_from_cache(client, pages):
    pages.store["/docs"] = [{"slug": "cached"}]

    listed = (await client.get("/api/v1/documents", params={"published": "true"})).json()["data"]

    assert listed == [{"slug": "cached"}]


@pytest.mark.asyncio
async def test_listing_variants_are_cached_separately(client, create_doc, member_user, pages):
    await create_doc(member_user, published=True)

    await client.get("/api/v1/documents", params={"published": "true", "limit": 5})

    assert "/docs?limit=5" in pages.store
    assert "/docs" not in pages.store


# ---------------------------------------------------------------------------
# Categories and tags
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_category_crud_as_admin(client, auth_headers, admin_user):
    headers = auth_headers(admin_user)

    created = await client.post(
        "/api/v1/categories", json={"name": "Guides", "slug": "guides"}, headers=headers,
    )
    assert created.status_code == 201
    cat_id = created.json()["data"]["id"]

    updated = await client.put(
        f"/api/v1/categories/{cat_id}", json={"description": "How-tos"}, headers=headers,
    )
    assert updated.json()["data"]["description"] == "How-tos"
    assert updated.json()["data"]["name"] == "Guides"

    listed = (await client.get("/api/v1/categories")).json()["data"]
    assert [c["slug"] for c in listed] == ["guides"]

    deleted = await client.delete(f"/api/v1/categories/{cat_id}", headers=headers)
    assert deleted.status_code == 200
    assert (await client.get(f"/api/v1/categories/{cat_id}")).status_code == 404


@pytest.mark.asyncio
async def test_member_cannot_create_category(client, auth_headers, member_user):
    response = await client.post(
        "/api/v1/categories", json={"name": "Guides", "slug": "guides"}, headers=auth_headers(member_user),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_category_in_use_is_a_400(client, create_doc, auth_headers, admin_user, member_user, category):
    await create_doc(member_user, categoryId=category.id)

    response = await client.delete(f"/api/v1/categories/{category.id}", headers=auth_headers(admin_user))

    assert response.status_code == 400
    assert response.json()["error"] == "Cannot delete category with documents"


@pytest.mark.asyncio
async def test_tags(client, auth_headers, admin_user, member_user):
    forbidden = await client.post("/api/v1/tags", json={"name": "python"}, headers=auth_headers(member_user))
    assert forbidden.status_code == 403

    created = await client.post("/api/v1/tags", json={"name": "python"}, headers=auth_headers(admin_user))
    assert created.status_code == 201

    duplicate = await client.post("/api/v1/tags", json={"name": "python"}, headers=auth_headers(admin_user))
    assert duplicate.status_code == 400

    listed = (await client.get("/api/v1/tags")).json()["data"]
    assert [t["name"] for t in listed] == ["python"]


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_comment_flow(client, create_doc, auth_headers, member_user, other_user, pages):
    doc = await create_doc(member_user, published=True)
    pages.invalidated.clear()

    response = await client.post(
        "/api/v1/comments",
        json={"documentId": doc["id"], "content": "Nice doc"},
        headers=auth_headers(other_user),
    )
    assert response.status_code == 201
    comment = response.json()["data"]
    assert comment["author"]["name"] == "Other User"
    assert pages.invalidated == ["/docs/intro"]

    listed = (await client.get("/api/v1/comments", params={"documentId": doc["id"]})).json()["data"]
    assert [c["content"] for c in listed] == ["Nice doc"]

    forbidden = await client.delete(f"/api/v1/comments/{comment['id']}", headers=auth_headers(member_user))
    assert forbidden.status_code == 403

    deleted = await client.delete(f"/api/v1/comments/{comment['id']}", headers=auth_headers(other_user))
    assert deleted.status_code == 200


@pytest.mark.asyncio
async def test_list_comments_requires_document_id(client):
    assert (await client.get("/api/v1/comments")).status_code == 400


# ---------------------------------------------------------------------------
# Search and export
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_search_requires_query(client):
    assert (await client.get("/api/v1/search")).status_code == 400
    assert (await client.get("/api/v1/search", params={"q": "  "})).status_code == 400


@pytest.mark.asyncio
async def test_search_result_shape(client, db, member_user, category):
    db.add(Document(
        title="Guide", slug="guide", subtitle="Sub", content="Find the needle here",
        published=True, author_id=member_user.id, category_id=category.id,
    ))
    await db.commit()

    body = (await client.get("/api/v1/search", params={"q": "needle"})).json()

    hit = body["data"][0]
    assert hit["category"] == {"id": category.id, "name": "Guides", "slug": "guides"}
    assert hit["contentSnippet"] == "Find the needle here"
    assert body["meta"] == {"query": "needle", "count": 1}


@pytest.mark.asyncio
async def test_search_echoes_query_unmodified(client, db, member_user):
    db.add(Document(
        title="Dance", slug="dance", content="the quickstep dance",
        published=True, author_id=member_user.id,
    ))
    await db.commit()

    body = (await client.get("/api/v1/search", params={"q": " quick "})).json()

    assert body["data"] == []
    assert body["meta"] == {"query": " quick ", "count": 0}


@pytest.mark.asyncio
async def test_export_unknown_document_is_a_404(client):
    response = await client.post("/api/v1/export/pdf", json={"documentId": "missing"})
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Auth and system
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register_login_and_me(client):
    registered = await client.post(
        "/api/v1/auth/register",
        json={"email": "new@example.com", "name": "New User", "password": "secret123"},
    )
    assert registered.status_code == 201
    assert registered.json()["data"]["role"] == "MEMBER"

    duplicate = await client.post(
        "/api/v1/auth/register",
        json={"email": "new@example.com", "name": "New User", "password": "secret123"},
    )
    assert duplicate.status_code == 400

    bad_login = await client.post(
        "/api/v1/auth/login", json={"email": "new@example.com", "password": "wrong-pass1"},
    )
    assert bad_login.status_code == 401

    login = await client.post(
        "/api/v1/auth/login", json={"email": "new@example.com", "password": "secret123"},
    )
    token = login.json()["data"]["accessToken"]

    me = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["data"]["email"] == "new@example.com"

    refreshed = await client.post("/api/v1/auth/refresh", json={"token": token})
    assert refreshed.status_code == 200
    assert refreshed.json()["data"]["userId"] == me.json()["data"]["id"]


@pytest.mark.asyncio
async def test_weak_password_is_rejected(client):
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": "new@example.com", "name": "New User", "password": "short"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_health_and_request_id(client):
    response = await client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.json() == {"status": "healthy"}
    assert response.headers["x-request-id"] == "abc-123"
    assert response.headers["x-content-type-options"] == "nosniff"
