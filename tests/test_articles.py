"""
Article endpoint tests — covers the article queries and admin mutations
on the operation endpoint, the REST listing/deletion surface and the
health endpoint.

Articles are created through ``createArticle`` with the admin token
fixture so each test exercises the real derivation and policy path.
"""
import pytest
from httpx import AsyncClient

EXCERPT = "An excerpt that clears the twenty character minimum."


def _article(title: str = "Budget passes council", **overrides) -> dict:
    args = {
        "title": title,
        "excerpt": EXCERPT,
        "content": "The council approved the budget after a long debate.",
        "category": "politics",
    }
    args.update(overrides)
    return args


async def _create(call, token: str, **overrides) -> dict:
    body = await call("createArticle", _article(**overrides), token=token)
    assert "errors" not in body, body
    return body["data"]["createArticle"]


async def _article_count(client: AsyncClient) -> int:
    resp = await client.get("/health")
    return resp.json()["counts"]["articles"]


# ---------------------------------------------------------------------------
# Infrastructure / health
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    """Health reports connectivity and zero counts on an empty store."""
    resp = await async_client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["database"] == "connected"
    assert data["counts"] == {"articles": 0, "users": 0, "comments": 0}


@pytest.mark.asyncio
async def test_timing_headers(async_client: AsyncClient):
    resp = await async_client.get("/health")
    assert "x-response-time-ms" in resp.headers
    assert "x-query-count" in resp.headers


@pytest.mark.asyncio
async def test_unknown_operation(call):
    body = await call("dropEverything")
    assert body["data"] == {"dropEverything": None}
    assert body["errors"][0]["code"] == "UNKNOWN_OPERATION"


# ---------------------------------------------------------------------------
# createArticle
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_article_as_admin(call, admin_token):
    article = await _create(call, admin_token, tags=["Budget", "Council"])
    assert article["title"] == "Budget passes council"
    assert article["views"] == 0
    assert article["readTime"] == 1
    assert article["isFeatured"] is False
    assert article["isPublished"] is True
    assert article["author"] == "Admin User"
    assert article["featuredImage"].startswith("https://")
    assert article["tags"] == ["budget", "council"]
    assert article["publishedAt"] is not None


@pytest.mark.asyncio
async def test_create_article_read_time_from_word_count(call, admin_token):
    article = await _create(call, admin_token, content=" ".join(["word"] * 400))
    assert article["readTime"] == 2

    article = await _create(call, admin_token, title="Single word story", content="word")
    assert article["readTime"] == 1


@pytest.mark.asyncio
async def test_create_article_explicit_read_time(call, admin_token):
    article = await _create(call, admin_token, content="short", readTime=9)
    assert article["readTime"] == 9


@pytest.mark.asyncio
async def test_create_article_as_reader_is_forbidden(async_client, call, register):
    token, _ = await register("Rita", "rita@example.com")

    body = await call("createArticle", _article(), token=token)
    assert body["data"]["createArticle"] is None
    assert body["errors"][0]["code"] == "FORBIDDEN"
    assert body["errors"][0]["message"] == "Admin access required"
    assert await _article_count(async_client) == 0


@pytest.mark.asyncio
async def test_create_article_anonymous_is_rejected(async_client, call):
    body = await call("createArticle", _article())
    assert body["errors"][0]["message"] == "Admin access required"
    assert await _article_count(async_client) == 0


@pytest.mark.asyncio
async def test_create_article_rejects_unknown_category(call, admin_token):
    body = await call("createArticle", _article(category="gossip"), token=admin_token)
    error = body["errors"][0]
    assert error["code"] == "BAD_USER_INPUT"
    assert error["field"] == "category"


@pytest.mark.asyncio
async def test_create_article_rejects_short_title(call, admin_token):
    body = await call("createArticle", _article(title="Hi"), token=admin_token)
    assert body["errors"][0]["field"] == "title"


@pytest.mark.asyncio
async def test_create_article_rejects_short_excerpt(call, admin_token):
    body = await call("createArticle", _article(excerpt="too short"), token=admin_token)
    assert body["errors"][0]["field"] == "excerpt"


# ---------------------------------------------------------------------------
# articles / featuredArticles
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_articles_only_published(call, admin_token):
    await _create(call, admin_token, title="Visible story")
    await _create(call, admin_token, title="Hidden draft", isPublished=False)

    body = await call("articles")
    titles = [a["title"] for a in body["data"]["articles"]]
    assert titles == ["Visible story"]


@pytest.mark.asyncio
async def test_articles_newest_first_with_paging(call, admin_token):
    for i in range(3):
        await _create(call, admin_token, title=f"Story number {i}")

    body = await call("articles", {"limit": 2, "skip": 1})
    titles = [a["title"] for a in body["data"]["articles"]]
    assert titles == ["Story number 1", "Story number 0"]


@pytest.mark.asyncio
async def test_articles_filter_by_category_and_featured(call, admin_token):
    await _create(call, admin_token, title="Match report", category="sports", isFeatured=True)
    await _create(call, admin_token, title="Transfer news", category="sports")
    await _create(call, admin_token, title="Election night", isFeatured=True)

    sports = await call("articles", {"category": "sports"})
    assert {a["title"] for a in sports["data"]["articles"]} == {"Match report", "Transfer news"}

    featured_sports = await call("articles", {"category": "sports", "isFeatured": True})
    assert [a["title"] for a in featured_sports["data"]["articles"]] == ["Match report"]


@pytest.mark.asyncio
async def test_articles_rejects_negative_skip(call):
    body = await call("articles", {"skip": -1})
    assert body["errors"][0]["field"] == "skip"


@pytest.mark.asyncio
async def test_featured_articles_newest_five(call, admin_token):
    for i in range(7):
        await _create(call, admin_token, title=f"Featured story {i}", isFeatured=True)
    await _create(call, admin_token, title="Regular story")

    body = await call("featuredArticles")
    titles = [a["title"] for a in body["data"]["featuredArticles"]]
    assert titles == [f"Featured story {i}" for i in (6, 5, 4, 3, 2)]


# ---------------------------------------------------------------------------
# article (view counting)
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_article_fetch_increments_views(call, admin_token):
    created = await _create(call, admin_token)

    first = await call("article", {"id": created["id"]})
    second = await call("article", {"id": created["id"]})
    assert first["data"]["article"]["views"] == 1
    assert second["data"]["article"]["views"] == 2


@pytest.mark.asyncio
async def test_listing_does_not_count_views(call, admin_token):
    created = await _create(call, admin_token)
    await call("articles")
    await call("searchArticles", {"query": "budget"})

    body = await call("article", {"id": created["id"]})
    assert body["data"]["article"]["views"] == 1


@pytest.mark.asyncio
async def test_article_not_found(call):
    body = await call("article", {"id": 99999})
    assert body["data"]["article"] is None
    assert body["errors"][0]["code"] == "NOT_FOUND"
    assert body["errors"][0]["message"] == "Article not found"



@pytest.mark.asyncio
async def test_article_id_out_of_range(call):
    for bad_id in (0, -3, 2**31, 2**70):
        body = await call("article", {"id": bad_id})
        assert body["data"]["article"] is None
        assert body["errors"][0]["code"] == "BAD_USER_INPUT"
        assert body["errors"][0]["field"] == "id"

    body = await call("articles", {"skip": 2**70})
    assert body["errors"][0]["field"] == "skip"


# ---------------------------------------------------------------------------
# searchArticles
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_search_empty_query_returns_empty(call, admin_token):
    await _create(call, admin_token)
    body = await call("searchArticles", {"query": ""})
    assert body["data"]["searchArticles"] == []
    body = await call("searchArticles")
    assert body["data"]["searchArticles"] == []


@pytest.mark.asyncio
async def test_search_matches_published_only(call, admin_token):
    await _create(call, admin_token, title="Justice for all", category="justice")
    await _create(call, admin_token, title="Weekend sport", tags=["Justice"])
    await _create(call, admin_token, title="Draft on justice", isPublished=False)
    await _create(call, admin_token, title="Nothing related")

    body = await call("searchArticles", {"query": "JUSTICE"})
    titles = {a["title"] for a in body["data"]["searchArticles"]}
    assert titles == {"Justice for all", "Weekend sport"}


@pytest.mark.asyncio
async def test_search_matches_tag_values_not_their_encoding(call, admin_token):
    await _create(call, admin_token, title="Weekend sport", tags=["league"])

    for query in ("[", '"', '", "', "]"):
        body = await call("searchArticles", {"query": query})
        assert body["data"]["searchArticles"] == [], query


@pytest.mark.asyncio
async def test_search_matches_non_ascii_tag(call, admin_token):
    await _create(call, admin_token, title="Morning brew", tags=["Café"])

    for query in ("café", "CAFÉ", "caf"):
        body = await call("searchArticles", {"query": query})
        assert [a["title"] for a in body["data"]["searchArticles"]] == ["Morning brew"], query


# ---------------------------------------------------------------------------
# updateArticle / deleteArticle
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_article_partial(call, admin_token):
    created = await _create(call, admin_token, tags=["one"])

    body = await call("updateArticle", {
        "id": created["id"],
        "input": {"content": " ".join(["word"] * 600), "isFeatured": True},
    }, token=admin_token)
    updated = body["data"]["updateArticle"]
    assert updated["readTime"] == 3
    assert updated["isFeatured"] is True
    assert updated["title"] == created["title"]
    assert updated["tags"] == ["one"]
    assert updated["views"] == 0


@pytest.mark.asyncio
async def test_update_article_replaces_tags_in_order(call, admin_token):
    created = await _create(call, admin_token, tags=["one", "two"])

    body = await call("updateArticle", {
        "id": created["id"],
        "input": {"tags": ["Zeta", "alpha", "zeta"]},
    }, token=admin_token)
    assert body["data"]["updateArticle"]["tags"] == ["zeta", "alpha"]

    fetched = await call("article", {"id": created["id"]})
    assert fetched["data"]["article"]["tags"] == ["zeta", "alpha"]

    body = await call("searchArticles", {"query": "two"})
    assert body["data"]["searchArticles"] == []


@pytest.mark.asyncio
async def test_update_article_requires_admin(call, admin_token, register):
    created = await _create(call, admin_token)
    token, _ = await register("Rita", "rita@example.com")

    body = await call("updateArticle", {"id": created["id"], "input": {"title": "Hijacked title"}}, token=token)
    assert body["errors"][0]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_delete_article_mutation(async_client, call, admin_token):
    created = await _create(call, admin_token)

    body = await call("deleteArticle", {"id": created["id"]}, token=admin_token)
    assert body["data"]["deleteArticle"]["success"] is True
    assert await _article_count(async_client) == 0

    body = await call("deleteArticle", {"id": created["id"]}, token=admin_token)
    assert body["errors"][0]["code"] == "NOT_FOUND"


# ---------------------------------------------------------------------------
# REST surface
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_rest_list_articles(async_client, call, admin_token):
    await _create(call, admin_token, title="Match report", category="sports")
    await _create(call, admin_token, title="Election night")

    resp = await async_client.get("/api/v1/articles", params={"category": "sports"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert [a["title"] for a in data["articles"]] == ["Match report"]


@pytest.mark.asyncio
async def test_rest_delete_article(async_client, call, admin_token, register):
    created = await _create(call, admin_token)
    reader_token, _ = await register("Rita", "rita@example.com")

    resp = await async_client.delete(f"/api/v1/articles/{created['id']}")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Admin access required"}

    resp = await async_client.delete(
        f"/api/v1/articles/{created['id']}",
        headers={"Authorization": f"Bearer {reader_token}"},
    )
    assert resp.status_code == 403

    resp = await async_client.delete(
        f"/api/v1/articles/{created['id']}",
        headers={"Authorization": f"Bearer {admin_token}"},
    )
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    resp = await async_client.delete(
        f"/api/v1/articles/{created['id']}",
        headers={"Authorization": f"Bearer {admin_token}"},
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_rest_rejects_malformed_parameters(async_client, admin_token):
    auth = {"Authorization": f"Bearer {admin_token}"}

    resp = await async_client.get("/api/v1/articles", params={"category": "gossip"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["error"].startswith("category:")

    resp = await async_client.delete("/api/v1/articles/abc", headers=auth)
    assert resp.status_code == 400
    assert resp.json()["success"] is False

    resp = await async_client.delete(f"/api/v1/articles/{2**70}", headers=auth)
    assert resp.status_code == 400
    assert resp.json()["success"] is False


# ---------------------------------------------------------------------------
# Operation endpoint transport
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_null_arguments_mean_no_arguments(async_client):
    resp = await async_client.post("/api/v1/query", json={"operation": "featuredArticles", "arguments": None})
    assert resp.status_code == 200
    assert resp.json() == {"data": {"featuredArticles": []}}


@pytest.mark.asyncio
async def test_malformed_operation_request_keeps_envelope(async_client):
    for payload in (
        {"arguments": {}},
        {"operation": "articles", "arguments": "limit=5"},
        ["articles"],
    ):
        resp = await async_client.post("/api/v1/query", json=payload)
        assert resp.status_code == 400, payload
        body = resp.json()
        assert body["data"] is None
        assert body["errors"][0]["code"] == "BAD_USER_INPUT"
        assert "detail" not in body

    resp = await async_client.post(
        "/api/v1/query",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["code"] == "BAD_USER_INPUT"


@pytest.mark.asyncio
async def test_missing_operation_names_the_field(async_client):
    resp = await async_client.post("/api/v1/query", json={"arguments": {}})
    assert resp.json()["errors"][0]["field"] == "operation"
