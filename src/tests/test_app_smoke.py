"""End-to-end smoke tests for the blog catalog JSON API.

Starts the app against a temp content directory and exercises every route.
"""

import importlib
import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

POSTS = {
    "first.md": (
        "---\n"
        "title: First Post\n"
        "pubDate: '2024-01-05'\n"
        "description: The first one\n"
        "author: alice\n"
        "tags: [rust, cli]\n"
        "---\n\n"
        "# First\n\n![diagram](./diagram.png)\n"
    ),
    "second.md": (
        "---\n"
        "title: Second Post\n"
        "pubDate: '2024-02-10'\n"
        "description: The second one\n"
        "author: bob\n"
        "tags: [python]\n"
        "---\n\n"
        "## Details\n"
    ),
    "2024/third.md": (
        "---\n"
        "title: Third Post\n"
        "pubDate: '2024-03-15'\n"
        "description: The third one\n"
        "author: alice\n"
        "tags: [rust, python]\n"
        "---\n\n"
        "Body\n"
    ),
    "broken.md": (
        "---\n"
        "pubDate: '2024-04-01'\n"
        "description: No title\n"
        "author: alice\n"
        "tags: []\n"
        "---\n\n"
        "Body\n"
    ),
}


@pytest.fixture()
def blog_app(tmp_path):
    """Create a fresh app instance pointing at a temp content directory.

    Reloads config and main modules so the app picks up the temp
    content_dir, then loads the catalog. Yields the FastAPI app object.
    """
    for name, text in POSTS.items():
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    os.environ["BLOG_CONTENT_DIR"] = str(tmp_path)

    import blogcatalog.config
    importlib.reload(blogcatalog.config)
    import blogcatalog.main
    importlib.reload(blogcatalog.main)
    blogcatalog.main.catalog.load()

    yield blogcatalog.main.app

    # Cleanup env
    os.environ.pop("BLOG_CONTENT_DIR", None)


@pytest_asyncio.fixture()
async def client(blog_app):
    """Async HTTP client wired to the app (no lifespan)."""
    transport = ASGITransport(app=blog_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ============================================================
# Post listing
# ============================================================


class TestListPosts:
    @pytest.mark.asyncio
    async def test_lists_valid_posts(self, client):
        resp = await client.get("/api/posts")
        assert resp.status_code == 200
        ids = {p["id"] for p in resp.json()}
        assert ids == {"first", "second", "2024/third"}

    @pytest.mark.asyncio
    async def test_summary_shape(self, client):
        resp = await client.get("/api/posts", params={"tag": "cli"})
        [summary] = resp.json()
        assert set(summary) == {"id", "slug", "data"}
        assert summary["slug"] == "first"
        assert summary["data"]["pubDate"] == "2024-01-05"
        assert summary["data"]["tags"] == ["rust", "cli"]

    @pytest.mark.asyncio
    async def test_filter_by_tags_and_author(self, client):
        resp = await client.get(
            "/api/posts", params=[("tags", "rust"), ("tags", "python"), ("author", "alice")]
        )
        assert [p["id"] for p in resp.json()] == ["2024/third"]

    @pytest.mark.asyncio
    async def test_sort_and_limit(self, client):
        resp = await client.get(
            "/api/posts", params={"sortBy": "pubDate", "sortOrder": "desc", "limit": 2}
        )
        assert resp.status_code == 200
        assert [p["id"] for p in resp.json()] == ["2024/third", "second"]

    @pytest.mark.asyncio
    async def test_negative_limit_rejected(self, client):
        resp = await client.get("/api/posts", params={"limit": -1})
        assert resp.status_code == 400
        assert "limit" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_unknown_sort_field_rejected(self, client):
        resp = await client.get("/api/posts", params={"sortBy": "author"})
        assert resp.status_code == 400


# ============================================================
# Single post
# ============================================================


class TestGetPost:
    @pytest.mark.asyncio
    async def test_full_post(self, client):
        resp = await client.get("/api/posts/first")
        assert resp.status_code == 200
        post = resp.json()
        assert post["collection"] == "blog"
        assert post["data"]["title"] == "First Post"
        assert "<h1" in post["rendered"]["html"]
        metadata = post["rendered"]["metadata"]
        assert metadata["headings"] == [{"depth": 1, "slug": "first", "text": "First"}]
        assert metadata["localImagePaths"] == ["./diagram.png"]
        assert metadata["imagePaths"] == ["./diagram.png"]
        assert len(post["digest"]) == 16

    @pytest.mark.asyncio
    async def test_nested_slug(self, client):
        resp = await client.get("/api/posts/2024/third")
        assert resp.status_code == 200
        assert resp.json()["id"] == "2024/third"

    @pytest.mark.asyncio
    async def test_missing_post(self, client):
        resp = await client.get("/api/posts/nope")
        assert resp.status_code == 404
        assert "nope" in resp.json()["detail"]


# ============================================================
# Tags and load errors
# ============================================================


class TestTagsAndErrors:
    @pytest.mark.asyncio
    async def test_tag_counts(self, client):
        resp = await client.get("/api/tags")
        assert resp.json() == {"python": 2, "rust": 2, "cli": 1}

    @pytest.mark.asyncio
    async def test_load_errors(self, client):
        resp = await client.get("/api/load-errors")
        [error] = resp.json()
        assert error["filePath"].endswith("broken.md")
        assert error["field"] == "title"
        assert "missing" in error["message"]
