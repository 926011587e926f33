"""Tests for rich link previews: parsing, fetching, lifecycle and API."""

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import httpx
import pytest
from celery.exceptions import Retry

from link4coders.api.dependencies import get_preview_service
from link4coders.main import app
from link4coders.models.enums import PreviewType
from link4coders.models.link import Link
from link4coders.services.preview_fetchers import (
    PreviewFetcher,
    PreviewFetchError,
    detect_blog_platform,
    extract_favicon,
    extract_meta_tags,
    get_preview_type,
    parse_blog_post,
    parse_github_url,
    supports_rich_preview,
)
from link4coders.services.preview_service import (
    PreviewService,
    needs_preview_refresh,
    reset_preview,
)
from link4coders.services.sanitization import is_fetchable_url
from link4coders.tasks.previews import fetch_link_preview, refresh_stale_previews

GITHUB_REPO = {
    "full_name": "octocat/hello-world",
    "description": "My first repository",
    "language": "Python",
    "topics": ["demo"],
    "stargazers_count": 42,
    "forks_count": 7,
    "updated_at": "2026-01-01T00:00:00Z",
    "private": False,
    "default_branch": "main",
    "homepage": "",
    "license": {"name": "MIT License", "spdx_id": "MIT"},
    "owner": {"login": "octocat", "avatar_url": "https://avatars.example/octocat", "type": "User"},
}

ARTICLE_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Fallback title</title>
  <meta property="og:title" content="Building APIs &amp; Friends">
  <meta name="description" content="A   short
    description">
  <meta property="og:image" content="/images/cover.png">
  <meta property="og:site_name" content="Example Blog">
  <link rel="shortcut icon" href="/static/icon.png">
</head>
<body><p>Hello</p></body>
</html>
"""


def mock_fetcher(handler) -> PreviewFetcher:
    return PreviewFetcher(transport=httpx.MockTransport(handler))


def make_link(db, user_id: int, url: str, category: str = "projects", **fields) -> Link:
    link = Link(user_id=user_id, title="Link", url=url, category=category, **fields)
    if "preview_status" not in fields:
        reset_preview(link)
    db.add(link)
    db.commit()
    db.refresh(link)
    return link


class TestUrlClassification:
    """Tests for URL parsing and preview eligibility."""

    def test_parse_github_url(self):
        assert parse_github_url("https://github.com/octocat/hello-world") == (
            "octocat",
            "hello-world",
        )
        assert parse_github_url("https://www.github.com/octocat/hello-world.git/") == (
            "octocat",
            "hello-world",
        )
        assert parse_github_url("https://github.com/octocat/hello-world/tree/main") == (
            "octocat",
            "hello-world",
        )
        assert parse_github_url("https://github.com/octocat/hello-world/blob/main/README.md") == (
            "octocat",
            "hello-world",
        )

    def test_parse_github_url_rejects_profiles(self):
        assert parse_github_url("https://github.com/octocat") is None
        assert parse_github_url("https://gitlab.com/octocat/hello-world") is None

    def test_detect_blog_platform(self):
        assert detect_blog_platform("https://dev.to/me/post-1a2b") == "dev.to"
        assert detect_blog_platform("https://medium.com/@me/post") == "medium"
        assert detect_blog_platform("https://me.hashnode.dev/post") == "hashnode"
        assert detect_blog_platform("https://me.substack.com/p/post") == "substack"
        assert detect_blog_platform("https://example.com/wp-content/post") == "wordpress"
        assert detect_blog_platform("https://blog.example.com/post") == "hashnode"
        assert detect_blog_platform("https://example.com/about") is None

    def test_get_preview_type(self):
        assert get_preview_type("https://github.com/a/b") == PreviewType.GITHUB_REPO
        assert get_preview_type("https://dev.to/a/b") == PreviewType.BLOG_POST
        assert get_preview_type("https://example.com") == PreviewType.WEBPAGE

    def test_supports_rich_preview(self):
        assert supports_rich_preview("https://example.com", "projects") is True
        assert supports_rich_preview("https://example.com", "social") is False
        assert supports_rich_preview("https://twitter.com/octocat", "custom") is False
        assert supports_rich_preview("https://www.linkedin.com/in/me", "contact") is False

    def test_private_hosts_not_previewed(self):
        assert supports_rich_preview("http://localhost:8000/admin", "projects") is False
        assert supports_rich_preview("http://127.0.0.1/", "projects") is False
        assert supports_rich_preview("http://10.0.0.5/", "projects") is False


    def test_numeric_host_spellings_not_fetchable(self):
        """Test that alternate spellings of internal addresses are refused."""
        for url in (
            "http://2130706433/",
            "http://0x7f000001/",
            "http://127.1/",
            "http://0177.0.0.1/",
            "http://[::ffff:127.0.0.1]/",
            "http://[::ffff:169.254.169.254]/",
            "http://localhost./",
            "http://224.0.0.1/",
        ):
            assert is_fetchable_url(url) is False, url

    def test_public_hosts_fetchable(self):
        assert is_fetchable_url("https://example.com/post") is True
        assert is_fetchable_url("https://example.com./post") is True
        assert is_fetchable_url("http://8.8.8.8/") is True
        assert is_fetchable_url("https://0xcafe.dev/") is True


class TestHtmlParsing:
    """Tests for metadata extraction from HTML."""

    def test_extract_meta_tags(self):
        tags = extract_meta_tags(ARTICLE_HTML)
        assert tags["og:title"] == "Building APIs &amp; Friends"
        assert tags["og:site_name"] == "Example Blog"
        assert "description" in tags

    def test_extract_meta_tags_first_wins(self):
        document = (
            '<meta name="description" content="first">'
            '<meta name="description" content="second">'
        )
        assert extract_meta_tags(document)["description"] == "first"

    def test_extract_favicon(self):
        assert (
            extract_favicon(ARTICLE_HTML, "https://example.com/posts/1")
            == "https://example.com/static/icon.png"
        )
        assert extract_favicon("<html></html>", "https://example.com/a/b") == (
            "https://example.com/favicon.ico"
        )

    def test_parse_blog_post_medium(self):
        document = """
        <meta property="og:title" content="Why I Love Python | by Jane Doe | Medium">
        <meta name="author" content="Jane Doe">
        <meta property="article:published_time" content="2026-03-01T10:00:00Z">
        <meta name="keywords" content="python, backend">
        <span>6 min read</span>
        """
        metadata = parse_blog_post(document, "https://medium.com/@jane/why", "medium")
        assert metadata["type"] == "blog_post"
        assert metadata["title"] == "Why I Love Python"
        assert metadata["author"] == {"name": "Jane Doe"}
        assert metadata["reading_time_minutes"] == 6
        assert metadata["tags"] == ["python", "backend"]
        assert metadata["platform_logo"] == "https://medium.com/favicon.ico"
        assert metadata["published_at"] == "2026-03-01T10:00:00Z"


class TestPreviewFetcher:
    """Tests for PreviewFetcher against mocked HTTP responses."""

    @pytest.mark.asyncio
    async def test_fetch_github_repo(self):
        """Test that GitHub URLs use the repository API."""
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(
                200,
                json=GITHUB_REPO,
                headers={"x-ratelimit-remaining": "4999", "x-ratelimit-limit": "5000"},
            )

        fetcher = mock_fetcher(handler)
        metadata = await fetcher.fetch("https://github.com/octocat/hello-world")

        assert requests[0].url.path == "/repos/octocat/hello-world"
        assert requests[0].headers["user-agent"] == "Link4Coders/1.0"
        assert metadata["type"] == "github_repo"
        assert metadata["repo_name"] == "octocat/hello-world"
        assert metadata["stars"] == 42
        assert metadata["license"] == {"name": "MIT License", "spdx_id": "MIT"}
        assert metadata["homepage"] is None
        assert "expires_at" in metadata
        assert fetcher.github_rate_limit == {"limit": 5000, "remaining": 4999}

    @pytest.mark.asyncio
    async def test_fetch_github_repo_not_found(self):
        fetcher = mock_fetcher(lambda request: httpx.Response(404, json={}))

        with pytest.raises(PreviewFetchError) as exc_info:
            await fetcher.fetch("https://github.com/octocat/missing")

        assert exc_info.value.code == "NOT_FOUND"
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    async def test_fetch_github_repo_rate_limited(self):
        fetcher = mock_fetcher(
            lambda request: httpx.Response(403, json={}, headers={"x-ratelimit-remaining": "0"})
        )

        with pytest.raises(PreviewFetchError) as exc_info:
            await fetcher.fetch("https://github.com/octocat/hello-world")

        assert exc_info.value.code == "RATE_LIMITED"
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_fetch_github_repo_private_not_retryable(self):
        fetcher = mock_fetcher(
            lambda request: httpx.Response(403, json={}, headers={"x-ratelimit-remaining": "42"})
        )

        with pytest.raises(PreviewFetchError) as exc_info:
            await fetcher.fetch("https://github.com/octocat/secret")

        assert exc_info.value.code == "PRIVATE_REPO"
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    async def test_fetch_github_repo_invalid_json(self):
        """Test that a non-JSON API body is a preview failure."""
        fetcher = mock_fetcher(
            lambda request: httpx.Response(200, html="<html><body>Unicorn!</body></html>")
        )

        with pytest.raises(PreviewFetchError) as exc_info:
            await fetcher.fetch("https://github.com/octocat/hello-world")

        assert exc_info.value.code == "INVALID_RESPONSE"
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    async def test_fetch_github_repo_unexpected_json(self):
        fetcher = mock_fetcher(lambda request: httpx.Response(200, json=["not", "a", "repo"]))

        with pytest.raises(PreviewFetchError) as exc_info:
            await fetcher.fetch("https://github.com/octocat/hello-world")

        assert exc_info.value.code == "INVALID_RESPONSE"

    @pytest.mark.asyncio
    async def test_fetch_webpage(self):
        """Test scraping Open Graph metadata from a page."""

        def handler(request):
            assert request.headers["user-agent"].startswith("Link4Coders-Bot/1.0")
            return httpx.Response(200, html=ARTICLE_HTML)

        metadata = await mock_fetcher(handler).fetch("https://example.com/posts/1")

        assert metadata["type"] == "webpage"
        assert metadata["title"] == "Building APIs & Friends"
        assert metadata["description"] == "A short description"
        assert metadata["image"] == "https://example.com/images/cover.png"
        assert metadata["favicon"] == "https://example.com/static/icon.png"
        assert metadata["site_name"] == "Example Blog"
        assert metadata["domain"] == "example.com"

    @pytest.mark.asyncio
    async def test_fetch_webpage_falls_back_to_title(self):
        fetcher = mock_fetcher(
            lambda request: httpx.Response(200, html="<title> Plain   page </title>")
        )

        metadata = await fetcher.fetch("https://example.com/")

        assert metadata["title"] == "Plain page"
        assert metadata["description"] is None
        assert metadata["image"] is None

    @pytest.mark.asyncio
    async def test_fetch_webpage_rejects_non_html(self):
        fetcher = mock_fetcher(
            lambda request: httpx.Response(
                200, content=b"%PDF-1.4", headers={"content-type": "application/pdf"}
            )
        )

        with pytest.raises(PreviewFetchError) as exc_info:
            await fetcher.fetch("https://example.com/paper.pdf")

        assert exc_info.value.code == "INVALID_CONTENT"

    @pytest.mark.asyncio
    async def test_fetch_webpage_too_large(self):
        fetcher = mock_fetcher(lambda request: httpx.Response(200, html="<p>" + "x" * 100))
        fetcher.max_content_bytes = 50

        with pytest.raises(PreviewFetchError) as exc_info:
            await fetcher.fetch("https://example.com/")

        assert exc_info.value.code == "CONTENT_TOO_LARGE"

    @pytest.mark.asyncio
    async def test_fetch_webpage_server_error_is_retryable(self):
        fetcher = mock_fetcher(lambda request: httpx.Response(503))

        with pytest.raises(PreviewFetchError) as exc_info:
            await fetcher.fetch("https://example.com/")

        assert exc_info.value.code == "SERVER_ERROR"
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_fetch_webpage_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(PreviewFetchError) as exc_info:
            await mock_fetcher(handler).fetch("https://example.com/")

        assert exc_info.value.code == "TIMEOUT"
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_fetch_refuses_private_hosts(self):
        def handler(request):
            raise AssertionError("private hosts must not be requested")

        with pytest.raises(PreviewFetchError) as exc_info:
            await mock_fetcher(handler).fetch("http://localhost/admin")

        assert exc_info.value.code == "INVALID_URL"

    @pytest.mark.asyncio
    async def test_fetch_refuses_redirect_to_private_host(self):
        """Test that a public page cannot redirect the fetcher inward."""
        requested = []

        def handler(request):
            requested.append(str(request.url))
            return httpx.Response(
                302, headers={"location": "http://169.254.169.254/latest/meta-data/"}
            )

        with pytest.raises(PreviewFetchError) as exc_info:
            await mock_fetcher(handler).fetch("https://example.com/redirect")

        assert exc_info.value.code == "INVALID_URL"
        assert requested == ["https://example.com/redirect"]

    @pytest.mark.asyncio
    async def test_fetch_follows_public_redirect(self):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(301, headers={"location": "https://example.com/new"})
            return httpx.Response(200, html=ARTICLE_HTML)

        metadata = await mock_fetcher(handler).fetch("https://example.com/old")

        assert metadata["url"] == "https://example.com/new"

    @pytest.mark.asyncio
    async def test_fetch_devto_article(self):
        """Test that Dev.to posts use the Forem API."""
        article = {
            "title": "Shipping fast",
            "description": "Notes on shipping",
            "cover_image": "https://dev.to/cover.png",
            "published_at": "2026-02-01T00:00:00Z",
            "reading_time_minutes": 4,
            "tag_list": ["python"],
            "positive_reactions_count": 12,
            "comments_count": 3,
            "url": "https://dev.to/jane/shipping-fast-1a2b",
            "user": {"name": "Jane", "username": "jane", "profile_image_90": "https://a/j.png"},
        }

        def handler(request):
            assert request.url.path == "/api/articles/jane/shipping-fast-1a2b"
            return httpx.Response(200, json=article)

        metadata = await mock_fetcher(handler).fetch("https://dev.to/jane/shipping-fast-1a2b")

        assert metadata["type"] == "blog_post"
        assert metadata["platform"] == "dev.to"
        assert metadata["title"] == "Shipping fast"
        assert metadata["author"]["profile_url"] == "https://dev.to/jane"
        assert metadata["reading_time_minutes"] == 4
        assert metadata["reactions_count"] == 12

    @pytest.mark.asyncio
    async def test_fetch_devto_article_search_fallback(self):
        def handler(request):
            if request.url.path == "/api/articles":
                return httpx.Response(
                    200, json=[{"slug": "other"}, {"slug": "my-post", "title": "Found it"}]
                )
            return httpx.Response(404, json={})

        metadata = await mock_fetcher(handler).fetch("https://dev.to/jane/my-post")

        assert metadata["title"] == "Found it"

    @pytest.mark.asyncio
    async def test_fetch_devto_search_invalid_json(self):
        def handler(request):
            if request.url.path == "/api/articles":
                return httpx.Response(200, json={"error": "not a list"})
            return httpx.Response(404, json={})

        with pytest.raises(PreviewFetchError) as exc_info:
            await mock_fetcher(handler).fetch_devto_article("https://dev.to/jane/my-post")

        assert exc_info.value.code == "INVALID_RESPONSE"

    @pytest.mark.asyncio
    async def test_blog_failure_falls_back_to_webpage(self):
        def handler(request):
            if request.url.host == "dev.to":
                return httpx.Response(500)
            return httpx.Response(200, html=ARTICLE_HTML)

        # Dev.to API and page both fail, so the error surfaces from the page scrape
        with pytest.raises(PreviewFetchError) as exc_info:
            await mock_fetcher(handler).fetch("https://dev.to/jane/my-post")
        assert exc_info.value.code == "SERVER_ERROR"

        metadata = await mock_fetcher(handler).fetch("https://me.hashnode.dev/my-post")
        assert metadata["type"] == "blog_post"
        assert metadata["platform"] == "hashnode"
        assert metadata["featured_image"] == "https://me.hashnode.dev/images/cover.png"


class TestNeedsPreviewRefresh:
    """Tests for deciding when a preview is refetched."""

    def make(self, **fields):
        defaults = {"url": "https://example.com", "category": "projects"}
        defaults.update(fields)
        return Link(**defaults)

    def test_pending_needs_refresh(self):
        assert needs_preview_refresh(self.make(preview_status="pending")) is True

    def test_processing_left_alone_until_timeout(self):
        """Test that a fetch abandoned mid-flight is picked up again."""
        now = datetime.now(UTC)
        recent = self.make(preview_status="processing", updated_at=now - timedelta(minutes=1))
        stuck = self.make(preview_status="processing", updated_at=now - timedelta(hours=1))
        assert needs_preview_refresh(recent, now) is False
        assert needs_preview_refresh(stuck, now) is True

    def test_social_never_refreshed(self):
        link = self.make(url="https://x.com/me", category="social", preview_status="pending")
        assert needs_preview_refresh(link) is False

    def test_success_until_expired(self):
        now = datetime.now(UTC)
        fresh = self.make(
            preview_status="success",
            preview_fetched_at=now - timedelta(hours=1),
            preview_expires_at=now + timedelta(hours=1),
        )
        expired = self.make(
            preview_status="success",
            preview_fetched_at=now - timedelta(days=2),
            preview_expires_at=now - timedelta(hours=1),
        )
        assert needs_preview_refresh(fresh, now) is False
        assert needs_preview_refresh(expired, now) is True

    def test_failed_after_cooldown(self):
        now = datetime.now(UTC)
        recent = self.make(preview_status="failed", preview_fetched_at=now - timedelta(minutes=5))
        old = self.make(preview_status="failed", preview_fetched_at=now - timedelta(hours=2))
        assert needs_preview_refresh(recent, now) is False
        assert needs_preview_refresh(old, now) is True

    def test_naive_timestamps_treated_as_utc(self):
        now = datetime.now(UTC)
        link = self.make(
            preview_status="success",
            preview_fetched_at=(now - timedelta(hours=1)).replace(tzinfo=None),
            preview_expires_at=(now + timedelta(hours=1)).replace(tzinfo=None),
        )
        assert needs_preview_refresh(link, now) is False


def github_handler(request):
    if request.url.path == "/repos/octocat/hello-world":
        return httpx.Response(200, json=GITHUB_REPO)
    return httpx.Response(404, json={})


@pytest.fixture
def preview_fetcher(client, db):
    """Route the preview API through a fetcher backed by a mock transport."""
    fetcher = mock_fetcher(github_handler)
    app.dependency_overrides[get_preview_service] = lambda: PreviewService(db, fetcher=fetcher)
    return fetcher


def create_link(client, headers, url="https://github.com/octocat/hello-world", category="projects"):
    response = client.post(
        "/api/v1/links",
        headers=headers,
        json={"title": "Repo", "url": url, "category": category},
    )
    assert response.status_code == 201
    return response.json()


class TestPreviewApi:
    """Tests for the preview endpoints."""

    def test_get_preview_fetches_pending(self, client, auth_headers, preview_fetcher):
        link = create_link(client, auth_headers)

        response = client.get(f"/api/v1/links/{link['id']}/preview", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "success"
        assert data["refreshed"] is True
        assert data["metadata"]["repo_name"] == "octocat/hello-world"
        assert data["expires_at"] is not None

        # Second read is served from the stored preview
        response = client.get(f"/api/v1/links/{link['id']}/preview", headers=auth_headers)
        data = response.json()
        assert data["cached"] is True
        assert data["refreshed"] is False

    def test_get_preview_not_supported(self, client, auth_headers, preview_fetcher):
        link = create_link(client, auth_headers, url="https://x.com/octocat", category="social")

        response = client.get(f"/api/v1/links/{link['id']}/preview", headers=auth_headers)
        data = response.json()
        assert data["status"] == "not_supported"
        assert data["metadata"] is None

    def test_refresh_preview(self, client, auth_headers, preview_fetcher):
        link = create_link(client, auth_headers)

        response = client.post(
            f"/api/v1/links/{link['id']}/preview/refresh", headers=auth_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == link["id"]
        assert data["preview_status"] == "success"
        assert data["preview_metadata"]["stars"] == 42

    def test_refresh_preview_failure_recorded(self, client, auth_headers, db, preview_fetcher):
        link = create_link(client, auth_headers, url="https://github.com/octocat/missing")

        response = client.post(
            f"/api/v1/links/{link['id']}/preview/refresh", headers=auth_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["preview_status"] == "failed"
        assert data["preview_error"].startswith("NOT_FOUND")

        stored = db.query(Link).filter(Link.id == link["id"]).first()
        assert stored.preview_attempts == 1

    def test_get_preview_invalid_json_recorded(self, client, auth_headers, db):
        """Test that a non-JSON GitHub body leaves the link failed, not processing."""
        fetcher = mock_fetcher(lambda request: httpx.Response(200, html="<html>oops</html>"))
        app.dependency_overrides[get_preview_service] = lambda: PreviewService(
            db, fetcher=fetcher
        )
        link = create_link(client, auth_headers)

        response = client.get(f"/api/v1/links/{link['id']}/preview", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failed"
        assert data["error"].startswith("INVALID_RESPONSE")

        stored = db.query(Link).filter(Link.id == link["id"]).first()
        assert stored.preview_attempts == 1
        later = datetime.now(UTC) + timedelta(hours=2)
        assert needs_preview_refresh(stored, later) is True

    def test_refresh_preview_unexpected_error_recorded(
        self, client, auth_headers, db, preview_fetcher
    ):
        link = create_link(client, auth_headers)

        with patch.object(preview_fetcher, "fetch", side_effect=RuntimeError("boom")):
            response = client.post(
                f"/api/v1/links/{link['id']}/preview/refresh", headers=auth_headers
            )

        assert response.status_code == 200
        data = response.json()
        assert data["preview_status"] == "failed"
        assert data["preview_error"] == "UNKNOWN: Unexpected error: boom"

    def test_refresh_other_users_link(
        self, client, auth_headers, other_auth_headers, preview_fetcher
    ):
        link = create_link(client, other_auth_headers)

        response = client.post(
            f"/api/v1/links/{link['id']}/preview/refresh", headers=auth_headers
        )
        assert response.status_code == 404

    def test_clear_preview(self, client, auth_headers, preview_fetcher):
        link = create_link(client, auth_headers)
        client.post(f"/api/v1/links/{link['id']}/preview/refresh", headers=auth_headers)

        response = client.delete(f"/api/v1/links/{link['id']}/preview", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["preview_status"] == "pending"
        assert data["preview_metadata"] is None
        assert data["preview_fetched_at"] is None

    def test_preview_stats(self, client, auth_headers, preview_fetcher):
        repo = create_link(client, auth_headers)
        create_link(client, auth_headers, url="https://x.com/octocat", category="social")
        create_link(client, auth_headers, url="https://example.com", category="personal")
        client.post(f"/api/v1/links/{repo['id']}/preview/refresh", headers=auth_headers)

        response = client.get("/api/v1/links/preview/stats", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert data["success"] == 1
        assert data["pending"] == 1
        assert data["not_supported"] == 1
        assert data["github_repo"] == 1
        assert data["webpage"] == 0

    def test_batch_refresh(self, client, auth_headers, other_auth_headers, preview_queue):
        repo = create_link(client, auth_headers)
        social = create_link(client, auth_headers, url="https://x.com/octocat", category="social")
        foreign = create_link(client, other_auth_headers)
        preview_queue.reset_mock()

        response = client.post(
            "/api/v1/links/preview/batch",
            headers=auth_headers,
            json={"link_ids": [repo["id"], social["id"], foreign["id"], repo["id"]]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["queued"] == [repo["id"]]
        assert data["skipped"] == [social["id"], foreign["id"]]
        preview_queue.assert_called_once_with(repo["id"])

    def test_batch_refresh_limit(self, client, auth_headers):
        response = client.post(
            "/api/v1/links/preview/batch",
            headers=auth_headers,
            json={"link_ids": list(range(1, 22))},
        )
        assert response.status_code == 422

    def test_queue_failure_does_not_fail_request(self, client, auth_headers, preview_queue):
        preview_queue.side_effect = ConnectionError("broker down")

        response = client.post(
            "/api/v1/links",
            headers=auth_headers,
            json={"title": "Repo", "url": "https://github.com/a/b", "category": "projects"},
        )
        assert response.status_code == 201
        assert response.json()["preview_status"] == "pending"


class TestPreviewTasks:
    """Tests for the Celery preview tasks."""

    def run_task(self, db, link_id, handler):
        fetcher = mock_fetcher(handler)
        with (
            patch("link4coders.tasks.previews.SessionLocal", return_value=db),
            patch("link4coders.services.preview_service.PreviewFetcher", return_value=fetcher),
        ):
            return fetch_link_preview(link_id)

    def test_fetch_link_preview_success(self, db, auth_headers):
        link = make_link(db, auth_headers.user_id, "https://github.com/octocat/hello-world")

        result = self.run_task(db, link.id, github_handler)

        assert result == {"success": True, "status": "success"}
        stored = db.query(Link).filter(Link.id == link.id).first()
        assert stored.preview_metadata["repo_name"] == "octocat/hello-world"
        assert stored.preview_expires_at is not None

    def test_fetch_link_preview_missing_link(self, db):
        result = self.run_task(db, 99999, github_handler)
        assert result == {"error": "Link not found"}

    def test_fetch_link_preview_permanent_failure(self, db, auth_headers):
        link = make_link(db, auth_headers.user_id, "https://github.com/octocat/missing")

        result = self.run_task(db, link.id, github_handler)

        assert result["success"] is False
        assert result["status"] == "failed"
        assert "NOT_FOUND" in result["error"]

    def test_fetch_link_preview_retries_transient_failure(self, db, auth_headers):
        link = make_link(db, auth_headers.user_id, "https://example.com/")

        with patch.object(fetch_link_preview, "retry", return_value=Retry()) as mock_retry:
            with pytest.raises(Retry):
                self.run_task(db, link.id, lambda request: httpx.Response(502))

        _, kwargs = mock_retry.call_args
        assert kwargs["countdown"] == 60
        assert isinstance(kwargs["exc"], PreviewFetchError)
        stored = db.query(Link).filter(Link.id == link.id).first()
        assert stored.preview_status == "failed"

    def test_fetch_link_preview_unexpected_error_not_retried(self, db, auth_headers):
        link = make_link(db, auth_headers.user_id, "https://github.com/octocat/hello-world")

        def handler(request):
            raise RuntimeError("decoder exploded")

        with patch.object(fetch_link_preview, "retry") as mock_retry:
            result = self.run_task(db, link.id, handler)

        mock_retry.assert_not_called()
        assert result["success"] is False
        assert result["status"] == "failed"
        assert result["error"].startswith("UNKNOWN")
        stored = db.query(Link).filter(Link.id == link.id).first()
        assert stored.preview_status == "failed"

    def test_refresh_stale_previews_recovers_stuck_processing(
        self, db, auth_headers, preview_queue
    ):
        now = datetime.now(UTC)
        user_id = auth_headers.user_id
        stuck = make_link(
            db,
            user_id,
            "https://example.com/stuck",
            preview_status="processing",
            updated_at=now - timedelta(hours=1),
        )
        make_link(
            db,
            user_id,
            "https://example.com/in-flight",
            preview_status="processing",
            updated_at=now,
        )
        preview_queue.reset_mock()

        with patch("link4coders.tasks.previews.SessionLocal", return_value=db):
            result = refresh_stale_previews()

        assert result == {"queued": 1}
        preview_queue.assert_called_once_with(stuck.id)

    def test_refresh_stale_previews(self, db, auth_headers, preview_queue):
        now = datetime.now(UTC)
        user_id = auth_headers.user_id
        pending = make_link(db, user_id, "https://example.com/pending")
        expired = make_link(
            db,
            user_id,
            "https://example.com/expired",
            preview_status="success",
            preview_metadata={"type": "webpage"},
            preview_fetched_at=now - timedelta(days=10),
            preview_expires_at=now - timedelta(days=3),
        )
        make_link(
            db,
            user_id,
            "https://example.com/fresh",
            preview_status="success",
            preview_fetched_at=now,
            preview_expires_at=now + timedelta(days=3),
        )
        make_link(
            db,
            user_id,
            "https://example.com/gave-up",
            preview_status="failed",
            preview_fetched_at=now - timedelta(days=1),
            preview_attempts=3,
        )
        make_link(db, user_id, "https://example.com/hidden", is_active=False)
        make_link(db, user_id, "https://x.com/me", category="social")
        preview_queue.reset_mock()

        with patch("link4coders.tasks.previews.SessionLocal", return_value=db):
            result = refresh_stale_previews()

        assert result == {"queued": 2}
        queued = {call.args[0] for call in preview_queue.call_args_list}
        assert queued == {pending.id, expired.id}


def test_preview_error_str():
    error = PreviewFetchError("Page not found", "NOT_FOUND")
    assert str(error) == "NOT_FOUND: Page not found"
    assert json.dumps({"error": str(error)})
