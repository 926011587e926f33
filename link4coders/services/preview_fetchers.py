"""Rich preview fetchers for GitHub repositories, blog posts and web pages."""

import html
import logging
import re
from datetime import UTC, datetime, timedelta
from urllib.parse import urljoin, urlsplit

import httpx

from link4coders.config import get_settings
from link4coders.models.enums import LinkCategory, PreviewType
from link4coders.services.sanitization import get_hostname, host_matches, is_fetchable_url

logger = logging.getLogger(__name__)

GITHUB_URL_PATTERNS = [
    re.compile(r"^https?://(?:www\.)?github\.com/([^/]+)/([^/]+?)/?$"),
    re.compile(r"^https?://(?:www\.)?github\.com/([^/]+)/([^/]+)/tree/([^/]+)/?$"),
    re.compile(r"^https?://(?:www\.)?github\.com/([^/]+)/([^/]+)/blob/([^/]+)/(.+)$"),
]

# Hosts whose pages are login-walled or render client side; no previews
SOCIAL_PREVIEW_EXCLUDED_HOSTS = (
    "twitter.com",
    "x.com",
    "facebook.com",
    "instagram.com",
    "linkedin.com",
    "youtube.com",
    "tiktok.com",
    "snapchat.com",
    "discord.com",
    "discord.gg",
    "telegram.org",
    "t.me",
    "whatsapp.com",
    "reddit.com",
    "pinterest.com",
    "tumblr.com",
)

BLOG_PLATFORM_LOGOS = {
    "dev.to": "https://dev.to/favicon.ico",
    "medium": "https://medium.com/favicon.ico",
    "hashnode": "https://hashnode.com/favicon.ico",
    "substack": "https://substack.com/favicon.ico",
}

SCRAPER_USER_AGENT = "Link4Coders-Bot/1.0 (+https://link4coders.in)"
GITHUB_USER_AGENT = "Link4Coders/1.0"
DEVTO_API_URL = "https://dev.to/api"
MAX_REDIRECTS = 5


class PreviewFetchError(Exception):
    """A preview could not be fetched.

    Args:
        message: Human readable reason, stored on the link
        code: Machine readable error code (NOT_FOUND, RATE_LIMITED, ...)
        retryable: Whether a later attempt may succeed
    """

    def __init__(self, message: str, code: str, retryable: bool = False):
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


def parse_github_url(url: str) -> tuple[str, str] | None:
    """Extract (owner, repo) from a GitHub repository URL."""
    candidate = url.strip().split("#", 1)[0].split("?", 1)[0]
    for pattern in GITHUB_URL_PATTERNS:
        match = pattern.match(candidate)
        if match:
            owner, repo = match.group(1), match.group(2)
            return owner, repo.removesuffix(".git")
    return None


def detect_blog_platform(url: str) -> str | None:
    """Detect which blogging platform hosts a URL."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return None

    hostname = (parts.hostname or "").lower()
    path = parts.path or ""

    if host_matches(hostname, "medium.com"):
        return "medium"
    if host_matches(hostname, "hashnode.dev") or host_matches(hostname, "hashnode.com"):
        return "hashnode"
    if hostname == "dev.to":
        return "dev.to"
    if hostname.endswith(".substack.com"):
        return "substack"
    if "ghost." in hostname or "/ghost/" in path:
        return "ghost"
    if "wordpress." in hostname or "/wp-content/" in path:
        return "wordpress"
    # Custom blog domains are most often Hashnode
    if "blog" in hostname:
        return "hashnode"
    return None


def is_social_url(url: str) -> bool:
    hostname = get_hostname(url)
    return any(host_matches(hostname, domain) for domain in SOCIAL_PREVIEW_EXCLUDED_HOSTS)


def supports_rich_preview(url: str, category: str) -> bool:
    """Check whether a link is eligible for a rich preview at all."""
    if category == LinkCategory.SOCIAL.value:
        return False
    if not is_fetchable_url(url):
        return False
    return not is_social_url(url)


def get_preview_type(url: str) -> PreviewType:
    if parse_github_url(url):
        return PreviewType.GITHUB_REPO
    if detect_blog_platform(url):
        return PreviewType.BLOG_POST
    return PreviewType.WEBPAGE


def get_preview_ttl(preview_type: PreviewType | str) -> timedelta:
    settings = get_settings()
    if preview_type == PreviewType.GITHUB_REPO:
        return timedelta(hours=settings.github_preview_ttl_hours)
    return timedelta(hours=settings.webpage_preview_ttl_hours)


def _timestamps(preview_type: PreviewType) -> dict:
    fetched_at = datetime.now(UTC)
    return {
        "fetched_at": fetched_at.isoformat(),
        "expires_at": (fetched_at + get_preview_ttl(preview_type)).isoformat(),
    }


# HTML parsing

_META_TAG = re.compile(r"<meta\b([^>]*)>", re.IGNORECASE)
_LINK_TAG = re.compile(r"<link\b([^>]*)>", re.IGNORECASE)
_TITLE_TAG = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_ATTRIBUTE = re.compile(
    r"""([a-zA-Z_:][-a-zA-Z0-9_:.]*)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))"""
)
_READING_TIME = re.compile(r"(\d+)\s*min\s*read", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def clean_text(value: str | None) -> str | None:
    """Decode HTML entities and collapse whitespace."""
    if not value:
        return None
    cleaned = _WHITESPACE.sub(" ", html.unescape(value)).strip()
    return cleaned or None


def _parse_attributes(raw: str) -> dict[str, str]:
    attributes = {}
    for match in _ATTRIBUTE.finditer(raw):
        name = match.group(1).lower()
        value = next((g for g in match.groups()[1:] if g is not None), "")
        attributes.setdefault(name, value)
    return attributes


def extract_meta_tags(document: str) -> dict[str, str]:
    """Collect <meta> content keyed by lowercased property or name.

    The first occurrence of a key wins.
    """
    tags: dict[str, str] = {}
    for match in _META_TAG.finditer(document):
        attributes = _parse_attributes(match.group(1))
        key = attributes.get("property") or attributes.get("name")
        content = attributes.get("content")
        if key and content is not None:
            tags.setdefault(key.strip().lower(), content)
    return tags


def extract_title(document: str) -> str | None:
    match = _TITLE_TAG.search(document)
    return clean_text(match.group(1)) if match else None


def extract_favicon(document: str, base_url: str) -> str:
    """Find the page icon, defaulting to /favicon.ico on the page's origin."""
    for match in _LINK_TAG.finditer(document):
        attributes = _parse_attributes(match.group(1))
        rel = attributes.get("rel", "").lower().split()
        if "icon" in rel and attributes.get("href"):
            return urljoin(base_url, attributes["href"])
    parts = urlsplit(base_url)
    return f"{parts.scheme}://{parts.netloc}/favicon.ico"


def parse_webpage(document: str, url: str) -> dict:
    """Build webpage preview metadata from an HTML document."""
    meta = extract_meta_tags(document)

    image = meta.get("og:image") or meta.get("twitter:image")
    return {
        "type": PreviewType.WEBPAGE.value,
        "title": clean_text(meta.get("og:title")) or extract_title(document) or get_hostname(url),
        "description": clean_text(
            meta.get("og:description") or meta.get("description") or meta.get("twitter:description")
        ),
        "image": urljoin(url, image) if image else None,
        "favicon": extract_favicon(document, url),
        "site_name": clean_text(meta.get("og:site_name")),
        "domain": get_hostname(url),
        "url": meta.get("og:url") or url,
        **_timestamps(PreviewType.WEBPAGE),
    }


def parse_blog_post(document: str, url: str, platform: str) -> dict:
    """Build blog post preview metadata from a scraped article page."""
    meta = extract_meta_tags(document)

    title = (
        clean_text(meta.get("og:title"))
        or clean_text(meta.get("twitter:title"))
        or extract_title(document)
        or ""
    )
    if platform == "medium":
        title = re.sub(r"\s*\|\s*by\s+[^|]*\s*\|\s*Medium\s*$", "", title)
        title = re.sub(r"\s*\|\s*Medium\s*$", "", title)

    description = clean_text(
        meta.get("og:description") or meta.get("twitter:description") or meta.get("description")
    )
    image = meta.get("og:image") or meta.get("twitter:image")
    author_name = clean_text(meta.get("author") or meta.get("article:author"))
    reading_time = _READING_TIME.search(document)
    tags = [clean_text(tag) for tag in (meta.get("keywords") or "").split(",") if tag.strip()]

    return {
        "type": PreviewType.BLOG_POST.value,
        "title": title,
        "description": description,
        "excerpt": description,
        "featured_image": urljoin(url, image) if image else None,
        "author": {"name": author_name or "Unknown Author"},
        "published_at": meta.get("article:published_time"),
        "reading_time_minutes": int(reading_time.group(1)) if reading_time else None,
        "tags": tags,
        "platform": platform,
        "platform_logo": BLOG_PLATFORM_LOGOS.get(platform) or extract_favicon(document, url),
        "canonical_url": meta.get("og:url") or url,
        "url": url,
        **_timestamps(PreviewType.BLOG_POST),
    }


def transform_devto_article(article: dict) -> dict:
    user = article.get("user") or {}
    username = user.get("username")
    return {
        "type": PreviewType.BLOG_POST.value,
        "title": article.get("title") or "",
        "description": article.get("description"),
        "excerpt": article.get("description"),
        "featured_image": article.get("cover_image") or article.get("social_image"),
        "author": {
            "name": user.get("name") or "Unknown Author",
            "username": username,
            "avatar": user.get("profile_image_90") or user.get("profile_image"),
            "profile_url": f"https://dev.to/{username}" if username else None,
        },
        "published_at": article.get("published_at") or article.get("created_at"),
        "reading_time_minutes": article.get("reading_time_minutes"),
        "tags": article.get("tag_list") or article.get("tags") or [],
        "platform": "dev.to",
        "platform_logo": BLOG_PLATFORM_LOGOS["dev.to"],
        "reactions_count": article.get("positive_reactions_count")
        or article.get("public_reactions_count"),
        "comments_count": article.get("comments_count"),
        "canonical_url": article.get("canonical_url") or article.get("url"),
        "url": article.get("url"),
        **_timestamps(PreviewType.BLOG_POST),
    }


def transform_github_repo(repo: dict) -> dict:
    owner = repo.get("owner") or {}
    license_info = repo.get("license")
    return {
        "type": PreviewType.GITHUB_REPO.value,
        "repo_name": repo.get("full_name"),
        "description": repo.get("description"),
        "language": repo.get("language"),
        "topics": repo.get("topics") or [],
        "stars": repo.get("stargazers_count", 0),
        "forks": repo.get("forks_count", 0),
        "updated_at": repo.get("updated_at"),
        "avatar_url": owner.get("avatar_url"),
        "is_private": repo.get("private", False),
        "default_branch": repo.get("default_branch"),
        "homepage": repo.get("homepage") or None,
        "license": (
            {"name": license_info.get("name"), "spdx_id": license_info.get("spdx_id")}
            if license_info
            else None
        ),
        "owner": {
            "login": owner.get("login"),
            "avatar_url": owner.get("avatar_url"),
            "type": owner.get("type"),
        },
        **_timestamps(PreviewType.GITHUB_REPO),
    }


def parse_json_body(response: httpx.Response, expected: type = dict):
    """Decode an API response body, refusing anything but the expected shape."""
    try:
        data = response.json()
    except ValueError as e:
        raise PreviewFetchError("Invalid JSON response", "INVALID_RESPONSE") from e
    if not isinstance(data, expected):
        raise PreviewFetchError("Unexpected JSON response", "INVALID_RESPONSE")
    return data


class PreviewFetcher:
    """Fetches preview metadata for a URL over HTTP."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = get_settings()
        self.timeout = self.settings.preview_timeout_seconds
        self.max_content_bytes = self.settings.preview_max_content_bytes
        self.transport = transport
        self.github_rate_limit: dict[str, int] = {}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
            transport=self.transport,
            event_hooks={"request": [self._check_request_url]},
        )

    @staticmethod
    async def _check_request_url(request: httpx.Request) -> None:
        # Runs for every hop, so redirects cannot reach internal hosts
        if not is_fetchable_url(str(request.url)):
            raise PreviewFetchError("Redirect target is not allowed for previews", "INVALID_URL")

    async def fetch(self, url: str) -> dict:
        """Fetch preview metadata for any supported URL.

        Raises:
            PreviewFetchError: If the URL is refused or the fetch fails
        """
        if not is_fetchable_url(url):
            raise PreviewFetchError("URL is not allowed for previews", "INVALID_URL")

        repo = parse_github_url(url)
        if repo:
            return await self.fetch_github_repo(*repo)

        platform = detect_blog_platform(url)
        if platform:
            try:
                return await self.fetch_blog_post(url, platform)
            except PreviewFetchError as e:
                logger.warning(f"Blog fetch failed for {url} ({e}), falling back to page scrape")

        return await self.fetch_webpage(url)

    async def fetch_github_repo(self, owner: str, repo: str) -> dict:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": GITHUB_USER_AGENT,
        }
        if self.settings.github_token:
            headers["Authorization"] = f"token {self.settings.github_token}"

        api_url = f"{self.settings.github_api_url}/repos/{owner}/{repo}"
        try:
            async with self._client() as client:
                response = await client.get(api_url, headers=headers)
        except httpx.TimeoutException as e:
            raise PreviewFetchError("GitHub API timed out", "TIMEOUT", retryable=True) from e
        except httpx.HTTPError as e:
            raise PreviewFetchError(
                f"GitHub API request failed: {e}", "NETWORK_ERROR", retryable=True
            ) from e

        self._track_github_rate_limit(response.headers)

        if response.status_code == 404:
            raise PreviewFetchError(f"Repository {owner}/{repo} not found", "NOT_FOUND")
        if response.status_code == 429 or (
            response.status_code == 403 and response.headers.get("x-ratelimit-remaining") == "0"
        ):
            raise PreviewFetchError(
                "GitHub API rate limit exceeded", "RATE_LIMITED", retryable=True
            )
        if response.status_code == 403:
            raise PreviewFetchError(
                f"Repository {owner}/{repo} is private or access is denied",
                "PRIVATE_REPO",
            )
        if response.status_code >= 400:
            raise PreviewFetchError(
                f"GitHub API error: {response.status_code}", "NETWORK_ERROR", retryable=True
            )

        return transform_github_repo(parse_json_body(response))

    def _track_github_rate_limit(self, headers: httpx.Headers) -> None:
        for key in ("limit", "remaining", "reset"):
            value = headers.get(f"x-ratelimit-{key}")
            if value is not None and value.isdigit():
                self.github_rate_limit[key] = int(value)

        remaining = self.github_rate_limit.get("remaining")
        if remaining is not None and remaining < 10:
            logger.warning(f"GitHub API rate limit nearly exhausted: {remaining} requests left")

    async def fetch_blog_post(self, url: str, platform: str) -> dict:
        if platform == "dev.to":
            return await self.fetch_devto_article(url)
        document, final_url = await self._get_html(url)
        return parse_blog_post(document, final_url, platform)

    async def fetch_devto_article(self, url: str) -> dict:
        match = re.search(r"dev\.to/([^/]+)/([^/?#]+)", url)
        if not match:
            raise PreviewFetchError("Invalid Dev.to article URL", "INVALID_URL")
        username, slug = match.group(1), match.group(2)
        headers = {"Accept": "application/vnd.forem.api-v1+json", "User-Agent": SCRAPER_USER_AGENT}

        try:
            async with self._client() as client:
                response = await client.get(
                    f"{DEVTO_API_URL}/articles/{username}/{slug}", headers=headers
                )
                if response.status_code == 200:
                    return transform_devto_article(parse_json_body(response))

                # Fall back to searching the author's articles by slug
                search = await client.get(
                    f"{DEVTO_API_URL}/articles", params={"username": username}, headers=headers
                )
        except httpx.HTTPError as e:
            raise PreviewFetchError(
                "Failed to fetch Dev.to article", "NETWORK_ERROR", retryable=True
            ) from e

        if search.status_code != 200:
            raise PreviewFetchError("Dev.to API request failed", "API_ERROR", retryable=True)

        articles = parse_json_body(search, list)
        article = next(
            (a for a in articles if isinstance(a, dict) and a.get("slug") == slug), None
        )
        if article is None:
            raise PreviewFetchError("Article not found on Dev.to", "NOT_FOUND")
        return transform_devto_article(article)

    async def fetch_webpage(self, url: str) -> dict:
        document, final_url = await self._get_html(url)
        return parse_webpage(document, final_url)

    async def _get_html(self, url: str) -> tuple[str, str]:
        """Download an HTML document, enforcing content type and size limits.

        Returns:
            Tuple of (document text, final URL after redirects)
        """
        headers = {
            "User-Agent": SCRAPER_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }
        try:
            async with self._client() as client:
                async with client.stream("GET", url, headers=headers) as response:
                    self._raise_for_status(response)

                    content_type = response.headers.get("content-type", "").lower()
                    if "html" not in content_type:
                        raise PreviewFetchError(
                            f"Unsupported content type: {content_type or 'unknown'}",
                            "INVALID_CONTENT",
                        )

                    declared = response.headers.get("content-length")
                    if declared and declared.isdigit() and int(declared) > self.max_content_bytes:
                        raise PreviewFetchError("Page is too large", "CONTENT_TOO_LARGE")

                    body = bytearray()
                    async for chunk in response.aiter_bytes():
                        body.extend(chunk)
                        if len(body) > self.max_content_bytes:
                            raise PreviewFetchError("Page is too large", "CONTENT_TOO_LARGE")

                    try:
                        document = body.decode(response.encoding or "utf-8", errors="replace")
                    except LookupError:
                        document = body.decode("utf-8", errors="replace")
                    return document, str(response.url)
        except httpx.TimeoutException as e:
            raise PreviewFetchError("Request timed out", "TIMEOUT", retryable=True) from e
        except httpx.HTTPError as e:
            raise PreviewFetchError(f"Request failed: {e}", "NETWORK_ERROR", retryable=True) from e

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        code = response.status_code
        if code < 400:
            return
        if code in (404, 410):
            raise PreviewFetchError("Page not found", "NOT_FOUND")
        if code == 429:
            raise PreviewFetchError("Rate limited by remote site", "RATE_LIMITED", retryable=True)
        if code >= 500:
            raise PreviewFetchError(f"Remote server error: {code}", "SERVER_ERROR", retryable=True)
        raise PreviewFetchError(f"HTTP error: {code}", "HTTP_ERROR")
