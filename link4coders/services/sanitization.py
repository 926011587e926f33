"""Input sanitization helpers for user-supplied text and URLs."""

import ipaddress
import re
from urllib.parse import urlsplit

BLOCKED_URL_SCHEMES = ("javascript:", "data:", "vbscript:")

SLUG_PATTERN = re.compile(r"^[a-z0-9_-]{3,50}$")

RESERVED_SLUGS = frozenset(
    {
        "admin",
        "api",
        "app",
        "auth",
        "dashboard",
        "health",
        "login",
        "logout",
        "public",
        "settings",
        "signup",
        "static",
        "templates",
    }
)

# hostname suffix -> platform key
SOCIAL_PLATFORM_HOSTS: dict[str, str] = {
    "github.com": "github",
    "gitlab.com": "gitlab",
    "linkedin.com": "linkedin",
    "twitter.com": "twitter",
    "x.com": "twitter",
    "instagram.com": "instagram",
    "facebook.com": "facebook",
    "youtube.com": "youtube",
    "youtu.be": "youtube",
    "tiktok.com": "tiktok",
    "discord.gg": "discord",
    "discord.com": "discord",
    "t.me": "telegram",
    "telegram.org": "telegram",
    "reddit.com": "reddit",
    "stackoverflow.com": "stackoverflow",
    "dev.to": "devto",
    "medium.com": "medium",
    "hashnode.dev": "hashnode",
    "twitch.tv": "twitch",
    "mastodon.social": "mastodon",
    "dribbble.com": "dribbble",
    "behance.net": "behance",
    "codepen.io": "codepen",
    "leetcode.com": "leetcode",
    "kaggle.com": "kaggle",
}

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_MARKUP_CHARS = re.compile(r"[<>]")
_WHITESPACE = re.compile(r"\s+")
_NUMERIC_HOST = re.compile(r"^(?:0x[0-9a-f]*|\d+)(?:\.(?:0x[0-9a-f]*|\d+))*$")


def sanitize_text(value: str | None, max_length: int = 1000) -> str | None:
    """Strip markup characters and control codes, collapse whitespace, truncate."""
    if value is None:
        return None
    cleaned = _CONTROL_CHARS.sub("", value)
    cleaned = _MARKUP_CHARS.sub("", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    return cleaned[:max_length]


def sanitize_url(value: str | None) -> str | None:
    """Return a trimmed http(s) URL, or None if it is unsafe or malformed."""
    if not value or not value.strip():
        return None

    cleaned = value.strip()
    if cleaned.lower().startswith(BLOCKED_URL_SCHEMES):
        return None

    try:
        parts = urlsplit(cleaned)
    except ValueError:
        return None

    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        return None
    if parts.username or parts.password:
        return None
    return cleaned


def sanitize_slug(value: str) -> str:
    """Lowercase a slug and drop anything outside [a-z0-9_-]."""
    return re.sub(r"[^a-z0-9_-]", "", value.strip().lower())[:50]


def get_hostname(url: str) -> str:
    try:
        hostname = urlsplit(url).hostname or ""
    except ValueError:
        return ""
    return hostname.lower().removeprefix("www.")


def host_matches(hostname: str, domain: str) -> bool:
    """Check whether hostname is domain or one of its subdomains."""
    return hostname == domain or hostname.endswith(f".{domain}")


def detect_platform(url: str) -> str | None:
    """Detect the social/developer platform a URL points at."""
    if url.lower().startswith("mailto:"):
        return "email"
    hostname = get_hostname(url)
    for domain, platform in SOCIAL_PLATFORM_HOSTS.items():
        if host_matches(hostname, domain):
            return platform
    return None


def is_fetchable_url(url: str) -> bool:
    """Check that a URL is safe for the server to fetch.

    Only http(s) URLs pointing at public hosts are allowed; loopback,
    link-local and private network addresses are refused, including
    numeric and IPv4-mapped spellings of them.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return False

    if parts.scheme.lower() not in ("http", "https"):
        return False

    hostname = (parts.hostname or "").lower().rstrip(".")
    if not hostname or hostname == "localhost" or hostname.endswith(".localhost"):
        return False

    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        # Resolvers accept forms like 127.1 or 0x7f000001 that ipaddress does not
        return not _NUMERIC_HOST.match(hostname)

    if address.version == 6 and address.ipv4_mapped:
        address = address.ipv4_mapped

    return not (
        address.is_multicast
        or address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_reserved
        or address.is_unspecified
    )
