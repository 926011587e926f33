"""Redis cache for public profile payloads."""

import json
import logging

import redis

from link4coders.config import get_settings
from link4coders.models.user import User

logger = logging.getLogger(__name__)
settings = get_settings()

KEY_PREFIX = "public-profile"

# Synchronous Redis client shared by API endpoints
_sync_redis: redis.Redis | None = None


def get_sync_redis() -> redis.Redis:
    """Get synchronous Redis client for cache reads and invalidation."""
    global _sync_redis
    if _sync_redis is None:
        _sync_redis = redis.from_url(settings.redis_url)
    return _sync_redis


def profile_cache_key(username: str) -> str:
    return f"{KEY_PREFIX}:{username.lower()}"


def get_cached_profile(username: str) -> dict | None:
    """Return a cached public profile payload, or None on miss or error."""
    if not settings.cache_enabled:
        return None
    try:
        raw = get_sync_redis().get(profile_cache_key(username))
    except Exception as e:
        logger.error(f"Failed to read profile cache for {username}: {e}")
        return None

    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Invalid JSON in profile cache for {username}")
        return None


def set_cached_profile(username: str, payload: dict) -> None:
    if not settings.cache_enabled:
        return
    try:
        get_sync_redis().setex(
            profile_cache_key(username),
            settings.profile_cache_ttl_seconds,
            json.dumps(payload, default=str),
        )
    except Exception as e:
        # Don't fail the request if caching fails
        logger.error(f"Failed to write profile cache for {username}: {e}")


def invalidate_user_profile(user: User, *previous_usernames: str | None) -> None:
    """Drop cached public pages for every name the user's profile is served under.

    Args:
        user: The user whose profile changed
        previous_usernames: Slugs or GitHub usernames the profile was served
            under before this change
    """
    if not settings.cache_enabled:
        return

    usernames = {
        name for name in (user.profile_slug, user.github_username, *previous_usernames) if name
    }
    if not usernames:
        return

    try:
        get_sync_redis().delete(*(profile_cache_key(name) for name in usernames))
        logger.debug(f"Invalidated profile cache for {sorted(usernames)}")
    except Exception as e:
        logger.error(f"Failed to invalidate profile cache for user {user.id}: {e}")
