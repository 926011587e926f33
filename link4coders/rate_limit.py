"""Per-client rate limiting."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from link4coders.config import get_settings

settings = get_settings()

# Limits per route class, per client IP
LOGIN_LIMIT = "5/15minute"
SIGNUP_LIMIT = "3/hour"
PROFILE_UPDATE_LIMIT = "10/minute"
TEMPLATE_UPDATE_LIMIT = "10/minute"
LINK_CREATE_LIMIT = "20/minute"
LINK_UPDATE_LIMIT = "30/minute"
LINK_REORDER_LIMIT = "30/minute"
CATEGORY_ORDER_UPDATE_LIMIT = "20/minute"
CATEGORY_ORDER_RESET_LIMIT = "10/minute"
PREVIEW_REFRESH_LIMIT = "10/minute"
PUBLIC_PROFILE_LIMIT = "100/minute"
LINK_CLICK_LIMIT = "200/minute"
API_GENERAL_LIMIT = "60/minute"

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[API_GENERAL_LIMIT],
    storage_uri=settings.rate_limit_storage_uri,
    enabled=settings.rate_limit_enabled,
)
