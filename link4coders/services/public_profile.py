"""Public profile assembly and click tracking."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from link4coders.models.link import Link
from link4coders.models.user import User
from link4coders.schemas.appearance import AppearanceResponse
from link4coders.schemas.public import PublicLink, PublicProfileResponse, PublicUser
from link4coders.services.appearance import default_appearance
from link4coders.services.category_order import get_category_order
from link4coders.services.link_service import group_links_by_category
from link4coders.services.profile_cache import get_cached_profile, set_cached_profile
from link4coders.services.templates import get_template_config

logger = logging.getLogger(__name__)


def find_public_user(db: Session, username: str) -> User | None:
    """Resolve a public profile by slug or GitHub username."""
    name = username.strip().lower()
    public_users = db.query(User).filter(User.is_public.is_(True))

    # Slugs take precedence over GitHub usernames
    user = public_users.filter(User.profile_slug == name).first()
    if user is None:
        user = public_users.filter(func.lower(User.github_username) == name).first()
    return user


def build_public_profile(db: Session, user: User) -> dict:
    """Assemble the JSON payload for a public profile page."""
    links = (
        db.query(Link)
        .filter(Link.user_id == user.id, Link.is_active.is_(True))
        .order_by(Link.category, Link.position, Link.created_at, Link.id)
        .all()
    )
    grouped = group_links_by_category(links)

    if user.appearance is not None:
        appearance = AppearanceResponse.model_validate(user.appearance).model_dump(mode="json")
    else:
        appearance = default_appearance(user.theme_id)

    payload = PublicProfileResponse(
        user=PublicUser.model_validate(user),
        template=get_template_config(user.theme_id),
        appearance=appearance,
        category_order=get_category_order(user),
        links={
            category: [PublicLink.model_validate(link) for link in category_links]
            for category, category_links in grouped.items()
        },
    )
    return payload.model_dump(mode="json")


def get_public_profile(db: Session, username: str) -> dict | None:
    """Return the public profile payload, served from cache when possible."""
    cached = get_cached_profile(username)
    if cached is not None:
        return cached

    user = find_public_user(db, username)
    if user is None:
        return None

    payload = build_public_profile(db, user)
    set_cached_profile(username, payload)
    return payload


def record_click(db: Session, link_id: int) -> int | None:
    """Increment a public link's click counter.

    Returns:
        The new click count, or None if the link is not publicly visible
    """
    link_exists = (
        db.query(Link.id)
        .join(User, Link.user_id == User.id)
        .filter(Link.id == link_id, Link.is_active.is_(True), User.is_public.is_(True))
        .first()
    )
    if link_exists is None:
        return None

    # Single UPDATE so concurrent clicks are not lost
    db.query(Link).filter(Link.id == link_id).update(
        {Link.click_count: Link.click_count + 1}, synchronize_session=False
    )
    db.commit()

    click_count = db.query(Link.click_count).filter(Link.id == link_id).scalar()
    logger.debug(f"Recorded click on link {link_id} (total {click_count})")
    return click_count
