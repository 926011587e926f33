"""Link management service."""

import logging

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from link4coders.models.enums import DEFAULT_CATEGORY_ORDER, LinkCategory
from link4coders.models.link import Link
from link4coders.models.user import User
from link4coders.schemas.link import LinkCreate, LinkUpdate
from link4coders.services.preview_service import link_supports_preview, reset_preview
from link4coders.services.sanitization import detect_platform, sanitize_text, sanitize_url

logger = logging.getLogger(__name__)

# Maximum number of links per category
CATEGORY_LIMITS: dict[str, int] = {
    LinkCategory.PERSONAL.value: 5,
    LinkCategory.PROJECTS.value: 10,
    LinkCategory.BLOGS.value: 8,
    LinkCategory.ACHIEVEMENTS.value: 6,
    LinkCategory.CONTACT.value: 4,
    LinkCategory.CUSTOM.value: 5,
    LinkCategory.SOCIAL.value: 6,
}

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 200


def group_links_by_category(links: list[Link]) -> dict[str, list[Link]]:
    """Group links under every category key, keeping the given order."""
    grouped: dict[str, list[Link]] = {category: [] for category in DEFAULT_CATEGORY_ORDER}
    for link in links:
        grouped.setdefault(link.category, []).append(link)
    return grouped


def enqueue_preview_fetch(link: Link) -> bool:
    """Queue a background preview fetch for a link.

    Returns False when the link is not eligible or the queue is unreachable.
    """
    if not link_supports_preview(link):
        return False

    from link4coders.tasks.previews import fetch_link_preview

    try:
        fetch_link_preview.delay(link.id)
    except Exception as e:
        # Don't fail the request if the broker is down; the periodic refresh picks it up
        logger.error(f"Failed to queue preview fetch for link {link.id}: {e}")
        return False
    return True


class LinkService:
    """Service for creating, editing and ordering a user's links."""

    def __init__(self, db: Session):
        self.db = db

    def get_user_link(self, link_id: int, user: User) -> Link:
        """Get a link owned by the user."""
        link = self.db.query(Link).filter(Link.id == link_id, Link.user_id == user.id).first()
        if not link:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")
        return link

    def get_links(self, user: User, active_only: bool = False) -> list[Link]:
        query = self.db.query(Link).filter(Link.user_id == user.id)
        if active_only:
            query = query.filter(Link.is_active.is_(True))
        return query.order_by(Link.category, Link.position, Link.created_at, Link.id).all()

    def get_grouped_links(self, user: User, active_only: bool = False) -> dict[str, list[Link]]:
        return group_links_by_category(self.get_links(user, active_only=active_only))

    def _next_position(self, user_id: int, category: str) -> int:
        current_max = (
            self.db.query(func.max(Link.position))
            .filter(Link.user_id == user_id, Link.category == category)
            .scalar()
        )
        return 0 if current_max is None else current_max + 1

    def _check_capacity(self, user_id: int, category: str) -> None:
        count = (
            self.db.query(func.count(Link.id))
            .filter(Link.user_id == user_id, Link.category == category)
            .scalar()
        )
        limit = CATEGORY_LIMITS[category]
        if count >= limit:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Category '{category}' is limited to {limit} links",
            )

    @staticmethod
    def _clean_url(url: str, category: str) -> str:
        cleaned = sanitize_url(url)
        if cleaned is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid URL: only http and https links are allowed",
            )
        if category == LinkCategory.SOCIAL.value and not cleaned.lower().startswith("https://"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Social media URLs must use HTTPS",
            )
        return cleaned

    @staticmethod
    def _clean_optional_url(url: str | None, field: str) -> str | None:
        if not url:
            return None
        cleaned = sanitize_url(url)
        if cleaned is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid {field}",
            )
        return cleaned

    @staticmethod
    def _clean_title(title: str) -> str:
        cleaned = sanitize_text(title, TITLE_MAX_LENGTH)
        if not cleaned:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Title is required",
            )
        return cleaned

    def create_link(self, user: User, data: LinkCreate) -> Link:
        """Create a link at the end of its category."""
        category = data.category.value
        self._check_capacity(user.id, category)

        url = self._clean_url(data.url, category)
        link = Link(
            user_id=user.id,
            title=self._clean_title(data.title),
            url=url,
            description=sanitize_text(data.description, DESCRIPTION_MAX_LENGTH) or None,
            category=category,
            position=self._next_position(user.id, category),
            is_active=data.is_active,
            icon_type=data.icon_type,
            custom_icon_url=self._clean_optional_url(data.custom_icon_url, "icon URL"),
            live_project_url=self._clean_optional_url(data.live_project_url, "live project URL"),
            platform_detected=detect_platform(url),
        )
        reset_preview(link)

        self.db.add(link)
        self.db.commit()
        self.db.refresh(link)
        logger.info(f"Created link {link.id} in {category} for user {user.id}")
        return link

    def update_link(self, link: Link, data: LinkUpdate) -> bool:
        """Apply a partial update.

        Returns:
            True if the URL or category changed and the preview needs refetching
        """
        changes = data.model_dump(exclude_unset=True)
        preview_invalidated = False

        new_category = changes.pop("category", None)
        if new_category is not None:
            new_category = LinkCategory(new_category).value
        if new_category and new_category != link.category:
            self._check_capacity(link.user_id, new_category)
            link.category = new_category
            link.position = self._next_position(link.user_id, new_category)
            preview_invalidated = True

        if "url" in changes:
            url = self._clean_url(changes.pop("url"), link.category)
            if url != link.url:
                link.url = url
                link.platform_detected = detect_platform(url)
                preview_invalidated = True
        elif new_category == LinkCategory.SOCIAL.value:
            self._clean_url(link.url, link.category)

        if "title" in changes:
            link.title = self._clean_title(changes.pop("title"))
        if "description" in changes:
            link.description = (
                sanitize_text(changes.pop("description"), DESCRIPTION_MAX_LENGTH) or None
            )
        if "custom_icon_url" in changes:
            link.custom_icon_url = self._clean_optional_url(
                changes.pop("custom_icon_url"), "icon URL"
            )
        if "live_project_url" in changes:
            link.live_project_url = self._clean_optional_url(
                changes.pop("live_project_url"), "live project URL"
            )

        for field, value in changes.items():
            if value is not None:
                setattr(link, field, value)

        if preview_invalidated:
            reset_preview(link)

        self.db.commit()
        self.db.refresh(link)
        return preview_invalidated

    def delete_link(self, link: Link) -> None:
        self.db.delete(link)
        self.db.commit()

    def toggle_link(self, link: Link) -> Link:
        link.is_active = not link.is_active
        self.db.commit()
        self.db.refresh(link)
        return link

    def reorder_links(self, user: User, category: str, link_ids: list[int]) -> list[Link]:
        """Rewrite positions 0..n-1 in the given order.

        Every id must be one of the user's links in that category.
        """
        if len(set(link_ids)) != len(link_ids):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Duplicate link IDs",
            )

        links = (
            self.db.query(Link)
            .filter(Link.id.in_(link_ids), Link.user_id == user.id, Link.category == category)
            .all()
        )
        if len(links) != len(link_ids):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Some links do not belong to this user or category",
            )

        links_by_id = {link.id: link for link in links}
        for position, link_id in enumerate(link_ids):
            links_by_id[link_id].position = position
        self.db.commit()

        return [links_by_id[link_id] for link_id in link_ids]

    def get_analytics(self, user: User) -> dict:
        """Summarize click counts across the user's links."""
        links = self.get_links(user)
        active_links = [link for link in links if link.is_active]

        links_by_category = {category: 0 for category in DEFAULT_CATEGORY_ORDER}
        for link in links:
            links_by_category[link.category] = links_by_category.get(link.category, 0) + 1

        top_links = sorted(active_links, key=lambda link: link.click_count or 0, reverse=True)[:5]

        return {
            "total_links": len(links),
            "active_links": len(active_links),
            "total_clicks": sum(link.click_count or 0 for link in active_links),
            "links_by_category": links_by_category,
            "top_links": top_links,
        }
