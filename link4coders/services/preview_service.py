"""Rich preview lifecycle for links."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import or_
from sqlalchemy.orm import Session

from link4coders.config import get_settings
from link4coders.models.enums import PreviewStatus, PreviewType
from link4coders.models.link import Link
from link4coders.models.mixins import as_utc
from link4coders.services.preview_fetchers import (
    PreviewFetcher,
    PreviewFetchError,
    get_preview_ttl,
    get_preview_type,
    supports_rich_preview,
)

logger = logging.getLogger(__name__)


def link_supports_preview(link: Link) -> bool:
    return supports_rich_preview(link.url, link.category)


def needs_preview_refresh(link: Link, now: datetime | None = None) -> bool:
    """Decide whether a link's preview should be fetched again.

    Pending previews are always fetched. Successful previews are refetched
    once they expire, failed ones after the failure cooldown. A preview left
    in processing by a crashed worker is picked up again after the
    processing timeout.
    """
    if not link_supports_preview(link):
        return False

    now = now or datetime.now(UTC)
    status = link.preview_status

    if status == PreviewStatus.PROCESSING.value:
        if link.updated_at is None:
            return False
        timeout = timedelta(minutes=get_settings().preview_processing_timeout_minutes)
        return as_utc(link.updated_at) + timeout <= now
    if status == PreviewStatus.PENDING.value or link.preview_fetched_at is None:
        return True
    if status == PreviewStatus.SUCCESS.value:
        return link.preview_expires_at is None or as_utc(link.preview_expires_at) <= now
    if status == PreviewStatus.FAILED.value:
        cooldown = timedelta(minutes=get_settings().preview_failure_cooldown_minutes)
        return as_utc(link.preview_fetched_at) + cooldown <= now
    # not_supported links whose URL became eligible
    return True


def reset_preview(link: Link) -> None:
    """Forget any stored preview, e.g. after the URL changed."""
    link.preview_metadata = None
    link.preview_fetched_at = None
    link.preview_expires_at = None
    link.preview_error = None
    link.preview_attempts = 0
    if link_supports_preview(link):
        link.preview_status = PreviewStatus.PENDING.value
    else:
        link.preview_status = PreviewStatus.NOT_SUPPORTED.value


class PreviewService:
    """Service for fetching and storing link previews."""

    def __init__(self, db: Session, fetcher: PreviewFetcher | None = None):
        self.db = db
        self.fetcher = fetcher or PreviewFetcher()
        self.settings = get_settings()

    async def refresh_link_preview(self, link: Link, raise_errors: bool = False) -> Link:
        """Fetch a preview now and store the outcome on the link.

        Args:
            link: Link to refresh
            raise_errors: Raise PreviewFetchError after recording the failure

        Returns:
            The updated link
        """
        if not link_supports_preview(link):
            link.preview_status = PreviewStatus.NOT_SUPPORTED.value
            self.db.commit()
            return link

        link.preview_status = PreviewStatus.PROCESSING.value
        self.db.commit()

        try:
            metadata = await self.fetcher.fetch(link.url)
        except PreviewFetchError as e:
            logger.warning(f"Preview fetch failed for link {link.id}: {e}")
            self.mark_failed(link, e)
            if raise_errors:
                raise
            return link
        except Exception as e:
            logger.error(
                f"Unexpected error fetching preview for link {link.id}: {e}", exc_info=True
            )
            self.db.rollback()
            error = PreviewFetchError(f"Unexpected error: {e}", "UNKNOWN")
            self.mark_failed(link, error)
            if raise_errors:
                raise error from e
            return link

        self.mark_success(link, metadata)
        logger.info(f"Stored {metadata['type']} preview for link {link.id}")
        return link

    def mark_success(self, link: Link, metadata: dict) -> None:
        now = datetime.now(UTC)
        link.preview_metadata = metadata
        link.preview_status = PreviewStatus.SUCCESS.value
        link.preview_fetched_at = now
        link.preview_expires_at = now + get_preview_ttl(metadata.get("type", PreviewType.WEBPAGE))
        link.preview_error = None
        link.preview_attempts = 0
        self.db.commit()
        self.db.refresh(link)

    def mark_failed(self, link: Link, error: PreviewFetchError) -> None:
        link.preview_status = PreviewStatus.FAILED.value
        link.preview_error = str(error)
        link.preview_fetched_at = datetime.now(UTC)
        link.preview_attempts = (link.preview_attempts or 0) + 1
        self.db.commit()
        self.db.refresh(link)

    def clear_preview(self, link: Link) -> Link:
        reset_preview(link)
        self.db.commit()
        self.db.refresh(link)
        return link

    def get_stats(self, user_id: int) -> dict:
        """Count a user's previews by status and by metadata type."""
        links = self.db.query(Link).filter(Link.user_id == user_id).all()

        stats = {"total": len(links)}
        for status in PreviewStatus:
            stats[status.value] = 0
        for preview_type in PreviewType:
            stats[preview_type.value] = 0

        for link in links:
            stats[link.preview_status] = stats.get(link.preview_status, 0) + 1
            preview_type = (link.preview_metadata or {}).get("type")
            if link.preview_status == PreviewStatus.SUCCESS.value and preview_type in stats:
                stats[preview_type] += 1

        return stats

    def get_refresh_candidates(self, limit: int) -> list[Link]:
        """Find active links whose previews are pending, expired, retryable or stuck."""
        now = datetime.now(UTC)
        candidates = (
            self.db.query(Link)
            .filter(
                Link.is_active.is_(True),
                or_(
                    Link.preview_status == PreviewStatus.PENDING.value,
                    Link.preview_status == PreviewStatus.PROCESSING.value,
                    Link.preview_status == PreviewStatus.SUCCESS.value,
                    Link.preview_status == PreviewStatus.FAILED.value,
                ),
                Link.preview_attempts < self.settings.preview_max_attempts,
            )
            .order_by(Link.preview_fetched_at.is_(None).desc(), Link.preview_fetched_at)
            .all()
        )
        return [link for link in candidates if needs_preview_refresh(link, now)][:limit]
