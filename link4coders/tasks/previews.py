"""Celery tasks for fetching link previews."""

import asyncio
import logging

from link4coders.celery_app import app as celery_app
from link4coders.database import SessionLocal
from link4coders.models.link import Link
from link4coders.services.preview_fetchers import PreviewFetchError
from link4coders.services.preview_service import PreviewService
from link4coders.services.profile_cache import invalidate_user_profile

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def fetch_link_preview(self, link_id: int) -> dict:
    """Fetch and store the rich preview for a link.

    Retryable failures (timeouts, server errors, rate limits) are retried
    with exponential backoff.

    Args:
        link_id: ID of the Link to fetch a preview for

    Returns:
        dict with the preview status
    """
    db = SessionLocal()
    try:
        link = db.query(Link).filter(Link.id == link_id).first()
        if not link:
            return {"error": "Link not found"}

        logger.info(f"Fetching preview for link {link_id}: {link.url}")

        try:
            asyncio.run(PreviewService(db).refresh_link_preview(link, raise_errors=True))
        except PreviewFetchError as e:
            fetch_error = e
        else:
            invalidate_user_profile(link.user)
            return {"success": True, "status": link.preview_status}

        preview_status = link.preview_status

    except Exception as e:
        logger.error(f"Error fetching preview for link {link_id}: {e}", exc_info=True)
        db.rollback()

        if self.request.retries < self.max_retries:
            raise self.retry(exc=e, countdown=60) from e

        return {"error": str(e)}
    finally:
        db.close()

    if fetch_error.retryable and self.request.retries < self.max_retries:
        countdown = 60 * (2**self.request.retries)
        logger.info(f"Retrying preview for link {link_id} in {countdown}s")
        raise self.retry(exc=fetch_error, countdown=countdown) from fetch_error

    return {"success": False, "status": preview_status, "error": str(fetch_error)}


@celery_app.task
def refresh_stale_previews() -> dict:
    """Queue preview fetches for pending, expired and retryable links."""
    db = SessionLocal()
    try:
        preview_service = PreviewService(db)
        candidates = preview_service.get_refresh_candidates(
            limit=preview_service.settings.preview_refresh_batch_size
        )
        for link in candidates:
            fetch_link_preview.delay(link.id)

        logger.info(f"Queued {len(candidates)} stale previews for refresh")
        return {"queued": len(candidates)}
    finally:
        db.close()
