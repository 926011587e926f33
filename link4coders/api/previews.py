"""Rich preview API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from link4coders.api.dependencies import get_current_user, get_preview_service
from link4coders.database import get_db
from link4coders.models.link import Link
from link4coders.models.user import User
from link4coders.rate_limit import PREVIEW_REFRESH_LIMIT, limiter
from link4coders.schemas.link import LinkResponse
from link4coders.schemas.preview import (
    PreviewBatchRequest,
    PreviewBatchResponse,
    PreviewResponse,
    PreviewStatsResponse,
)
from link4coders.services.link_service import LinkService, enqueue_preview_fetch
from link4coders.services.preview_service import PreviewService, needs_preview_refresh
from link4coders.services.profile_cache import invalidate_user_profile

router = APIRouter(prefix="/api/v1/links", tags=["previews"])


def to_preview_response(link: Link, cached: bool = False, refreshed: bool = False):
    return PreviewResponse(
        link_id=link.id,
        status=link.preview_status,
        metadata=link.preview_metadata,
        fetched_at=link.preview_fetched_at,
        expires_at=link.preview_expires_at,
        error=link.preview_error,
        cached=cached,
        refreshed=refreshed,
    )


@router.get("/preview/stats", response_model=PreviewStatsResponse)
async def get_preview_stats(
    current_user: Annotated[User, Depends(get_current_user)],
    preview_service: Annotated[PreviewService, Depends(get_preview_service)],
):
    """Count the current user's previews by status and type."""
    return preview_service.get_stats(current_user.id)


@router.post("/preview/batch", response_model=PreviewBatchResponse)
@limiter.limit(PREVIEW_REFRESH_LIMIT)
async def batch_refresh_previews(
    request: Request,
    batch: PreviewBatchRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Queue preview refreshes for up to 20 links."""
    link_ids = list(dict.fromkeys(batch.link_ids))
    links = (
        db.query(Link).filter(Link.id.in_(link_ids), Link.user_id == current_user.id).all()
    )
    links_by_id = {link.id: link for link in links}

    queued: list[int] = []
    skipped: list[int] = []
    for link_id in link_ids:
        link = links_by_id.get(link_id)
        if link is not None and enqueue_preview_fetch(link):
            queued.append(link_id)
        else:
            skipped.append(link_id)

    return PreviewBatchResponse(queued=queued, skipped=skipped)


@router.get("/{link_id}/preview", response_model=PreviewResponse)
async def get_link_preview(
    link_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    preview_service: Annotated[PreviewService, Depends(get_preview_service)],
):
    """Get a link's preview, fetching it first if it is missing or stale."""
    link = LinkService(db).get_user_link(link_id, current_user)

    if not needs_preview_refresh(link):
        return to_preview_response(link, cached=link.preview_metadata is not None)

    await preview_service.refresh_link_preview(link)
    invalidate_user_profile(current_user)
    return to_preview_response(link, refreshed=True)


@router.post("/{link_id}/preview/refresh", response_model=LinkResponse)
@limiter.limit(PREVIEW_REFRESH_LIMIT)
async def refresh_link_preview(
    request: Request,
    link_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    preview_service: Annotated[PreviewService, Depends(get_preview_service)],
):
    """Fetch a link's preview now, ignoring the cache."""
    link = LinkService(db).get_user_link(link_id, current_user)
    await preview_service.refresh_link_preview(link)
    invalidate_user_profile(current_user)
    return link


@router.delete("/{link_id}/preview", response_model=LinkResponse)
async def clear_link_preview(
    link_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    preview_service: Annotated[PreviewService, Depends(get_preview_service)],
):
    """Clear a link's stored preview."""
    link = LinkService(db).get_user_link(link_id, current_user)
    preview_service.clear_preview(link)
    invalidate_user_profile(current_user)
    return link
