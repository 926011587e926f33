"""Rich preview schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class PreviewResponse(BaseModel):
    """Stored preview of a link."""

    link_id: int
    status: str
    metadata: dict[str, Any] | None
    fetched_at: datetime | None
    expires_at: datetime | None
    error: str | None
    cached: bool = False
    refreshed: bool = False


class PreviewBatchRequest(BaseModel):
    """Queue preview refreshes for several links."""

    link_ids: list[int] = Field(..., min_length=1, max_length=20)


class PreviewBatchResponse(BaseModel):
    """Which links were queued for a preview refresh."""

    queued: list[int]
    skipped: list[int]


class PreviewStatsResponse(BaseModel):
    """Preview counts for the current user."""

    total: int
    pending: int
    processing: int
    success: int
    failed: int
    not_supported: int
    github_repo: int
    webpage: int
    blog_post: int
