"""Link schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from link4coders.models.enums import LinkCategory


class LinkCreate(BaseModel):
    """Create a new link."""

    title: str = Field(..., min_length=1, max_length=100)
    url: str = Field(..., min_length=1, max_length=2000)
    description: str | None = Field(None, max_length=200)
    category: LinkCategory
    is_active: bool = True
    icon_type: str | None = Field(None, max_length=50)
    custom_icon_url: str | None = Field(None, max_length=2000)
    live_project_url: str | None = Field(None, max_length=2000)


class LinkUpdate(BaseModel):
    """Update a link. Only provided fields change."""

    title: str | None = Field(None, min_length=1, max_length=100)
    url: str | None = Field(None, min_length=1, max_length=2000)
    description: str | None = Field(None, max_length=200)
    category: LinkCategory | None = None
    is_active: bool | None = None
    icon_type: str | None = Field(None, max_length=50)
    custom_icon_url: str | None = Field(None, max_length=2000)
    live_project_url: str | None = Field(None, max_length=2000)


class LinkResponse(BaseModel):
    """Link response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    url: str
    description: str | None
    category: str
    position: int
    is_active: bool
    click_count: int
    icon_type: str | None
    platform_detected: str | None
    custom_icon_url: str | None
    live_project_url: str | None
    preview_status: str
    preview_metadata: dict[str, Any] | None
    preview_fetched_at: datetime | None
    preview_expires_at: datetime | None
    preview_error: str | None
    created_at: datetime
    updated_at: datetime


class LinkReorder(BaseModel):
    """New order for every link in one category."""

    category: LinkCategory
    link_ids: list[int] = Field(..., min_length=1)


class TopLink(BaseModel):
    """A link ranked by clicks."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: str
    category: str
    click_count: int


class LinkAnalyticsResponse(BaseModel):
    """Click analytics across a user's links."""

    total_links: int
    active_links: int
    total_clicks: int
    links_by_category: dict[str, int]
    top_links: list[TopLink]


class CategoryOrderUpdate(BaseModel):
    """New display order of link categories."""

    category_order: list[str]


class CategoryOrderResponse(BaseModel):
    """Display order of link categories."""

    category_order: list[str]
