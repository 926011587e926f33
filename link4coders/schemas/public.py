"""Public profile schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class PublicUser(BaseModel):
    """Fields of a user that are safe to show to anyone."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str | None
    profile_title: str | None
    bio: str | None
    avatar_url: str | None
    profile_slug: str | None
    github_username: str | None
    twitter_username: str | None
    linkedin_url: str | None
    website_url: str | None
    location: str | None
    company: str | None
    tech_stacks: list[str] | None
    theme_id: str
    is_premium: bool
    created_at: datetime


class PublicLink(BaseModel):
    """An active link as shown on the public profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    url: str
    description: str | None
    category: str
    position: int
    click_count: int
    icon_type: str | None
    platform_detected: str | None
    custom_icon_url: str | None
    live_project_url: str | None
    preview_status: str
    preview_metadata: dict[str, Any] | None


class PublicProfileResponse(BaseModel):
    """Everything needed to render a public profile page."""

    user: PublicUser
    template: dict[str, Any]
    appearance: dict[str, Any] | None
    category_order: list[str]
    links: dict[str, list[PublicLink]]


class ClickResponse(BaseModel):
    """Click count after recording a click."""

    link_id: int
    click_count: int
