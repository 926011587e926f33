"""Profile schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ProfileUpdate(BaseModel):
    """Partial update of the current user's profile."""

    full_name: str | None = Field(None, max_length=100)
    profile_title: str | None = Field(None, max_length=150)
    bio: str | None = Field(None, max_length=500)
    avatar_url: str | None = Field(None, max_length=2000)
    profile_slug: str | None = Field(None, min_length=3, max_length=50)
    github_username: str | None = Field(None, max_length=39, pattern=r"^[a-zA-Z0-9-]*$")
    twitter_username: str | None = Field(None, max_length=15, pattern=r"^[a-zA-Z0-9_]*$")
    linkedin_url: str | None = Field(None, max_length=2000)
    website_url: str | None = Field(None, max_length=2000)
    location: str | None = Field(None, max_length=100)
    company: str | None = Field(None, max_length=100)
    tech_stacks: list[str] | None = Field(None, max_length=50)
    is_public: bool | None = None


class ProfileResponse(BaseModel):
    """Full profile of the current user."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
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
    is_public: bool
    is_premium: bool
    created_at: datetime
    updated_at: datetime


class ProfileCompletionResponse(BaseModel):
    """How much of the profile has been filled in."""

    percentage: int
    completed_fields: list[str]
    missing_required: list[str]
    missing_important: list[str]
    is_complete: bool

