"""Appearance settings schemas."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from link4coders.models.enums import BackgroundType, SocialIconStyle

COLOR_REGEX = r"^(#[0-9a-fA-F]{3,8}|rgba?\([0-9.,\s%]+\)|transparent)$"
Color = Annotated[str, Field(pattern=COLOR_REGEX)]


class BackgroundGradient(BaseModel):
    """Gradient background definition."""

    type: Literal["linear", "radial"] = "linear"
    direction: str = Field("135deg", max_length=50)
    colors: list[Color] = Field(..., min_length=2, max_length=5)


class AppearanceUpdate(BaseModel):
    """Partial update of appearance settings."""

    background_type: BackgroundType | None = None
    background_color: str | None = Field(None, pattern=COLOR_REGEX)
    background_gradient: BackgroundGradient | None = None
    background_image_url: str | None = Field(None, max_length=2000)
    background_image_position: str | None = Field(None, max_length=50)
    background_image_size: str | None = Field(None, max_length=50)

    primary_font: str | None = Field(None, min_length=1, max_length=100)
    secondary_font: str | None = Field(None, min_length=1, max_length=100)
    font_size_base: int | None = Field(None, ge=10, le=32)
    font_size_heading: int | None = Field(None, ge=16, le=72)
    font_size_subheading: int | None = Field(None, ge=12, le=48)
    line_height_base: float | None = Field(None, ge=1.0, le=3.0)
    line_height_heading: float | None = Field(None, ge=1.0, le=3.0)

    text_primary_color: str | None = Field(None, pattern=COLOR_REGEX)
    text_secondary_color: str | None = Field(None, pattern=COLOR_REGEX)
    text_accent_color: str | None = Field(None, pattern=COLOR_REGEX)
    link_color: str | None = Field(None, pattern=COLOR_REGEX)
    link_hover_color: str | None = Field(None, pattern=COLOR_REGEX)
    border_color: str | None = Field(None, pattern=COLOR_REGEX)

    card_background_color: str | None = Field(None, pattern=COLOR_REGEX)
    card_border_radius: int | None = Field(None, ge=0, le=50)
    card_border_width: int | None = Field(None, ge=0, le=10)
    card_shadow: str | None = Field(None, max_length=100)
    card_backdrop_blur: int | None = Field(None, ge=0, le=50)

    profile_avatar_size: int | None = Field(None, ge=48, le=200)
    social_icon_size: int | None = Field(None, ge=16, le=64)
    social_icon_style: SocialIconStyle | None = None
    social_icon_color: str | None = Field(None, pattern=COLOR_REGEX)
    social_icon_hover_color: str | None = Field(None, pattern=COLOR_REGEX)


class AppearanceResponse(BaseModel):
    """Stored appearance settings."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    background_type: str
    background_color: str
    background_gradient: dict | None
    background_image_url: str | None
    background_image_position: str
    background_image_size: str
    primary_font: str
    secondary_font: str
    font_size_base: int
    font_size_heading: int
    font_size_subheading: int
    line_height_base: float
    line_height_heading: float
    text_primary_color: str
    text_secondary_color: str
    text_accent_color: str
    link_color: str
    link_hover_color: str
    border_color: str
    card_background_color: str
    card_border_radius: int
    card_border_width: int
    card_shadow: str
    card_backdrop_blur: int
    profile_avatar_size: int
    social_icon_size: int
    social_icon_style: str
    social_icon_color: str
    social_icon_hover_color: str
    updated_at: datetime


class PremiumAccessResponse(BaseModel):
    """Premium and trial status."""

    has_access: bool
    is_premium: bool
    is_trial: bool
    days_remaining: int
    trial_ends_at: datetime | None


class AppearanceWithAccessResponse(BaseModel):
    """Appearance settings together with the caller's access status."""

    settings: AppearanceResponse
    access: PremiumAccessResponse
