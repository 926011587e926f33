"""Appearance settings service."""

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from link4coders.models.appearance import AppearanceSettings
from link4coders.models.user import User
from link4coders.services.sanitization import sanitize_url
from link4coders.services.templates import get_template_config

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = frozenset({"background_gradient", "background_image_url"})

BASE_APPEARANCE: dict = {
    "background_type": "color",
    "background_gradient": None,
    "background_image_url": None,
    "background_image_position": "center",
    "background_image_size": "cover",
    "font_size_base": 16,
    "font_size_heading": 32,
    "font_size_subheading": 20,
    "line_height_base": 1.5,
    "line_height_heading": 1.2,
    "card_border_radius": 12,
    "card_border_width": 1,
    "card_shadow": "none",
    "card_backdrop_blur": 0,
    "profile_avatar_size": 96,
    "social_icon_size": 24,
    "social_icon_style": "rounded",
}


def default_appearance(template_id: str | None) -> dict:
    """Build the default settings for a template's color scheme."""
    template = get_template_config(template_id)
    colors = template["color_scheme"]
    typography = template["typography"]

    defaults = dict(BASE_APPEARANCE)
    defaults.update(
        {
            "background_color": colors["background"],
            "primary_font": typography["heading_font"],
            "secondary_font": typography["body_font"],
            "font_size_base": typography["body_size"],
            "font_size_heading": typography["heading_size"],
            "text_primary_color": colors["text_primary"],
            "text_secondary_color": colors["text_secondary"],
            "text_accent_color": colors["accent"],
            "link_color": colors["primary"],
            "link_hover_color": colors["secondary"],
            "border_color": colors["border"],
            "card_background_color": colors["surface"],
            "social_icon_color": colors["text_secondary"],
            "social_icon_hover_color": colors["primary"],
        }
    )
    return defaults


class AppearanceService:
    """Service for reading and editing a user's appearance settings."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user: User) -> AppearanceSettings | None:
        return (
            self.db.query(AppearanceSettings)
            .filter(AppearanceSettings.user_id == user.id)
            .first()
        )

    def create_defaults(self, user: User, commit: bool = True) -> AppearanceSettings:
        """Create settings from the user's current template."""
        settings = AppearanceSettings(user_id=user.id, **default_appearance(user.theme_id))
        self.db.add(settings)
        if commit:
            self.db.commit()
            self.db.refresh(settings)
        return settings

    def get_or_create(self, user: User) -> AppearanceSettings:
        settings = self.get(user)
        if settings is None:
            logger.info(f"Creating default appearance settings for user {user.id}")
            settings = self.create_defaults(user)
        return settings

    def update(self, user: User, changes: dict) -> AppearanceSettings:
        """Apply a partial update, creating defaults first if needed.

        Explicit nulls only clear the nullable background fields; for every
        other field they are ignored.
        """
        if changes.get("background_image_url"):
            image_url = sanitize_url(changes["background_image_url"])
            if image_url is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Invalid background image URL",
                )
            changes["background_image_url"] = image_url

        settings = self.get_or_create(user)
        for field, value in changes.items():
            if value is None and field not in NULLABLE_FIELDS:
                continue
            setattr(settings, field, value)

        if settings.background_type == "image" and not settings.background_image_url:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="An image background requires background_image_url",
            )
        if settings.background_type == "gradient" and not settings.background_gradient:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A gradient background requires background_gradient",
            )

        self.db.commit()
        self.db.refresh(settings)
        return settings

    def reset(self, user: User) -> AppearanceSettings:
        """Replace the settings with the template defaults."""
        existing = self.get(user)
        if existing is not None:
            self.db.delete(existing)
            self.db.flush()
        return self.create_defaults(user)

    def delete(self, user: User) -> bool:
        existing = self.get(user)
        if existing is None:
            return False
        self.db.delete(existing)
        self.db.commit()
        return True
