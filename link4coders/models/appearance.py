"""Appearance settings model."""

from sqlalchemy import JSON, Column, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from link4coders.database import Base
from link4coders.models.mixins import TimestampMixin


class AppearanceSettings(Base, TimestampMixin):
    """Per-user styling overrides for the public profile page."""

    __tablename__ = "appearance_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False, index=True)

    # Background
    background_type = Column(String(20), nullable=False, default="color")
    background_color = Column(String(50), nullable=False)
    background_gradient = Column(JSON, nullable=True)  # {"type", "direction", "colors"}
    background_image_url = Column(String(2000), nullable=True)
    background_image_position = Column(String(50), nullable=False, default="center")
    background_image_size = Column(String(50), nullable=False, default="cover")

    # Typography
    primary_font = Column(String(100), nullable=False)
    secondary_font = Column(String(100), nullable=False)
    font_size_base = Column(Integer, nullable=False, default=16)
    font_size_heading = Column(Integer, nullable=False, default=32)
    font_size_subheading = Column(Integer, nullable=False, default=20)
    line_height_base = Column(Float, nullable=False, default=1.5)
    line_height_heading = Column(Float, nullable=False, default=1.2)

    # Colors
    text_primary_color = Column(String(50), nullable=False)
    text_secondary_color = Column(String(50), nullable=False)
    text_accent_color = Column(String(50), nullable=False)
    link_color = Column(String(50), nullable=False)
    link_hover_color = Column(String(50), nullable=False)
    border_color = Column(String(50), nullable=False)

    # Cards
    card_background_color = Column(String(50), nullable=False)
    card_border_radius = Column(Integer, nullable=False, default=12)
    card_border_width = Column(Integer, nullable=False, default=1)
    card_shadow = Column(String(100), nullable=False, default="none")
    card_backdrop_blur = Column(Integer, nullable=False, default=0)

    # Profile and social icons
    profile_avatar_size = Column(Integer, nullable=False, default=96)
    social_icon_size = Column(Integer, nullable=False, default=24)
    social_icon_style = Column(String(20), nullable=False, default="rounded")
    social_icon_color = Column(String(50), nullable=False)
    social_icon_hover_color = Column(String(50), nullable=False)

    # Relationships
    user = relationship("User", back_populates="appearance")
