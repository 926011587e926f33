"""User model."""

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from link4coders.database import Base
from link4coders.models.mixins import TimestampMixin

DEFAULT_THEME_ID = "developer-dark"


class User(Base, TimestampMixin):
    """User account and public developer profile."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    # Profile card
    full_name = Column(String(100), nullable=True)
    profile_title = Column(String(150), nullable=True)
    bio = Column(Text, nullable=True)
    avatar_url = Column(String(2000), nullable=True)
    github_username = Column(String(39), nullable=True, index=True)
    profile_slug = Column(String(50), unique=True, nullable=True, index=True)
    location = Column(String(100), nullable=True)
    company = Column(String(100), nullable=True)
    website_url = Column(String(2000), nullable=True)
    twitter_username = Column(String(15), nullable=True)
    linkedin_url = Column(String(2000), nullable=True)
    tech_stacks = Column(JSON, nullable=True)  # list of tag strings

    # Presentation
    theme_id = Column(
        String(50), ForeignKey("templates.id"), nullable=False, default=DEFAULT_THEME_ID
    )
    category_order = Column(JSON, nullable=True)  # list of category values

    is_public = Column(Boolean, default=True, nullable=False)
    is_premium = Column(Boolean, default=False, nullable=False)

    # Relationships
    template = relationship("Template")
    links = relationship("Link", back_populates="user", cascade="all, delete-orphan")
    appearance = relationship(
        "AppearanceSettings",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
