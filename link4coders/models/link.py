"""Link model."""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from link4coders.database import Base
from link4coders.models.enums import PreviewStatus
from link4coders.models.mixins import TimestampMixin


class Link(Base, TimestampMixin):
    """A categorized link on a user's profile, with its cached rich preview."""

    __tablename__ = "links"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    url = Column(String(2000), nullable=False)
    description = Column(String(200), nullable=True)
    category = Column(String(20), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    click_count = Column(Integer, default=0, nullable=False)

    # Presentation
    icon_type = Column(String(50), nullable=True)
    platform_detected = Column(String(50), nullable=True)
    custom_icon_url = Column(String(2000), nullable=True)
    live_project_url = Column(String(2000), nullable=True)

    # Rich preview
    preview_status = Column(String(20), default=PreviewStatus.PENDING.value, nullable=False)
    preview_metadata = Column(JSON, nullable=True)
    preview_fetched_at = Column(DateTime(timezone=True), nullable=True)
    preview_expires_at = Column(DateTime(timezone=True), nullable=True)
    preview_error = Column(Text, nullable=True)
    preview_attempts = Column(Integer, default=0, nullable=False)

    # Relationships
    user = relationship("User", back_populates="links")
