"""Template model."""

from sqlalchemy import JSON, Boolean, Column, Integer, String

from link4coders.database import Base
from link4coders.models.mixins import TimestampMixin


class Template(Base, TimestampMixin):
    """A named visual theme a user can apply to their public profile."""

    __tablename__ = "templates"

    id = Column(String(50), primary_key=True)  # slug, e.g. "developer-dark"
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    preview_image_url = Column(String(2000), nullable=True)
    category = Column(String(50), nullable=False, default="developer")
    is_premium = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)
    tags = Column(JSON, nullable=True)
    color_scheme = Column(JSON, nullable=False)
    typography = Column(JSON, nullable=False)
