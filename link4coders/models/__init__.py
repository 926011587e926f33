"""SQLAlchemy models."""

from link4coders.models.appearance import AppearanceSettings
from link4coders.models.link import Link
from link4coders.models.template import Template
from link4coders.models.user import User

__all__ = [
    "User",
    "Link",
    "AppearanceSettings",
    "Template",
]
