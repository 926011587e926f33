"""Enums for model fields."""

from enum import Enum


class LinkCategory(str, Enum):
    """Fixed set of categories a link can be grouped under."""

    PERSONAL = "personal"
    PROJECTS = "projects"
    BLOGS = "blogs"
    ACHIEVEMENTS = "achievements"
    CONTACT = "contact"
    CUSTOM = "custom"
    SOCIAL = "social"


DEFAULT_CATEGORY_ORDER: list[str] = [category.value for category in LinkCategory]


class PreviewStatus(str, Enum):
    """Lifecycle of a link's rich preview."""

    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"
    NOT_SUPPORTED = "not_supported"


class PreviewType(str, Enum):
    """Kind of metadata stored for a rich preview."""

    GITHUB_REPO = "github_repo"
    WEBPAGE = "webpage"
    BLOG_POST = "blog_post"


class BackgroundType(str, Enum):
    """How the profile background is painted."""

    COLOR = "color"
    GRADIENT = "gradient"
    IMAGE = "image"


class SocialIconStyle(str, Enum):
    """Shape of social icons on the public profile."""

    ROUNDED = "rounded"
    SQUARE = "square"
    CIRCLE = "circle"
