"""Pydantic schemas for API requests and responses."""

from link4coders.schemas.appearance import AppearanceResponse, AppearanceUpdate
from link4coders.schemas.auth import AuthResponse, UserLogin, UserRegister, UserResponse
from link4coders.schemas.link import LinkCreate, LinkReorder, LinkResponse, LinkUpdate
from link4coders.schemas.preview import PreviewBatchRequest, PreviewResponse
from link4coders.schemas.profile import ProfileResponse, ProfileUpdate
from link4coders.schemas.public import PublicProfileResponse
from link4coders.schemas.template import TemplateResponse, TemplateSelect

__all__ = [
    "UserRegister",
    "UserLogin",
    "AuthResponse",
    "UserResponse",
    "ProfileUpdate",
    "ProfileResponse",
    "LinkCreate",
    "LinkUpdate",
    "LinkResponse",
    "LinkReorder",
    "PreviewResponse",
    "PreviewBatchRequest",
    "AppearanceUpdate",
    "AppearanceResponse",
    "TemplateResponse",
    "TemplateSelect",
    "PublicProfileResponse",
]
