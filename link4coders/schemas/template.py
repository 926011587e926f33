"""Template schemas."""

from pydantic import BaseModel, ConfigDict, Field


class TemplateResponse(BaseModel):
    """A template in the catalog."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None
    preview_image_url: str | None
    category: str
    is_premium: bool
    tags: list[str] | None
    color_scheme: dict[str, str]
    typography: dict[str, str | int]
    available: bool = True


class TemplateListResponse(BaseModel):
    """Templates and the user's current selection."""

    templates: list[TemplateResponse]
    current_theme: str
    is_premium: bool


class TemplateSelect(BaseModel):
    """Switch the profile to another template."""

    template_id: str = Field(..., min_length=1, max_length=50)
