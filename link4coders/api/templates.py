"""Template API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from link4coders.api.dependencies import get_current_user, get_template_service
from link4coders.models.user import User
from link4coders.rate_limit import TEMPLATE_UPDATE_LIMIT, limiter
from link4coders.schemas.template import TemplateListResponse, TemplateResponse, TemplateSelect
from link4coders.services.profile_cache import invalidate_user_profile
from link4coders.services.templates import TemplateService

router = APIRouter(prefix="/api/v1/templates", tags=["templates"])


@router.get("", response_model=TemplateListResponse)
async def get_templates(
    current_user: Annotated[User, Depends(get_current_user)],
    template_service: Annotated[TemplateService, Depends(get_template_service)],
):
    """List templates with whether the current user can apply each."""
    templates = [
        TemplateResponse.model_validate(template).model_copy(update={"available": available})
        for template, available in template_service.list_templates(current_user)
    ]
    return TemplateListResponse(
        templates=templates,
        current_theme=current_user.theme_id,
        is_premium=current_user.is_premium,
    )


@router.put("/current", response_model=TemplateResponse)
@limiter.limit(TEMPLATE_UPDATE_LIMIT)
async def set_current_template(
    request: Request,
    selection: TemplateSelect,
    current_user: Annotated[User, Depends(get_current_user)],
    template_service: Annotated[TemplateService, Depends(get_template_service)],
):
    """Apply a template to the current user's profile."""
    template = template_service.set_current_template(current_user, selection.template_id)
    invalidate_user_profile(current_user)
    return template
