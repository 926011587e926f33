"""Appearance customization API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from link4coders.api.dependencies import get_appearance_service, get_current_user
from link4coders.models.user import User
from link4coders.rate_limit import PROFILE_UPDATE_LIMIT, limiter
from link4coders.schemas.appearance import (
    AppearanceResponse,
    AppearanceUpdate,
    AppearanceWithAccessResponse,
    PremiumAccessResponse,
)
from link4coders.services.appearance import AppearanceService
from link4coders.services.premium import get_premium_access, require_premium_access
from link4coders.services.profile_cache import invalidate_user_profile

router = APIRouter(prefix="/api/v1/appearance", tags=["appearance"])


@router.get("/access", response_model=PremiumAccessResponse)
async def get_access(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get the current user's premium or trial status."""
    return get_premium_access(current_user).as_dict()


@router.get("", response_model=AppearanceWithAccessResponse)
async def get_appearance(
    current_user: Annotated[User, Depends(get_current_user)],
    appearance_service: Annotated[AppearanceService, Depends(get_appearance_service)],
):
    """Get appearance settings, creating defaults if none exist."""
    access = require_premium_access(current_user)
    settings = appearance_service.get_or_create(current_user)
    return AppearanceWithAccessResponse(
        settings=AppearanceResponse.model_validate(settings),
        access=PremiumAccessResponse(**access.as_dict()),
    )


@router.put("", response_model=AppearanceResponse)
@limiter.limit(PROFILE_UPDATE_LIMIT)
async def update_appearance(
    request: Request,
    appearance_data: AppearanceUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    appearance_service: Annotated[AppearanceService, Depends(get_appearance_service)],
):
    """Update appearance settings. Only provided fields change."""
    require_premium_access(current_user)
    changes = appearance_data.model_dump(exclude_unset=True, mode="json")
    settings = appearance_service.update(current_user, changes)
    invalidate_user_profile(current_user)
    return settings


@router.post("/reset", response_model=AppearanceResponse)
@limiter.limit(PROFILE_UPDATE_LIMIT)
async def reset_appearance(
    request: Request,
    current_user: Annotated[User, Depends(get_current_user)],
    appearance_service: Annotated[AppearanceService, Depends(get_appearance_service)],
):
    """Reset appearance settings to the current template's defaults."""
    require_premium_access(current_user)
    settings = appearance_service.reset(current_user)
    invalidate_user_profile(current_user)
    return settings


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appearance(
    current_user: Annotated[User, Depends(get_current_user)],
    appearance_service: Annotated[AppearanceService, Depends(get_appearance_service)],
):
    """Delete appearance settings so the template defaults apply."""
    require_premium_access(current_user)
    if not appearance_service.delete(current_user):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appearance settings not found",
        )
    invalidate_user_profile(current_user)
