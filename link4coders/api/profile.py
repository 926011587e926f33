"""Profile API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from link4coders.api.dependencies import get_current_user
from link4coders.database import get_db
from link4coders.models.user import User
from link4coders.rate_limit import PROFILE_UPDATE_LIMIT, limiter
from link4coders.schemas.profile import ProfileCompletionResponse, ProfileResponse, ProfileUpdate
from link4coders.services.profile import get_profile_completion, update_profile
from link4coders.services.profile_cache import invalidate_user_profile

router = APIRouter(prefix="/api/v1/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get the current user's profile."""
    return current_user


@router.put("", response_model=ProfileResponse)
@limiter.limit(PROFILE_UPDATE_LIMIT)
async def update_my_profile(
    request: Request,
    profile_data: ProfileUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update the current user's profile."""
    previous_usernames = update_profile(db, current_user, profile_data)
    invalidate_user_profile(current_user, *previous_usernames)
    return current_user


@router.get("/completion", response_model=ProfileCompletionResponse)
async def get_completion(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get how complete the current user's profile is."""
    return get_profile_completion(current_user)
