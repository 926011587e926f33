"""Public profile API endpoints (no authentication)."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from link4coders.database import get_db
from link4coders.rate_limit import LINK_CLICK_LIMIT, PUBLIC_PROFILE_LIMIT, limiter
from link4coders.schemas.public import ClickResponse, PublicProfileResponse
from link4coders.services.public_profile import get_public_profile, record_click

router = APIRouter(prefix="/api/v1/public", tags=["public"])


@router.get("/profiles/{username}", response_model=PublicProfileResponse)
@limiter.limit(PUBLIC_PROFILE_LIMIT)
async def get_profile(
    request: Request,
    username: str,
    db: Annotated[Session, Depends(get_db)],
):
    """Get a public profile by profile slug or GitHub username."""
    profile = get_public_profile(db, username)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


@router.post("/links/{link_id}/click", response_model=ClickResponse)
@limiter.limit(LINK_CLICK_LIMIT)
async def track_click(
    request: Request,
    link_id: int,
    db: Annotated[Session, Depends(get_db)],
):
    """Record a click on a public link."""
    click_count = record_click(db, link_id)
    if click_count is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link not found")
    return ClickResponse(link_id=link_id, click_count=click_count)
