"""Link API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from link4coders.api.dependencies import get_current_user, get_link_service
from link4coders.database import get_db
from link4coders.models.user import User
from link4coders.rate_limit import (
    CATEGORY_ORDER_RESET_LIMIT,
    CATEGORY_ORDER_UPDATE_LIMIT,
    LINK_CREATE_LIMIT,
    LINK_REORDER_LIMIT,
    LINK_UPDATE_LIMIT,
    limiter,
)
from link4coders.schemas.link import (
    CategoryOrderResponse,
    CategoryOrderUpdate,
    LinkAnalyticsResponse,
    LinkCreate,
    LinkReorder,
    LinkResponse,
    LinkUpdate,
)
from link4coders.services.category_order import CategoryOrderService, get_category_order
from link4coders.services.link_service import LinkService, enqueue_preview_fetch
from link4coders.services.profile_cache import invalidate_user_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/links", tags=["links"])


@router.get("", response_model=dict[str, list[LinkResponse]])
async def get_links(
    current_user: Annotated[User, Depends(get_current_user)],
    link_service: Annotated[LinkService, Depends(get_link_service)],
    active_only: bool = Query(False, description="Only include active links"),
):
    """Get the current user's links grouped by category."""
    return link_service.get_grouped_links(current_user, active_only=active_only)


@router.post("", response_model=LinkResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(LINK_CREATE_LIMIT)
async def create_link(
    request: Request,
    link_data: LinkCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    link_service: Annotated[LinkService, Depends(get_link_service)],
):
    """Create a link at the end of its category."""
    link = link_service.create_link(current_user, link_data)
    enqueue_preview_fetch(link)
    invalidate_user_profile(current_user)
    return link


@router.get("/analytics", response_model=LinkAnalyticsResponse)
async def get_link_analytics(
    current_user: Annotated[User, Depends(get_current_user)],
    link_service: Annotated[LinkService, Depends(get_link_service)],
):
    """Get click analytics for the current user's links."""
    return link_service.get_analytics(current_user)


@router.put("/reorder", response_model=list[LinkResponse])
@limiter.limit(LINK_REORDER_LIMIT)
async def reorder_links(
    request: Request,
    reorder_data: LinkReorder,
    current_user: Annotated[User, Depends(get_current_user)],
    link_service: Annotated[LinkService, Depends(get_link_service)],
):
    """Set the order of every link in one category."""
    links = link_service.reorder_links(
        current_user, reorder_data.category.value, reorder_data.link_ids
    )
    invalidate_user_profile(current_user)
    return links


@router.get("/category-order", response_model=CategoryOrderResponse)
async def get_my_category_order(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get the display order of link categories."""
    return CategoryOrderResponse(category_order=get_category_order(current_user))


@router.put("/category-order", response_model=CategoryOrderResponse)
@limiter.limit(CATEGORY_ORDER_UPDATE_LIMIT)
async def update_category_order(
    request: Request,
    order_data: CategoryOrderUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Change the display order of link categories."""
    order = CategoryOrderService(db).update(current_user, order_data.category_order)
    invalidate_user_profile(current_user)
    return CategoryOrderResponse(category_order=order)


@router.delete("/category-order", response_model=CategoryOrderResponse)
@limiter.limit(CATEGORY_ORDER_RESET_LIMIT)
async def reset_category_order(
    request: Request,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Reset the category order to the default."""
    order = CategoryOrderService(db).reset(current_user)
    invalidate_user_profile(current_user)
    return CategoryOrderResponse(category_order=order)


@router.get("/{link_id}", response_model=LinkResponse)
async def get_link(
    link_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    link_service: Annotated[LinkService, Depends(get_link_service)],
):
    """Get a specific link."""
    return link_service.get_user_link(link_id, current_user)


@router.put("/{link_id}", response_model=LinkResponse)
@limiter.limit(LINK_UPDATE_LIMIT)
async def update_link(
    request: Request,
    link_id: int,
    link_data: LinkUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    link_service: Annotated[LinkService, Depends(get_link_service)],
):
    """Update a link. Changing its URL or category refetches the preview."""
    link = link_service.get_user_link(link_id, current_user)
    if link_service.update_link(link, link_data):
        enqueue_preview_fetch(link)
    invalidate_user_profile(current_user)
    return link


@router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_link(
    link_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    link_service: Annotated[LinkService, Depends(get_link_service)],
):
    """Delete a link."""
    link = link_service.get_user_link(link_id, current_user)
    link_service.delete_link(link)
    invalidate_user_profile(current_user)
    logger.info(f"Deleted link {link_id} for user {current_user.id}")


@router.post("/{link_id}/toggle", response_model=LinkResponse)
@limiter.limit(LINK_UPDATE_LIMIT)
async def toggle_link(
    request: Request,
    link_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    link_service: Annotated[LinkService, Depends(get_link_service)],
):
    """Show or hide a link on the public profile."""
    link = link_service.get_user_link(link_id, current_user)
    link_service.toggle_link(link)
    invalidate_user_profile(current_user)
    return link
