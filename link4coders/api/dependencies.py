"""FastAPI dependencies for authentication and database."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from link4coders.database import get_db
from link4coders.models.user import User
from link4coders.services.appearance import AppearanceService
from link4coders.services.auth import decode_access_token
from link4coders.services.link_service import LinkService
from link4coders.services.preview_service import PreviewService
from link4coders.services.templates import TemplateService

security = HTTPBearer()


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    token = credentials.credentials
    payload = decode_access_token(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(User).filter(User.id == int(user_id)).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def get_link_service(
    db: Annotated[Session, Depends(get_db)],
) -> LinkService:
    """Get link service with dependencies."""
    return LinkService(db)


def get_preview_service(
    db: Annotated[Session, Depends(get_db)],
) -> PreviewService:
    """Get preview service with dependencies."""
    return PreviewService(db)


def get_appearance_service(
    db: Annotated[Session, Depends(get_db)],
) -> AppearanceService:
    """Get appearance service with dependencies."""
    return AppearanceService(db)


def get_template_service(
    db: Annotated[Session, Depends(get_db)],
) -> TemplateService:
    """Get template service with dependencies."""
    return TemplateService(db)
