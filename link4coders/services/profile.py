"""Profile editing and completion."""

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from link4coders.models.user import User
from link4coders.schemas.profile import ProfileUpdate
from link4coders.services.sanitization import (
    RESERVED_SLUGS,
    SLUG_PATTERN,
    sanitize_text,
    sanitize_url,
)

logger = logging.getLogger(__name__)

REQUIRED_PROFILE_FIELDS = ("full_name", "profile_slug")
IMPORTANT_PROFILE_FIELDS = ("profile_title", "bio", "avatar_url")

TEXT_FIELD_LIMITS = {
    "full_name": 100,
    "profile_title": 150,
    "bio": 500,
    "location": 100,
    "company": 100,
}
URL_FIELDS = ("avatar_url", "linkedin_url", "website_url")
MAX_TECH_STACKS = 20


def validate_slug(db: Session, slug: str, user_id: int | None = None) -> str:
    """Normalize a profile slug and make sure it is usable and free."""
    slug = slug.strip().lower()
    if not SLUG_PATTERN.match(slug):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Profile slug must be 3-50 characters of a-z, 0-9, '-' or '_'",
        )
    if slug in RESERVED_SLUGS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This profile slug is reserved",
        )

    query = db.query(User).filter(User.profile_slug == slug)
    if user_id is not None:
        query = query.filter(User.id != user_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Profile slug is already taken",
        )
    return slug


def clean_tech_stacks(tags: list[str]) -> list[str]:
    """Trim, de-duplicate (case-insensitively) and cap tech stack tags."""
    cleaned: list[str] = []
    seen: set[str] = set()
    for tag in tags:
        value = sanitize_text(tag, 30)
        if value and value.lower() not in seen:
            seen.add(value.lower())
            cleaned.append(value)
    return cleaned[:MAX_TECH_STACKS]


def update_profile(db: Session, user: User, data: ProfileUpdate) -> list[str]:
    """Apply a partial profile update.

    Returns:
        Public usernames the profile was reachable under before the change
    """
    changes = data.model_dump(exclude_unset=True)
    previous_usernames = [user.profile_slug, user.github_username]

    if "profile_slug" in changes:
        slug = changes.pop("profile_slug")
        user.profile_slug = validate_slug(db, slug, user.id) if slug else None

    for field, limit in TEXT_FIELD_LIMITS.items():
        if field in changes:
            setattr(user, field, sanitize_text(changes.pop(field), limit) or None)

    for field in URL_FIELDS:
        if field in changes:
            value = changes.pop(field)
            if value:
                cleaned = sanitize_url(value)
                if cleaned is None:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail=f"Invalid {field}",
                    )
                value = cleaned
            setattr(user, field, value or None)

    if "tech_stacks" in changes:
        user.tech_stacks = clean_tech_stacks(changes.pop("tech_stacks") or [])

    for field in ("github_username", "twitter_username"):
        if field in changes:
            setattr(user, field, changes.pop(field) or None)

    if changes.get("is_public") is not None:
        user.is_public = changes.pop("is_public")

    db.commit()
    db.refresh(user)
    logger.info(f"Updated profile for user {user.id}")
    return [name for name in previous_usernames if name]


def get_profile_completion(user: User) -> dict:
    """Score the profile on its required and important fields."""
    fields = REQUIRED_PROFILE_FIELDS + IMPORTANT_PROFILE_FIELDS
    completed = [field for field in fields if getattr(user, field)]
    missing_required = [field for field in REQUIRED_PROFILE_FIELDS if field not in completed]
    missing_important = [field for field in IMPORTANT_PROFILE_FIELDS if field not in completed]

    return {
        "percentage": round(len(completed) / len(fields) * 100),
        "completed_fields": completed,
        "missing_required": missing_required,
        "missing_important": missing_important,
        "is_complete": not missing_required,
    }
