"""Per-user ordering of link categories."""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from link4coders.models.enums import DEFAULT_CATEGORY_ORDER
from link4coders.models.user import User


def is_valid_category_order(order: list[str] | None) -> bool:
    """An order is valid when it is a permutation of every category."""
    if not isinstance(order, list) or len(order) != len(DEFAULT_CATEGORY_ORDER):
        return False
    return sorted(order) == sorted(DEFAULT_CATEGORY_ORDER)


def get_category_order(user: User) -> list[str]:
    """Return the user's category order, or the default if unset or corrupt."""
    if is_valid_category_order(user.category_order):
        return list(user.category_order)
    return list(DEFAULT_CATEGORY_ORDER)


class CategoryOrderService:
    """Service for reading and changing a user's category order."""

    def __init__(self, db: Session):
        self.db = db

    def update(self, user: User, order: list[str]) -> list[str]:
        if not is_valid_category_order(order):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Category order must contain each category exactly once",
            )
        user.category_order = list(order)
        self.db.commit()
        self.db.refresh(user)
        return get_category_order(user)

    def reset(self, user: User) -> list[str]:
        user.category_order = None
        self.db.commit()
        self.db.refresh(user)
        return get_category_order(user)
