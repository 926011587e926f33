"""Premium and trial access checks."""

import math
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from fastapi import HTTPException, status

from link4coders.config import get_settings
from link4coders.models.mixins import as_utc
from link4coders.models.user import User


@dataclass
class PremiumAccess:
    """Resolved premium status for a user."""

    has_access: bool
    is_premium: bool
    is_trial: bool
    days_remaining: int
    trial_ends_at: datetime | None

    def as_dict(self) -> dict:
        return {
            "has_access": self.has_access,
            "is_premium": self.is_premium,
            "is_trial": self.is_trial,
            "days_remaining": self.days_remaining,
            "trial_ends_at": self.trial_ends_at.isoformat() if self.trial_ends_at else None,
        }


def get_premium_access(user: User, now: datetime | None = None) -> PremiumAccess:
    """Resolve whether a user can use premium features.

    Paid accounts always have access. Everyone else gets a trial window
    counted from account creation.
    """
    if user.is_premium:
        return PremiumAccess(
            has_access=True, is_premium=True, is_trial=False, days_remaining=0, trial_ends_at=None
        )

    now = now or datetime.now(UTC)
    created_at = as_utc(user.created_at) if user.created_at else now
    trial_ends_at = created_at + timedelta(days=get_settings().trial_days)
    remaining = (trial_ends_at - now).total_seconds()

    if remaining <= 0:
        return PremiumAccess(
            has_access=False,
            is_premium=False,
            is_trial=False,
            days_remaining=0,
            trial_ends_at=trial_ends_at,
        )

    return PremiumAccess(
        has_access=True,
        is_premium=False,
        is_trial=True,
        days_remaining=math.ceil(remaining / 86400),
        trial_ends_at=trial_ends_at,
    )


def require_premium_access(user: User) -> PremiumAccess:
    """Raise 403 unless the user is premium or still in their trial."""
    access = get_premium_access(user)
    if not access.has_access:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "Appearance customization requires a premium account",
                "access": access.as_dict(),
            },
        )
    return access
