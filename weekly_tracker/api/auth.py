"""Caller identity.

Authentication is handled upstream; requests arrive with the caller's
profile id in the ``X-Profile-Id`` header.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from weekly_tracker.core.persistence import get_profile
from weekly_tracker.database import get_db
from weekly_tracker.models.profile import Profile, ProfileRole


def get_current_profile(
    x_profile_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Profile:
    """Resolve the calling profile."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not identify caller",
    )
    if not x_profile_id:
        raise credentials_exception
    profile = get_profile(db, x_profile_id)
    if profile is None:
        raise credentials_exception
    return profile


def require_manager(current_profile: Profile = Depends(get_current_profile)) -> Profile:
    """Require manager role."""
    if current_profile.role != ProfileRole.MANAGER:
        raise HTTPException(status_code=403, detail="Manager access required")
    return current_profile
