"""Reference data endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from weekly_tracker.api.auth import get_current_profile
from weekly_tracker.core.persistence import fetch_action_catalog, fetch_profiles
from weekly_tracker.database import get_db
from weekly_tracker.models.profile import ProfileRole

router = APIRouter()


class ActionResponse(BaseModel):
    """Action catalog response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    default_daily_target: int
    sort_order: int


class ProfileResponse(BaseModel):
    """Profile response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    role: ProfileRole
    manager_id: Optional[str] = None


@router.get("/actions", response_model=List[ActionResponse])
def list_actions(
    db: Session = Depends(get_db),
    current_profile = Depends(get_current_profile),
):
    """List the action catalog in sort order."""
    return fetch_action_catalog(db)


@router.get("/profiles", response_model=List[ProfileResponse])
def list_profiles(
    db: Session = Depends(get_db),
    current_profile = Depends(get_current_profile),
):
    """List profiles."""
    return fetch_profiles(db)
