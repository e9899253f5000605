"""Seed the action catalog and profiles from YAML."""

import logging
from typing import Dict, NamedTuple

import yaml
from sqlalchemy.orm import Session

from weekly_tracker.core.validation import validate_non_negative_integer
from weekly_tracker.models.action import ActionCatalog
from weekly_tracker.models.profile import Profile, ProfileRole

logger = logging.getLogger(__name__)

DEFAULT_ACTIONS = [
    {"name": "New Hires", "default_daily_target": 4},
    {"name": "Interviews", "default_daily_target": 9},
    {"name": "Call outs", "default_daily_target": 1},
    {"name": "Replacements", "default_daily_target": 1},
    {"name": "Site Visits", "default_daily_target": 4},
    {"name": "Writeups", "default_daily_target": 0},
    {"name": "Fingerprints", "default_daily_target": 0},
    {"name": "Pay issues", "default_daily_target": 0},
    {"name": "Terminations", "default_daily_target": 0},
]


class SeedResult(NamedTuple):
    actions_added: int
    profiles_added: int


def seed_actions(db: Session, actions_data) -> int:
    """Add catalog actions that don't exist yet, matched by name."""
    added = 0
    for position, action_data in enumerate(actions_data, start=1):
        existing = db.query(ActionCatalog).filter(ActionCatalog.name == action_data["name"]).first()
        if existing:
            logger.info(f"Action {action_data['name']} already exists, skipping")
            continue
        target = validate_non_negative_integer(action_data.get("default_daily_target", 0))
        if not target.valid:
            raise ValueError(f"Action {action_data['name']}: default_daily_target {target.error.lower()}")
        db.add(
            ActionCatalog(
                name=action_data["name"],
                default_daily_target=target.value,
                sort_order=action_data.get("sort_order", position),
            )
        )
        added += 1
    return added


def seed_profiles(db: Session, profiles_data) -> int:
    """Add profiles that don't exist yet, matched by id. Managers go first."""
    added = 0
    ordered = sorted(profiles_data, key=lambda p: p.get("role", "employee") != "manager")
    for profile_data in ordered:
        if db.query(Profile).filter(Profile.id == profile_data["id"]).first():
            logger.info(f"Profile {profile_data['id']} already exists, skipping")
            continue
        db.add(
            Profile(
                id=profile_data["id"],
                full_name=profile_data["full_name"],
                role=ProfileRole(profile_data.get("role", "employee")),
                manager_id=profile_data.get("manager_id"),
            )
        )
        db.flush()
        added += 1
    return added


def seed_from_data(db: Session, data: Dict) -> SeedResult:
    """Seed from a parsed document; falls back to the default catalog."""
    try:
        actions_added = seed_actions(db, data.get("actions") or DEFAULT_ACTIONS)
        profiles_added = seed_profiles(db, data.get("profiles") or [])
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"Seeded {actions_added} actions and {profiles_added} profiles")
    return SeedResult(actions_added, profiles_added)


def seed_from_yaml(db: Session, yaml_file: str) -> SeedResult:
    """Seed from a YAML file with optional ``actions`` and ``profiles`` lists."""
    with open(yaml_file, "r") as f:
        data = yaml.safe_load(f) or {}
    return seed_from_data(db, data)
