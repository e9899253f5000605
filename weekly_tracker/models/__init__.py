"""Database models."""

from weekly_tracker.models.profile import Profile, ProfileRole
from weekly_tracker.models.action import ActionCatalog
from weekly_tracker.models.report import ReportEntry, ReportLine, ReportStatus, WeeklyReport

__all__ = [
    "Profile",
    "ProfileRole",
    "ActionCatalog",
    "WeeklyReport",
    "ReportLine",
    "ReportEntry",
    "ReportStatus",
]
