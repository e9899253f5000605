"""Weekly report endpoints."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from weekly_tracker.api.auth import get_current_profile, require_manager
from weekly_tracker.core import persistence
from weekly_tracker.core.exceptions import SubmissionNotAllowed
from weekly_tracker.core.session_state import submit_state
from weekly_tracker.core.validation import MAX_VALUE
from weekly_tracker.core.week_utils import (
    DAY_NAMES_SHORT,
    format_display,
    format_iso,
    local_now,
    local_today,
    week_dates,
    week_range_string,
)
from weekly_tracker.database import get_db
from weekly_tracker.models.profile import Profile, ProfileRole
from weekly_tracker.models.report import WeeklyReport

router = APIRouter()


class LineUpsert(BaseModel):
    """Line upsert schema. Omitting the target uses the action's default."""

    daily_target: Optional[int] = Field(default=None, ge=0, le=MAX_VALUE)


class EntryUpsert(BaseModel):
    """Entry upsert schema. A null value clears the cell."""

    value: Optional[int] = Field(default=None, ge=0, le=MAX_VALUE)


class ChangeRequest(BaseModel):
    """Request-changes schema."""

    comment: str = Field(min_length=1)


def _isoformat(value):
    return value.isoformat() if value else None


def serialize_report(details: persistence.ReportDetails) -> dict:
    """Report with lines, entries, totals and submit state."""
    report = details.report
    lines = []
    for item in details.lines:
        entries = {format_iso(e.entry_date): e.value for e in item.entries}
        lines.append(
            {
                "id": item.line.id,
                "action_id": item.action.id,
                "action_name": item.action.name,
                "daily_target": item.line.daily_target,
                "entries": entries,
                "total": sum(entries.values()),
            }
        )
    state = submit_state(report.status, len(lines), report.week_start_date, local_now())
    return {
        "id": report.id,
        "employee_id": report.employee_id,
        "week_start_date": format_iso(report.week_start_date),
        "week_range": week_range_string(report.week_start_date),
        "week_dates": [
            {"date": format_iso(d), "day": DAY_NAMES_SHORT[i], "label": format_display(d)}
            for i, d in enumerate(week_dates(report.week_start_date))
        ],
        "status": report.status.value,
        "submitted_at": _isoformat(report.submitted_at),
        "approved_at": _isoformat(report.approved_at),
        "manager_comment": report.manager_comment,
        "created_at": _isoformat(report.created_at),
        "lines": lines,
        "weekly_total": sum(line["total"] for line in lines),
        "submit": {"enabled": state.enabled, "messages": state.messages},
    }


def _can_view(report: WeeklyReport, profile: Profile) -> bool:
    if report.employee_id == profile.id:
        return True
    return profile.role == ProfileRole.MANAGER and report.employee.manager_id == profile.id


def _viewable_report(db: Session, report_id: str, profile: Profile) -> WeeklyReport:
    report = persistence.get_report(db, report_id)
    if not _can_view(report, profile):
        raise HTTPException(status_code=403, detail="Not allowed to view this report")
    return report


def _owned_report(db: Session, report_id: str, profile: Profile) -> WeeklyReport:
    report = persistence.get_report(db, report_id)
    if report.employee_id != profile.id:
        raise HTTPException(status_code=403, detail="Only the report owner can edit it")
    return report


def _managed_report(db: Session, report_id: str, manager: Profile) -> WeeklyReport:
    report = persistence.get_report(db, report_id)
    if report.employee.manager_id != manager.id:
        raise HTTPException(status_code=403, detail="Not one of your reports")
    return report


@router.get("/week")
def get_week_report(
    on: Optional[date] = None,
    employee_id: Optional[str] = None,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Get or create the report for the week containing ``on``."""
    employee_id = employee_id or current_profile.id
    employee = persistence.get_profile(db, employee_id)
    if employee is None:
        raise HTTPException(status_code=404, detail="Employee not found")
    if employee.id != current_profile.id and employee.manager_id != current_profile.id:
        raise HTTPException(status_code=403, detail="Not allowed to view this employee's reports")

    report = persistence.get_or_create_weekly_report(db, employee.id, on or local_today())
    return serialize_report(persistence.fetch_report_with_lines_and_entries(db, report.id))


@router.get("/{report_id}")
def get_report(
    report_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Get report by ID."""
    _viewable_report(db, report_id, current_profile)
    return serialize_report(persistence.fetch_report_with_lines_and_entries(db, report_id))


@router.put("/{report_id}/lines/{action_id}")
def upsert_line(
    report_id: str,
    action_id: int,
    payload: LineUpsert,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Add an action to the report or change its daily target."""
    _owned_report(db, report_id, current_profile)
    action = persistence.get_action(db, action_id)
    if action is None:
        raise HTTPException(status_code=404, detail="Action not found")
    target = action.default_daily_target if payload.daily_target is None else payload.daily_target
    line = persistence.upsert_report_line(db, report_id, action_id, target)
    return {"id": line.id, "report_id": line.report_id, "action_id": line.action_id, "daily_target": line.daily_target}


@router.delete("/{report_id}/lines/{line_id}")
def delete_line(
    report_id: str,
    line_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Remove a line and its entries."""
    _owned_report(db, report_id, current_profile)
    line = persistence.get_line(db, line_id)
    if line.report_id != report_id:
        raise HTTPException(status_code=404, detail="Line not found")
    persistence.delete_report_line(db, line_id)
    return {"message": "Line removed"}


@router.put("/{report_id}/lines/{line_id}/entries/{entry_date}")
def upsert_entry(
    report_id: str,
    line_id: str,
    entry_date: date,
    payload: EntryUpsert,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Set or clear a day's value."""
    _owned_report(db, report_id, current_profile)
    line = persistence.get_line(db, line_id)
    if line.report_id != report_id:
        raise HTTPException(status_code=404, detail="Line not found")
    if payload.value is None:
        persistence.delete_entry(db, line_id, entry_date)
        return {"line_id": line_id, "entry_date": format_iso(entry_date), "value": None}
    entry = persistence.upsert_entry(db, line_id, entry_date, payload.value)
    return {"line_id": entry.line_id, "entry_date": format_iso(entry.entry_date), "value": entry.value}


@router.post("/{report_id}/submit")
def submit(
    report_id: str,
    db: Session = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """Submit a draft once the week's submission window has opened."""
    report = _owned_report(db, report_id, current_profile)
    state = submit_state(report.status, len(report.lines), report.week_start_date, local_now())
    if report.is_draft and not state.enabled:
        raise SubmissionNotAllowed(state.messages[0])
    report = persistence.submit_report(db, report_id)
    return {"id": report.id, "status": report.status.value, "submitted_at": _isoformat(report.submitted_at)}


@router.post("/{report_id}/approve")
def approve(
    report_id: str,
    db: Session = Depends(get_db),
    manager: Profile = Depends(require_manager),
):
    """Approve a submitted report."""
    _managed_report(db, report_id, manager)
    report = persistence.approve_report(db, report_id)
    return {"id": report.id, "status": report.status.value, "approved_at": _isoformat(report.approved_at)}


@router.post("/{report_id}/request-changes")
def request_changes(
    report_id: str,
    payload: ChangeRequest,
    db: Session = Depends(get_db),
    manager: Profile = Depends(require_manager),
):
    """Send a submitted report back with a comment."""
    _managed_report(db, report_id, manager)
    report = persistence.request_changes(db, report_id, payload.comment)
    return {"id": report.id, "status": report.status.value, "manager_comment": report.manager_comment}
