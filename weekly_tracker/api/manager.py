"""Manager review endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from weekly_tracker.api.auth import require_manager
from weekly_tracker.core.persistence import fetch_manager_reports
from weekly_tracker.core.week_utils import format_iso, week_range_string
from weekly_tracker.database import get_db

router = APIRouter()


@router.get("/reports")
def list_manager_reports(
    db: Session = Depends(get_db),
    manager = Depends(require_manager),
):
    """List reports of the caller's direct reports, latest submissions first."""
    reports = fetch_manager_reports(db, manager.id)
    return [
        {
            "id": r.id,
            "employee_id": r.employee_id,
            "employee_name": r.employee.full_name,
            "week_start_date": format_iso(r.week_start_date),
            "week_range": week_range_string(r.week_start_date),
            "status": r.status.value,
            "submitted_at": r.submitted_at.isoformat() if r.submitted_at else None,
            "approved_at": r.approved_at.isoformat() if r.approved_at else None,
            "manager_comment": r.manager_comment,
            "created_at": r.created_at.isoformat() if r.created_at else None,
        }
        for r in reports
    ]
