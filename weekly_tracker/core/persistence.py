"""Persistence gateway for weekly reports.

Each function is a single request/response against the database: no caching
and no retries. Failures from SQLAlchemy propagate to the caller unchanged,
except for the "no row" case of get-or-create, which falls back to insert.
"""

import logging
from datetime import date, datetime
from typing import Dict, List, NamedTuple, Optional

from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlalchemy.orm import Session

from weekly_tracker.core.exceptions import (
    InvalidStatusTransition,
    InvalidValue,
    LineNotFound,
    ReportNotEditable,
    ReportNotFound,
)
from weekly_tracker.core.validation import MAX_VALUE
from weekly_tracker.core.week_utils import format_iso, week_dates, week_start
from weekly_tracker.models.action import ActionCatalog
from weekly_tracker.models.profile import Profile
from weekly_tracker.models.report import ReportEntry, ReportLine, ReportStatus, WeeklyReport

logger = logging.getLogger(__name__)


class LineWithEntries(NamedTuple):
    """A report line joined to its action and its entries."""

    line: ReportLine
    action: ActionCatalog
    entries: List[ReportEntry]


class ReportDetails(NamedTuple):
    """A report with its lines and entries assembled."""

    report: WeeklyReport
    lines: List[LineWithEntries]


def _require_count(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= MAX_VALUE:
        raise InvalidValue(f"{name} must be an integer from 0 to {MAX_VALUE}")


def _require_draft(report: WeeklyReport) -> None:
    if report.status != ReportStatus.DRAFT:
        raise ReportNotEditable(f"Report {report.id} is {report.status.value}; only drafts can be edited")


def fetch_action_catalog(db: Session) -> List[ActionCatalog]:
    """Fetch the full action catalog ordered by sort order."""
    return db.query(ActionCatalog).order_by(ActionCatalog.sort_order, ActionCatalog.id).all()


def get_action(db: Session, action_id: int) -> Optional[ActionCatalog]:
    return db.query(ActionCatalog).filter(ActionCatalog.id == action_id).first()


def fetch_profiles(db: Session) -> List[Profile]:
    return db.query(Profile).order_by(Profile.full_name).all()


def get_profile(db: Session, profile_id: str) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.id == profile_id).first()


def get_report(db: Session, report_id: str) -> WeeklyReport:
    """Fetch a report by id or raise ReportNotFound."""
    report = db.query(WeeklyReport).filter(WeeklyReport.id == report_id).first()
    if report is None:
        raise ReportNotFound(f"Report {report_id} not found")
    return report


def find_weekly_report(db: Session, employee_id: str, week_start_date: date) -> Optional[WeeklyReport]:
    return (
        db.query(WeeklyReport)
        .filter(
            WeeklyReport.employee_id == employee_id,
            WeeklyReport.week_start_date == week_start(week_start_date),
        )
        .first()
    )


def get_or_create_weekly_report(db: Session, employee_id: str, week_start_date: date) -> WeeklyReport:
    """
    Get the report for (employee, week), creating a draft when none exists.

    The date is normalized to the Monday of its week. A unique-constraint
    collision on insert means another caller created the row first; that row
    is re-read and returned.
    """
    monday = week_start(week_start_date)
    try:
        return (
            db.query(WeeklyReport)
            .filter(WeeklyReport.employee_id == employee_id, WeeklyReport.week_start_date == monday)
            .one()
        )
    except NoResultFound:
        pass

    report = WeeklyReport(employee_id=employee_id, week_start_date=monday, status=ReportStatus.DRAFT)
    db.add(report)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = find_weekly_report(db, employee_id, monday)
        if existing is None:
            raise
        logger.info(f"Report for {employee_id} week {format_iso(monday)} created concurrently, reusing it")
        return existing

    db.refresh(report)
    logger.info(f"Created draft report {report.id} for {employee_id} week {format_iso(monday)}")
    return report


def fetch_report_with_lines_and_entries(db: Session, report_id: str) -> ReportDetails:
    """Fetch a report with its lines (joined to actions) and all their entries."""
    report = get_report(db, report_id)

    lines = (
        db.query(ReportLine)
        .join(ActionCatalog, ReportLine.action_id == ActionCatalog.id)
        .filter(ReportLine.report_id == report_id)
        .order_by(ActionCatalog.sort_order, ActionCatalog.id)
        .all()
    )

    entries_by_line: Dict[str, List[ReportEntry]] = {line.id: [] for line in lines}
    if lines:
        entries = (
            db.query(ReportEntry)
            .filter(ReportEntry.line_id.in_(list(entries_by_line)))
            .order_by(ReportEntry.entry_date)
            .all()
        )
        for entry in entries:
            entries_by_line[entry.line_id].append(entry)

    return ReportDetails(
        report=report,
        lines=[LineWithEntries(line, line.action, entries_by_line[line.id]) for line in lines],
    )


def upsert_report_line(db: Session, report_id: str, action_id: int, daily_target: int) -> ReportLine:
    """Insert or overwrite the line for (report, action)."""
    _require_count("daily_target", daily_target)
    report = get_report(db, report_id)
    _require_draft(report)

    line = (
        db.query(ReportLine)
        .filter(ReportLine.report_id == report_id, ReportLine.action_id == action_id)
        .first()
    )
    if line is None:
        line = ReportLine(report_id=report_id, action_id=action_id, daily_target=daily_target)
        db.add(line)
    else:
        line.daily_target = daily_target

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        line = (
            db.query(ReportLine)
            .filter(ReportLine.report_id == report_id, ReportLine.action_id == action_id)
            .first()
        )
        if line is None:
            raise
        line.daily_target = daily_target
        db.commit()

    db.refresh(line)
    logger.info(f"Upserted line {line.id} (action {action_id}, target {daily_target}) on report {report_id}")
    return line


def get_line(db: Session, line_id: str) -> ReportLine:
    line = db.query(ReportLine).filter(ReportLine.id == line_id).first()
    if line is None:
        raise LineNotFound(f"Line {line_id} not found")
    return line


def upsert_entry(db: Session, line_id: str, entry_date: date, value: int) -> ReportEntry:
    """Insert or overwrite the entry for (line, date)."""
    _require_count("value", value)
    line = get_line(db, line_id)
    _require_draft(line.report)
    if entry_date not in week_dates(line.report.week_start_date):
        raise InvalidValue(f"{format_iso(entry_date)} is outside the report week")

    entry = (
        db.query(ReportEntry)
        .filter(ReportEntry.line_id == line_id, ReportEntry.entry_date == entry_date)
        .first()
    )
    if entry is None:
        entry = ReportEntry(line_id=line_id, entry_date=entry_date, value=value)
        db.add(entry)
    else:
        entry.value = value

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        entry = (
            db.query(ReportEntry)
            .filter(ReportEntry.line_id == line_id, ReportEntry.entry_date == entry_date)
            .first()
        )
        if entry is None:
            raise
        entry.value = value
        db.commit()

    db.refresh(entry)
    return entry


def delete_entry(db: Session, line_id: str, entry_date: date) -> bool:
    """Clear a day's cell. Returns whether an entry existed."""
    line = get_line(db, line_id)
    _require_draft(line.report)
    deleted = (
        db.query(ReportEntry)
        .filter(ReportEntry.line_id == line_id, ReportEntry.entry_date == entry_date)
        .delete(synchronize_session="fetch")
    )
    db.commit()
    return bool(deleted)


def delete_report_line(db: Session, line_id: str) -> None:
    """Delete a line; its entries go with it through the FK cascade."""
    line = get_line(db, line_id)
    _require_draft(line.report)
    report_id = line.report_id
    db.delete(line)
    db.commit()
    logger.info(f"Removed line {line_id} from report {report_id}")


def _transition(
    db: Session,
    report_id: str,
    allowed_from: ReportStatus,
    to: ReportStatus,
    **fields,
) -> WeeklyReport:
    report = get_report(db, report_id)
    if report.status != allowed_from:
        raise InvalidStatusTransition(
            f"Cannot move report {report_id} from {report.status.value} to {to.value}"
        )
    report.status = to
    for key, value in fields.items():
        setattr(report, key, value)
    db.commit()
    db.refresh(report)
    logger.info(f"Report {report_id} is now {to.value}")
    return report


def submit_report(db: Session, report_id: str, now: Optional[datetime] = None) -> WeeklyReport:
    """Move a draft to submitted and stamp submitted_at."""
    return _transition(
        db,
        report_id,
        ReportStatus.DRAFT,
        ReportStatus.SUBMITTED,
        submitted_at=now or datetime.utcnow(),
    )


def approve_report(db: Session, report_id: str, now: Optional[datetime] = None) -> WeeklyReport:
    """Approve a submitted report and stamp approved_at."""
    return _transition(
        db,
        report_id,
        ReportStatus.SUBMITTED,
        ReportStatus.APPROVED,
        approved_at=now or datetime.utcnow(),
    )


def request_changes(db: Session, report_id: str, comment: str) -> WeeklyReport:
    """Send a submitted report back with a manager comment."""
    return _transition(
        db,
        report_id,
        ReportStatus.SUBMITTED,
        ReportStatus.NEEDS_CHANGES,
        manager_comment=comment,
    )


def fetch_manager_reports(db: Session, manager_id: str) -> List[WeeklyReport]:
    """
    Fetch every report belonging to the manager's direct reports.

    Most recently submitted first with unsubmitted reports last, then newest
    created first.
    """
    return (
        db.query(WeeklyReport)
        .join(Profile, WeeklyReport.employee_id == Profile.id)
        .filter(Profile.manager_id == manager_id)
        .order_by(
            WeeklyReport.submitted_at.is_(None),
            WeeklyReport.submitted_at.desc(),
            WeeklyReport.created_at.desc(),
        )
        .all()
    )
