"""Working copy of the weekly report currently being edited.

``ReportStore`` holds one ``DraftReport`` per (employee_id, week_start_iso)
key. ``ReportSession`` is the form controller: it derives the active key
from the selected employee and date, applies edits while the report is a
draft, and derives totals and the submit state on every read.

When a ``ReportSession`` is given a database session it writes every change
through the persistence gateway first and only updates the working copy once
the write has succeeded.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Dict, List, NamedTuple, Optional

from sqlalchemy.orm import Session

from weekly_tracker.config import settings
from weekly_tracker.core import persistence
from weekly_tracker.core.exceptions import InvalidValue
from weekly_tracker.core.validation import sanitize_number
from weekly_tracker.core.week_utils import (
    can_submit,
    format_iso,
    local_now,
    parse_iso,
    week_dates,
    week_start,
)
from weekly_tracker.models.action import ActionCatalog
from weekly_tracker.models.report import ReportStatus

logger = logging.getLogger(__name__)

NO_ACTIONS_MESSAGE = "Add at least one action before submitting"


class ReportKey(NamedTuple):
    employee_id: str
    week_start_iso: str


@dataclass
class DraftLine:
    """One action row of the working copy."""

    action_id: int
    action_name: str
    daily_target: Optional[int]
    entries: Dict[str, Optional[int]] = field(default_factory=dict)
    line_id: Optional[str] = None

    @property
    def total(self) -> int:
        return row_total(self)


@dataclass
class DraftReport:
    """Working copy of one employee's report for one week."""

    employee_id: str
    week_start_iso: str
    status: ReportStatus = ReportStatus.DRAFT
    lines: List[DraftLine] = field(default_factory=list)
    report_id: Optional[str] = None

    @property
    def key(self) -> ReportKey:
        return ReportKey(self.employee_id, self.week_start_iso)

    def find_line(self, action_id: int) -> Optional[DraftLine]:
        for line in self.lines:
            if line.action_id == action_id:
                return line
        return None

    @classmethod
    def from_details(cls, details: "persistence.ReportDetails") -> "DraftReport":
        """Build a working copy from persisted rows."""
        report = details.report
        return cls(
            employee_id=report.employee_id,
            week_start_iso=format_iso(report.week_start_date),
            status=report.status,
            report_id=report.id,
            lines=[
                DraftLine(
                    action_id=item.action.id,
                    action_name=item.action.name,
                    daily_target=item.line.daily_target,
                    entries={format_iso(e.entry_date): e.value for e in item.entries},
                    line_id=item.line.id,
                )
                for item in details.lines
            ],
        )


class ReportStore:
    """Reports keyed by (employee_id, week_start_iso)."""

    def __init__(self):
        self._reports: Dict[ReportKey, DraftReport] = {}

    def get(self, key: ReportKey) -> Optional[DraftReport]:
        return self._reports.get(key)

    def put(self, report: DraftReport) -> None:
        self._reports[report.key] = report

    def __contains__(self, key) -> bool:
        return key in self._reports

    def __len__(self) -> int:
        return len(self._reports)


class SubmitState(NamedTuple):
    """Whether the submit button is enabled, and why not."""

    enabled: bool
    messages: List[str]


def row_total(line: DraftLine) -> int:
    """Sum of the line's present entries. Absent cells count as zero."""
    return sum(value for value in line.entries.values() if value is not None)


def weekly_total(report: DraftReport) -> int:
    return sum(row_total(line) for line in report.lines)


def available_actions(report: DraftReport, catalog: List[ActionCatalog]) -> List[ActionCatalog]:
    """Catalog actions not yet on the report."""
    used = {line.action_id for line in report.lines}
    return [action for action in catalog if action.id not in used]


def submit_state(status: ReportStatus, line_count: int, start: date, now: datetime) -> SubmitState:
    """
    Evaluate the submit button.

    The gate reason is listed whenever the gate is closed, and the
    no-actions message is listed whenever there are no lines.
    """
    messages = []
    gate = can_submit(start, now)
    if not gate.allowed:
        messages.append(gate.reason)
    if line_count == 0:
        messages.append(NO_ACTIONS_MESSAGE)
    enabled = status == ReportStatus.DRAFT and line_count > 0 and gate.allowed
    return SubmitState(enabled=enabled, messages=messages)


class TransientMessage:
    """A user-visible message that clears itself after a few seconds."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self._seconds = seconds
        self._clock = clock
        self._text = ""
        self._expires_at = 0.0

    def show(self, text: str) -> None:
        self._text = text
        self._expires_at = self._clock() + self._seconds

    def clear(self) -> None:
        self._text = ""

    @property
    def text(self) -> str:
        if self._text and self._clock() >= self._expires_at:
            self._text = ""
        return self._text


class ReportSession:
    """Form controller over a ``ReportStore``."""

    def __init__(
        self,
        store: ReportStore,
        catalog: List[ActionCatalog],
        employee_id: str,
        selected_date: Optional[date] = None,
        db: Optional[Session] = None,
        now: Callable[[], datetime] = local_now,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.catalog = list(catalog)
        self.employee_id = employee_id
        self.selected_date = selected_date or now().date()
        self.db = db
        self._now = now
        self.message = TransientMessage(settings.validation_message_seconds, clock=monotonic)

    # Selection

    def select_employee(self, employee_id: str) -> None:
        self.employee_id = employee_id

    def select_date(self, selected: date) -> None:
        self.selected_date = selected

    @property
    def week_start(self) -> date:
        return week_start(self.selected_date)

    @property
    def week_dates(self) -> List[date]:
        return week_dates(self.week_start)

    @property
    def key(self) -> ReportKey:
        return ReportKey(self.employee_id, format_iso(self.week_start))

    @property
    def report(self) -> DraftReport:
        """
        Working copy for the active key.

        Falls back to the persisted report when the store has none, and to an
        empty unsaved draft when nothing is persisted either.
        """
        stored = self.store.get(self.key)
        if stored is not None:
            return stored
        if self.db is not None:
            persisted = self._fetch_persisted()
            if persisted is not None:
                return persisted
        return DraftReport(employee_id=self.employee_id, week_start_iso=self.key.week_start_iso)

    @property
    def is_read_only(self) -> bool:
        return self.report.status != ReportStatus.DRAFT

    def _fetch_persisted(self) -> Optional[DraftReport]:
        report = persistence.find_weekly_report(self.db, self.employee_id, self.week_start)
        if report is None:
            return None
        draft = DraftReport.from_details(persistence.fetch_report_with_lines_and_entries(self.db, report.id))
        self.store.put(draft)
        return draft

    def load(self) -> DraftReport:
        """Replace the working copy for the active key with persisted rows."""
        if self.db is None:
            return self.report
        return self._fetch_persisted() or self.report

    # Derived values

    @property
    def weekly_total(self) -> int:
        return weekly_total(self.report)

    @property
    def available_actions(self) -> List[ActionCatalog]:
        return available_actions(self.report, self.catalog)

    @property
    def submit_state(self) -> SubmitState:
        report = self.report
        return submit_state(report.status, len(report.lines), self.week_start, self._now())

    # Edits

    def _editable(self) -> Optional[DraftReport]:
        report = self.report
        if report.status != ReportStatus.DRAFT:
            logger.warning(f"Ignoring edit on {report.status.value} report {report.key}")
            return None
        return report

    def _ensure_persisted(self, report: DraftReport) -> str:
        if report.report_id is None:
            persisted = persistence.get_or_create_weekly_report(self.db, report.employee_id, self.week_start)
            report.report_id = persisted.id
        return report.report_id

    def add_line(self, action_id: int) -> bool:
        """Add a catalog action to the report with its default target."""
        report = self._editable()
        if report is None:
            return False
        action = next((a for a in self.catalog if a.id == action_id), None)
        if action is None:
            raise KeyError(f"Unknown action {action_id}")
        if report.find_line(action_id) is not None:
            self.message.show(f"{action.name} is already added")
            return False

        line = DraftLine(
            action_id=action.id,
            action_name=action.name,
            daily_target=action.default_daily_target,
        )
        if self.db is not None:
            report_id = self._ensure_persisted(report)
            persisted = persistence.upsert_report_line(self.db, report_id, action.id, action.default_daily_target)
            line.line_id = persisted.id

        report.lines.append(line)
        self.store.put(report)
        return True

    def remove_line(self, action_id: int) -> bool:
        report = self._editable()
        if report is None:
            return False
        line = report.find_line(action_id)
        if line is None:
            return False
        if self.db is not None and line.line_id is not None:
            persistence.delete_report_line(self.db, line.line_id)
        report.lines = [existing for existing in report.lines if existing.action_id != action_id]
        self.store.put(report)
        return True

    def change_target(self, action_id: int, raw: str) -> bool:
        report = self._editable()
        if report is None:
            return False
        line = report.find_line(action_id)
        if line is None:
            return False
        target = sanitize_number(raw)
        if self.db is not None and target is not None:
            persistence.upsert_report_line(self.db, self._ensure_persisted(report), action_id, target)
        line.daily_target = target
        self.store.put(report)
        return True

    def change_entry(self, action_id: int, day, raw: str) -> bool:
        """Set a day's cell. ``day`` is a date or a YYYY-MM-DD string."""
        report = self._editable()
        if report is None:
            return False
        line = report.find_line(action_id)
        if line is None:
            return False
        day_iso = day if isinstance(day, str) else format_iso(day)
        if parse_iso(day_iso) not in self.week_dates:
            raise InvalidValue(f"{day_iso} is outside the week of {report.week_start_iso}")
        value = sanitize_number(raw)
        if self.db is not None and line.line_id is not None:
            if value is None:
                persistence.delete_entry(self.db, line.line_id, parse_iso(day_iso))
            else:
                persistence.upsert_entry(self.db, line.line_id, parse_iso(day_iso), value)
        line.entries[day_iso] = value
        self.store.put(report)
        return True

    def submit(self) -> bool:
        """Submit when the report is a draft with lines and the gate is open."""
        report = self.report
        if not self.submit_state.enabled:
            return False
        if self.db is not None:
            persistence.submit_report(self.db, self._ensure_persisted(report))
        report.status = ReportStatus.SUBMITTED
        self.store.put(report)
        logger.info(f"Submitted report {report.key}")
        return True
