"""Tests for the report session state."""

from datetime import date, datetime

import pytest

from weekly_tracker.core import persistence
from weekly_tracker.core.exceptions import InvalidValue
from weekly_tracker.core.session_state import (
    NO_ACTIONS_MESSAGE,
    DraftLine,
    ReportKey,
    ReportSession,
    ReportStore,
    TransientMessage,
    row_total,
    submit_state,
)
from weekly_tracker.models.action import ActionCatalog
from weekly_tracker.models.report import ReportEntry, ReportStatus

CATALOG = [
    ActionCatalog(id=1, name="New Hires", default_daily_target=4, sort_order=1),
    ActionCatalog(id=2, name="Interviews", default_daily_target=9, sort_order=2),
]


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def make_session(clock, store=None, **kwargs):
    return ReportSession(
        store if store is not None else ReportStore(),
        CATALOG,
        "emp_peyton",
        selected_date=date(2025, 1, 8),
        now=clock,
        **kwargs,
    )


def test_key_derived_from_employee_and_week():
    """Test the key uses the Monday of the selected date."""
    session = make_session(FakeClock(datetime(2025, 1, 8, 9, 0)))
    assert session.key == ReportKey("emp_peyton", "2025-01-06")
    session.select_date(date(2025, 1, 12))
    assert session.key == ReportKey("emp_peyton", "2025-01-06")
    session.select_employee("emp_john")
    assert session.key == ReportKey("emp_john", "2025-01-06")


def test_unsaved_draft_is_not_stored_until_first_edit():
    """Test an empty draft is synthesized without touching the store."""
    store = ReportStore()
    session = make_session(FakeClock(datetime(2025, 1, 8, 9, 0)), store=store)
    report = session.report
    assert report.status == ReportStatus.DRAFT
    assert report.lines == []
    assert len(store) == 0

    assert session.add_line(1) is True
    assert session.key in store


def test_switching_weeks_keeps_each_working_copy():
    """Test each (employee, week) key has its own report."""
    session = make_session(FakeClock(datetime(2025, 1, 8, 9, 0)))
    session.add_line(1)
    session.select_date(date(2025, 1, 15))
    assert session.report.lines == []
    session.select_date(date(2025, 1, 7))
    assert [line.action_id for line in session.report.lines] == [1]


def test_add_line_uses_default_target():
    """Test a new line starts at the action's default target."""
    session = make_session(FakeClock(datetime(2025, 1, 8, 9, 0)))
    session.add_line(1)
    line = session.report.lines[0]
    assert line.action_name == "New Hires"
    assert line.daily_target == 4
    assert line.entries == {}
    assert [a.id for a in session.available_actions] == [2]


def test_duplicate_add_is_rejected_with_message():
    """Test adding the same action twice leaves one line and shows a message."""
    ticks = FakeClock(100.0)
    session = make_session(FakeClock(datetime(2025, 1, 8, 9, 0)), monotonic=ticks)
    assert session.add_line(1) is True
    assert session.add_line(1) is False
    assert len(session.report.lines) == 1
    assert session.message.text == "New Hires is already added"

    ticks.now = 104.0
    assert session.message.text == ""


def test_row_total_ignores_insertion_order_and_absent_cells():
    """Test row totals sum present values only."""
    first = DraftLine(1, "New Hires", 4, {"2025-01-06": 3, "2025-01-08": 2})
    second = DraftLine(1, "New Hires", 4, {"2025-01-08": 2, "2025-01-06": 3, "2025-01-07": None})
    assert row_total(first) == 5
    assert row_total(second) == 5


def test_invalid_input_clears_cells():
    """Test invalid keystrokes clear the cell instead of zeroing it."""
    session = make_session(FakeClock(datetime(2025, 1, 8, 9, 0)))
    session.add_line(1)
    session.change_entry(1, "2025-01-07", "4")
    session.change_entry(1, "2025-01-07", "-5")
    session.change_target(1, "3.5")
    line = session.report.lines[0]
    assert line.entries["2025-01-07"] is None
    assert line.daily_target is None
    assert line.total == 0


def test_entry_outside_week_rejected():
    """Test cells can only be set for dates of the active week."""
    session = make_session(FakeClock(datetime(2025, 1, 8, 9, 0)))
    session.add_line(1)
    with pytest.raises(InvalidValue):
        session.change_entry(1, date(2025, 1, 13), "1")


def test_submit_state_messages():
    """Test gate reason and no-actions message precedence."""
    closed = submit_state(ReportStatus.DRAFT, 0, date(2025, 1, 6), datetime(2025, 1, 8, 9, 0))
    assert closed.enabled is False
    assert closed.messages == ["Submission opens Sunday, Jan 12, 6:00 PM", NO_ACTIONS_MESSAGE]

    empty = submit_state(ReportStatus.DRAFT, 0, date(2025, 1, 6), datetime(2025, 1, 12, 18, 0))
    assert empty == (False, [NO_ACTIONS_MESSAGE])

    ready = submit_state(ReportStatus.DRAFT, 2, date(2025, 1, 6), datetime(2025, 1, 12, 18, 0))
    assert ready == (True, [])

    done = submit_state(ReportStatus.SUBMITTED, 2, date(2025, 1, 6), datetime(2025, 1, 12, 18, 0))
    assert done.enabled is False


def test_weekly_flow_for_one_employee():
    """Test add, fill in, wait for the gate, submit, then read-only."""
    clock = FakeClock(datetime(2025, 1, 12, 17, 0))
    session = make_session(clock)
    session.add_line(1)
    session.change_entry(1, "2025-01-07", "2")
    session.change_entry(1, date(2025, 1, 9), "3")

    line = session.report.lines[0]
    assert line.total == 5
    assert session.weekly_total == 5

    state = session.submit_state
    assert state.enabled is False
    assert state.messages == ["Submission opens Sunday, Jan 12, 6:00 PM"]
    assert session.submit() is False
    assert session.report.status == ReportStatus.DRAFT

    clock.now = datetime(2025, 1, 12, 18, 0)
    assert session.submit() is True
    assert session.report.status == ReportStatus.SUBMITTED
    assert session.is_read_only

    assert session.change_entry(1, "2025-01-07", "9") is False
    assert session.change_target(1, "1") is False
    assert session.add_line(2) is False
    assert session.remove_line(1) is False
    assert session.report.lines[0].entries == {"2025-01-07": 2, "2025-01-09": 3}
    assert session.report.lines[0].daily_target == 4
    assert session.submit() is False


def test_submit_requires_lines():
    """Test an empty report cannot be submitted even after the gate opens."""
    session = make_session(FakeClock(datetime(2025, 1, 20, 9, 0)))
    assert session.submit() is False


def test_transient_message_expires():
    """Test messages clear themselves."""
    ticks = FakeClock(0.0)
    message = TransientMessage(3, clock=ticks)
    message.show("Interviews is already added")
    ticks.now = 2.9
    assert message.text == "Interviews is already added"
    ticks.now = 3.0
    assert message.text == ""


def test_write_through_persists_edits(seeded):
    """Test edits are written through the gateway before updating the copy."""
    catalog = persistence.fetch_action_catalog(seeded)
    clock = FakeClock(datetime(2025, 1, 13, 9, 0))
    session = ReportSession(ReportStore(), catalog, "emp_peyton", date(2025, 1, 8), db=seeded, now=clock)

    session.add_line(1)
    session.change_entry(1, "2025-01-07", "2")
    session.change_entry(1, "2025-01-09", "3")
    session.change_target(1, "6")

    report = persistence.find_weekly_report(seeded, "emp_peyton", date(2025, 1, 6))
    details = persistence.fetch_report_with_lines_and_entries(seeded, report.id)
    assert details.lines[0].line.daily_target == 6
    assert {e.entry_date: e.value for e in details.lines[0].entries} == {
        date(2025, 1, 7): 2,
        date(2025, 1, 9): 3,
    }

    session.change_entry(1, "2025-01-09", "")
    assert seeded.query(ReportEntry).count() == 1

    assert session.submit() is True
    seeded.refresh(report)
    assert report.status == ReportStatus.SUBMITTED


def test_load_rebuilds_working_copy(seeded):
    """Test persisted rows replace the in-memory copy."""
    report = persistence.get_or_create_weekly_report(seeded, "emp_peyton", date(2025, 1, 6))
    line = persistence.upsert_report_line(seeded, report.id, 2, 7)
    persistence.upsert_entry(seeded, line.id, date(2025, 1, 6), 3)

    catalog = persistence.fetch_action_catalog(seeded)
    session = ReportSession(
        ReportStore(), catalog, "emp_peyton", date(2025, 1, 10), db=seeded,
        now=FakeClock(datetime(2025, 1, 10, 9, 0)),
    )
    draft = session.load()
    assert draft.report_id == report.id
    assert draft.lines[0].action_name == "Interviews"
    assert draft.lines[0].daily_target == 7
    assert draft.lines[0].entries == {"2025-01-06": 3}
    assert session.weekly_total == 3

    session.remove_line(2)
    assert persistence.fetch_report_with_lines_and_entries(seeded, report.id).lines == []


def test_persisted_report_is_read_without_load(seeded):
    """Test a fresh session shows the stored report instead of an empty draft."""
    report = persistence.get_or_create_weekly_report(seeded, "emp_peyton", date(2025, 1, 6))
    line = persistence.upsert_report_line(seeded, report.id, 1, 5)
    persistence.upsert_entry(seeded, line.id, date(2025, 1, 7), 2)

    catalog = persistence.fetch_action_catalog(seeded)
    session = ReportSession(
        ReportStore(), catalog, "emp_peyton", date(2025, 1, 8), db=seeded,
        now=FakeClock(datetime(2025, 1, 13, 9, 0)),
    )
    assert session.report.report_id == report.id
    assert session.weekly_total == 2
    assert session.key in session.store

    session.change_entry(1, "2025-01-08", "4")
    assert seeded.query(ReportEntry).count() == 2
    assert session.add_line(1) is False


def test_submitted_report_edits_are_ignored(seeded):
    """Test edits on a stored submitted report are no-ops in a new session."""
    report = persistence.get_or_create_weekly_report(seeded, "emp_peyton", date(2025, 1, 6))
    line = persistence.upsert_report_line(seeded, report.id, 1, 4)
    persistence.upsert_entry(seeded, line.id, date(2025, 1, 6), 1)
    persistence.submit_report(seeded, report.id)

    catalog = persistence.fetch_action_catalog(seeded)
    session = ReportSession(
        ReportStore(), catalog, "emp_peyton", date(2025, 1, 8), db=seeded,
        now=FakeClock(datetime(2025, 1, 13, 9, 0)),
    )
    assert session.report.status == ReportStatus.SUBMITTED
    assert len(session.report.lines) == 1
    assert session.is_read_only

    assert session.add_line(2) is False
    assert session.change_target(1, "9") is False
    assert session.change_entry(1, "2025-01-06", "5") is False
    assert session.remove_line(1) is False
    assert session.submit_state.enabled is False
    assert session.submit() is False

    details = persistence.fetch_report_with_lines_and_entries(seeded, report.id)
    assert len(details.lines) == 1
    assert details.lines[0].line.daily_target == 4
    assert details.lines[0].entries[0].value == 1


def test_load_without_database_returns_working_copy():
    """Test loading with no database falls back to the in-memory copy."""
    session = make_session(FakeClock(datetime(2025, 1, 8, 9, 0)))
    draft = session.load()
    assert draft.lines == []
    assert draft.report_id is None

    session.add_line(1)
    assert session.load().find_line(1) is not None
