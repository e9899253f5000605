"""Weekly report models - report, lines and daily entries."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from weekly_tracker.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class ReportStatus(str, enum.Enum):
    """Report status enum."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    NEEDS_CHANGES = "needs_changes"


class WeeklyReport(Base):
    """Weekly report model - one per employee per week."""

    __tablename__ = "weekly_reports"

    id = Column(String(36), primary_key=True, default=_uuid, index=True)
    employee_id = Column(String(64), ForeignKey("profiles.id"), nullable=False, index=True)
    week_start_date = Column(Date, nullable=False, index=True)  # Always a Monday
    status = Column(
        Enum(ReportStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ReportStatus.DRAFT,
    )
    submitted_at = Column(DateTime, nullable=True)
    approved_at = Column(DateTime, nullable=True)
    manager_comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    employee = relationship("Profile")
    lines = relationship(
        "ReportLine",
        back_populates="report",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("employee_id", "week_start_date", name="uq_weekly_reports_employee_week"),
    )

    @property
    def is_draft(self) -> bool:
        return self.status == ReportStatus.DRAFT

    def __repr__(self) -> str:
        return f"<WeeklyReport(id={self.id}, employee_id='{self.employee_id}', week_start_date={self.week_start_date})>"


class ReportLine(Base):
    """Report line model - one action included in a report."""

    __tablename__ = "report_lines"

    id = Column(String(36), primary_key=True, default=_uuid, index=True)
    report_id = Column(String(36), ForeignKey("weekly_reports.id", ondelete="CASCADE"), nullable=False, index=True)
    action_id = Column(Integer, ForeignKey("action_catalog.id"), nullable=False)
    daily_target = Column(Integer, nullable=False, default=0)

    report = relationship("WeeklyReport", back_populates="lines")
    action = relationship("ActionCatalog", lazy="joined")
    entries = relationship(
        "ReportEntry",
        back_populates="line",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ReportEntry.entry_date",
    )

    __table_args__ = (
        UniqueConstraint("report_id", "action_id", name="uq_report_lines_report_action"),
        CheckConstraint("daily_target >= 0", name="ck_report_lines_target_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<ReportLine(id={self.id}, report_id={self.report_id}, action_id={self.action_id})>"


class ReportEntry(Base):
    """Report entry model - one line's count for one calendar day."""

    __tablename__ = "report_entries"

    id = Column(String(36), primary_key=True, default=_uuid, index=True)
    line_id = Column(String(36), ForeignKey("report_lines.id", ondelete="CASCADE"), nullable=False, index=True)
    entry_date = Column(Date, nullable=False)
    value = Column(Integer, nullable=False, default=0)

    line = relationship("ReportLine", back_populates="entries")

    __table_args__ = (
        UniqueConstraint("line_id", "entry_date", name="uq_report_entries_line_date"),
        CheckConstraint("value >= 0", name="ck_report_entries_value_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<ReportEntry(line_id={self.line_id}, entry_date={self.entry_date}, value={self.value})>"
