"""Profile model."""

from datetime import datetime

from sqlalchemy import Column, String, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
import enum

from weekly_tracker.database import Base


class ProfileRole(str, enum.Enum):
    """Profile role enum."""

    EMPLOYEE = "employee"
    MANAGER = "manager"


class Profile(Base):
    """Profile model - identity record provisioned outside this service."""

    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    role = Column(
        Enum(ProfileRole, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ProfileRole.EMPLOYEE,
    )
    manager_id = Column(String(64), ForeignKey("profiles.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    manager = relationship("Profile", remote_side=[id], backref="direct_reports")

    def __repr__(self) -> str:
        return f"<Profile(id='{self.id}', full_name='{self.full_name}', role='{self.role}')>"
