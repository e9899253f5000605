"""Action catalog model."""

from sqlalchemy import Column, Integer, String

from weekly_tracker.database import Base


class ActionCatalog(Base):
    """Action catalog model - shared reference list of trackable work."""

    __tablename__ = "action_catalog"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    default_daily_target = Column(Integer, nullable=False, default=0)
    sort_order = Column(Integer, nullable=False, default=0, index=True)

    def __repr__(self) -> str:
        return f"<ActionCatalog(id={self.id}, name='{self.name}')>"
