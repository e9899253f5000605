"""Shared fixtures: in-memory SQLite database and seeded reference data."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from weekly_tracker import models  # noqa: F401
from weekly_tracker.database import Base, enable_sqlite_foreign_keys
from weekly_tracker.models.action import ActionCatalog
from weekly_tracker.models.profile import Profile, ProfileRole


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(db):
    """Three catalog actions and a small org chart."""
    db.add_all(
        [
            ActionCatalog(id=1, name="New Hires", default_daily_target=4, sort_order=2),
            ActionCatalog(id=2, name="Interviews", default_daily_target=9, sort_order=3),
            ActionCatalog(id=3, name="Site Visits", default_daily_target=4, sort_order=1),
        ]
    )
    db.add_all(
        [
            Profile(id="mgr_alex", full_name="Alex Morgan", role=ProfileRole.MANAGER),
            Profile(id="mgr_sam", full_name="Sam Reed", role=ProfileRole.MANAGER),
        ]
    )
    db.flush()
    db.add_all(
        [
            Profile(id="emp_peyton", full_name="Peyton Cizek", role=ProfileRole.EMPLOYEE, manager_id="mgr_alex"),
            Profile(id="emp_john", full_name="John Doe", role=ProfileRole.EMPLOYEE, manager_id="mgr_alex"),
            Profile(id="emp_maria", full_name="Maria Lopez", role=ProfileRole.EMPLOYEE, manager_id="mgr_sam"),
        ]
    )
    db.commit()
    return db
