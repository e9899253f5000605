"""CLI utilities."""

import logging
from datetime import date

import click
from sqlalchemy.orm import Session

from weekly_tracker.config import settings
from weekly_tracker.core.week_utils import (
    can_submit,
    format_iso,
    local_now,
    week_range_string,
    week_start,
)
from weekly_tracker.database import Base, SessionLocal, engine
from weekly_tracker.seed import seed_from_data, seed_from_yaml


@click.group()
def cli():
    """Weekly production report CLI."""
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
def init_db():
    """Create database tables."""
    Base.metadata.create_all(bind=engine)
    click.echo("Database tables created")


@cli.command()
@click.argument("yaml_file", required=False, type=click.Path(exists=True, dir_okay=False))
def seed(yaml_file: str):
    """Seed the action catalog and profiles (default catalog when no file is given)."""
    db: Session = SessionLocal()
    try:
        result = seed_from_yaml(db, yaml_file) if yaml_file else seed_from_data(db, {})
    finally:
        db.close()
    click.echo(f"Added {result.actions_added} actions and {result.profiles_added} profiles")


@cli.command()
@click.option("--date", "on", default=None, help="Any date in the week (YYYY-MM-DD)")
def week_info(on: str):
    """Show the week range and whether submission is open."""
    now = local_now()
    target = date.fromisoformat(on) if on else now.date()
    start = week_start(target)
    check = can_submit(start, now)
    click.echo(f"Week of {format_iso(start)}: {week_range_string(start)}")
    click.echo("Submission open" if check.allowed else check.reason)


if __name__ == "__main__":
    cli()
