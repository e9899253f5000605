"""Initial migration

Revision ID: 001
Revises: 
Create Date: 2025-01-06 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

report_status = sa.Enum('draft', 'submitted', 'approved', 'needs_changes', name='reportstatus')
profile_role = sa.Enum('employee', 'manager', name='profilerole')


def upgrade() -> None:
    # Profiles
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('role', profile_role, nullable=False),
        sa.Column('manager_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['manager_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_profiles_id'), 'profiles', ['id'], unique=False)
    op.create_index(op.f('ix_profiles_manager_id'), 'profiles', ['manager_id'], unique=False)

    # Action catalog
    op.create_table(
        'action_catalog',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('default_daily_target', sa.Integer(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_action_catalog_id'), 'action_catalog', ['id'], unique=False)
    op.create_index(op.f('ix_action_catalog_sort_order'), 'action_catalog', ['sort_order'], unique=False)

    # Weekly reports
    op.create_table(
        'weekly_reports',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('employee_id', sa.String(length=64), nullable=False),
        sa.Column('week_start_date', sa.Date(), nullable=False),
        sa.Column('status', report_status, nullable=False),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('manager_comment', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['employee_id'], ['profiles.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'week_start_date', name='uq_weekly_reports_employee_week')
    )
    op.create_index(op.f('ix_weekly_reports_id'), 'weekly_reports', ['id'], unique=False)
    op.create_index(op.f('ix_weekly_reports_employee_id'), 'weekly_reports', ['employee_id'], unique=False)
    op.create_index(op.f('ix_weekly_reports_week_start_date'), 'weekly_reports', ['week_start_date'], unique=False)

    # Report lines
    op.create_table(
        'report_lines',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('report_id', sa.String(length=36), nullable=False),
        sa.Column('action_id', sa.Integer(), nullable=False),
        sa.Column('daily_target', sa.Integer(), nullable=False),
        sa.CheckConstraint('daily_target >= 0', name='ck_report_lines_target_non_negative'),
        sa.ForeignKeyConstraint(['report_id'], ['weekly_reports.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['action_id'], ['action_catalog.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('report_id', 'action_id', name='uq_report_lines_report_action')
    )
    op.create_index(op.f('ix_report_lines_id'), 'report_lines', ['id'], unique=False)
    op.create_index(op.f('ix_report_lines_report_id'), 'report_lines', ['report_id'], unique=False)

    # Report entries
    op.create_table(
        'report_entries',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('line_id', sa.String(length=36), nullable=False),
        sa.Column('entry_date', sa.Date(), nullable=False),
        sa.Column('value', sa.Integer(), nullable=False),
        sa.CheckConstraint('value >= 0', name='ck_report_entries_value_non_negative'),
        sa.ForeignKeyConstraint(['line_id'], ['report_lines.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('line_id', 'entry_date', name='uq_report_entries_line_date')
    )
    op.create_index(op.f('ix_report_entries_id'), 'report_entries', ['id'], unique=False)
    op.create_index(op.f('ix_report_entries_line_id'), 'report_entries', ['line_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_report_entries_line_id'), table_name='report_entries')
    op.drop_index(op.f('ix_report_entries_id'), table_name='report_entries')
    op.drop_table('report_entries')
    op.drop_index(op.f('ix_report_lines_report_id'), table_name='report_lines')
    op.drop_index(op.f('ix_report_lines_id'), table_name='report_lines')
    op.drop_table('report_lines')
    op.drop_index(op.f('ix_weekly_reports_week_start_date'), table_name='weekly_reports')
    op.drop_index(op.f('ix_weekly_reports_employee_id'), table_name='weekly_reports')
    op.drop_index(op.f('ix_weekly_reports_id'), table_name='weekly_reports')
    op.drop_table('weekly_reports')
    op.drop_index(op.f('ix_action_catalog_sort_order'), table_name='action_catalog')
    op.drop_index(op.f('ix_action_catalog_id'), table_name='action_catalog')
    op.drop_table('action_catalog')
    op.drop_index(op.f('ix_profiles_manager_id'), table_name='profiles')
    op.drop_index(op.f('ix_profiles_id'), table_name='profiles')
    op.drop_table('profiles')
    report_status.drop(op.get_bind(), checkfirst=True)
    profile_role.drop(op.get_bind(), checkfirst=True)
