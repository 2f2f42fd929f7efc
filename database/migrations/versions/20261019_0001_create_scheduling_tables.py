"""create time slots, course assignments, schedules and schedule entries

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

week_day = sa.Enum("monday", "tuesday", "wednesday", "thursday", "friday", name="week_day")
session_type = sa.Enum("theory", "lab", "combined", name="session_type")


def upgrade() -> None:
    op.create_table(
        "time_slots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column("label", sa.String(length=50), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False),
    )
    op.create_index("ix_time_slots_label", "time_slots", ["label"], unique=True)

    op.create_table(
        "course_assignments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("course_name", sa.String(length=200), nullable=False),
        sa.Column("lecturer_id", sa.String(length=36), nullable=True),
        sa.Column("lecturer_name", sa.String(length=200), nullable=True),
        sa.Column("group_id", sa.String(length=36), nullable=False),
        sa.Column("group_name", sa.String(length=100), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=True),
        sa.Column("term", sa.String(length=50), nullable=True),
        sa.Column("availability", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_course_assignments_course_id", "course_assignments", ["course_id"])
    op.create_index("ix_course_assignments_lecturer_id", "course_assignments", ["lecturer_id"])
    op.create_index("ix_course_assignments_group_id", "course_assignments", ["group_id"])

    op.create_table(
        "schedules",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("group_id", sa.String(length=36), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=True),
        sa.Column("term", sa.String(length=50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_schedules_group_id", "schedules", ["group_id"], unique=True)

    op.create_table(
        "schedule_entries",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "schedule_id",
            sa.String(length=36),
            sa.ForeignKey("schedules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "course_assignment_id",
            sa.String(length=36),
            sa.ForeignKey("course_assignments.id"),
            nullable=False,
        ),
        sa.Column("day_of_week", week_day, nullable=False),
        sa.Column("time_slot_id", sa.Integer(), sa.ForeignKey("time_slots.id"), nullable=False),
        sa.Column("room", sa.String(length=100), nullable=False),
        sa.Column("session_type", session_type, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "schedule_id",
            "day_of_week",
            "time_slot_id",
            name="uq_schedule_entries_schedule_day_slot",
        ),
    )
    op.create_index("ix_schedule_entries_schedule_id", "schedule_entries", ["schedule_id"])
    op.create_index(
        "ix_schedule_entries_course_assignment_id",
        "schedule_entries",
        ["course_assignment_id"],
    )


def downgrade() -> None:
    op.drop_table("schedule_entries")
    op.drop_table("schedules")
    op.drop_table("course_assignments")
    op.drop_table("time_slots")
    bind = op.get_bind()
    session_type.drop(bind, checkfirst=True)
    week_day.drop(bind, checkfirst=True)
