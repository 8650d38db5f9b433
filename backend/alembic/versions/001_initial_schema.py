"""Initial schema: events, participants, seats, seat assignments, attendance logs.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Events table
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_events_id", "events", ["id"])
    op.create_index("ix_events_is_active", "events", ["is_active"])

    # Participants table
    op.create_table(
        "participants",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("participant_code", sa.String(100), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False, server_default=sa.text("'{}'")),
        *_timestamps(),
        # Codes are unique per event, not globally
        sa.UniqueConstraint("event_id", "participant_code", name="uq_participant_event_code"),
    )
    op.create_index("ix_participants_id", "participants", ["id"])
    op.create_index("ix_participants_event_id", "participants", ["event_id"])
    # Scans without an event ID look a code up across all events
    op.create_index("ix_participants_code", "participants", ["participant_code"])

    # Seats table
    op.create_table(
        "seats",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("table_number", sa.Integer(), nullable=False),
        sa.Column("seat_number", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("event_id", "table_number", "seat_number", name="uq_seat_event_table_seat"),
        sa.CheckConstraint("table_number > 0", name="check_table_number_positive"),
        sa.CheckConstraint("seat_number > 0", name="check_seat_number_positive"),
    )
    op.create_index("ix_seats_id", "seats", ["id"])
    op.create_index("ix_seats_event_id", "seats", ["event_id"])

    # Seat assignments table
    op.create_table(
        "seat_assignments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "participant_id", sa.Integer(),
            sa.ForeignKey("participants.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("seat_id", sa.Integer(), sa.ForeignKey("seats.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
        # BIJECTION: these two constraints are what make concurrent assigns safe.
        # A racing insert that would give a seat two occupants, or a participant
        # two seats, fails here and the service retries.
        sa.UniqueConstraint("event_id", "participant_id", name="uq_assignment_event_participant"),
        sa.UniqueConstraint("event_id", "seat_id", name="uq_assignment_event_seat"),
    )
    op.create_index("ix_seat_assignments_id", "seat_assignments", ["id"])
    op.create_index("ix_seat_assignments_event_id", "seat_assignments", ["event_id"])

    # Attendance logs: append-only, intentionally no unique constraint
    op.create_table(
        "attendance_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "participant_id", sa.Integer(),
            sa.ForeignKey("participants.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_attendance_logs_id", "attendance_logs", ["id"])
    op.create_index("ix_attendance_event_participant", "attendance_logs", ["event_id", "participant_id"])
    op.create_index("ix_attendance_created_at", "attendance_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("attendance_logs")
    op.drop_table("seat_assignments")
    op.drop_table("seats")
    op.drop_table("participants")
    op.drop_table("events")
