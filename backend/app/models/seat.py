"""
Seat and seat assignment models.

Key design decisions:
- Seats are created lazily the first time they are assigned; the
  (event_id, table_number, seat_number) unique constraint makes that upsert safe
- SeatAssignment carries two unique constraints, (event_id, seat_id) and
  (event_id, participant_id), so the database itself rejects a seat with two
  occupants or a participant with two seats even if two assigns interleave
"""

from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint, CheckConstraint

from app.db.base import Base, TimestampMixin


class Seat(Base, TimestampMixin):
    __tablename__ = "seats"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    table_number = Column(Integer, nullable=False)
    seat_number = Column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("event_id", "table_number", "seat_number", name="uq_seat_event_table_seat"),
        CheckConstraint("table_number > 0", name="check_table_number_positive"),
        CheckConstraint("seat_number > 0", name="check_seat_number_positive"),
    )

    def __repr__(self) -> str:
        return f"<Seat(id={self.id}, event={self.event_id}, table={self.table_number}, seat={self.seat_number})>"


class SeatAssignment(Base, TimestampMixin):
    __tablename__ = "seat_assignments"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_id = Column(Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    seat_id = Column(Integer, ForeignKey("seats.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        # One seat per participant, one participant per seat
        UniqueConstraint("event_id", "participant_id", name="uq_assignment_event_participant"),
        UniqueConstraint("event_id", "seat_id", name="uq_assignment_event_seat"),
    )

    def __repr__(self) -> str:
        return f"<SeatAssignment(event={self.event_id}, participant={self.participant_id}, seat={self.seat_id})>"
