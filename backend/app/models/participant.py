"""
Participant model.

Key design decisions:
- Unique constraint on (event_id, participant_code): codes are unique within
  an event but the same code may appear in several events
- Index on participant_code alone for scans that omit the event ID
- Optional attributes such as gender live in the free-form `metadata` JSON
  column (mapped as `meta`, since `metadata` is reserved on declarative models)
"""

from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint, Index, JSON

from app.db.base import Base, TimestampMixin


class Participant(Base, TimestampMixin):
    __tablename__ = "participants"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_code = Column(String(100), nullable=False)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    meta = Column("metadata", JSON, nullable=False, default=dict)

    __table_args__ = (
        UniqueConstraint("event_id", "participant_code", name="uq_participant_event_code"),
        Index("ix_participants_code", "participant_code"),
    )

    @property
    def gender(self):
        return (self.meta or {}).get("gender")

    def __repr__(self) -> str:
        return f"<Participant(id={self.id}, event={self.event_id}, code={self.participant_code})>"
