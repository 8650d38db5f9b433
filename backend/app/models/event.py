"""
Event model.

Key design decisions:
- `is_active` gates scanning: an inactive event rejects new scans but keeps
  its participants, seats and attendance history
- Participant codes are namespaced per event (see Participant)
"""

from sqlalchemy import Column, Integer, String, Boolean, Index

from app.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("ix_events_is_active", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, name={self.name}, active={self.is_active})>"
