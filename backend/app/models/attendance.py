"""
Attendance log model.

Append-only: one row per successful scan. There is deliberately no unique
constraint, re-scanning a participant always adds a row, which gives both
"last seen" and total visit counts.
"""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, Index, func

from app.db.base import Base


class AttendanceLog(Base):
    __tablename__ = "attendance_logs"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    participant_id = Column(Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        # Covers the per-participant count after every scan
        Index("ix_attendance_event_participant", "event_id", "participant_id"),
        Index("ix_attendance_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AttendanceLog(id={self.id}, event={self.event_id}, participant={self.participant_id})>"
