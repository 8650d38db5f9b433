from app.models.event import Event
from app.models.participant import Participant
from app.models.seat import Seat, SeatAssignment
from app.models.attendance import AttendanceLog

__all__ = ["Event", "Participant", "Seat", "SeatAssignment", "AttendanceLog"]
