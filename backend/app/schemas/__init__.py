from app.schemas.common import OkResponse, ErrorResponse
from app.schemas.event import EventCreate, EventUpdate, EventResponse, EventListResponse
from app.schemas.participant import ParticipantCreate, ParticipantUpdate, ParticipantResponse
from app.schemas.seat import SeatAssignRequest, SeatAssignmentResponse, SeatMapEntry
from app.schemas.attendance import ScanRequest, ScanResult, RecentScan, AttendanceSummary

__all__ = [
    "OkResponse", "ErrorResponse",
    "EventCreate", "EventUpdate", "EventResponse", "EventListResponse",
    "ParticipantCreate", "ParticipantUpdate", "ParticipantResponse",
    "SeatAssignRequest", "SeatAssignmentResponse", "SeatMapEntry",
    "ScanRequest", "ScanResult", "RecentScan", "AttendanceSummary",
]
