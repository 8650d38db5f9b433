"""
Pydantic schemas for seat assignment requests and the seat map.
"""

from typing import Optional
from pydantic import BaseModel, Field

from app.schemas.participant import ParticipantCode


class SeatAssignRequest(BaseModel):
    participant_code: ParticipantCode
    table_number: int = Field(..., gt=0)
    seat_number: int = Field(..., gt=0)


class SeatAssignmentResponse(BaseModel):
    event_id: int
    participant_code: str
    table_number: int
    seat_number: int


class SeatMapEntry(BaseModel):
    table_number: int
    seat_number: int
    participant_code: Optional[str] = None
    participant_name: Optional[str] = None
