"""
Pydantic schemas for the scan endpoint and attendance reports.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator


class ScanRequest(BaseModel):
    """
    Either a bare participant code (with an optional event ID) or the raw QR
    payload (`eventId:participantCode` or `participantCode`).
    An explicit event_id wins over one embedded in the payload.
    """

    event_id: Optional[int] = None
    participant_code: Optional[str] = Field(None, max_length=100)
    payload: Optional[str] = Field(None, max_length=255)

    @model_validator(mode="after")
    def require_code_or_payload(self):
        code = (self.participant_code or "").strip()
        payload = (self.payload or "").strip()
        if not code and not payload:
            raise ValueError("participant_code or payload is required")
        return self


class ScanResult(BaseModel):
    participant_name: str
    event_id: int
    table_number: Optional[int] = None
    seat_number: Optional[int] = None
    total_scans: int


class RecentScan(BaseModel):
    id: int
    event_id: int
    participant_id: int
    participant_code: str
    participant_name: str
    created_at: datetime


class AttendanceSummary(BaseModel):
    event_id: int
    participants: int
    present: int
    total_scans: int
