"""
Attendance endpoints: QR scan check-in and attendance reports.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.common import OkResponse
from app.schemas.attendance import ScanRequest, ScanResult, RecentScan, AttendanceSummary
from app.services.attendance_service import (
    get_attendance_summary,
    list_recent_scans,
    normalize_scan_input,
    record_scan,
)
from app.core.config import get_settings
from app.core.metrics import scan_latency

settings = get_settings()
router = APIRouter(tags=["Attendance"])


@router.post("/attendance/scan", response_model=OkResponse[ScanResult])
async def scan_endpoint(
    scan: ScanRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Check a participant in.

    Send either `participant_code` (plus `event_id` when known) or the raw QR
    `payload` (`eventId:participantCode` or `participantCode`). Every
    successful scan is logged; `total_scans` counts them all.
    """
    with scan_latency.time():
        event_id, code = normalize_scan_input(scan.event_id, scan.participant_code, scan.payload)
        result = await record_scan(db, code, event_id)
    return OkResponse(data=result)


@router.get("/attendance/recent", response_model=OkResponse[list[RecentScan]])
async def recent_scans_endpoint(
    event_id: Optional[int] = Query(None),
    limit: int = Query(settings.RECENT_SCANS_DEFAULT_LIMIT, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Latest check-ins, newest first."""
    return OkResponse(data=await list_recent_scans(db, event_id, limit))


@router.get("/events/{event_id}/attendance/summary", response_model=OkResponse[AttendanceSummary])
async def attendance_summary_endpoint(
    event_id: int,
    db: AsyncSession = Depends(get_db),
):
    return OkResponse(data=await get_attendance_summary(db, event_id))
