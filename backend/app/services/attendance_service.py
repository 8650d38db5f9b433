"""
Attendance service: scan resolution and attendance reporting.

SCAN FLOW
=========

  1. Resolve the scanned code to exactly one (event, participant) pair.
     - With an event ID: the event must exist and be active, and the code
       must exist in that event.
     - Without one: see app.services.resolution for candidate filtering.
  2. Look up the participant's current seat (read only, for display).
  3. Append an attendance_logs row. Always: re-scans are recorded too, there
     is no dedup and no cooldown.
  4. Count every row for the pair, including the one just written.

Concurrent scans of the same participant each append their own row,
so no locking is needed here.
"""

from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.event import Event
from app.models.participant import Participant
from app.models.attendance import AttendanceLog
from app.schemas.attendance import ScanResult, RecentScan, AttendanceSummary
from app.services.event_service import get_event
from app.services.resolution import Candidate, ResolvedPair, parse_scan_payload, resolve_candidates
from app.services.seat_service import get_participant_seat
from app.core.exceptions import AttendanceError, EventInactive, EventNotFound, ParticipantNotFound
from app.core.metrics import record_scan as record_scan_metric
from app.core.logging import get_logger

logger = get_logger(__name__)


def normalize_scan_input(
    event_id: Optional[int],
    participant_code: Optional[str],
    payload: Optional[str],
) -> tuple[Optional[int], str]:
    """
    Turn a scan request into (event_id, participant_code).
    An explicit event_id takes precedence over one embedded in the payload,
    matching the scanner's "selected event" behaviour.
    """
    if participant_code and participant_code.strip():
        return event_id, participant_code.strip()

    payload_event, code = parse_scan_payload(payload or "")
    if event_id is not None or payload_event is None:
        return event_id, code
    try:
        return int(payload_event), code
    except ValueError:
        raise EventNotFound(payload_event)


async def _resolve_with_event(db: AsyncSession, event_id: int, code: str) -> ResolvedPair:
    event = await get_event(db, event_id)
    if not event.is_active:
        raise EventInactive(event_id)

    result = await db.execute(
        select(Participant.id, Participant.full_name).where(
            Participant.event_id == event_id,
            Participant.participant_code == code,
        )
    )
    row = result.first()
    if row is None:
        raise ParticipantNotFound(code, event_id)
    return ResolvedPair(event_id=event_id, participant_id=row.id, participant_name=row.full_name)


async def _resolve_without_event(db: AsyncSession, code: str) -> ResolvedPair:
    result = await db.execute(
        select(Participant.id, Participant.event_id, Participant.full_name)
        .where(Participant.participant_code == code)
    )
    candidates = [
        Candidate(participant_id=row.id, event_id=row.event_id, full_name=row.full_name)
        for row in result.all()
    ]

    active_ids: set[int] = set()
    if candidates:
        event_ids = {c.event_id for c in candidates}
        active = await db.execute(
            select(Event.id).where(Event.id.in_(sorted(event_ids)), Event.is_active.is_(True))
        )
        active_ids = set(active.scalars().all())

    return resolve_candidates(code, candidates, active_ids)


async def record_scan(
    db: AsyncSession,
    participant_code: str,
    event_id: Optional[int] = None,
) -> ScanResult:
    """Resolve a scan, log attendance and return seat placement plus visit count."""
    code = participant_code.strip()
    try:
        if event_id is not None:
            pair = await _resolve_with_event(db, event_id, code)
        else:
            pair = await _resolve_without_event(db, code)
    except AttendanceError as e:
        record_scan_metric(e.error_code)
        logger.warning("scan_rejected", code=code, event_id=event_id, reason=e.error_code)
        raise

    seat = await get_participant_seat(db, pair.event_id, pair.participant_id)

    db.add(AttendanceLog(event_id=pair.event_id, participant_id=pair.participant_id))
    await db.flush()

    total = (
        await db.execute(
            select(func.count(AttendanceLog.id)).where(
                AttendanceLog.event_id == pair.event_id,
                AttendanceLog.participant_id == pair.participant_id,
            )
        )
    ).scalar_one()

    record_scan_metric("recorded")
    logger.info(
        "scan_recorded",
        event_id=pair.event_id,
        participant_id=pair.participant_id,
        seated=seat is not None,
        total_scans=total,
    )
    return ScanResult(
        participant_name=pair.participant_name,
        event_id=pair.event_id,
        table_number=seat.table_number if seat else None,
        seat_number=seat.seat_number if seat else None,
        total_scans=total,
    )


async def list_recent_scans(
    db: AsyncSession,
    event_id: Optional[int] = None,
    limit: int = 20,
) -> list[RecentScan]:
    """Most recent attendance rows first, optionally for one event."""
    query = (
        select(
            AttendanceLog.id,
            AttendanceLog.event_id,
            AttendanceLog.participant_id,
            AttendanceLog.created_at,
            Participant.participant_code,
            Participant.full_name,
        )
        .join(Participant, Participant.id == AttendanceLog.participant_id)
    )
    if event_id is not None:
        query = query.where(AttendanceLog.event_id == event_id)

    result = await db.execute(
        query.order_by(AttendanceLog.created_at.desc(), AttendanceLog.id.desc()).limit(limit)
    )
    return [
        RecentScan(
            id=row.id,
            event_id=row.event_id,
            participant_id=row.participant_id,
            participant_code=row.participant_code,
            participant_name=row.full_name,
            created_at=row.created_at,
        )
        for row in result.all()
    ]


async def get_attendance_summary(db: AsyncSession, event_id: int) -> AttendanceSummary:
    await get_event(db, event_id)

    participants = (
        await db.execute(
            select(func.count(Participant.id)).where(Participant.event_id == event_id)
        )
    ).scalar_one()

    totals = (
        await db.execute(
            select(
                func.count(AttendanceLog.id),
                func.count(func.distinct(AttendanceLog.participant_id)),
            ).where(AttendanceLog.event_id == event_id)
        )
    ).one()

    return AttendanceSummary(
        event_id=event_id,
        participants=participants,
        present=totals[1],
        total_scans=totals[0],
    )
