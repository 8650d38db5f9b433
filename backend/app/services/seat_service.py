"""
Seat assignment service maintaining a participant <-> seat bijection per event.

CONCURRENCY STRATEGY: Row Locks + Unique Constraints + Retry
============================================================

Problem:
  Assigning a seat is three writes: clear whoever sits in the target seat,
  clear the seat the participant currently holds, insert the new pairing.
  Two concurrent assigns touching the same seat or participant can
  interleave and leave a seat with two occupants, or a participant with
  two seats.

Solution:
  1. Everything runs in the request's single transaction (see get_db).
  2. Lock the participant row, then the seat row, with SELECT ... FOR UPDATE.
     Concurrent assigns for the same participant or seat queue up behind
     each other.
  3. Lock every seat_assignments row the assign will delete (the target
     seat's and the participant's) in one SELECT ... FOR UPDATE ordered by
     id. A swap (P1 -> S1 while P2 -> S2, each seat held by the other)
     touches the same two assignment rows from both sides; taking them in
     id order makes one assign wait for the other instead of deadlocking.
  4. seat_assignments has UNIQUE(event_id, seat_id) and
     UNIQUE(event_id, participant_id). If anything still slips through
     (e.g. two requests creating the same brand-new seat), the insert fails
     with IntegrityError; we roll back and retry the whole assign. Deadlock
     (40P01) and serialization (40001) failures are retried the same way.

  After SEAT_ASSIGN_MAX_RETRIES attempts the caller gets a 409 and may try
  again.

  Dialects without row locks (SQLite) skip FOR UPDATE and rely on the
  constraints alone.
"""

from typing import Optional

from sqlalchemy import select, delete, or_
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.participant import Participant
from app.models.seat import Seat, SeatAssignment
from app.schemas.seat import SeatAssignmentResponse, SeatMapEntry
from app.services.event_service import get_event
from app.core.config import get_settings
from app.core.exceptions import AssignmentConflict, InvalidSeatNumber, ParticipantNotFound
from app.core.metrics import record_db_retry, record_seat_operation
from app.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

# PostgreSQL deadlock_detected, serialization_failure
RETRYABLE_SQLSTATES = {"40P01", "40001"}


def _is_retryable(error: DBAPIError) -> bool:
    if isinstance(error, IntegrityError):
        return True
    # asyncpg exposes `sqlstate`, psycopg2 `pgcode`
    code = getattr(error.orig, "sqlstate", None) or getattr(error.orig, "pgcode", None)
    return code in RETRYABLE_SQLSTATES


def _validate_position(table_number: int, seat_number: int) -> None:
    valid = all(
        isinstance(n, int) and not isinstance(n, bool) and n > 0
        for n in (table_number, seat_number)
    )
    if not valid:
        raise InvalidSeatNumber(table_number, seat_number)


async def _get_or_create_seat(
    db: AsyncSession,
    event_id: int,
    table_number: int,
    seat_number: int,
) -> Seat:
    """Upsert keyed by (event, table, seat); the returned row is locked."""
    result = await db.execute(
        select(Seat)
        .where(
            Seat.event_id == event_id,
            Seat.table_number == table_number,
            Seat.seat_number == seat_number,
        )
        .with_for_update()
    )
    seat = result.scalar_one_or_none()
    if seat:
        return seat

    seat = Seat(event_id=event_id, table_number=table_number, seat_number=seat_number)
    db.add(seat)
    await db.flush()
    logger.debug("seat_created", event_id=event_id, table=table_number, seat=seat_number)
    return seat


async def _assign_once(
    db: AsyncSession,
    event_id: int,
    participant_code: str,
    table_number: int,
    seat_number: int,
) -> SeatAssignment:
    result = await db.execute(
        select(Participant)
        .where(
            Participant.event_id == event_id,
            Participant.participant_code == participant_code,
        )
        .with_for_update()
    )
    participant = result.scalar_one_or_none()
    if not participant:
        raise ParticipantNotFound(participant_code, event_id)

    seat = await _get_or_create_seat(db, event_id, table_number, seat_number)

    await db.execute(
        select(SeatAssignment.id)
        .where(
            SeatAssignment.event_id == event_id,
            or_(
                SeatAssignment.seat_id == seat.id,
                SeatAssignment.participant_id == participant.id,
            ),
        )
        .order_by(SeatAssignment.id)
        .with_for_update()
    )

    # Clear both conflicting edges before inserting: seat first, then participant
    await db.execute(
        delete(SeatAssignment).where(
            SeatAssignment.event_id == event_id,
            SeatAssignment.seat_id == seat.id,
        )
    )
    await db.execute(
        delete(SeatAssignment).where(
            SeatAssignment.event_id == event_id,
            SeatAssignment.participant_id == participant.id,
        )
    )

    assignment = SeatAssignment(event_id=event_id, participant_id=participant.id, seat_id=seat.id)
    db.add(assignment)
    await db.flush()
    return assignment


async def assign_seat(
    db: AsyncSession,
    event_id: int,
    participant_code: str,
    table_number: int,
    seat_number: int,
) -> SeatAssignmentResponse:
    """
    Seat a participant at (table, seat), displacing whoever sat there and
    releasing the participant's previous seat.
    Retries up to SEAT_ASSIGN_MAX_RETRIES on integrity conflicts.
    """
    _validate_position(table_number, seat_number)
    code = participant_code.strip()
    await get_event(db, event_id)

    max_attempts = settings.SEAT_ASSIGN_MAX_RETRIES
    for attempt in range(1, max_attempts + 1):
        try:
            await _assign_once(db, event_id, code, table_number, seat_number)
        except DBAPIError as e:
            if not _is_retryable(e):
                raise
            await db.rollback()
            record_db_retry()
            logger.info(
                "seat_assign_retry",
                event_id=event_id,
                table=table_number,
                seat=seat_number,
                attempt=attempt,
                reason=type(e.orig).__name__ if e.orig is not None else "integrity_error",
            )
            if attempt == max_attempts:
                record_seat_operation("assign", "conflict")
                raise AssignmentConflict(event_id, table_number, seat_number)
            continue

        record_seat_operation("assign", "success")
        logger.info(
            "seat_assigned",
            event_id=event_id,
            participant_code=code,
            table=table_number,
            seat=seat_number,
            attempt=attempt,
        )
        return SeatAssignmentResponse(
            event_id=event_id,
            participant_code=code,
            table_number=table_number,
            seat_number=seat_number,
        )

    # Unreachable: the loop either returns or raises on its last attempt
    raise AssignmentConflict(event_id, table_number, seat_number)


async def unassign_seat(
    db: AsyncSession,
    event_id: int,
    table_number: int,
    seat_number: int,
) -> bool:
    """
    Free a seat. Idempotent: a seat that was never created (or is already
    empty) is a successful no-op and no row is created.
    Returns True if an assignment was removed.
    """
    _validate_position(table_number, seat_number)

    result = await db.execute(
        select(Seat.id).where(
            Seat.event_id == event_id,
            Seat.table_number == table_number,
            Seat.seat_number == seat_number,
        )
    )
    seat_id = result.scalar_one_or_none()
    if seat_id is None:
        record_seat_operation("unassign", "noop")
        logger.info("seat_unassign_noop", event_id=event_id, table=table_number, seat=seat_number)
        return False

    deleted = await db.execute(
        delete(SeatAssignment).where(
            SeatAssignment.event_id == event_id,
            SeatAssignment.seat_id == seat_id,
        )
    )
    removed = deleted.rowcount > 0
    record_seat_operation("unassign", "success" if removed else "noop")
    logger.info(
        "seat_unassigned",
        event_id=event_id,
        table=table_number,
        seat=seat_number,
        removed=removed,
    )
    return removed


async def get_participant_seat(
    db: AsyncSession,
    event_id: int,
    participant_id: int,
) -> Optional[Seat]:
    """Read-only lookup of a participant's current seat, if any."""
    result = await db.execute(
        select(Seat)
        .join(SeatAssignment, SeatAssignment.seat_id == Seat.id)
        .where(
            SeatAssignment.event_id == event_id,
            SeatAssignment.participant_id == participant_id,
        )
    )
    return result.scalars().first()


async def list_seat_map(db: AsyncSession, event_id: int) -> list[SeatMapEntry]:
    """All known seats of an event with their occupant, ordered by table then seat."""
    await get_event(db, event_id)

    result = await db.execute(
        select(
            Seat.table_number,
            Seat.seat_number,
            Participant.participant_code,
            Participant.full_name,
        )
        .outerjoin(SeatAssignment, SeatAssignment.seat_id == Seat.id)
        .outerjoin(Participant, Participant.id == SeatAssignment.participant_id)
        .where(Seat.event_id == event_id)
        .order_by(Seat.table_number.asc(), Seat.seat_number.asc())
    )
    return [
        SeatMapEntry(
            table_number=row.table_number,
            seat_number=row.seat_number,
            participant_code=row.participant_code,
            participant_name=row.full_name,
        )
        for row in result.all()
    ]
