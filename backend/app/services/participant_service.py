"""
Participant service: per-event roster management.

Participant codes are unique within an event. The pre-check gives a clean
409 in the common case; the uq_participant_event_code constraint catches
the concurrent one.
"""

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.participant import Participant
from app.models.seat import SeatAssignment
from app.schemas.participant import ParticipantCreate, ParticipantUpdate
from app.services.event_service import get_event
from app.core.exceptions import DuplicateParticipantCode, ParticipantNotFound
from app.core.logging import get_logger

logger = get_logger(__name__)


async def _code_taken(db: AsyncSession, event_id: int, code: str) -> bool:
    result = await db.execute(
        select(Participant.id).where(
            Participant.event_id == event_id,
            Participant.participant_code == code,
        )
    )
    return result.first() is not None


async def create_participant(db: AsyncSession, event_id: int, data: ParticipantCreate) -> Participant:
    await get_event(db, event_id)

    code = data.participant_code.strip()
    if await _code_taken(db, event_id, code):
        logger.warning("participant_create_failed", reason="duplicate_code", event_id=event_id, code=code)
        raise DuplicateParticipantCode(code, event_id)

    participant = Participant(
        event_id=event_id,
        participant_code=code,
        full_name=data.full_name,
        email=data.email,
        phone=data.phone,
        meta={"gender": data.gender} if data.gender else {},
    )
    db.add(participant)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateParticipantCode(code, event_id)
    await db.refresh(participant)

    logger.info("participant_created", participant_id=participant.id, event_id=event_id, code=code)
    return participant


async def get_participant(db: AsyncSession, event_id: int, participant_id: int) -> Participant:
    result = await db.execute(
        select(Participant).where(
            Participant.event_id == event_id,
            Participant.id == participant_id,
        )
    )
    participant = result.scalar_one_or_none()
    if not participant:
        raise ParticipantNotFound(f"id={participant_id}", event_id)
    return participant


async def list_participants(db: AsyncSession, event_id: int) -> list[Participant]:
    await get_event(db, event_id)
    result = await db.execute(
        select(Participant)
        .where(Participant.event_id == event_id)
        .order_by(Participant.participant_code.asc())
    )
    return list(result.scalars().all())


async def update_participant(
    db: AsyncSession,
    event_id: int,
    participant_id: int,
    data: ParticipantUpdate,
) -> Participant:
    """
    Partial update. Gender is merged into the metadata mapping so other keys
    stored there survive.
    """
    participant = await get_participant(db, event_id, participant_id)
    changes = data.model_dump(exclude_unset=True)

    new_code = changes.pop("participant_code", None)
    if new_code is not None:
        new_code = new_code.strip()
        if new_code != participant.participant_code and await _code_taken(db, event_id, new_code):
            raise DuplicateParticipantCode(new_code, event_id)
        participant.participant_code = new_code

    if "gender" in changes:
        # Reassign rather than mutate so the JSON column is marked dirty
        participant.meta = {**(participant.meta or {}), "gender": changes.pop("gender")}

    for field, value in changes.items():
        setattr(participant, field, value)

    await db.flush()
    await db.refresh(participant)

    logger.info("participant_updated", participant_id=participant.id, event_id=event_id)
    return participant


async def delete_participant(db: AsyncSession, event_id: int, participant_id: int) -> None:
    """Delete a participant and free their seat."""
    participant = await get_participant(db, event_id, participant_id)

    await db.execute(
        delete(SeatAssignment).where(
            SeatAssignment.event_id == event_id,
            SeatAssignment.participant_id == participant.id,
        )
    )
    await db.delete(participant)
    await db.flush()

    logger.info("participant_deleted", participant_id=participant_id, event_id=event_id)
