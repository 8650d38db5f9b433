"""
Participant roster endpoints, scoped to one event.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.common import OkResponse
from app.schemas.participant import ParticipantCreate, ParticipantUpdate, ParticipantResponse
from app.services.participant_service import (
    create_participant,
    delete_participant,
    list_participants,
    update_participant,
)

router = APIRouter(prefix="/events/{event_id}/participants", tags=["Participants"])


@router.post("/", response_model=OkResponse[ParticipantResponse], status_code=status.HTTP_201_CREATED)
async def create_participant_endpoint(
    event_id: int,
    data: ParticipantCreate,
    db: AsyncSession = Depends(get_db),
):
    """Add a participant. Codes must be unique within the event."""
    participant = await create_participant(db, event_id, data)
    return OkResponse(data=ParticipantResponse.model_validate(participant))


@router.get("/", response_model=OkResponse[list[ParticipantResponse]])
async def list_participants_endpoint(
    event_id: int,
    db: AsyncSession = Depends(get_db),
):
    participants = await list_participants(db, event_id)
    return OkResponse(data=[ParticipantResponse.model_validate(p) for p in participants])


@router.patch("/{participant_id}", response_model=OkResponse[ParticipantResponse])
async def update_participant_endpoint(
    event_id: int,
    participant_id: int,
    data: ParticipantUpdate,
    db: AsyncSession = Depends(get_db),
):
    participant = await update_participant(db, event_id, participant_id, data)
    return OkResponse(data=ParticipantResponse.model_validate(participant))


@router.delete("/{participant_id}", response_model=OkResponse[None])
async def delete_participant_endpoint(
    event_id: int,
    participant_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Remove a participant; their seat is freed."""
    await delete_participant(db, event_id, participant_id)
    return OkResponse()
