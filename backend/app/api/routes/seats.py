"""
Seat assignment endpoints (administrative, never called by the scan path).
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.common import OkResponse
from app.schemas.seat import SeatAssignRequest, SeatAssignmentResponse, SeatMapEntry
from app.services.seat_service import assign_seat, list_seat_map, unassign_seat

router = APIRouter(prefix="/events/{event_id}", tags=["Seats"])


@router.post("/assignments", response_model=OkResponse[SeatAssignmentResponse])
async def assign_seat_endpoint(
    event_id: int,
    data: SeatAssignRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Seat a participant. Whoever held the seat is unseated, and the
    participant's previous seat is released. The seat row is created on
    first use.
    """
    assignment = await assign_seat(db, event_id, data.participant_code, data.table_number, data.seat_number)
    return OkResponse(data=assignment)


@router.delete("/assignments/{table_number}/{seat_number}", response_model=OkResponse[None])
async def unassign_seat_endpoint(
    event_id: int,
    table_number: int = Path(..., gt=0),
    seat_number: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db),
):
    """Free a seat. Succeeds even if the seat was never assigned."""
    await unassign_seat(db, event_id, table_number, seat_number)
    return OkResponse()


@router.get("/seats", response_model=OkResponse[list[SeatMapEntry]])
async def seat_map_endpoint(
    event_id: int,
    db: AsyncSession = Depends(get_db),
):
    return OkResponse(data=await list_seat_map(db, event_id))
