"""
Event endpoints with Redis caching on list operations.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.common import OkResponse
from app.schemas.event import EventCreate, EventUpdate, EventResponse, EventListResponse
from app.services.event_service import create_event, get_event, list_events, update_event
from app.services.cache_service import get_cached_events, set_cached_events, invalidate_event_cache
from app.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


@router.post("/", response_model=OkResponse[EventResponse], status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    db: AsyncSession = Depends(get_db),
):
    event = await create_event(db, event_data)
    # Invalidate cache since event list has changed
    await invalidate_event_cache()
    return OkResponse(data=EventResponse.model_validate(event))


@router.get("/", response_model=OkResponse[EventListResponse])
async def list_events_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    active_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """
    List events with pagination.
    Results are cached in Redis for 5 minutes.
    Cache is invalidated when events are created or updated.
    """
    cached = await get_cached_events(page, page_size, active_only)
    if cached:
        logger.info("events_list_cache_hit", page=page)
        cached["cached"] = True
        return OkResponse(data=EventListResponse(**cached))

    events, total = await list_events(db, page, page_size, active_only)

    response_data = {
        "events": [EventResponse.model_validate(e).model_dump() for e in events],
        "total": total,
        "page": page,
        "page_size": page_size,
        "cached": False,
    }

    await set_cached_events(page, page_size, active_only, response_data)

    return OkResponse(data=EventListResponse(**response_data))


@router.get("/{event_id}", response_model=OkResponse[EventResponse])
async def get_event_endpoint(
    event_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a single event by ID. Not cached (activation state must be live)."""
    event = await get_event(db, event_id)
    return OkResponse(data=EventResponse.model_validate(event))


@router.patch("/{event_id}", response_model=OkResponse[EventResponse])
async def update_event_endpoint(
    event_id: int,
    event_data: EventUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Rename, describe, activate or deactivate an event."""
    event = await update_event(db, event_id, event_data)
    await invalidate_event_cache()
    return OkResponse(data=EventResponse.model_validate(event))
