"""
Event service handling CRUD operations.
"""

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.event import Event
from app.schemas.event import EventCreate, EventUpdate
from app.core.exceptions import EventNotFound
from app.core.logging import get_logger

logger = get_logger(__name__)


async def create_event(db: AsyncSession, event_data: EventCreate) -> Event:
    event = Event(
        name=event_data.name,
        description=event_data.description,
        is_active=event_data.is_active,
    )
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info("event_created", event_id=event.id, name=event.name, active=event.is_active)
    return event


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Get a single event by ID. Raises EventNotFound."""
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()

    if not event:
        raise EventNotFound(event_id)
    return event


async def update_event(db: AsyncSession, event_id: int, event_data: EventUpdate) -> Event:
    """Partial update; toggling is_active activates or deactivates scanning."""
    event = await get_event(db, event_id)

    changes = event_data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(event, field, value)

    await db.flush()
    await db.refresh(event)

    logger.info("event_updated", event_id=event.id, fields=sorted(changes))
    return event


async def list_events(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    active_only: bool = False,
) -> tuple[list[Event], int]:
    """
    List events with pagination, newest first.
    Uses the ix_events_is_active index when filtering active events.
    """
    query = select(Event)

    if active_only:
        query = query.where(Event.is_active.is_(True))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    events_query = (
        query
        .order_by(Event.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(events_query)
    events = list(result.scalars().all())

    return events, total
