"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from typing import Annotated, Optional
from pydantic import BaseModel, Field, StringConstraints, field_validator

EventName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class EventCreate(BaseModel):
    name: EventName
    description: Optional[str] = Field(None, max_length=1000)
    is_active: bool = True


class EventUpdate(BaseModel):
    """Partial update. Only description may be cleared with an explicit null."""

    name: Optional[EventName] = None
    description: Optional[str] = Field(None, max_length=1000)
    is_active: Optional[bool] = None

    @field_validator("name", "is_active")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class EventResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False
