"""
Pydantic schemas for participant-related request/response validation.
"""

from typing import Annotated, Literal, Optional
from pydantic import AliasChoices, BaseModel, EmailStr, Field, StringConstraints, field_validator

# L = laki-laki (male), P = perempuan (female)
Gender = Literal["L", "P"]

ParticipantCode = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
FullName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class ParticipantCreate(BaseModel):
    participant_code: ParticipantCode
    full_name: FullName
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    gender: Optional[Gender] = None


class ParticipantUpdate(BaseModel):
    """
    Partial update. Fields left out are untouched; explicit nulls clear
    email, phone and gender. Code and name cannot be cleared.
    """

    full_name: Optional[FullName] = None
    participant_code: Optional[ParticipantCode] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    gender: Optional[Gender] = None

    @field_validator("full_name", "participant_code")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ParticipantResponse(BaseModel):
    id: int
    event_id: int
    participant_code: str
    full_name: str
    email: Optional[str]
    phone: Optional[str]
    gender: Optional[str]
    # ORM attribute is `meta`; re-validated response dicts carry `metadata`
    metadata: dict = Field(default_factory=dict, validation_alias=AliasChoices("meta", "metadata"))

    model_config = {"from_attributes": True}
