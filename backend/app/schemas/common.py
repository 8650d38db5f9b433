"""
Response envelopes shared by every endpoint.

Success: {"ok": true, "data": ...}
Failure: {"ok": false, "code": "<ErrorName>", "message": "..."}
"""

from typing import Any, Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class OkResponse(BaseModel, Generic[T]):
    ok: bool = True
    data: Optional[T] = None


class ErrorResponse(BaseModel):
    ok: bool = False
    code: str
    message: str
    detail: Optional[Any] = None
