"""Response envelopes shared by every endpoint.

Every response has the same outer shape:

    {"success": true,  "data": ...}
    {"success": false, "error": "...", "errors": [...]}

List endpoints add count/total/page/pages so clients can walk the pages.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class PageResponse(BaseModel, Generic[T]):
    success: bool = True
    count: int
    total: int
    page: int
    pages: int
    data: list[T]


class ErrorDetail(BaseModel):
    field: str
    message: str
    location: Optional[str] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    errors: Optional[list[ErrorDetail]] = None
