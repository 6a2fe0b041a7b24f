"""
Shared response envelopes.

Appointments, prescriptions and notifications answer with a status
envelope; list responses also carry the number of results.
"""
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Single-document status envelope: ``{"status": "success", "data": {...}}``."""
    status: str = Field("success", description="Always 'success' for 2xx responses")
    data: T


class DataListResponse(BaseModel, Generic[T]):
    """List status envelope: ``{"status": "success", "results": n, "data": [...]}``."""
    status: str = Field("success", description="Always 'success' for 2xx responses")
    results: int = Field(..., ge=0, description="Number of documents in data")
    data: List[T]

    @classmethod
    def of(cls, items: List[T]) -> "DataListResponse[T]":
        return cls(results=len(items), data=items)


class MessageResponse(BaseModel):
    """Plain acknowledgement."""
    message: str
    count: Optional[int] = Field(None, description="Number of records affected, where relevant")
