"""
Pydantic schemas for leave requests.
"""
from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.leave import COMMENTS_MAX_LENGTH, REASON_MAX_LENGTH, LeaveStatus, LeaveType


class LeaveCreate(BaseModel):
    """Schema for submitting a leave request. The requester comes from the token."""
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(..., min_length=1, max_length=REASON_MAX_LENGTH)

    @model_validator(mode="after")
    def check_date_range(self) -> "LeaveCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class LeaveUpdate(BaseModel):
    """Partial update of a pending request."""
    leave_type: Optional[LeaveType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = Field(None, min_length=1, max_length=REASON_MAX_LENGTH)

    @model_validator(mode="after")
    def check_date_range(self) -> "LeaveUpdate":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class LeaveReview(BaseModel):
    status: Literal["Approved", "Rejected"]
    approval_comments: Optional[str] = Field(None, max_length=COMMENTS_MAX_LENGTH)


class LeaveResponse(BaseModel):
    id: int
    doctor_id: int
    doctor_name: str
    leave_type: LeaveType
    start_date: str
    end_date: str
    reason: str
    status: LeaveStatus
    approved_by: Optional[int] = None
    approved_by_name: Optional[str] = None
    approval_comments: Optional[str] = None
    submitted_at: str
    reviewed_at: Optional[str] = None
    total_days: int
    created_at: str
    updated_at: str

    model_config = ConfigDict(from_attributes=True)


class LeaveEnvelope(BaseModel):
    leave_request: LeaveResponse
    message: Optional[str] = None


class LeaveListEnvelope(BaseModel):
    leave_requests: List[LeaveResponse]
