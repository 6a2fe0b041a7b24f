"""
Pydantic schemas for appointments.
"""
import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.appointment import AppointmentStatus

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class AppointmentCreate(BaseModel):
    patient_id: int = Field(..., ge=1)
    doctor_id: int = Field(..., ge=1)
    date: dt.date
    time: str = Field(..., pattern=TIME_PATTERN, examples=["10:30"])
    reason: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)


class AppointmentUpdate(BaseModel):
    """Partial update; only the fields sent are changed."""
    date: Optional[dt.date] = None
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    status: Optional[AppointmentStatus] = None
    reason: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = Field(None, max_length=1000)
    reminder_sent: Optional[bool] = None


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    patient_name: Optional[str] = None
    doctor_id: int
    doctor_name: Optional[str] = None
    doctor_specialization: Optional[str] = None
    date: str
    time: str
    status: AppointmentStatus
    reason: Optional[str] = None
    notes: Optional[str] = None
    reminder_sent: bool
    created_at: str
    updated_at: str

    model_config = ConfigDict(from_attributes=True)
