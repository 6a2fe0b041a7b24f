"""
Pydantic schemas for doctor profiles.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.doctor import DEFAULT_MAX_PATIENTS_PER_DAY, Weekday


class Qualification(BaseModel):
    degree: Optional[str] = Field(None, examples=["MBBS"])
    institution: Optional[str] = Field(None, examples=["University of Colombo"])
    year: Optional[int] = Field(None, ge=1900, le=2100, examples=[2012])


class ScheduleSlot(BaseModel):
    """One weekly availability slot."""
    day: Weekday
    start_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$", examples=["09:00"])
    end_time: Optional[str] = Field(None, pattern=r"^\d{2}:\d{2}$", examples=["13:00"])
    is_available: bool = True


class DoctorCreate(BaseModel):
    """Schema for registering a doctor profile against an existing user."""
    user_id: int = Field(..., ge=1, description="Id of the user account this profile belongs to")
    specialization: str = Field(..., min_length=1, max_length=200, examples=["Cardiology"])
    license_number: str = Field(..., min_length=1, max_length=100, examples=["SLMC-12345"])
    qualifications: List[Qualification] = Field(default_factory=list)
    experience: int = Field(0, ge=0, description="Years of experience")
    schedule: List[ScheduleSlot] = Field(default_factory=list)
    max_patients_per_day: int = Field(DEFAULT_MAX_PATIENTS_PER_DAY, ge=1)


class ScheduleUpdate(BaseModel):
    schedule: List[ScheduleSlot]


class DoctorUser(BaseModel):
    id: int
    name: str
    email: str
    mobile_number: Optional[str] = None


class DoctorResponse(BaseModel):
    id: int
    user_id: int
    user: DoctorUser
    specialization: str
    license_number: str
    qualifications: List[Qualification]
    experience: int
    schedule: List[ScheduleSlot]
    max_patients_per_day: int
    is_active: bool
    created_at: str
    updated_at: str

    model_config = ConfigDict(from_attributes=True)


class DoctorEnvelope(BaseModel):
    doctor: DoctorResponse


class DoctorListEnvelope(BaseModel):
    doctors: List[DoctorResponse]
