"""
Pydantic schemas for prescriptions.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.prescription import PrescriptionStatus


class Medicine(BaseModel):
    name: str = Field(..., min_length=1, examples=["Amoxicillin"])
    dosage: str = Field(..., min_length=1, examples=["500mg"])
    frequency: str = Field(..., min_length=1, examples=["3 times daily"])
    duration: str = Field(..., min_length=1, examples=["7 days"])
    instructions: str = ""


class PrescriptionCreate(BaseModel):
    patient_id: int = Field(..., ge=1)
    doctor_id: int = Field(..., ge=1)
    appointment_id: Optional[int] = Field(None, ge=1)
    medicines: List[Medicine] = Field(..., min_length=1)
    diagnosis: str = Field(..., min_length=1)
    notes: str = ""


class PrescriptionUpdate(BaseModel):
    appointment_id: Optional[int] = Field(None, ge=1)
    medicines: Optional[List[Medicine]] = Field(None, min_length=1)
    diagnosis: Optional[str] = Field(None, min_length=1)
    notes: Optional[str] = None


class PrescriptionStatusUpdate(BaseModel):
    status: PrescriptionStatus


class PrescriptionResponse(BaseModel):
    id: int
    patient_id: int
    patient_name: Optional[str] = None
    doctor_id: int
    doctor_name: Optional[str] = None
    doctor_specialization: Optional[str] = None
    appointment_id: Optional[int] = None
    medicines: List[Medicine]
    diagnosis: str
    notes: str
    status: PrescriptionStatus
    dispensed_by: Optional[int] = None
    dispensed_by_name: Optional[str] = None
    dispensed_at: Optional[str] = None
    created_at: str
    updated_at: str

    model_config = ConfigDict(from_attributes=True)
