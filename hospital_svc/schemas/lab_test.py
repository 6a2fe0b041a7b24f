"""
Pydantic schemas for lab tests.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.lab_test import LabTestStatus, LabTestType, Priority


class LabTestCreate(BaseModel):
    """Schema for requesting a lab test. The requester is the caller."""
    name: str = Field(..., min_length=1, max_length=200, examples=["Full Blood Count"])
    patient_id: int = Field(..., ge=1)
    test_type: LabTestType
    priority: Priority = Priority.NORMAL
    notes: Optional[str] = Field(None, max_length=1000)


class LabTestResultsUpdate(BaseModel):
    results: str = Field(..., min_length=1, examples=["Hb 13.2 g/dL"])
    findings: Optional[str] = Field(None, examples=["Within normal range"])


class LabTestStatusUpdate(BaseModel):
    status: LabTestStatus


class LabTestResponse(BaseModel):
    id: int
    name: str
    patient_id: int
    patient_name: Optional[str] = None
    requested_by: int
    requested_by_name: Optional[str] = None
    test_type: LabTestType
    status: LabTestStatus
    results: Optional[str] = None
    findings: Optional[str] = None
    notes: Optional[str] = None
    sample_collection_date: Optional[str] = None
    result_date: Optional[str] = None
    priority: Priority
    created_at: str
    updated_at: str

    model_config = ConfigDict(from_attributes=True)


class LabTestEnvelope(BaseModel):
    lab_test: LabTestResponse
    message: Optional[str] = None


class LabTestListEnvelope(BaseModel):
    lab_tests: List[LabTestResponse]
