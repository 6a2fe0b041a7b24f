"""
Doctors router - doctor profiles and weekly schedules.

Architecture:
    HTTP Request → Router (this file) → DoctorService → DoctorRepository → Database
"""
import logging

from fastapi import APIRouter, Depends

from schemas import DoctorCreate, DoctorEnvelope, DoctorListEnvelope, ScheduleUpdate
from services import DoctorService
from core.auth import require_permission
from core.dependencies import get_doctor_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/doctors", tags=["Doctors"])


@router.get(
    "",
    response_model=DoctorListEnvelope,
    summary="List doctors",
    description="List active doctor profiles with their user details.",
    dependencies=[Depends(require_permission("doctors.read"))],
)
async def list_doctors(doctor_service: DoctorService = Depends(get_doctor_service)):
    return DoctorListEnvelope(doctors=doctor_service.get_doctors())


@router.get(
    "/{doctor_id}",
    response_model=DoctorEnvelope,
    summary="Get a doctor",
    dependencies=[Depends(require_permission("doctors.read"))],
)
async def get_doctor(
    doctor_id: int,
    doctor_service: DoctorService = Depends(get_doctor_service)
):
    return DoctorEnvelope(doctor=doctor_service.get_doctor(doctor_id))


@router.post(
    "",
    response_model=DoctorEnvelope,
    status_code=201,
    summary="Create a doctor profile",
    description="Attach a doctor profile to an existing user. License numbers are unique (409 on duplicate).",
    dependencies=[Depends(require_permission("doctors.manage"))],
)
async def create_doctor(
    payload: DoctorCreate,
    doctor_service: DoctorService = Depends(get_doctor_service)
):
    """
    Create a doctor profile.

    - **user_id**: existing user account (404 if unknown)
    - **license_number**: unique license number (409 if taken)
    """
    return DoctorEnvelope(doctor=doctor_service.create_doctor(payload))


@router.put(
    "/{doctor_id}/schedule",
    response_model=DoctorEnvelope,
    summary="Replace a doctor's weekly schedule",
    dependencies=[Depends(require_permission("doctors.schedule"))],
)
async def update_schedule(
    doctor_id: int,
    payload: ScheduleUpdate,
    doctor_service: DoctorService = Depends(get_doctor_service)
):
    return DoctorEnvelope(doctor=doctor_service.update_schedule(doctor_id, payload))
