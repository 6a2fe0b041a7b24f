"""
Appointments router.

Responses use the status envelope:
    {"status": "success", "results": n, "data": [...]}   (lists)
    {"status": "success", "data": {...}}                  (single appointment)
"""
import logging

from fastapi import APIRouter, Depends, Response

from schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatusUpdate,
    AppointmentUpdate,
    DataListResponse,
    DataResponse,
)
from services import AppointmentService
from core.auth import require_permission
from core.dependencies import get_appointment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/appointments", tags=["Appointments"])

AppointmentList = DataListResponse[AppointmentResponse]
AppointmentData = DataResponse[AppointmentResponse]


@router.get(
    "",
    response_model=AppointmentList,
    summary="List appointments",
    dependencies=[Depends(require_permission("appointments.read"))],
)
async def list_appointments(service: AppointmentService = Depends(get_appointment_service)):
    return AppointmentList.of(service.get_appointments())


@router.get(
    "/today",
    response_model=AppointmentList,
    summary="Today's appointments",
    description="Appointments on the current UTC date, ordered by time.",
    dependencies=[Depends(require_permission("appointments.read"))],
)
async def list_today(service: AppointmentService = Depends(get_appointment_service)):
    return AppointmentList.of(service.get_today())


@router.get(
    "/upcoming",
    response_model=AppointmentList,
    summary="Upcoming appointments",
    description="Appointments from today onwards that are not Cancelled or Completed.",
    dependencies=[Depends(require_permission("appointments.read"))],
)
async def list_upcoming(service: AppointmentService = Depends(get_appointment_service)):
    return AppointmentList.of(service.get_upcoming())


@router.get(
    "/patient/{patient_id}",
    response_model=AppointmentList,
    summary="A patient's appointments",
    description="Staff can read any patient's appointments; a patient only their own.",
    dependencies=[Depends(require_permission("appointments.read", self_param="patient_id"))],
)
async def list_by_patient(
    patient_id: int,
    service: AppointmentService = Depends(get_appointment_service)
):
    return AppointmentList.of(service.get_by_patient(patient_id))


@router.get(
    "/doctor/{doctor_id}",
    response_model=AppointmentList,
    summary="A doctor's appointments",
    dependencies=[Depends(require_permission("appointments.read"))],
)
async def list_by_doctor(
    doctor_id: int,
    service: AppointmentService = Depends(get_appointment_service)
):
    return AppointmentList.of(service.get_by_doctor(doctor_id))


@router.get(
    "/{appointment_id}",
    response_model=AppointmentData,
    summary="Get an appointment",
    dependencies=[Depends(require_permission("appointments.read"))],
)
async def get_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service)
):
    return AppointmentData(data=service.get_appointment(appointment_id))


@router.post(
    "",
    response_model=AppointmentData,
    status_code=201,
    summary="Book an appointment",
    description="Patient and doctor must exist (404). A doctor's slot holds one open appointment (409).",
    dependencies=[Depends(require_permission("appointments.book"))],
)
async def create_appointment(
    payload: AppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service)
):
    return AppointmentData(data=service.create_appointment(payload))


@router.put(
    "/{appointment_id}",
    response_model=AppointmentData,
    summary="Update an appointment",
    dependencies=[Depends(require_permission("appointments.manage"))],
)
async def update_appointment(
    appointment_id: int,
    payload: AppointmentUpdate,
    service: AppointmentService = Depends(get_appointment_service)
):
    return AppointmentData(data=service.update_appointment(appointment_id, payload))


@router.patch(
    "/{appointment_id}/status",
    response_model=AppointmentData,
    summary="Change an appointment's status",
    description="Confirming an appointment notifies the patient.",
    dependencies=[Depends(require_permission("appointments.manage"))],
)
async def update_appointment_status(
    appointment_id: int,
    payload: AppointmentStatusUpdate,
    service: AppointmentService = Depends(get_appointment_service)
):
    return AppointmentData(data=service.update_status(appointment_id, payload))


@router.delete(
    "/{appointment_id}",
    status_code=204,
    summary="Delete an appointment",
    dependencies=[Depends(require_permission("appointments.manage"))],
)
async def delete_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service)
):
    service.delete_appointment(appointment_id)
    return Response(status_code=204)
