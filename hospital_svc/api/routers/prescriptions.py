"""
Prescriptions router - prescribing, the pharmacy queue and dispensing.

Responses use the status envelope (see schemas/common.py).
"""
import logging

from fastapi import APIRouter, Depends, Response

from schemas import (
    DataListResponse,
    DataResponse,
    PrescriptionCreate,
    PrescriptionResponse,
    PrescriptionStatusUpdate,
    PrescriptionUpdate,
)
from services import PrescriptionService
from core.auth import CurrentUser, require_permission
from core.dependencies import get_prescription_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/prescriptions", tags=["Prescriptions"])

PrescriptionList = DataListResponse[PrescriptionResponse]
PrescriptionData = DataResponse[PrescriptionResponse]


@router.get(
    "",
    response_model=PrescriptionList,
    summary="List prescriptions",
    dependencies=[Depends(require_permission("prescriptions.read"))],
)
async def list_prescriptions(service: PrescriptionService = Depends(get_prescription_service)):
    return PrescriptionList.of(service.get_prescriptions())


@router.get(
    "/pharmacy-queue",
    response_model=PrescriptionList,
    summary="Pharmacy queue",
    description="Prescriptions sent to the pharmacy or being dispensed.",
    dependencies=[Depends(require_permission("prescriptions.dispense"))],
)
async def pharmacy_queue(service: PrescriptionService = Depends(get_prescription_service)):
    return PrescriptionList.of(service.get_pharmacy_queue())


@router.get(
    "/patient/{patient_id}",
    response_model=PrescriptionList,
    summary="A patient's prescriptions",
    description="Clinical staff can read any patient's prescriptions; a patient only their own.",
    dependencies=[Depends(require_permission("prescriptions.read", self_param="patient_id"))],
)
async def list_by_patient(
    patient_id: int,
    service: PrescriptionService = Depends(get_prescription_service)
):
    return PrescriptionList.of(service.get_by_patient(patient_id))


@router.get(
    "/doctor/{doctor_id}",
    response_model=PrescriptionList,
    summary="A doctor's prescriptions",
    dependencies=[Depends(require_permission("prescriptions.read"))],
)
async def list_by_doctor(
    doctor_id: int,
    service: PrescriptionService = Depends(get_prescription_service)
):
    return PrescriptionList.of(service.get_by_doctor(doctor_id))


@router.get(
    "/{prescription_id}",
    response_model=PrescriptionData,
    summary="Get a prescription",
    dependencies=[Depends(require_permission("prescriptions.read"))],
)
async def get_prescription(
    prescription_id: int,
    service: PrescriptionService = Depends(get_prescription_service)
):
    return PrescriptionData(data=service.get_prescription(prescription_id))


@router.post(
    "",
    response_model=PrescriptionData,
    status_code=201,
    summary="Write a prescription",
    description="Patient and doctor must exist (404). At least one medicine is required.",
    dependencies=[Depends(require_permission("prescriptions.write"))],
)
async def create_prescription(
    payload: PrescriptionCreate,
    service: PrescriptionService = Depends(get_prescription_service)
):
    return PrescriptionData(data=service.create_prescription(payload))


@router.put(
    "/{prescription_id}",
    response_model=PrescriptionData,
    summary="Update a prescription",
    dependencies=[Depends(require_permission("prescriptions.write"))],
)
async def update_prescription(
    prescription_id: int,
    payload: PrescriptionUpdate,
    service: PrescriptionService = Depends(get_prescription_service)
):
    return PrescriptionData(data=service.update_prescription(prescription_id, payload))


@router.put(
    "/{prescription_id}/send-to-pharmacy",
    response_model=PrescriptionData,
    summary="Send a prescription to the pharmacy",
    description="Queues the prescription and notifies every pharmacist.",
    dependencies=[Depends(require_permission("prescriptions.write"))],
)
async def send_to_pharmacy(
    prescription_id: int,
    service: PrescriptionService = Depends(get_prescription_service)
):
    return PrescriptionData(data=service.send_to_pharmacy(prescription_id))


@router.patch(
    "/{prescription_id}/status",
    response_model=PrescriptionData,
    summary="Change a prescription's status",
    description="Dispensed and completed prescriptions record who dispensed them and when.",
)
async def update_prescription_status(
    prescription_id: int,
    payload: PrescriptionStatusUpdate,
    user: CurrentUser = Depends(require_permission("prescriptions.dispense")),
    service: PrescriptionService = Depends(get_prescription_service)
):
    return PrescriptionData(data=service.update_status(prescription_id, payload, user))


@router.delete(
    "/{prescription_id}",
    status_code=204,
    summary="Delete a prescription",
    dependencies=[Depends(require_permission("prescriptions.write"))],
)
async def delete_prescription(
    prescription_id: int,
    service: PrescriptionService = Depends(get_prescription_service)
):
    service.delete_prescription(prescription_id)
    return Response(status_code=204)
