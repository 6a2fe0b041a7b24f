"""
Lab tests router - requesting tests, recording results and tracking status.

Visibility follows the caller's role: lab technicians see the tests they
requested, patients see their own tests, everyone else sees all tests.
A test outside the caller's view answers 404.
"""
import logging

from fastapi import APIRouter, Depends

from schemas import (
    LabTestCreate,
    LabTestEnvelope,
    LabTestListEnvelope,
    LabTestResultsUpdate,
    LabTestStatusUpdate,
)
from services import LabTestService
from core.auth import CurrentUser, require_permission
from core.dependencies import get_lab_test_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/lab-tests", tags=["Lab Tests"])


@router.get(
    "",
    response_model=LabTestListEnvelope,
    summary="List lab tests",
    description="Lab tests visible to the caller, newest first.",
)
async def list_lab_tests(
    user: CurrentUser = Depends(require_permission("lab_tests.read")),
    service: LabTestService = Depends(get_lab_test_service)
):
    return LabTestListEnvelope(lab_tests=service.get_lab_tests(user))


@router.post(
    "",
    response_model=LabTestEnvelope,
    status_code=201,
    summary="Request a lab test",
    description="The caller is recorded as the requester. Returns 404 if the patient does not exist.",
)
async def create_lab_test(
    payload: LabTestCreate,
    user: CurrentUser = Depends(require_permission("lab_tests.create")),
    service: LabTestService = Depends(get_lab_test_service)
):
    lab_test = service.create_lab_test(payload, user)
    return LabTestEnvelope(lab_test=lab_test, message="Lab test requested successfully")


@router.get(
    "/{test_id}",
    response_model=LabTestEnvelope,
    summary="Get a lab test",
)
async def get_lab_test(
    test_id: int,
    user: CurrentUser = Depends(require_permission("lab_tests.read")),
    service: LabTestService = Depends(get_lab_test_service)
):
    return LabTestEnvelope(lab_test=service.get_lab_test(test_id, user))


@router.put(
    "/{test_id}/results",
    response_model=LabTestEnvelope,
    summary="Record lab test results",
    description="Stores results and findings and completes the test. "
                "A cancelled test cannot take results (409).",
)
async def update_results(
    test_id: int,
    payload: LabTestResultsUpdate,
    user: CurrentUser = Depends(require_permission("lab_tests.process")),
    service: LabTestService = Depends(get_lab_test_service)
):
    lab_test = service.update_results(test_id, payload, user)
    return LabTestEnvelope(lab_test=lab_test, message="Lab test results updated successfully")


@router.put(
    "/{test_id}/status",
    response_model=LabTestEnvelope,
    summary="Change a lab test's status",
    description="Allowed: Requested → In Progress or Cancelled; In Progress → Cancelled. "
                "Anything else returns 409.",
)
async def update_status(
    test_id: int,
    payload: LabTestStatusUpdate,
    user: CurrentUser = Depends(require_permission("lab_tests.process")),
    service: LabTestService = Depends(get_lab_test_service)
):
    lab_test = service.update_status(test_id, payload, user)
    return LabTestEnvelope(lab_test=lab_test, message="Lab test status updated successfully")
