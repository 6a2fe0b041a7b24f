"""
Leave requests router.

Staff submit and manage their own requests while they are Pending;
admins list every request and approve or reject them.
"""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from schemas import LeaveCreate, LeaveEnvelope, LeaveListEnvelope, LeaveReview, LeaveUpdate
from services import LeaveService
from models.leave import LeaveStatus
from core.auth import CurrentUser, require_permission
from core.dependencies import get_leave_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/leaves", tags=["Leave Requests"])


@router.post(
    "",
    response_model=LeaveEnvelope,
    status_code=201,
    summary="Submit a leave request",
    description="The requester is the caller. end_date must be on or after start_date.",
)
async def create_leave_request(
    payload: LeaveCreate,
    user: CurrentUser = Depends(require_permission("leaves.request")),
    service: LeaveService = Depends(get_leave_service)
):
    leave = service.create_request(payload, user)
    return LeaveEnvelope(leave_request=leave, message="Leave request submitted successfully")


@router.get(
    "/my",
    response_model=LeaveListEnvelope,
    summary="List my leave requests",
)
async def list_my_requests(
    user: CurrentUser = Depends(require_permission("leaves.request")),
    service: LeaveService = Depends(get_leave_service)
):
    return LeaveListEnvelope(leave_requests=service.get_my_requests(user))


@router.get(
    "/all",
    response_model=LeaveListEnvelope,
    summary="List all leave requests",
    description="Admin view. The date filter keeps requests starting within "
                "[start_date, end_date] and only applies when both bounds are given.",
    dependencies=[Depends(require_permission("leaves.review"))],
)
async def list_all_requests(
    status: Optional[LeaveStatus] = Query(None, description="Only requests with this status"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    service: LeaveService = Depends(get_leave_service)
):
    leaves = service.get_all_requests(
        status=status.value if status else None,
        start_date=start_date,
        end_date=end_date,
    )
    return LeaveListEnvelope(leave_requests=leaves)


@router.get(
    "/{leave_id}",
    response_model=LeaveEnvelope,
    summary="Get one of my leave requests",
)
async def get_leave_request(
    leave_id: int,
    user: CurrentUser = Depends(require_permission("leaves.request")),
    service: LeaveService = Depends(get_leave_service)
):
    return LeaveEnvelope(leave_request=service.get_request(leave_id, user))


@router.put(
    "/{leave_id}",
    response_model=LeaveEnvelope,
    summary="Update a pending leave request",
    description="Only the requester can update, and only while the request is Pending (400 otherwise).",
)
async def update_leave_request(
    leave_id: int,
    payload: LeaveUpdate,
    user: CurrentUser = Depends(require_permission("leaves.request")),
    service: LeaveService = Depends(get_leave_service)
):
    leave = service.update_request(leave_id, payload, user)
    return LeaveEnvelope(leave_request=leave, message="Leave request updated successfully")


@router.delete(
    "/{leave_id}",
    status_code=204,
    summary="Withdraw a pending leave request",
)
async def delete_leave_request(
    leave_id: int,
    user: CurrentUser = Depends(require_permission("leaves.request")),
    service: LeaveService = Depends(get_leave_service)
):
    service.delete_request(leave_id, user)
    return Response(status_code=204)


@router.put(
    "/{leave_id}/review",
    response_model=LeaveEnvelope,
    summary="Approve or reject a leave request",
    description="Only Pending requests can be reviewed (400 otherwise). The requester is notified.",
)
async def review_leave_request(
    leave_id: int,
    payload: LeaveReview,
    user: CurrentUser = Depends(require_permission("leaves.review")),
    service: LeaveService = Depends(get_leave_service)
):
    leave = service.review_request(leave_id, payload, user)
    return LeaveEnvelope(
        leave_request=leave,
        message=f"Leave request {payload.status.lower()} successfully",
    )
