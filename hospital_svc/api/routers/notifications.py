"""
Notifications router - the caller's own notification feed.
"""
import logging

from fastapi import APIRouter, Depends, Response

from schemas import DataListResponse, DataResponse, MessageResponse, NotificationResponse
from services import NotificationService
from core.auth import CurrentUser, require_permission
from core.dependencies import get_notification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/notifications", tags=["Notifications"])

NotificationList = DataListResponse[NotificationResponse]
NotificationData = DataResponse[NotificationResponse]


@router.get(
    "",
    response_model=NotificationList,
    summary="List my notifications",
    description="The caller's 50 most recent notifications, newest first.",
)
async def list_notifications(
    user: CurrentUser = Depends(require_permission("notifications.read")),
    service: NotificationService = Depends(get_notification_service)
):
    return NotificationList.of(service.get_my_notifications(user))


@router.put(
    "/read-all",
    response_model=DataResponse[MessageResponse],
    summary="Mark all my notifications as read",
)
async def mark_all_read(
    user: CurrentUser = Depends(require_permission("notifications.read")),
    service: NotificationService = Depends(get_notification_service)
):
    count = service.mark_all_as_read(user)
    return DataResponse[MessageResponse](
        data=MessageResponse(message="All notifications marked as read", count=count)
    )


@router.put(
    "/{notification_id}/read",
    response_model=NotificationData,
    summary="Mark a notification as read",
    description="Returns 404 if the notification does not exist or belongs to someone else.",
)
async def mark_read(
    notification_id: int,
    user: CurrentUser = Depends(require_permission("notifications.read")),
    service: NotificationService = Depends(get_notification_service)
):
    return NotificationData(data=service.mark_as_read(notification_id, user))


@router.delete(
    "/{notification_id}",
    status_code=204,
    summary="Delete a notification",
)
async def delete_notification(
    notification_id: int,
    user: CurrentUser = Depends(require_permission("notifications.read")),
    service: NotificationService = Depends(get_notification_service)
):
    service.delete_notification(notification_id, user)
    return Response(status_code=204)
