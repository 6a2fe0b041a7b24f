"""
Pydantic schemas for notifications.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict

from models.notification import NotificationType


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    title: str
    message: str
    type: NotificationType
    read: bool
    related_model: Optional[str] = None
    related_id: Optional[int] = None
    created_at: str

    model_config = ConfigDict(from_attributes=True)
