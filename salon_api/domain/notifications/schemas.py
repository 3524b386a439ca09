"""Notification schemas"""

from datetime import datetime

from pydantic import BaseModel, Field


class NotificationCreate(BaseModel):
    type: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str
    isRead: bool
    createdAt: datetime


def build_notification_response(notification) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        type=notification.type,
        title=notification.title,
        message=notification.message,
        isRead=notification.is_read,
        createdAt=notification.created_at,
    )
