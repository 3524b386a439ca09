"""Notification router - in-app notifications for the signed-in user"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.responses import success
from .schemas import NotificationCreate, build_notification_response
from .service import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    """Dependency injection for NotificationService"""
    return NotificationService(db)


@router.get("")
async def get_notifications(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    """Latest 50 notifications"""
    return success([build_notification_response(n) for n in service.get_notifications(current_user)])


@router.post("", status_code=201)
async def create_notification(
    data: NotificationCreate,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    notification = service.create_notification(current_user, data)
    return success(build_notification_response(notification))


@router.put("/read-all")
async def mark_all_as_read(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    updated = service.mark_all_as_read(current_user)
    return success({"updated": updated})


@router.put("/{notification_id}/read")
async def mark_as_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    notification = service.mark_as_read(current_user, notification_id)
    return success(build_notification_response(notification))


@router.delete("", status_code=204)
async def clear_history(
    current_user: User = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    service.clear_history(current_user)
    return Response(status_code=204)
