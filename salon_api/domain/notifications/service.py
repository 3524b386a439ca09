"""Notification service"""

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Notification, User
from .repository import NotificationRepository
from .schemas import NotificationCreate


class NotificationService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository()

    def get_notifications(self, user: User) -> list[Notification]:
        return self.repo.get_latest(self.db, user.id)

    def create_notification(self, user: User, data: NotificationCreate) -> Notification:
        return self.repo.create(
            self.db, user_id=user.id, type=data.type, title=data.title, message=data.message
        )

    def mark_as_read(self, user: User, notification_id: int) -> Notification:
        notification = self.repo.get_for_user(self.db, notification_id, user.id)
        if not notification:
            raise HTTPException(status_code=404, detail="Notification not found")
        notification.is_read = True
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_as_read(self, user: User) -> int:
        return self.repo.mark_all_read(self.db, user.id)

    def clear_history(self, user: User) -> int:
        return self.repo.delete_all(self.db, user.id)
