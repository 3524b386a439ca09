"""Catalog repository - Database operations for salon services"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Service


class ServiceRepository:
    @staticmethod
    def get_services(
        db: Session, category: Optional[str] = None, is_active: Optional[bool] = True
    ) -> list[Service]:
        query = db.query(Service)
        if category:
            query = query.filter(Service.category == category)
        if is_active is not None:
            query = query.filter(Service.is_active.is_(is_active))
        return query.order_by(Service.category, Service.name).all()

    @staticmethod
    def get_service_by_id(db: Session, service_id: int) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def get_active_by_name(db: Session, name: str, exclude_id: Optional[int] = None) -> Optional[Service]:
        query = db.query(Service).filter(
            func.lower(Service.name) == name.strip().lower(), Service.is_active.is_(True)
        )
        if exclude_id:
            query = query.filter(Service.id != exclude_id)
        return query.first()

    @staticmethod
    def create_service(db: Session, **service_data) -> Service:
        service = Service(**service_data)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update_service(db: Session, service: Service, **updates) -> Service:
        for key, value in updates.items():
            if value is not None and hasattr(service, key):
                setattr(service, key, value)
        db.commit()
        db.refresh(service)
        return service
