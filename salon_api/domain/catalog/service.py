"""Catalog service - Business logic for the salon price list"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Service
from .repository import ServiceRepository
from .schemas import ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceRepository()

    def get_services(self, category: Optional[str] = None, is_active: Optional[bool] = True) -> list[Service]:
        return self.repo.get_services(self.db, category.upper() if category else None, is_active)

    def get_service(self, service_id: int) -> Service:
        service = self.repo.get_service_by_id(self.db, service_id)
        if not service:
            raise HTTPException(status_code=404, detail="Service not found")
        return service

    def create_service(self, data: ServiceCreate) -> Service:
        if self.repo.get_active_by_name(self.db, data.name):
            raise HTTPException(status_code=400, detail="Service with this name already exists")

        service = self.repo.create_service(
            self.db,
            name=data.name.strip(),
            category=data.category,
            description=data.description,
            single_price=data.singlePrice,
            combined_price=data.combinedPrice,
            child_price=data.childPrice,
            child_combined_price=data.childCombinedPrice,
            duration=data.duration,
            is_combo_eligible=data.isComboEligible,
        )
        logger.info(f"✅ Service '{service.name}' created in {service.category}")
        return service

    def update_service(self, service_id: int, data: ServiceUpdate) -> Service:
        service = self.get_service(service_id)

        new_name = data.name.strip() if data.name else None
        becomes_active = data.isActive or (data.isActive is None and service.is_active)
        if becomes_active and self.repo.get_active_by_name(
            self.db, new_name or service.name, exclude_id=service.id
        ):
            raise HTTPException(status_code=400, detail="Service with this name already exists")

        return self.repo.update_service(
            self.db,
            service,
            name=new_name,
            category=data.category,
            description=data.description,
            single_price=data.singlePrice,
            combined_price=data.combinedPrice,
            child_price=data.childPrice,
            child_combined_price=data.childCombinedPrice,
            duration=data.duration,
            is_combo_eligible=data.isComboEligible,
            is_active=data.isActive,
        )

    def delete_service(self, service_id: int) -> dict:
        """Deactivate a service, past sales keep referencing it"""
        service = self.get_service(service_id)
        self.repo.update_service(self.db, service, is_active=False)
        logger.info(f"🗑️ Service {service_id} deactivated")
        return {"message": "Service deleted successfully"}
