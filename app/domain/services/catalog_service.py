"""
Catalog Service - fuel brands and station amenities (services)

Both are flat reference tables managed by admins.
"""
import uuid
from typing import Any, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundException
from app.core.logging import get_logger
from app.db.models.brand import Brand
from app.db.models.service import Service

logger = get_logger(__name__)

CatalogModel = TypeVar("CatalogModel", Brand, Service)


class CatalogService:
    """CRUD over brands and services"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _list(self, model: Type[CatalogModel]) -> List[CatalogModel]:
        result = await self.db.execute(select(model).order_by(model.name))
        return list(result.scalars().all())

    async def _get(self, model: Type[CatalogModel], item_id: uuid.UUID, label: str) -> CatalogModel:
        item = await self.db.get(model, item_id)
        if item is None:
            raise NotFoundException(label, item_id)
        return item

    async def _create(self, model: Type[CatalogModel], **values: Any) -> CatalogModel:
        item = model(**values)
        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)
        logger.info(f"{model.__name__} created", extra_data={"id": str(item.id), "name": item.name})
        return item

    async def _update(
        self, model: Type[CatalogModel], item_id: uuid.UUID, label: str, **values: Any
    ) -> CatalogModel:
        item = await self._get(model, item_id, label)
        for field, value in values.items():
            setattr(item, field, value)
        await self.db.commit()
        await self.db.refresh(item)
        logger.info(f"{model.__name__} updated", extra_data={"id": str(item_id)})
        return item

    async def _delete(self, model: Type[CatalogModel], item_id: uuid.UUID, label: str) -> None:
        item = await self._get(model, item_id, label)
        await self.db.delete(item)
        await self.db.commit()
        logger.info(f"{model.__name__} deleted", extra_data={"id": str(item_id)})

    # Brands

    async def list_brands(self) -> List[Brand]:
        return await self._list(Brand)

    async def get_brand(self, brand_id: uuid.UUID) -> Brand:
        return await self._get(Brand, brand_id, "Brand")

    async def create_brand(self, name: str, logo_url: Optional[str] = None) -> Brand:
        return await self._create(Brand, name=name, logo_url=logo_url)

    async def update_brand(self, brand_id: uuid.UUID, name: str, logo_url: Optional[str] = None) -> Brand:
        return await self._update(Brand, brand_id, "Brand", name=name, logo_url=logo_url)

    async def delete_brand(self, brand_id: uuid.UUID) -> None:
        await self._delete(Brand, brand_id, "Brand")

    # Services

    async def list_services(self) -> List[Service]:
        return await self._list(Service)

    async def get_service(self, service_id: uuid.UUID) -> Service:
        return await self._get(Service, service_id, "Service")

    async def create_service(self, name: str, icon_url: Optional[str] = None) -> Service:
        return await self._create(Service, name=name, icon_url=icon_url)

    async def update_service(self, service_id: uuid.UUID, name: str, icon_url: Optional[str] = None) -> Service:
        return await self._update(Service, service_id, "Service", name=name, icon_url=icon_url)

    async def delete_service(self, service_id: uuid.UUID) -> None:
        await self._delete(Service, service_id, "Service")
