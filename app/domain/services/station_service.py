"""
Station Service - תחנות (SPBU), השירותים שהן מציעות ומחירי הדלק שלהן
"""
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, List

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import ConflictException, NotFoundException, ValidationException
from app.core.logging import get_logger
from app.db.compat import classify_integrity_error
from app.db.models.brand import Brand
from app.db.models.fuel_price import FuelPrice
from app.db.models.service import Service
from app.db.models.station import Station
from app.db.models.station_service_link import StationServiceLink

logger = get_logger(__name__)


class StationService:
    """Service for managing fuel stations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_stations(self) -> List[Station]:
        result = await self.db.execute(select(Station).order_by(Station.name))
        return list(result.scalars().all())

    async def get_station(self, spbu_id: uuid.UUID) -> Station:
        station = await self.db.get(Station, spbu_id)
        if station is None:
            raise NotFoundException("SPBU", spbu_id)
        return station

    async def _ensure_brand(self, brand_id: uuid.UUID | None) -> None:
        if brand_id is not None and await self.db.get(Brand, brand_id) is None:
            raise NotFoundException("Brand", brand_id)

    async def create_station(self, **values: Any) -> Station:
        await self._ensure_brand(values.get("brand_id"))
        station = Station(**values)
        self.db.add(station)
        await self.db.commit()
        await self.db.refresh(station)
        logger.info("SPBU created", extra_data={"spbu_id": str(station.id), "name": station.name})
        return station

    async def update_station(self, spbu_id: uuid.UUID, **values: Any) -> Station:
        """Full replace of the station's editable fields"""
        station = await self.get_station(spbu_id)
        await self._ensure_brand(values.get("brand_id"))
        for field, value in values.items():
            setattr(station, field, value)
        await self.db.commit()
        await self.db.refresh(station)
        logger.info("SPBU updated", extra_data={"spbu_id": str(spbu_id)})
        return station

    async def delete_station(self, spbu_id: uuid.UUID) -> None:
        station = await self.get_station(spbu_id)
        await self.db.delete(station)
        try:
            await self.db.commit()
        except IntegrityError as e:
            # עסקאות מחזיקות הפניה קשיחה לתחנה, אין cascade
            await self.db.rollback()
            raise ConflictException("SPBU has transactions and cannot be deleted") from e
        logger.info("SPBU deleted", extra_data={"spbu_id": str(spbu_id)})

    # ==================== שירותי תחנה ====================

    async def add_service(self, spbu_id: uuid.UUID, service_id: uuid.UUID) -> StationServiceLink:
        await self.get_station(spbu_id)
        if await self.db.get(Service, service_id) is None:
            raise NotFoundException("Service", service_id)

        existing = await self.db.get(StationServiceLink, (spbu_id, service_id))
        if existing is not None:
            raise ConflictException("Service already added")

        link = StationServiceLink(spbu_id=spbu_id, service_id=service_id)
        self.db.add(link)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise classify_integrity_error(
                e, conflict_message="Service already added", missing_resource="Service",
                missing_identifier=service_id,
            ) from e
        await self.db.refresh(link)
        logger.info(
            "Service added to SPBU",
            extra_data={"spbu_id": str(spbu_id), "service_id": str(service_id)},
        )
        return link

    async def remove_service(self, spbu_id: uuid.UUID, service_id: uuid.UUID) -> None:
        result = await self.db.execute(
            delete(StationServiceLink).where(
                StationServiceLink.spbu_id == spbu_id,
                StationServiceLink.service_id == service_id,
            )
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise NotFoundException("Service for SPBU", service_id)
        await self.db.commit()
        logger.info(
            "Service removed from SPBU",
            extra_data={"spbu_id": str(spbu_id), "service_id": str(service_id)},
        )

    async def list_station_services(self, spbu_id: uuid.UUID) -> List[Service]:
        await self.get_station(spbu_id)
        result = await self.db.execute(
            select(Service)
            .join(StationServiceLink, StationServiceLink.service_id == Service.id)
            .where(StationServiceLink.spbu_id == spbu_id)
            .order_by(Service.name)
        )
        return list(result.scalars().all())

    async def list_stations_with_service(self, service_id: uuid.UUID) -> List[Station]:
        if await self.db.get(Service, service_id) is None:
            raise NotFoundException("Service", service_id)
        result = await self.db.execute(
            select(Station)
            .join(StationServiceLink, StationServiceLink.spbu_id == Station.id)
            .where(StationServiceLink.service_id == service_id)
            .order_by(Station.name)
        )
        return list(result.scalars().all())

    # ==================== מחירי דלק ====================

    async def list_fuel_prices(self, spbu_id: uuid.UUID) -> List[FuelPrice]:
        await self.get_station(spbu_id)
        result = await self.db.execute(
            select(FuelPrice)
            .where(FuelPrice.spbu_id == spbu_id)
            .order_by(FuelPrice.fuel_type)
        )
        return list(result.scalars().all())

    async def set_fuel_price(self, spbu_id: uuid.UUID, fuel_type: str, price: Decimal) -> FuelPrice:
        """Insert or replace the price of one fuel type at a station"""
        fuel_type = fuel_type.strip()
        if not fuel_type:
            raise ValidationException("fuel_type is required", field="fuel_type")
        if price <= 0:
            raise ValidationException("Price must be greater than 0", field="price")
        await self.get_station(spbu_id)

        result = await self.db.execute(
            select(FuelPrice)
            .where(FuelPrice.spbu_id == spbu_id, FuelPrice.fuel_type == fuel_type)
            .with_for_update()
        )
        fuel_price = result.scalar_one_or_none()
        if fuel_price is None:
            fuel_price = FuelPrice(spbu_id=spbu_id, fuel_type=fuel_type, price=price)
            self.db.add(fuel_price)
        else:
            fuel_price.price = price
            fuel_price.updated_at = datetime.utcnow()

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise classify_integrity_error(e, conflict_message="Fuel price was changed concurrently") from e
        await self.db.refresh(fuel_price)
        logger.info(
            "Fuel price set",
            extra_data={"spbu_id": str(spbu_id), "fuel_type": fuel_type, "price": str(price)},
        )
        return fuel_price

    async def list_stations_with_prices(self) -> List[Station]:
        result = await self.db.execute(
            select(Station)
            .options(selectinload(Station.fuel_prices))
            .order_by(Station.name)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())
