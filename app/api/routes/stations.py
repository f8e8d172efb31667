"""
Station (SPBU) API Routes - stations, their services and fuel prices
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.auth import require_admin
from app.api.routes.schemas import (
    FuelPriceResponse,
    MessageResponse,
    ServiceResponse,
    StationResponse,
    StationWithPricesResponse,
)
from app.core.decimals import AmountStr
from app.db.database import get_db
from app.domain.services.station_service import StationService

router = APIRouter()


class StationPayload(BaseModel):
    """Create/replace payload; every editable field is sent on PUT"""
    name: str = Field(min_length=1, max_length=200)
    address: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    brand_id: Optional[uuid.UUID] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    pump_count: Optional[int] = Field(default=None, ge=0)
    queue_count: Optional[int] = Field(default=None, ge=0)
    photo_url: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class AddServiceRequest(BaseModel):
    service_id: uuid.UUID


class FuelPricePayload(BaseModel):
    fuel_type: str = Field(min_length=1, max_length=50)
    price: AmountStr


@router.get("", response_model=List[StationResponse], summary="List stations")
async def list_stations(db: AsyncSession = Depends(get_db)):
    return await StationService(db).list_stations()


# Declared before /{spbu_id} so the literal path wins
@router.get(
    "/with-prices",
    response_model=List[StationWithPricesResponse],
    summary="List stations with their current fuel prices",
)
async def list_stations_with_prices(db: AsyncSession = Depends(get_db)):
    return await StationService(db).list_stations_with_prices()


@router.get(
    "/{spbu_id}",
    response_model=StationResponse,
    summary="Get a station",
    responses={404: {"description": "SPBU not found"}},
)
async def get_station(spbu_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await StationService(db).get_station(spbu_id)


@router.post(
    "",
    response_model=StationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a station (admin)",
    dependencies=[Depends(require_admin)],
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Admin only"},
        404: {"description": "Brand not found"},
    },
)
async def create_station(payload: StationPayload, db: AsyncSession = Depends(get_db)):
    return await StationService(db).create_station(**payload.model_dump())


@router.put(
    "/{spbu_id}",
    response_model=StationResponse,
    summary="Replace a station (admin)",
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "SPBU or brand not found"}},
)
async def update_station(spbu_id: uuid.UUID, payload: StationPayload, db: AsyncSession = Depends(get_db)):
    return await StationService(db).update_station(spbu_id, **payload.model_dump())


@router.delete(
    "/{spbu_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a station (admin)",
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "SPBU not found"}, 409: {"description": "SPBU has transactions"}},
)
async def delete_station(spbu_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await StationService(db).delete_station(spbu_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{spbu_id}/services",
    response_model=List[ServiceResponse],
    summary="List services offered by a station",
    responses={404: {"description": "SPBU not found"}},
)
async def list_station_services(spbu_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await StationService(db).list_station_services(spbu_id)


@router.post(
    "/{spbu_id}/services",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a service to a station (admin)",
    dependencies=[Depends(require_admin)],
    responses={
        404: {"description": "SPBU or service not found"},
        409: {"description": "Service already added"},
    },
)
async def add_station_service(
    spbu_id: uuid.UUID,
    payload: AddServiceRequest,
    db: AsyncSession = Depends(get_db),
):
    await StationService(db).add_service(spbu_id, payload.service_id)
    return MessageResponse(message="Service added to SPBU")


@router.delete(
    "/{spbu_id}/services/{service_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a service from a station (admin)",
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "Service not linked to this SPBU"}},
)
async def remove_station_service(
    spbu_id: uuid.UUID,
    service_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await StationService(db).remove_service(spbu_id, service_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{spbu_id}/fuel-prices",
    response_model=List[FuelPriceResponse],
    summary="List a station's fuel prices",
    responses={404: {"description": "SPBU not found"}},
)
async def list_fuel_prices(spbu_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await StationService(db).list_fuel_prices(spbu_id)


@router.put(
    "/{spbu_id}/fuel-prices",
    response_model=FuelPriceResponse,
    summary="Set the price of a fuel type at a station (admin)",
    dependencies=[Depends(require_admin)],
    responses={400: {"description": "Invalid price"}, 404: {"description": "SPBU not found"}},
)
async def set_fuel_price(
    spbu_id: uuid.UUID,
    payload: FuelPricePayload,
    db: AsyncSession = Depends(get_db),
):
    return await StationService(db).set_fuel_price(spbu_id, payload.fuel_type, payload.price)
