"""
Service (station amenity) API Routes
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.auth import require_admin
from app.api.routes.schemas import ServiceResponse, StationResponse
from app.db.database import get_db
from app.domain.services.catalog_service import CatalogService
from app.domain.services.station_service import StationService

router = APIRouter()


class ServicePayload(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    icon_url: Optional[str] = None


@router.get("", response_model=List[ServiceResponse], summary="List services")
async def list_services(db: AsyncSession = Depends(get_db)):
    return await CatalogService(db).list_services()


@router.get(
    "/{service_id}",
    response_model=ServiceResponse,
    summary="Get a service",
    responses={404: {"description": "Service not found"}},
)
async def get_service(service_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await CatalogService(db).get_service(service_id)


@router.get(
    "/{service_id}/spbus",
    response_model=List[StationResponse],
    summary="List stations offering a service",
    responses={404: {"description": "Service not found"}},
)
async def list_stations_with_service(service_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await StationService(db).list_stations_with_service(service_id)


@router.post(
    "",
    response_model=ServiceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a service (admin)",
    dependencies=[Depends(require_admin)],
    responses={401: {"description": "Not authenticated"}, 403: {"description": "Admin only"}},
)
async def create_service(payload: ServicePayload, db: AsyncSession = Depends(get_db)):
    return await CatalogService(db).create_service(payload.name.strip(), payload.icon_url)


@router.put(
    "/{service_id}",
    response_model=ServiceResponse,
    summary="Replace a service (admin)",
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "Service not found"}},
)
async def update_service(service_id: uuid.UUID, payload: ServicePayload, db: AsyncSession = Depends(get_db)):
    return await CatalogService(db).update_service(service_id, payload.name.strip(), payload.icon_url)


@router.delete(
    "/{service_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a service (admin)",
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "Service not found"}},
)
async def delete_service(service_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await CatalogService(db).delete_service(service_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
